from __future__ import annotations

import pytest

from jewelry_admin.domain.errors import MissingReferenceError
from jewelry_admin.domain.orders import KeepItems, OrderStatusChange, OrderUpdate, ReplaceItems


def test_item_change_distinguishes_omitted_from_empty():
    assert OrderUpdate().item_change() == KeepItems()
    assert OrderUpdate(items=None).item_change() == KeepItems()

    cleared = OrderUpdate(items=[]).item_change()
    assert isinstance(cleared, ReplaceItems)
    assert cleared.items == ()


def test_scalar_changes_only_include_provided_fields():
    changes = OrderUpdate(total="99.00", notes=None, subtotal=None).scalar_changes()
    assert set(changes) == {"total", "notes"}
    assert changes["notes"] is None


def test_update_unknown_order_returns_none_without_writes(workflow, make_product, product_state):
    product = make_product(stock=7)

    result = workflow.update_order(
        "missing-order",
        OrderUpdate(items=[{"product_id": product, "quantity": 5, "unit_price": "10.00"}]),
    )

    assert result is None
    assert product_state(product) == (7, 0, "IN_STOCK")


def test_update_scalar_fields_keeps_items(workflow, make_customer, make_product, product_state, build_order):
    customer = make_customer()
    product = make_product(stock=10)
    created = workflow.create_order(
        build_order(customer, [{"product_id": product, "quantity": 2, "unit_price": "10.00"}], notes="first")
    )

    updated = workflow.update_order(
        created["id"],
        OrderUpdate(payment_status="PAID", tax_total="1.50", total="21.50"),
    )

    assert updated["payment_status"] == "PAID"
    assert updated["tax_total"] == "1.50"
    assert updated["total"] == "21.50"
    assert updated["subtotal"] == created["subtotal"]
    assert updated["notes"] == "first"
    assert [item["id"] for item in updated["items"]] == [item["id"] for item in created["items"]]
    assert product_state(product) == (8, 2, "IN_STOCK")


def test_replace_items_restocks_old_lines_and_takes_new_ones(
    workflow, make_customer, make_product, product_state, build_order
):
    customer = make_customer()
    ring = make_product(stock=10)
    bracelet = make_product(stock=10, price="50.00", name="Gold bracelet")
    created = workflow.create_order(
        build_order(customer, [{"product_id": ring, "quantity": 4, "unit_price": "10.00"}])
    )
    assert product_state(ring) == (6, 4, "IN_STOCK")

    updated = workflow.update_order(
        created["id"],
        OrderUpdate(
            items=[
                {"product_id": ring, "quantity": 1, "unit_price": "10.00"},
                {"product_id": bracelet, "quantity": 2, "unit_price": "50.00", "discount": "5.00"},
            ],
            subtotal="100.00",
            total="100.00",
        ),
    )

    assert [(item["product_id"], item["quantity"], item["total"]) for item in updated["items"]] == [
        (ring, 1, "10.00"),
        (bracelet, 2, "90.00"),
    ]
    assert product_state(ring) == (9, 1, "IN_STOCK")
    assert product_state(bracelet) == (8, 2, "IN_STOCK")


def test_replace_with_empty_list_clears_items(workflow, make_customer, make_product, product_state, build_order):
    customer = make_customer()
    product = make_product(stock=3)
    created = workflow.create_order(
        build_order(customer, [{"product_id": product, "quantity": 3, "unit_price": "10.00"}])
    )
    assert product_state(product) == (0, 3, "OUT_OF_STOCK")

    updated = workflow.update_order(created["id"], OrderUpdate(items=[]))

    assert updated["items"] == []
    assert product_state(product) == (3, 0, "IN_STOCK")


def test_replacement_with_unknown_product_rolls_back(
    workflow, make_customer, make_product, product_state, build_order
):
    customer = make_customer()
    product = make_product(stock=10)
    created = workflow.create_order(
        build_order(customer, [{"product_id": product, "quantity": 2, "unit_price": "10.00"}])
    )

    with pytest.raises(MissingReferenceError):
        workflow.update_order(
            created["id"],
            OrderUpdate(
                notes="changed",
                items=[{"product_id": "missing-product", "quantity": 1, "unit_price": "10.00"}],
            ),
        )

    after = workflow.get_order(created["id"])
    assert after["notes"] is None
    assert len(after["items"]) == 1
    assert product_state(product) == (8, 2, "IN_STOCK")


def test_update_with_unknown_address_is_rejected(workflow, make_customer, make_product, build_order):
    customer = make_customer()
    product = make_product()
    created = workflow.create_order(
        build_order(customer, [{"product_id": product, "quantity": 1, "unit_price": "10.00"}])
    )

    with pytest.raises(MissingReferenceError):
        workflow.update_order(created["id"], OrderUpdate(billing_address_id="missing-address"))

    assert workflow.get_order(created["id"])["billing_address_id"] == customer["address_id"]


def test_replacing_items_of_canceled_order_leaves_inventory_alone(
    workflow, make_customer, make_product, product_state, build_order
):
    customer = make_customer()
    ring = make_product(stock=10)
    bracelet = make_product(stock=10, price="50.00", name="Gold bracelet")
    created = workflow.create_order(
        build_order(customer, [{"product_id": ring, "quantity": 3, "unit_price": "10.00"}])
    )
    workflow.update_order_status(created["id"], OrderStatusChange(status="CANCELED"))
    assert product_state(ring) == (10, 0, "IN_STOCK")

    updated = workflow.update_order(
        created["id"],
        OrderUpdate(items=[{"product_id": bracelet, "quantity": 2, "unit_price": "50.00"}]),
    )

    assert [(item["product_id"], item["quantity"]) for item in updated["items"]] == [(bracelet, 2)]
    assert product_state(ring) == (10, 0, "IN_STOCK")
    assert product_state(bracelet) == (10, 0, "IN_STOCK")

    with pytest.raises(MissingReferenceError):
        workflow.update_order(
            created["id"],
            OrderUpdate(items=[{"product_id": "missing-product", "quantity": 1, "unit_price": "10.00"}]),
        )
