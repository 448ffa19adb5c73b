from __future__ import annotations

import re
from datetime import datetime, timezone
from decimal import Decimal

from jewelry_admin.domain.orders.aggregates import OrderTotals, generate_order_number, line_total

ORDER_NUMBER = re.compile(r"^ORD-\d+-[0-9A-F]{8}$")


def test_line_total_subtracts_discount_per_unit():
    assert line_total(Decimal("10.00"), Decimal("0"), 2) == Decimal("20.00")
    assert line_total(Decimal("99.90"), Decimal("10.00"), 3) == Decimal("269.70")


def test_order_totals_consistency():
    totals = OrderTotals(
        subtotal=Decimal("200.00"),
        discount_total=Decimal("20.00"),
        shipping_total=Decimal("15.00"),
        tax_total=Decimal("5.50"),
        total=Decimal("200.50"),
    )
    assert totals.expected_total() == Decimal("200.50")
    assert totals.is_consistent()

    drifted = OrderTotals(subtotal=Decimal("200.00"), total=Decimal("180.00"))
    assert not drifted.is_consistent()


def test_order_number_embeds_epoch_millis():
    moment = datetime(2026, 1, 15, 10, 30, tzinfo=timezone.utc)
    number = generate_order_number(now=moment)

    assert ORDER_NUMBER.match(number)
    assert number.split("-")[1] == str(int(moment.timestamp() * 1000))


def test_order_numbers_do_not_collide_within_the_same_millisecond():
    moment = datetime(2026, 1, 15, 10, 30, tzinfo=timezone.utc)
    numbers = {generate_order_number(now=moment) for _ in range(500)}

    assert len(numbers) == 500
    assert all(ORDER_NUMBER.match(number) for number in numbers)


def test_order_number_prefix_is_configurable():
    assert generate_order_number("JWL").startswith("JWL-")
