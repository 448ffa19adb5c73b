from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from jewelry_admin.domain.orders.aggregates import CENTS
from jewelry_admin.persistence.models import (
    AddressModel,
    OrderItemModel,
    OrderModel,
    ProductModel,
    UserModel,
)


def iso_utc(value: datetime | None) -> str | None:
    if value is None:
        return None
    # SQLite hands back naive datetimes; everything is stored as UTC.
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def money(value: Decimal | None) -> str | None:
    if value is None:
        return None
    return str(Decimal(value).quantize(CENTS))


def user_summary(user: UserModel | None, include_document: bool = False) -> dict | None:
    if user is None:
        return None
    summary = {"id": user.id, "name": user.name, "email": user.email, "phone": user.phone}
    if include_document:
        summary["document"] = user.document
    return summary


def creator_summary(user: UserModel | None) -> dict | None:
    if user is None:
        return None
    return {"id": user.id, "name": user.name}


def product_summary(product: ProductModel | None) -> dict | None:
    if product is None:
        return None
    return {
        "id": product.id,
        "name": product.name,
        "sku": product.sku,
        "images": list(product.images or []),
    }


def address_view(address: AddressModel | None) -> dict | None:
    if address is None:
        return None
    return {
        "id": address.id,
        "user_id": address.user_id,
        "type": address.type,
        "street": address.street,
        "number": address.number,
        "complement": address.complement,
        "neighborhood": address.neighborhood,
        "city": address.city,
        "state": address.state,
        "zip_code": address.zip_code,
        "country": address.country,
        "is_default": address.is_default,
    }


def order_item_view(item: OrderItemModel) -> dict:
    return {
        "id": item.id,
        "order_id": item.order_id,
        "product_id": item.product_id,
        "variant_id": item.variant_id,
        "quantity": item.quantity,
        "unit_price": money(item.unit_price),
        "discount": money(item.discount),
        "total": money(item.total),
        "notes": item.notes,
        "product": product_summary(item.product),
    }


def order_view(order: OrderModel, detail: bool = False) -> dict:
    return {
        "id": order.id,
        "order_number": order.order_number,
        "user_id": order.user_id,
        "user": user_summary(order.user, include_document=detail),
        "subtotal": money(order.subtotal),
        "discount_total": money(order.discount_total),
        "shipping_total": money(order.shipping_total),
        "tax_total": money(order.tax_total),
        "total": money(order.total),
        "status": order.status,
        "payment_method": order.payment_method,
        "payment_status": order.payment_status,
        "notes": order.notes,
        "tracking_number": order.tracking_number,
        "shipping_carrier": order.shipping_carrier,
        "estimated_delivery": iso_utc(order.estimated_delivery),
        "billing_address_id": order.billing_address_id,
        "shipping_address_id": order.shipping_address_id,
        "billing_address": address_view(order.billing_address),
        "shipping_address": address_view(order.shipping_address),
        "created_by_id": order.created_by_id,
        "created_by": creator_summary(order.created_by),
        "items": [order_item_view(item) for item in order.items],
        "created_at": iso_utc(order.created_at),
        "updated_at": iso_utc(order.updated_at),
        "completed_at": iso_utc(order.completed_at),
        "canceled_at": iso_utc(order.canceled_at),
        "refunded_at": iso_utc(order.refunded_at),
    }
