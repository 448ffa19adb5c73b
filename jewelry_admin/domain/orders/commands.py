from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

from jewelry_admin.persistence.models import OrderStatus, PaymentMethod, PaymentStatus


class OrderItemInput(BaseModel):
    product_id: str
    variant_id: str | None = None
    quantity: int = Field(ge=1)
    unit_price: Decimal = Field(gt=0)
    discount: Decimal = Field(default=Decimal("0"), ge=0)
    notes: str | None = None


class OrderCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    user_id: str
    subtotal: Decimal = Field(ge=0)
    discount_total: Decimal = Field(default=Decimal("0"), ge=0)
    shipping_total: Decimal = Field(default=Decimal("0"), ge=0)
    tax_total: Decimal = Field(default=Decimal("0"), ge=0)
    total: Decimal = Field(ge=0)
    status: OrderStatus | None = None
    payment_method: PaymentMethod
    payment_status: PaymentStatus | None = None
    notes: str | None = None
    billing_address_id: str
    shipping_address_id: str
    items: list[OrderItemInput] = Field(min_length=1)
    created_by_id: str | None = None


@dataclass(frozen=True)
class KeepItems:
    pass


@dataclass(frozen=True)
class ReplaceItems:
    items: tuple[OrderItemInput, ...]


ItemChange = Union[KeepItems, ReplaceItems]

# Scalar order columns that may be cleared by sending an explicit null.
_NULLABLE_FIELDS = frozenset({"notes"})


class OrderUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    subtotal: Decimal | None = Field(default=None, ge=0)
    discount_total: Decimal | None = Field(default=None, ge=0)
    shipping_total: Decimal | None = Field(default=None, ge=0)
    tax_total: Decimal | None = Field(default=None, ge=0)
    total: Decimal | None = Field(default=None, ge=0)
    status: OrderStatus | None = None
    payment_method: PaymentMethod | None = None
    payment_status: PaymentStatus | None = None
    notes: str | None = None
    billing_address_id: str | None = None
    shipping_address_id: str | None = None
    items: list[OrderItemInput] | None = None

    def scalar_changes(self) -> dict[str, Any]:
        changes: dict[str, Any] = {}
        for name, value in self.model_dump(exclude_unset=True, exclude={"items"}).items():
            if value is None and name not in _NULLABLE_FIELDS:
                continue
            changes[name] = value
        return changes

    def item_change(self) -> ItemChange:
        if "items" not in self.model_fields_set or self.items is None:
            return KeepItems()
        return ReplaceItems(items=tuple(self.items))


class OrderStatusChange(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    status: OrderStatus
    notes: str | None = None
    tracking_number: str | None = None
    shipping_carrier: str | None = None
    estimated_delivery: datetime | None = None

    @property
    def notes_provided(self) -> bool:
        return "notes" in self.model_fields_set
