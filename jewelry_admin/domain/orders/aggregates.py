from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

CENTS = Decimal("0.01")


def line_total(unit_price: Decimal, discount: Decimal, quantity: int) -> Decimal:
    return ((unit_price - discount) * quantity).quantize(CENTS)


def generate_order_number(prefix: str = "ORD", now: datetime | None = None) -> str:
    moment = now or datetime.now(timezone.utc)
    epoch_millis = int(moment.timestamp() * 1000)
    return f"{prefix}-{epoch_millis}-{uuid4().hex[:8].upper()}"


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    discount_total: Decimal = Decimal("0")
    shipping_total: Decimal = Decimal("0")
    tax_total: Decimal = Decimal("0")
    total: Decimal = Decimal("0")

    def expected_total(self) -> Decimal:
        return (self.subtotal - self.discount_total + self.shipping_total + self.tax_total).quantize(CENTS)

    def is_consistent(self) -> bool:
        # Callers supply ``total``; nothing downstream recomputes it.
        return self.expected_total() == self.total.quantize(CENTS)
