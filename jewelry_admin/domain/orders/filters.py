from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import ColumnElement, and_, asc, desc, or_

from jewelry_admin.persistence.models import (
    OrderModel,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    UserModel,
)


class OrderSortField(str, Enum):
    ORDER_NUMBER = "order_number"
    TOTAL = "total"
    CREATED_AT = "created_at"
    STATUS = "status"


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class SearchFilter:
    text: str

    def condition(self) -> ColumnElement[bool]:
        return or_(
            OrderModel.order_number.icontains(self.text, autoescape=True),
            OrderModel.user.has(
                or_(
                    UserModel.name.icontains(self.text, autoescape=True),
                    UserModel.email.icontains(self.text, autoescape=True),
                )
            ),
        )


@dataclass(frozen=True)
class StatusFilter:
    status: str

    def condition(self) -> ColumnElement[bool]:
        return OrderModel.status == self.status


@dataclass(frozen=True)
class UserFilter:
    user_id: str

    def condition(self) -> ColumnElement[bool]:
        return OrderModel.user_id == self.user_id


@dataclass(frozen=True)
class PaymentMethodFilter:
    method: str

    def condition(self) -> ColumnElement[bool]:
        return OrderModel.payment_method == self.method


@dataclass(frozen=True)
class PaymentStatusFilter:
    status: str

    def condition(self) -> ColumnElement[bool]:
        return OrderModel.payment_status == self.status


@dataclass(frozen=True)
class TotalRange:
    minimum: Decimal | None = None
    maximum: Decimal | None = None

    def condition(self) -> ColumnElement[bool]:
        clauses = []
        if self.minimum is not None:
            clauses.append(OrderModel.total >= self.minimum)
        if self.maximum is not None:
            clauses.append(OrderModel.total <= self.maximum)
        return and_(*clauses)


@dataclass(frozen=True)
class CreatedRange:
    start: datetime | None = None
    end: datetime | None = None

    def condition(self) -> ColumnElement[bool]:
        clauses = []
        if self.start is not None:
            clauses.append(OrderModel.created_at >= _as_utc(self.start))
        if self.end is not None:
            clauses.append(OrderModel.created_at <= _as_utc(self.end))
        return and_(*clauses)


FilterClause = Union[
    SearchFilter,
    StatusFilter,
    UserFilter,
    PaymentMethodFilter,
    PaymentStatusFilter,
    TotalRange,
    CreatedRange,
]


class OrderFilters(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    search: str | None = None
    status: OrderStatus | None = None
    user_id: str | None = None
    payment_method: PaymentMethod | None = None
    payment_status: PaymentStatus | None = None
    min_total: Decimal | None = None
    max_total: Decimal | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    sort_by: OrderSortField = OrderSortField.CREATED_AT
    sort_order: Literal["asc", "desc"] = "desc"
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def clauses(self) -> list[FilterClause]:
        clauses: list[FilterClause] = []
        if self.search:
            clauses.append(SearchFilter(self.search))
        if self.status:
            clauses.append(StatusFilter(self.status))
        if self.user_id:
            clauses.append(UserFilter(self.user_id))
        if self.payment_method:
            clauses.append(PaymentMethodFilter(self.payment_method))
        if self.payment_status:
            clauses.append(PaymentStatusFilter(self.payment_status))
        if self.min_total is not None or self.max_total is not None:
            clauses.append(TotalRange(self.min_total, self.max_total))
        if self.start_date is not None or self.end_date is not None:
            clauses.append(CreatedRange(self.start_date, self.end_date))
        return clauses

    def conditions(self) -> list[ColumnElement[bool]]:
        return [clause.condition() for clause in self.clauses()]

    def ordering(self) -> list:
        column = getattr(OrderModel, OrderSortField(self.sort_by).value)
        direction = asc if self.sort_order == "asc" else desc
        # Secondary key keeps pagination stable across equal sort values.
        return [direction(column), direction(OrderModel.id)]
