from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query

from jewelry_admin.core.config import get_settings
from jewelry_admin.core.security import (
    ORDERS_READ,
    ORDERS_STATUS,
    ORDERS_WRITE,
    Actor,
    permission_required,
)
from jewelry_admin.domain.orders import (
    OrderCreate,
    OrderFilters,
    OrderSortField,
    OrderStatusChange,
    OrderUpdate,
    OrderWorkflow,
)
from jewelry_admin.persistence.models import OrderStatus, PaymentMethod, PaymentStatus
from jewelry_admin.persistence.pg import Database, get_database

router = APIRouter(tags=["orders"])


def get_workflow(db: Database = Depends(get_database)) -> OrderWorkflow:
    return OrderWorkflow(db, settings=get_settings())


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail="order not found")


@router.get("/orders")
def list_orders(
    search: str | None = Query(default=None),
    status: OrderStatus | None = Query(default=None),
    user_id: str | None = Query(default=None),
    payment_method: PaymentMethod | None = Query(default=None),
    payment_status: PaymentStatus | None = Query(default=None),
    min_total: Decimal | None = Query(default=None),
    max_total: Decimal | None = Query(default=None),
    start_date: datetime | None = Query(default=None),
    end_date: datetime | None = Query(default=None),
    sort_by: OrderSortField = Query(default=OrderSortField.CREATED_AT),
    sort_order: Literal["asc", "desc"] = Query(default="desc"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    actor: Actor = Depends(permission_required(ORDERS_READ)),
    workflow: OrderWorkflow = Depends(get_workflow),
):
    filters = OrderFilters(
        search=search,
        status=status,
        user_id=user_id,
        payment_method=payment_method,
        payment_status=payment_status,
        min_total=min_total,
        max_total=max_total,
        start_date=start_date,
        end_date=end_date,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    return workflow.list_orders(filters)


@router.get("/orders/{order_id}")
def get_order(
    order_id: str,
    actor: Actor = Depends(permission_required(ORDERS_READ)),
    workflow: OrderWorkflow = Depends(get_workflow),
):
    order = workflow.get_order(order_id)
    if order is None:
        raise _not_found()
    return order


@router.post("/orders", status_code=201)
def create_order(
    request: OrderCreate,
    actor: Actor = Depends(permission_required(ORDERS_WRITE)),
    workflow: OrderWorkflow = Depends(get_workflow),
):
    return workflow.create_order(request)


@router.put("/orders/{order_id}")
def update_order(
    order_id: str,
    request: OrderUpdate,
    actor: Actor = Depends(permission_required(ORDERS_WRITE)),
    workflow: OrderWorkflow = Depends(get_workflow),
):
    order = workflow.update_order(order_id, request)
    if order is None:
        raise _not_found()
    return order


@router.patch("/orders/{order_id}/status")
def update_order_status(
    order_id: str,
    request: OrderStatusChange,
    actor: Actor = Depends(permission_required(ORDERS_STATUS)),
    workflow: OrderWorkflow = Depends(get_workflow),
):
    order = workflow.update_order_status(order_id, request)
    if order is None:
        raise _not_found()
    return order
