from jewelry_admin.domain.orders.commands import (
    ItemChange,
    KeepItems,
    OrderCreate,
    OrderItemInput,
    OrderStatusChange,
    OrderUpdate,
    ReplaceItems,
)
from jewelry_admin.domain.orders.filters import OrderFilters, OrderSortField
from jewelry_admin.domain.orders.workflow import OrderWorkflow

__all__ = [
    "ItemChange",
    "KeepItems",
    "OrderCreate",
    "OrderFilters",
    "OrderItemInput",
    "OrderSortField",
    "OrderStatusChange",
    "OrderUpdate",
    "OrderWorkflow",
    "ReplaceItems",
]
