from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Callable, Iterable

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, selectinload

from jewelry_admin.core.config import Settings, get_settings
from jewelry_admin.domain.errors import MissingReferenceError
from jewelry_admin.domain.inventory.stock import record_sale, restock
from jewelry_admin.domain.orders.aggregates import generate_order_number, line_total
from jewelry_admin.domain.orders.commands import (
    OrderCreate,
    OrderItemInput,
    OrderStatusChange,
    OrderUpdate,
    ReplaceItems,
)
from jewelry_admin.domain.orders.filters import OrderFilters
from jewelry_admin.domain.orders.projections import order_view
from jewelry_admin.domain.orders.transitions import TransitionContext, apply_transition
from jewelry_admin.persistence.models import (
    AddressModel,
    OrderItemModel,
    OrderModel,
    OrderStatus,
    PaymentStatus,
    ProductModel,
    UserModel,
)
from jewelry_admin.persistence.pg import Database

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _order_detail_options():
    return (
        selectinload(OrderModel.items).selectinload(OrderItemModel.product),
        selectinload(OrderModel.user),
        selectinload(OrderModel.created_by),
        selectinload(OrderModel.billing_address),
        selectinload(OrderModel.shipping_address),
    )


class OrderWorkflow:
    """Order lifecycle operations; each write runs as one unit of work.

    Product counters and order state always change inside the same
    transaction, so a failure at any step leaves neither a partial order nor
    a partial stock adjustment behind.
    """

    def __init__(
        self,
        db: Database,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.clock = clock

    def list_orders(self, filters: OrderFilters) -> dict:
        conditions = filters.conditions()
        with self.db.session_scope() as session:
            total = session.scalar(select(func.count()).select_from(OrderModel).where(*conditions)) or 0
            stmt = (
                select(OrderModel)
                .where(*conditions)
                .options(*_order_detail_options())
                .order_by(*filters.ordering())
                .offset(filters.offset)
                .limit(filters.limit)
            )
            orders = list(session.scalars(stmt).all())
            return {
                "data": [order_view(order) for order in orders],
                "pagination": {
                    "total": total,
                    "page": filters.page,
                    "limit": filters.limit,
                    "pages": math.ceil(total / filters.limit),
                },
            }

    def get_order(self, order_id: str) -> dict | None:
        with self.db.session_scope() as session:
            order = self._load_order(session, order_id)
            if order is None:
                return None
            return order_view(order, detail=True)

    def create_order(self, data: OrderCreate) -> dict:
        now = self.clock()
        with self.db.session_scope() as session:
            self._require(session, AddressModel, data.billing_address_id, "address")
            self._require(session, AddressModel, data.shipping_address_id, "address")
            if data.created_by_id is not None:
                self._require(session, UserModel, data.created_by_id, "user")

            order = OrderModel(
                order_number=generate_order_number(self.settings.order_number_prefix, now),
                user_id=data.user_id,
                subtotal=data.subtotal,
                discount_total=data.discount_total,
                shipping_total=data.shipping_total,
                tax_total=data.tax_total,
                total=data.total,
                status=data.status or OrderStatus.PENDING.value,
                payment_method=data.payment_method,
                payment_status=data.payment_status or PaymentStatus.PENDING.value,
                notes=data.notes,
                billing_address_id=data.billing_address_id,
                shipping_address_id=data.shipping_address_id,
                created_by_id=data.created_by_id,
                created_at=now,
                updated_at=now,
            )
            session.add(order)
            self._add_items(session, order, data.items)

            credited = session.execute(
                update(UserModel)
                .where(UserModel.id == data.user_id)
                .values(total_spent=UserModel.total_spent + data.total, last_purchase=now)
                .execution_options(synchronize_session=False)
            ).rowcount
            if not credited:
                raise MissingReferenceError("user", data.user_id)

            session.flush()
            logger.info(
                "order created: order_id=%s order_number=%s user_id=%s items=%s total=%s",
                order.id,
                order.order_number,
                order.user_id,
                len(data.items),
                data.total,
            )
            return self._reload(session, order.id)

    def update_order(self, order_id: str, changes: OrderUpdate) -> dict | None:
        with self.db.session_scope() as session:
            order = self._load_order(session, order_id, lock=True)
            if order is None:
                return None
            # A canceled order already gave its stock back.
            holds_stock = OrderStatus(order.status) is not OrderStatus.CANCELED

            scalar_changes = changes.scalar_changes()
            for field in ("billing_address_id", "shipping_address_id"):
                if field in scalar_changes:
                    self._require(session, AddressModel, scalar_changes[field], "address")
            for field, value in scalar_changes.items():
                setattr(order, field, value)

            item_change = changes.item_change()
            if isinstance(item_change, ReplaceItems):
                self._replace_items(session, order, item_change.items, holds_stock)

            session.flush()
            return self._reload(session, order.id)

    def update_order_status(self, order_id: str, change: OrderStatusChange) -> dict | None:
        with self.db.session_scope() as session:
            order = self._load_order(session, order_id, lock=True)
            if order is None:
                return None

            if change.notes_provided:
                order.notes = change.notes
            if change.tracking_number:
                order.tracking_number = change.tracking_number
            if change.shipping_carrier:
                order.shipping_carrier = change.shipping_carrier
            if change.estimated_delivery:
                order.estimated_delivery = change.estimated_delivery

            target = OrderStatus(change.status)
            apply_transition(
                TransitionContext(
                    session=session,
                    order=order,
                    previous=self._claim_status(session, order.id, target),
                    target=target,
                    now=self.clock(),
                )
            )
            session.flush()
            return self._reload(session, order.id)

    def _add_items(
        self,
        session: Session,
        order: OrderModel,
        items: Iterable[OrderItemInput],
        take_stock: bool = True,
    ) -> None:
        enforce = self.settings.enforce_stock_check
        for line_no, item in enumerate(items):
            order.items.append(
                OrderItemModel(
                    line_no=line_no,
                    product_id=item.product_id,
                    variant_id=item.variant_id,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    discount=item.discount,
                    total=line_total(item.unit_price, item.discount, item.quantity),
                    notes=item.notes,
                )
            )
            if take_stock:
                record_sale(session, item.product_id, item.quantity, enforce_stock=enforce)
            else:
                self._require(session, ProductModel, item.product_id, "product")

    def _replace_items(
        self,
        session: Session,
        order: OrderModel,
        items: Iterable[OrderItemInput],
        holds_stock: bool = True,
    ) -> None:
        previous = [(item.product_id, item.quantity) for item in order.items]
        order.items.clear()
        # Old lines go back on the shelf before the new ones are taken. A
        # canceled order returned its stock already, so only its lines change.
        if holds_stock:
            for product_id, quantity in previous:
                restock(session, product_id, quantity)
        new_items = list(items)
        self._add_items(session, order, new_items, take_stock=holds_stock)
        logger.info(
            "order items replaced: order_id=%s removed=%s added=%s inventory=%s",
            order.id,
            len(previous),
            len(new_items),
            "adjusted" if holds_stock else "untouched",
        )

    def _claim_status(self, session: Session, order_id: str, target: OrderStatus) -> OrderStatus:
        """Write ``target`` and return the status it replaced.

        The write is conditional on the status last read, so when two
        requests race on the same order only one of them observes each
        previous status and its side effect runs once.
        """
        current = session.scalar(select(OrderModel.status).where(OrderModel.id == order_id))
        while True:
            claimed = session.execute(
                update(OrderModel)
                .where(OrderModel.id == order_id, OrderModel.status == current)
                .values(status=target.value)
                .execution_options(synchronize_session=False)
            ).rowcount
            if claimed:
                return OrderStatus(current)
            current = session.scalar(select(OrderModel.status).where(OrderModel.id == order_id))

    def _require(self, session: Session, model, record_id: str, entity: str) -> None:
        if session.get(model, record_id) is None:
            raise MissingReferenceError(entity, record_id)

    def _load_order(self, session: Session, order_id: str, lock: bool = False) -> OrderModel | None:
        stmt = select(OrderModel).where(OrderModel.id == order_id).options(*_order_detail_options())
        if lock:
            # Row lock on backends that support it; SQLite serializes writers instead.
            stmt = stmt.with_for_update(of=OrderModel)
        return session.scalar(stmt)

    def _reload(self, session: Session, order_id: str) -> dict:
        # Counter updates bypass the identity map; drop cached state first.
        session.expire_all()
        order = self._load_order(session, order_id)
        return order_view(order, detail=True)
