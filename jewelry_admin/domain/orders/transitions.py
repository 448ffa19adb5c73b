from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from sqlalchemy.orm import Session

from jewelry_admin.domain.inventory.stock import restock
from jewelry_admin.persistence.models import OrderModel, OrderStatus

logger = logging.getLogger(__name__)


@dataclass
class TransitionContext:
    session: Session
    order: OrderModel
    previous: OrderStatus
    target: OrderStatus
    now: datetime


SideEffect = Callable[[TransitionContext], None]


def no_side_effect(ctx: TransitionContext) -> None:
    return None


def stamp_completed(ctx: TransitionContext) -> None:
    ctx.order.completed_at = ctx.now


def cancel_and_restock(ctx: TransitionContext) -> None:
    ctx.order.canceled_at = ctx.now
    for item in ctx.order.items:
        restock(ctx.session, item.product_id, item.quantity)
    logger.info(
        "order canceled, items restocked: order_id=%s previous_status=%s items=%s",
        ctx.order.id,
        ctx.previous.value,
        len(ctx.order.items),
    )


def _build_transition_table() -> dict[tuple[OrderStatus, OrderStatus], SideEffect]:
    # Every (from, to) pair is allowed; staff may correct statuses by hand.
    table: dict[tuple[OrderStatus, OrderStatus], SideEffect] = {}
    for previous in OrderStatus:
        for target in OrderStatus:
            table[(previous, target)] = no_side_effect
    for previous in OrderStatus:
        if previous is not OrderStatus.DELIVERED:
            table[(previous, OrderStatus.DELIVERED)] = stamp_completed
        if previous is not OrderStatus.CANCELED:
            table[(previous, OrderStatus.CANCELED)] = cancel_and_restock
    return table


TRANSITIONS = _build_transition_table()


def side_effect_for(previous: OrderStatus, target: OrderStatus) -> SideEffect:
    return TRANSITIONS.get((previous, target), no_side_effect)


def apply_transition(ctx: TransitionContext) -> None:
    ctx.order.status = ctx.target.value
    side_effect_for(ctx.previous, ctx.target)(ctx)
