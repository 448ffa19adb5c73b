from __future__ import annotations

from sqlalchemy import case, select, update
from sqlalchemy.orm import Session

from jewelry_admin.domain.errors import InsufficientStockError, MissingReferenceError
from jewelry_admin.persistence.models import ProductModel, ProductStatus


def _adjust_counters(
    session: Session,
    product_id: str,
    stock_delta: int,
    sold_delta: int,
    require_available: int | None = None,
) -> int:
    new_stock = ProductModel.stock + stock_delta
    stmt = (
        update(ProductModel)
        .where(ProductModel.id == product_id)
        .values(
            stock=new_stock,
            sold_count=ProductModel.sold_count + sold_delta,
            status=case(
                (new_stock > 0, ProductStatus.IN_STOCK.value),
                else_=ProductStatus.OUT_OF_STOCK.value,
            ),
        )
        .execution_options(synchronize_session=False)
    )
    if require_available is not None:
        stmt = stmt.where(ProductModel.stock >= require_available)
    return session.execute(stmt).rowcount


def record_sale(session: Session, product_id: str, quantity: int, enforce_stock: bool = False) -> None:
    """Take ``quantity`` units out of stock and count them as sold.

    Counters move through a single UPDATE so concurrent orders against the
    same product never lose an adjustment. With ``enforce_stock`` the
    decrement is conditional on enough stock being present at write time.
    """
    updated = _adjust_counters(
        session,
        product_id,
        stock_delta=-quantity,
        sold_delta=quantity,
        require_available=quantity if enforce_stock else None,
    )
    if updated:
        return

    available = session.scalar(select(ProductModel.stock).where(ProductModel.id == product_id))
    if available is None:
        raise MissingReferenceError("product", product_id)
    raise InsufficientStockError(product_id, requested=quantity, available=int(available))


def restock(session: Session, product_id: str, quantity: int) -> None:
    if not _adjust_counters(session, product_id, stock_delta=quantity, sold_delta=-quantity):
        raise MissingReferenceError("product", product_id)
