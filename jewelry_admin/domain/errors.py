from __future__ import annotations


class MissingReferenceError(LookupError):
    """A record referenced from inside an order unit of work does not exist."""

    def __init__(self, entity: str, record_id: str):
        super().__init__(f"{entity} not found: {record_id}")
        self.entity = entity
        self.record_id = record_id


class InsufficientStockError(ValueError):
    def __init__(self, product_id: str, requested: int, available: int):
        super().__init__(
            f"insufficient stock for product={product_id}: requested={requested} available={available}"
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available
