from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from jewelry_admin.api.routes_orders import router as orders_router
from jewelry_admin.core.config import get_settings
from jewelry_admin.core.logging import configure_logging
from jewelry_admin.domain.errors import InsufficientStockError, MissingReferenceError
from jewelry_admin.persistence.pg import Database

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Jewelry Admin API")


@app.on_event("startup")
def on_startup() -> None:
    settings = get_settings()
    db = Database.from_settings(settings)
    db.init_schema()
    app.state.db = db
    logger.info("database ready: dialect=%s env=%s", db.engine.dialect.name, settings.env)


@app.on_event("shutdown")
def on_shutdown() -> None:
    db = getattr(app.state, "db", None)
    if db is not None:
        db.close()
        app.state.db = None


@app.exception_handler(MissingReferenceError)
async def missing_reference_handler(_: Request, exc: MissingReferenceError):
    return JSONResponse(
        status_code=404,
        content={
            "detail": str(exc),
            "error": "missing_reference",
            "entity": exc.entity,
        },
    )


@app.exception_handler(InsufficientStockError)
async def insufficient_stock_handler(_: Request, exc: InsufficientStockError):
    return JSONResponse(
        status_code=409,
        content={
            "detail": str(exc),
            "error": "insufficient_stock",
            "product_id": exc.product_id,
        },
    )


@app.get("/healthz")
def healthz() -> dict:
    return {"status": "ok"}


app.include_router(orders_router)
