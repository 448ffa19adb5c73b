from __future__ import annotations

import argparse
import json
from typing import Sequence

from jewelry_admin.core.config import get_settings
from jewelry_admin.core.logging import configure_logging
from jewelry_admin.domain.orders import OrderFilters, OrderSortField, OrderStatusChange, OrderWorkflow
from jewelry_admin.persistence.models import OrderStatus
from jewelry_admin.persistence.pg import Database


def _bounded_int(low: int, high: int | None = None):
    def parse(raw: str) -> int:
        try:
            value = int(raw)
        except ValueError:
            raise argparse.ArgumentTypeError(f"invalid integer: {raw!r}") from None
        if value < low or (high is not None and value > high):
            bounds = f">= {low}" if high is None else f"between {low} and {high}"
            raise argparse.ArgumentTypeError(f"must be {bounds}, got {value}")
        return value

    return parse


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Jewelry admin CLI")
    parser.add_argument("--database-url", default=None, help="Override JA_DATABASE_URL")
    top = parser.add_subparsers(dest="command", required=True)

    db = top.add_parser("db", help="Database maintenance")
    db_sub = db.add_subparsers(dest="db_command", required=True)
    db_sub.add_parser("init", help="Create all tables")

    orders = top.add_parser("orders", help="Order operations")
    orders_sub = orders.add_subparsers(dest="orders_command", required=True)

    listing = orders_sub.add_parser("list", help="List orders")
    listing.add_argument("--search", default=None)
    listing.add_argument("--status", choices=[s.value for s in OrderStatus], default=None)
    listing.add_argument("--user-id", default=None)
    listing.add_argument("--sort-by", choices=[f.value for f in OrderSortField], default="created_at")
    listing.add_argument("--sort-order", choices=["asc", "desc"], default="desc")
    listing.add_argument("--page", type=_bounded_int(1), default=1)
    listing.add_argument("--limit", type=_bounded_int(1, 100), default=10)

    show = orders_sub.add_parser("show", help="Show a single order")
    show.add_argument("order_id")

    status = orders_sub.add_parser("status", help="Move an order to a new status")
    status.add_argument("order_id")
    status.add_argument("status", choices=[s.value for s in OrderStatus])
    status.add_argument("--notes", default=None)
    status.add_argument("--tracking-number", default=None)
    status.add_argument("--carrier", default=None)

    serve = top.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    return parser


def _print(payload) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _run_orders(args: argparse.Namespace, workflow: OrderWorkflow) -> int:
    if args.orders_command == "list":
        _print(
            workflow.list_orders(
                OrderFilters(
                    search=args.search,
                    status=args.status,
                    user_id=args.user_id,
                    sort_by=args.sort_by,
                    sort_order=args.sort_order,
                    page=args.page,
                    limit=args.limit,
                )
            )
        )
        return 0

    if args.orders_command == "show":
        order = workflow.get_order(args.order_id)
    else:
        change = {"status": args.status}
        if args.notes is not None:
            change["notes"] = args.notes
        if args.tracking_number:
            change["tracking_number"] = args.tracking_number
        if args.carrier:
            change["shipping_carrier"] = args.carrier
        order = workflow.update_order_status(args.order_id, OrderStatusChange(**change))

    if order is None:
        _print({"error": "order not found", "order_id": args.order_id})
        return 1
    _print(order)
    return 0


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "jewelry_admin.main:app",
        host=args.host or settings.api_host,
        port=args.port or settings.api_port,
    )
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging()

    if args.command == "serve":
        return _serve(args)

    settings = get_settings()
    db = Database(args.database_url or settings.database_url)
    try:
        if args.command == "db" and args.db_command == "init":
            db.init_schema()
            _print({"status": "ok", "database": db.engine.url.render_as_string(hide_password=True)})
            return 0
        if args.command == "orders":
            return _run_orders(args, OrderWorkflow(db, settings=settings))
    finally:
        db.close()

    parser.error("unsupported command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
