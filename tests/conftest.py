from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from jewelry_admin.core.config import get_settings
from jewelry_admin.domain.orders import OrderCreate, OrderWorkflow
from jewelry_admin.persistence.models import AddressModel, ProductModel, ProductStatus, UserModel
from jewelry_admin.persistence.pg import Database


@pytest.fixture(scope="session")
def test_db_path(tmp_path_factory: pytest.TempPathFactory) -> Path:
    return tmp_path_factory.mktemp("db") / "test.sqlite"


@pytest.fixture(scope="session", autouse=True)
def configure_test_db(test_db_path: Path):
    settings = get_settings()
    settings.database_url = f"sqlite+pysqlite:///{test_db_path}"
    settings.enforce_stock_check = False

    database = Database(settings.database_url)
    database.drop_schema()
    database.init_schema()
    yield database
    database.drop_schema()
    database.close()


@pytest.fixture()
def db(configure_test_db) -> Database:
    return configure_test_db


@pytest.fixture()
def workflow(db: Database) -> OrderWorkflow:
    return OrderWorkflow(db, settings=get_settings())


@pytest.fixture()
def client(configure_test_db):
    from jewelry_admin.main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture()
def auth_headers():
    settings = get_settings()
    return {
        "admin": {"X-API-Key": settings.admin_api_key},
        "manager": {"X-API-Key": settings.manager_api_key},
        "salesperson": {"X-API-Key": settings.salesperson_api_key},
        "support": {"X-API-Key": settings.support_api_key},
    }


@pytest.fixture()
def make_customer(db: Database):
    def _make(name: str = "Ana Souza", email: str | None = None) -> dict:
        with db.session_scope() as session:
            user = UserModel(name=name, email=email or f"{uuid4().hex[:10]}@example.com", document="123.456.789-00")
            session.add(user)
            session.flush()
            address = AddressModel(
                user_id=user.id,
                street="Rua das Flores",
                number="42",
                neighborhood="Centro",
                city="Sao Paulo",
                state="SP",
                zip_code="01000-000",
                country="BR",
                is_default=True,
            )
            session.add(address)
            session.flush()
            return {"user_id": user.id, "address_id": address.id, "email": user.email, "name": user.name}

    return _make


@pytest.fixture()
def make_product(db: Database):
    def _make(stock: int = 10, price: str = "10.00", name: str = "Gold ring") -> str:
        with db.session_scope() as session:
            product = ProductModel(
                name=name,
                sku=f"SKU-{uuid4().hex[:10].upper()}",
                images=["https://cdn.example.com/ring.jpg"],
                price=Decimal(price),
                stock=stock,
                sold_count=0,
                status=ProductStatus.IN_STOCK.value if stock > 0 else ProductStatus.OUT_OF_STOCK.value,
            )
            session.add(product)
            session.flush()
            return product.id

    return _make


@pytest.fixture()
def product_state(db: Database):
    def _read(product_id: str) -> tuple[int, int, str]:
        with db.session_scope() as session:
            product = session.get(ProductModel, product_id)
            return product.stock, product.sold_count, product.status

    return _read


@pytest.fixture()
def customer_state(db: Database):
    def _read(user_id: str) -> UserModel:
        with db.session_scope() as session:
            return session.get(UserModel, user_id)

    return _read


def _order_payload(customer: dict, items: list[dict], **overrides) -> dict:
    subtotal = sum(
        (Decimal(str(i["unit_price"])) - Decimal(str(i.get("discount", "0")))) * i["quantity"] for i in items
    )
    payload = {
        "user_id": customer["user_id"],
        "subtotal": str(subtotal),
        "discount_total": "0",
        "shipping_total": "0",
        "tax_total": "0",
        "total": str(subtotal),
        "payment_method": "PIX",
        "billing_address_id": customer["address_id"],
        "shipping_address_id": customer["address_id"],
        "items": items,
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def order_payload():
    return _order_payload


@pytest.fixture()
def build_order():
    def _build(customer: dict, items: list[dict], **overrides) -> OrderCreate:
        return OrderCreate(**_order_payload(customer, items, **overrides))

    return _build
