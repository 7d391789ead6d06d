"""
Project: SmartOrder Restaurant POS
Date: October 2025

Description:
Shared fixtures: Flask apps over both data stores, logged-in clients for
each staff role, and an order factory for the engine tests.
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

# --- Make sure project root is importable ---
TESTS_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(TESTS_DIR, os.pardir, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from app import create_app  # noqa: E402
from domain import CartItem, Category, Order, OrderStatus  # noqa: E402
from models import db  # noqa: E402

ADMIN_LOGIN = {"email": "admin@smartorder.local", "password": "password"}
BASE_TIME = datetime(2025, 10, 1, 19, 0, tzinfo=timezone.utc)


@pytest.fixture(params=["memory", "sql"])
def app(request):
    app = create_app(testing=True, overrides={"DATA_STORE": request.param, "TABLE_COUNT": 10})
    yield app
    if request.param == "sql":
        with app.app_context():
            db.session.remove()
            db.drop_all()


@pytest.fixture
def store(app):
    with app.app_context():
        yield app.extensions["store"]


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client):
    resp = client.post("/login", json=ADMIN_LOGIN)
    assert resp.status_code == 200, resp.get_json()
    return client


def _staff_client(app, role):
    email = f"{role.lower()}@smartorder.local"
    with app.app_context():
        app.extensions["store"].add_user(
            {"name": f"{role} user", "email": email, "password": "secret", "role": role}
        )
    c = app.test_client()
    resp = c.post("/login", json={"email": email, "password": "secret"})
    assert resp.status_code == 200
    return c


@pytest.fixture
def kitchen_client(app):
    return _staff_client(app, "Kitchen")


@pytest.fixture
def waiter_client(app):
    return _staff_client(app, "Waiter")


@pytest.fixture
def menu_ids(app):
    with app.app_context():
        return {m.name: m.id for m in app.extensions["store"].get_menu()}


def item(name, quantity=1, price="10.00", category=Category.MAINS, notes=""):
    return CartItem(
        id=name.lower(),
        name=name,
        price=Decimal(price),
        category=category,
        quantity=quantity,
        notes=notes,
    )


@pytest.fixture
def make_order():
    counter = {"n": 0}

    def factory(table_id="1", customer="Ana", items=None, status=OrderStatus.PENDING,
                total=None, minutes=None):
        counter["n"] += 1
        n = counter["n"]
        items = [item("Dish")] if items is None else items
        if total is None:
            total = sum((i.price * i.quantity for i in items or []), Decimal("0"))
        return Order(
            id=f"o{n}",
            table_id=str(table_id),
            customer_name=customer,
            items=items,
            total=Decimal(str(total)),
            status=status,
            timestamp=BASE_TIME + timedelta(minutes=n if minutes is None else minutes),
        )

    return factory
