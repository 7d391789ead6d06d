import threading
import time
from decimal import Decimal

import pytest

from conftest import item
from domain import CompanySettings, OrderStatus, Role, UserStatus
from errors import NotFound, ProtectedRecord, ValidationError
from store import MemoryStore, OrderFeed, SqlStore


def test_store_selected_from_config(app, store):
    expected = MemoryStore if app.config["DATA_STORE"] == "memory" else SqlStore
    assert isinstance(store, expected)


def test_defaults_are_seeded(store):
    assert [u.role for u in store.get_users()] == [Role.ADMIN]
    assert len(store.get_menu()) == 8


def test_create_order_precomputes_total(store):
    order_id = store.create_order("3", [item("Pasta", 2, "10.00"), item("Soda", 1, "4.50")], "Ana")
    order = store.get_order(order_id)
    assert order.total == Decimal("24.50")
    assert order.status == OrderStatus.PENDING
    assert order.table_id == "3"
    assert [i.name for i in order.items] == ["Pasta", "Soda"]
    assert order.timestamp.tzinfo is not None


def test_orders_snapshot_newest_first(store):
    first = store.create_order("1", [item("A")], "Ana")
    second = store.create_order("1", [item("B")], "Bob")
    assert [o.id for o in store.get_orders()][:2] == [second, first]


def test_subscription_delivers_snapshots_until_unsubscribed(store):
    seen = []
    unsubscribe = store.subscribe_to_orders(seen.append)
    assert seen == [[]]
    order_id = store.create_order("2", [item("A")], "Ana")
    store.update_order_status(order_id, OrderStatus.PREPARING)
    assert [len(s) for s in seen] == [0, 1, 1]
    assert seen[-1][0].status == OrderStatus.PREPARING
    assert seen[1][0].status == OrderStatus.PENDING

    unsubscribe()
    store.update_order_status(order_id, OrderStatus.READY)
    assert len(seen) == 3


def test_failing_subscriber_does_not_block_others():
    feed = OrderFeed()
    seen = []

    def broken(snapshot):
        raise RuntimeError("boom")

    feed.subscribe(broken, [])
    feed.subscribe(seen.append, [])
    feed.publish(["x"])
    assert seen == [[], ["x"]]


def test_concurrent_updates_reach_a_slow_subscriber_in_order():
    store = MemoryStore()
    order_id = store.create_order("4", [item("A")], "Ana")
    delivering = threading.Event()
    seen = []

    def slow(snapshot):
        status = snapshot[0].status
        if status == OrderStatus.PREPARING and not delivering.is_set():
            delivering.set()
            time.sleep(0.2)
        seen.append(status)

    store.subscribe_to_orders(slow)
    worker = threading.Thread(target=store.update_order_status, args=(order_id, OrderStatus.PREPARING))
    worker.start()
    assert delivering.wait(2)
    store.update_order_status(order_id, OrderStatus.READY)
    worker.join()

    assert seen == [OrderStatus.PENDING, OrderStatus.PREPARING, OrderStatus.READY]


def test_unknown_order(store):
    with pytest.raises(NotFound):
        store.update_order_status("missing", OrderStatus.READY)


def test_menu_crud(store):
    created = store.add_menu_item({"name": "Gnocchi", "price": 41.5, "category": "Mains"})
    assert created.price == Decimal("41.5")
    updated = store.update_menu_item(created.id, {"price": "39.90"})
    assert (updated.name, updated.price) == ("Gnocchi", Decimal("39.90"))
    store.delete_menu_item(created.id)
    assert created.id not in {m.id for m in store.get_menu()}
    with pytest.raises(NotFound):
        store.delete_menu_item(created.id)


def test_menu_validation(store):
    with pytest.raises(ValidationError):
        store.add_menu_item({"name": "Mystery", "price": 1, "category": "Snacks"})
    with pytest.raises(ValidationError):
        store.add_menu_item({"name": "", "price": 1})


def test_login_rules(store):
    user = store.add_user({"name": "Kai", "email": "kai@x.io", "password": "pw", "role": "Kitchen"})
    assert store.login("kai@x.io", "pw").id == user.id
    assert store.login("kai@x.io", "wrong") is None
    assert store.login("nobody@x.io", "pw") is None

    store.update_user(user.id, {"status": "Inactive"})
    assert store.get_user(user.id).status == UserStatus.INACTIVE
    assert store.login("kai@x.io", "pw") is None


def test_password_change(store):
    user = store.add_user({"name": "Lu", "email": "lu@x.io", "password": "old", "role": "Waiter"})
    store.update_user(user.id, {"password": "new"})
    assert store.login("lu@x.io", "old") is None
    assert store.login("lu@x.io", "new") is not None


def test_user_validation(store):
    with pytest.raises(ValidationError):
        store.add_user({"name": "No Pw", "email": "np@x.io", "role": "Waiter"})
    with pytest.raises(ValidationError):
        store.add_user({"name": "Bad", "email": "b@x.io", "password": "x", "role": "Chef"})
    store.add_user({"name": "Dup", "email": "dup@x.io", "password": "x", "role": "Waiter"})
    with pytest.raises(ValidationError):
        store.add_user({"name": "Dup2", "email": "dup@x.io", "password": "x", "role": "Waiter"})


def test_default_admin_cannot_be_deleted(store):
    admin = store.get_users()[0]
    with pytest.raises(ProtectedRecord):
        store.delete_user(admin.id)
    other = store.add_user({"name": "Tmp", "email": "tmp@x.io", "password": "x", "role": "Waiter"})
    store.delete_user(other.id)
    assert store.get_user(other.id) is None


def test_company_settings_start_empty_and_are_overwritten(store):
    assert store.get_company_settings() == CompanySettings()
    store.save_company_settings(CompanySettings(trade_name="Cantina", city="Recife"))
    store.save_company_settings(CompanySettings(trade_name="Cantina Nova"))
    saved = store.get_company_settings()
    assert saved.trade_name == "Cantina Nova"
    assert saved.city == ""


def test_sql_row_with_null_items_decodes(app):
    if app.config["DATA_STORE"] != "sql":
        pytest.skip("relational store only")
    import models

    with app.app_context():
        models.db.session.add(models.Order(id="legacy", table_id="7", customer_name="Ana",
                                           items=None, total=None, status="Pending"))
        models.db.session.commit()
        order = app.extensions["store"].get_order("legacy")
    assert order.items == []
    assert order.total == Decimal("0")
