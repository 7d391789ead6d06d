"""
Project: SmartOrder Restaurant POS
Date: October 2025

Description:
Data store contract used by the API and the order engine, with two
interchangeable implementations: SqlStore (Flask-SQLAlchemy) and MemoryStore
(in-process, used for demos and tests). The active one is picked from
DATA_STORE at startup.
"""

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import replace
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from domain import (
    CompanySettings,
    MenuItem,
    Order,
    OrderStatus,
    Role,
    User,
    UserStatus,
    parse_enum,
    utcnow,
)
from errors import AdapterFailure, NotFound, ProtectedRecord, ValidationError
import models

log = logging.getLogger(__name__)


class OrderFeed:
    """Fan-out of order snapshots to subscribers.

    `delivering` is held for a whole snapshot-and-deliver cycle, so each
    subscriber receives snapshots one at a time and in the order they were taken.
    """

    def __init__(self):
        self._subscribers = []
        self._lock = threading.Lock()
        self.delivering = threading.RLock()

    def subscribe(self, callback, snapshot):
        with self.delivering:
            with self._lock:
                self._subscribers.append(callback)
            self._deliver(callback, snapshot)

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, snapshot):
        with self.delivering:
            with self._lock:
                subscribers = list(self._subscribers)
            for callback in subscribers:
                self._deliver(callback, snapshot)

    @staticmethod
    def _deliver(callback, snapshot):
        try:
            callback(list(snapshot))
        except Exception:
            log.exception("order subscriber %r failed", callback)


def _user_fields(data, partial=False):
    out = {}
    for key in ("name", "email"):
        if key in data or not partial:
            value = (data.get(key) or "").strip()
            if not value:
                raise ValidationError(f"{key} is required")
            out[key] = value
    if "role" in data or not partial:
        out["role"] = parse_enum(Role, data.get("role"), "role")
    if "status" in data or not partial:
        out["status"] = parse_enum(UserStatus, data.get("status") or UserStatus.ACTIVE.value, "status")
    if data.get("password"):
        out["password_hash"] = generate_password_hash(data["password"])
    elif not partial:
        raise ValidationError("password is required")
    return out


def _order_total(items):
    return sum((i.price * i.quantity for i in items), Decimal("0"))


class DataStore(ABC):
    def __init__(self, protected_emails=()):
        self.feed = OrderFeed()
        self.protected_emails = set(protected_emails)

    # --- menu ---
    @abstractmethod
    def get_menu(self): ...

    @abstractmethod
    def add_menu_item(self, data): ...

    @abstractmethod
    def update_menu_item(self, item_id, data): ...

    @abstractmethod
    def delete_menu_item(self, item_id): ...

    # --- users ---
    @abstractmethod
    def get_users(self): ...

    @abstractmethod
    def get_user(self, user_id): ...

    @abstractmethod
    def add_user(self, data): ...

    @abstractmethod
    def update_user(self, user_id, data): ...

    @abstractmethod
    def delete_user(self, user_id): ...

    @abstractmethod
    def login(self, email, password):
        """Return the user for valid credentials of an active account, else None."""

    # --- orders ---
    @abstractmethod
    def create_order(self, table_id, items, customer_name): ...

    @abstractmethod
    def get_orders(self):
        """Snapshot of every order, newest first."""

    @abstractmethod
    def get_order(self, order_id): ...

    @abstractmethod
    def update_order_status(self, order_id, status): ...

    def subscribe_to_orders(self, callback):
        with self.feed.delivering:
            return self.feed.subscribe(callback, self.get_orders())

    def _publish(self):
        # snapshot taken under the delivery lock so it is never older than one already sent
        with self.feed.delivering:
            self.feed.publish(self.get_orders())

    # --- company settings ---
    @abstractmethod
    def get_company_settings(self): ...

    @abstractmethod
    def save_company_settings(self, settings): ...


class MemoryStore(DataStore):
    def __init__(self, protected_emails=()):
        super().__init__(protected_emails)
        self._lock = threading.RLock()
        self._menu = {}
        self._users = {}
        self._hashes = {}
        self._orders = []
        self._settings = CompanySettings()

    def get_menu(self):
        with self._lock:
            return list(self._menu.values())

    def add_menu_item(self, data):
        item = MenuItem.from_dict(data, item_id=uuid.uuid4().hex)
        with self._lock:
            self._menu[item.id] = item
        return item

    def update_menu_item(self, item_id, data):
        with self._lock:
            if item_id not in self._menu:
                raise NotFound(f"menu item {item_id} not found")
            merged = self._menu[item_id].to_dict()
            merged.update(data)
            item = MenuItem.from_dict(merged, item_id=item_id)
            self._menu[item_id] = item
        return item

    def delete_menu_item(self, item_id):
        with self._lock:
            if self._menu.pop(item_id, None) is None:
                raise NotFound(f"menu item {item_id} not found")

    def get_users(self):
        with self._lock:
            return list(self._users.values())

    def get_user(self, user_id):
        return self._users.get(user_id)

    def _email_taken(self, email, exclude=None):
        return any(u.email == email and u.id != exclude for u in self._users.values())

    def add_user(self, data):
        fields_ = _user_fields(data)
        with self._lock:
            if self._email_taken(fields_["email"]):
                raise ValidationError("email already registered")
            pw = fields_.pop("password_hash")
            user = User(id=uuid.uuid4().hex, **fields_)
            self._users[user.id] = user
            self._hashes[user.id] = pw
        return user

    def update_user(self, user_id, data):
        fields_ = _user_fields(data, partial=True)
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise NotFound(f"user {user_id} not found")
            if "email" in fields_ and self._email_taken(fields_["email"], exclude=user_id):
                raise ValidationError("email already registered")
            if "password_hash" in fields_:
                self._hashes[user_id] = fields_.pop("password_hash")
            for key, value in fields_.items():
                setattr(user, key, value)
        return user

    def delete_user(self, user_id):
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise NotFound(f"user {user_id} not found")
            if user.email in self.protected_emails:
                raise ProtectedRecord("the default admin account cannot be deleted")
            del self._users[user_id]
            self._hashes.pop(user_id, None)

    def login(self, email, password):
        email = (email or "").strip()
        with self._lock:
            for user in self._users.values():
                if user.email == email:
                    if user.is_active and check_password_hash(self._hashes[user.id], password or ""):
                        return user
                    return None
        return None

    def create_order(self, table_id, items, customer_name):
        items = list(items)
        order = Order(
            id=uuid.uuid4().hex,
            table_id=str(table_id),
            customer_name=customer_name,
            items=items,
            total=_order_total(items),
            status=OrderStatus.PENDING,
            timestamp=utcnow(),
        )
        with self._lock:
            self._orders.insert(0, order)
        self._publish()
        return order.id

    def get_orders(self):
        with self._lock:
            return list(self._orders)

    def get_order(self, order_id):
        with self._lock:
            for order in self._orders:
                if order.id == order_id:
                    return order
        raise NotFound(f"order {order_id} not found")

    def update_order_status(self, order_id, status):
        status = OrderStatus(status)
        with self._lock:
            order = self.get_order(order_id)
            # snapshots already handed out must not change
            self._orders[self._orders.index(order)] = replace(order, status=status)
        self._publish()

    def get_company_settings(self):
        return CompanySettings.from_dict(self._settings.to_dict())

    def save_company_settings(self, settings):
        self._settings = CompanySettings.from_dict(settings.to_dict())
        return self.get_company_settings()


class SqlStore(DataStore):
    """Relational store. Must be used inside a Flask app context."""

    def __init__(self, db, protected_emails=()):
        super().__init__(protected_emails)
        self.db = db

    def _commit(self):
        try:
            self.db.session.commit()
        except SQLAlchemyError as exc:
            self.db.session.rollback()
            log.error("database write failed: %s", exc)
            raise AdapterFailure("database write failed") from exc

    def _get(self, model, key, label):
        try:
            row = self.db.session.get(model, key)
        except SQLAlchemyError as exc:
            raise AdapterFailure("database read failed") from exc
        if row is None:
            raise NotFound(f"{label} {key} not found")
        return row

    def get_menu(self):
        rows = models.MenuItem.query.order_by(models.MenuItem.category, models.MenuItem.name).all()
        return [r.to_domain() for r in rows]

    def add_menu_item(self, data):
        item = MenuItem.from_dict(data)
        row = models.MenuItem(id=models.new_id())
        row.apply(item)
        self.db.session.add(row)
        self._commit()
        return row.to_domain()

    def update_menu_item(self, item_id, data):
        row = self._get(models.MenuItem, item_id, "menu item")
        merged = row.to_domain().to_dict()
        merged.update(data)
        row.apply(MenuItem.from_dict(merged, item_id=item_id))
        self._commit()
        return row.to_domain()

    def delete_menu_item(self, item_id):
        self.db.session.delete(self._get(models.MenuItem, item_id, "menu item"))
        self._commit()

    def get_users(self):
        return [r.to_domain() for r in models.User.query.order_by(models.User.name).all()]

    def get_user(self, user_id):
        row = self.db.session.get(models.User, user_id)
        return row.to_domain() if row else None

    def _email_taken(self, email, exclude=None):
        q = models.User.query.filter_by(email=email)
        if exclude:
            q = q.filter(models.User.id != exclude)
        return q.first() is not None

    def add_user(self, data):
        fields_ = _user_fields(data)
        if self._email_taken(fields_["email"]):
            raise ValidationError("email already registered")
        row = models.User(
            id=models.new_id(),
            name=fields_["name"],
            email=fields_["email"],
            password_hash=fields_["password_hash"],
            role=fields_["role"].value,
            status=fields_["status"].value,
        )
        self.db.session.add(row)
        self._commit()
        return row.to_domain()

    def update_user(self, user_id, data):
        fields_ = _user_fields(data, partial=True)
        row = self._get(models.User, user_id, "user")
        if "email" in fields_ and self._email_taken(fields_["email"], exclude=user_id):
            raise ValidationError("email already registered")
        for key, value in fields_.items():
            setattr(row, key, getattr(value, "value", value))
        self._commit()
        return row.to_domain()

    def delete_user(self, user_id):
        row = self._get(models.User, user_id, "user")
        if row.email in self.protected_emails:
            raise ProtectedRecord("the default admin account cannot be deleted")
        self.db.session.delete(row)
        self._commit()

    def login(self, email, password):
        row = models.User.query.filter_by(email=(email or "").strip()).first()
        if row is None or row.status != UserStatus.ACTIVE.value:
            return None
        if not check_password_hash(row.password_hash, password or ""):
            return None
        return row.to_domain()

    def create_order(self, table_id, items, customer_name):
        items = list(items)
        row = models.Order(
            id=models.new_id(),
            table_id=str(table_id),
            customer_name=customer_name,
            items=[i.to_dict() for i in items],
            total=_order_total(items),
            status=OrderStatus.PENDING.value,
            created_at=utcnow(),
        )
        self.db.session.add(row)
        self._commit()
        self._publish()
        return row.id

    def get_orders(self):
        try:
            rows = models.Order.query.order_by(models.Order.created_at.desc()).all()
        except SQLAlchemyError as exc:
            raise AdapterFailure("database read failed") from exc
        return [Order.from_record(r.to_record()) for r in rows]

    def get_order(self, order_id):
        return Order.from_record(self._get(models.Order, order_id, "order").to_record())

    def update_order_status(self, order_id, status):
        row = self._get(models.Order, order_id, "order")
        row.status = OrderStatus(status).value
        self._commit()
        self._publish()

    def get_company_settings(self):
        row = self.db.session.get(models.CompanySettings, 1)
        return row.to_domain() if row else CompanySettings()

    def save_company_settings(self, settings):
        row = self.db.session.get(models.CompanySettings, 1)
        if row is None:
            row = models.CompanySettings(id=1)
            self.db.session.add(row)
        for key, value in settings.to_dict().items():
            setattr(row, key, value)
        self._commit()
        return row.to_domain()


def build_store(app, db):
    kind = app.config.get("DATA_STORE", "sql")
    protected = [app.config.get("DEFAULT_ADMIN_EMAIL")]
    if kind == "memory":
        return MemoryStore(protected_emails=protected)
    if kind == "sql":
        return SqlStore(db, protected_emails=protected)
    raise ValueError(f"unknown DATA_STORE {kind!r}")
