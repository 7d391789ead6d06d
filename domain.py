"""
Project: SmartOrder Restaurant POS
Date: October 2025

Description:
Store-independent records for menu items, cart lines, orders, staff users
and company settings. Every data store translates its own rows into these.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum

from errors import ValidationError

CENT = Decimal("0.01")
ANONYMOUS_CUSTOMER = "Anonymous Customer"


class OrderStatus(str, Enum):
    PENDING = "Pending"
    PREPARING = "Preparing"
    READY = "Ready"
    SERVED = "Served"
    CLOSED = "Closed"


class Category(str, Enum):
    STARTERS = "Starters"
    MAINS = "Mains"
    DRINKS = "Drinks"
    DESSERTS = "Desserts"


class Role(str, Enum):
    ADMIN = "Admin"
    KITCHEN = "Kitchen"
    WAITER = "Waiter"


class UserStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CREDIT = "credit"
    DEBIT = "debit"
    PIX = "pix"


def to_decimal(value, default="0"):
    """Convert JSON numbers/strings to a finite Decimal without float artefacts."""
    if value is None or value == "":
        return Decimal(default)
    if isinstance(value, Decimal):
        number = value
    else:
        try:
            number = Decimal(str(value))
        except InvalidOperation:
            raise ValidationError(f"not a number: {value!r}")
    if not number.is_finite():
        raise ValidationError(f"not a finite number: {value!r}")
    return number


def money(value):
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def parse_enum(enum_cls, value, field_name):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


def utcnow():
    return datetime.now(timezone.utc)


def parse_timestamp(value):
    """Aware UTC datetime from a datetime, an ISO string or epoch milliseconds."""
    if value is None:
        return utcnow()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000, timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise ValidationError(f"timestamp out of range: {value!r}")
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            raise ValidationError(f"timestamp is not ISO 8601: {value!r}")
    if not isinstance(value, datetime):
        raise ValidationError(f"unsupported timestamp: {value!r}")
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


@dataclass
class MenuItem:
    id: str
    name: str
    description: str = ""
    price: Decimal = Decimal("0")
    category: Category = Category.MAINS
    image: str = ""

    @classmethod
    def from_dict(cls, data, item_id=None):
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("name is required")
        price = to_decimal(data.get("price"))
        if price < 0:
            raise ValidationError("price must not be negative")
        return cls(
            id=str(item_id if item_id is not None else data.get("id") or ""),
            name=name,
            description=data.get("description") or "",
            price=price,
            category=parse_enum(Category, data.get("category") or Category.MAINS.value, "category"),
            image=data.get("image") or "",
        )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": float(self.price),
            "category": self.category.value,
            "image": self.image,
        }


@dataclass
class CartItem(MenuItem):
    quantity: int = 1
    notes: str = ""
    temp_id: str = ""

    @property
    def line_total(self):
        return self.price * self.quantity

    @classmethod
    def from_dict(cls, data, item_id=None):
        base = MenuItem.from_dict(data, item_id)
        try:
            quantity = int(data.get("quantity", 1))
        except (TypeError, ValueError):
            raise ValidationError("quantity must be an integer")
        if quantity < 1:
            raise ValidationError("quantity must be at least 1")
        values = {f.name: getattr(base, f.name) for f in fields(MenuItem)}
        return cls(
            **values,
            quantity=quantity,
            notes=data.get("notes") or "",
            temp_id=data.get("temp_id") or data.get("tempId") or "",
        )

    def to_dict(self):
        d = super().to_dict()
        d.update({"quantity": self.quantity, "notes": self.notes, "temp_id": self.temp_id})
        return d


@dataclass
class Order:
    id: str
    table_id: str
    customer_name: str
    items: list = field(default_factory=list)
    total: Decimal = Decimal("0")
    status: OrderStatus = OrderStatus.PENDING
    timestamp: datetime = field(default_factory=utcnow)

    @property
    def is_open(self):
        return self.status != OrderStatus.CLOSED

    @classmethod
    def from_record(cls, record):
        """Decode a loosely-shaped order record.

        Records written by other clients may be partial, so a missing or
        null `items` becomes an empty list and a missing total becomes zero.
        """
        raw_items = record.get("items")
        if not isinstance(raw_items, list):
            raw_items = []
        items = [i if isinstance(i, CartItem) else CartItem.from_dict(i) for i in raw_items]
        return cls(
            id=str(record.get("id")),
            table_id=str(record.get("table_id")),
            customer_name=record.get("customer_name") or "",
            items=items,
            total=to_decimal(record.get("total")),
            status=parse_enum(OrderStatus, record.get("status") or OrderStatus.PENDING.value, "status"),
            timestamp=parse_timestamp(record.get("timestamp")),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "table_id": self.table_id,
            "customer_name": self.customer_name,
            "items": [i.to_dict() for i in self.items],
            "total": float(self.total),
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class User:
    id: str
    name: str
    email: str
    role: Role = Role.WAITER
    status: UserStatus = UserStatus.ACTIVE

    @property
    def is_active(self):
        return self.status == UserStatus.ACTIVE

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "status": self.status.value,
        }


@dataclass
class CompanySettings:
    trade_name: str = ""
    legal_name: str = ""
    tax_id: str = ""
    state_registration: str = ""
    street: str = ""
    number: str = ""
    neighborhood: str = ""
    city: str = ""
    state: str = ""

    @classmethod
    def from_dict(cls, data):
        return cls(**{f.name: str(data.get(f.name) or "") for f in fields(cls)})

    def to_dict(self):
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @property
    def address_line(self):
        street = ", ".join(p for p in (self.street, self.number) if p)
        city = "/".join(p for p in (self.city, self.state) if p)
        return " - ".join(p for p in (street, self.neighborhood, city) if p)
