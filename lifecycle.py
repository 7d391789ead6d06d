"""
Project: SmartOrder Restaurant POS
Date: October 2025

Description:
Order lifecycle rules and table/dashboard aggregates. Everything here is a
pure function over a snapshot of orders handed over by a data store.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum

from domain import ANONYMOUS_CUSTOMER, OrderStatus
from errors import InvalidTransition

NEXT_STATUS = {
    OrderStatus.PENDING: OrderStatus.PREPARING,
    OrderStatus.PREPARING: OrderStatus.READY,
    OrderStatus.READY: OrderStatus.SERVED,
    OrderStatus.SERVED: OrderStatus.CLOSED,
}

# Statuses that no longer need kitchen or floor action.
SETTLED = (OrderStatus.SERVED, OrderStatus.CLOSED)


class TableStatus(str, Enum):
    FREE = "Free"
    OCCUPIED = "Occupied"


@dataclass(frozen=True)
class ItemStats:
    name: str
    category: str
    quantity: int

    def to_dict(self):
        return {"name": self.name, "category": self.category, "quantity": self.quantity}


NO_BEST_SELLER = ItemStats("---", "---", 0)


# ---------- transitions ----------

def advance_status(order):
    """Return the only status the order may move to next."""
    nxt = NEXT_STATUS.get(order.status)
    if nxt is None:
        raise InvalidTransition(order.status.value)
    return nxt


def check_transition(order, target):
    target = OrderStatus(target)
    if NEXT_STATUS.get(order.status) != target:
        raise InvalidTransition(order.status.value, target.value)
    return target


# ---------- per table ----------

def open_orders(orders, table_id):
    table_id = str(table_id)
    return [o for o in orders if o.table_id == table_id and o.status != OrderStatus.CLOSED]


def group_open_orders_by_customer(orders, table_id):
    grouped = {}
    for order in open_orders(orders, table_id):
        if order.items is None:
            order = replace(order, items=[])
        grouped.setdefault(order.customer_name or ANONYMOUS_CUSTOMER, []).append(order)
    return grouped


def table_status(orders, table_id):
    if open_orders(orders, table_id):
        return TableStatus.OCCUPIED
    return TableStatus.FREE


def table_total(orders, table_id):
    return sum((o.total for o in open_orders(orders, table_id)), Decimal("0"))


def table_overview(orders, table_ids):
    return [
        {
            "id": t,
            "name": f"Table {t}",
            "status": table_status(orders, t).value,
            "total": float(table_total(orders, t)),
        }
        for t in table_ids
    ]


def customer_orders(orders, table_id):
    """Open orders of a table, newest first."""
    return sorted(open_orders(orders, table_id), key=lambda o: o.timestamp, reverse=True)


# ---------- kitchen ----------

def kitchen_queue(orders):
    """Orders still waiting on the kitchen or floor, oldest first."""
    return sorted((o for o in orders if o.status not in SETTLED), key=lambda o: o.timestamp)


def active_order_count(orders):
    return sum(1 for o in orders if o.status not in SETTLED)


# ---------- dashboard ----------

def total_sales(orders):
    return sum((o.total for o in orders if o.status == OrderStatus.CLOSED), Decimal("0"))


def occupied_table_count(orders):
    return len({o.table_id for o in orders if o.status != OrderStatus.CLOSED})


def _all_items(orders):
    for order in orders:
        yield from order.items or []


def best_selling_item(orders):
    stats = {}
    for item in _all_items(orders):
        if item.name not in stats:
            stats[item.name] = [item.category.value, 0]
        stats[item.name][1] += item.quantity
    best = NO_BEST_SELLER
    # strict comparison keeps the first name seen on ties
    for name, (category, quantity) in stats.items():
        if quantity > best.quantity:
            best = ItemStats(name, category, quantity)
    return best


def sales_by_category(orders):
    totals = {}
    for item in _all_items(orders):
        key = item.category.value
        totals[key] = totals.get(key, Decimal("0")) + item.price * item.quantity
    return totals


# ---------- history ----------

def filter_history(orders, table_id=None, on_date=None):
    """Orders newest first, optionally limited to a table and a UTC calendar date."""
    result = []
    for o in orders:
        if table_id is not None and o.table_id != str(table_id):
            continue
        if on_date is not None and o.timestamp.date() != on_date:
            continue
        result.append(o)
    return sorted(result, key=lambda o: o.timestamp, reverse=True)


def history_revenue(orders):
    return sum((o.total for o in orders), Decimal("0"))
