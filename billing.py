"""
Project: SmartOrder Restaurant POS
Date: October 2025

Description:
Closing a table: service fee, payment/change and the per-order status
updates. Payment details only feed the receipt; nothing here is stored.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from domain import OrderStatus, PaymentMethod, money, to_decimal
from errors import AdapterFailure, ValidationError
from lifecycle import open_orders

log = logging.getLogger(__name__)

SERVICE_FEE_RATE = Decimal("0.10")


@dataclass(frozen=True)
class Bill:
    subtotal: Decimal
    service_fee: Decimal
    total: Decimal

    def to_dict(self):
        return {
            "subtotal": float(self.subtotal),
            "service_fee": float(self.service_fee),
            "total": float(self.total),
        }


@dataclass(frozen=True)
class Settlement:
    method: PaymentMethod
    amount_paid: Decimal
    change: Decimal


def compute_bill(subtotal, include_service_fee):
    subtotal = money(subtotal)
    fee = money(subtotal * SERVICE_FEE_RATE) if include_service_fee else money(0)
    return Bill(subtotal=subtotal, service_fee=fee, total=subtotal + fee)


def compute_change(total, amount_paid):
    return max(money(0), money(to_decimal(amount_paid) - to_decimal(total)))


def settle(total, method, amount_paid=None):
    """Card and PIX payments are always exact; only cash produces change."""
    method = PaymentMethod(method)
    total = money(total)
    if method != PaymentMethod.CASH or amount_paid in (None, ""):
        return Settlement(method, total, money(0))
    paid = money(amount_paid)
    if paid < 0:
        raise ValidationError("amount_paid must not be negative")
    return Settlement(method, paid, compute_change(total, paid))


def close_table(store, orders, table_id):
    """Mark every open order of the table as Closed, one update per order.

    A failed update stops the loop and raises AdapterFailure with the ids that
    were already closed; no rollback is attempted.
    """
    closed = []
    for order in open_orders(orders, table_id):
        try:
            store.update_order_status(order.id, OrderStatus.CLOSED)
        except AdapterFailure as exc:
            log.warning("table %s left partially closed after %d of its orders: %s",
                        table_id, len(closed), exc.message)
            raise AdapterFailure(exc.message, closed_ids=closed) from exc
        closed.append(order.id)
    log.info("closed table %s (%d orders)", table_id, len(closed))
    return closed
