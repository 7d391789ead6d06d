"""
Project: SmartOrder Restaurant POS
Date: October 2025

Description:
Order composition for one customer at a table. Lines for the same menu item
stay separate when they carry different notes.
"""

import uuid
from dataclasses import fields
from decimal import Decimal

from domain import CartItem, MenuItem
from errors import EmptyCart, MissingCustomerName, NotFound


class Cart:
    def __init__(self, table_id):
        self.table_id = str(table_id)
        self.lines = []

    def _line(self, temp_id):
        for line in self.lines:
            if line.temp_id == temp_id:
                return line
        raise NotFound(f"cart line {temp_id} not found")

    def add(self, menu_item, quantity=1, notes=""):
        if not notes:
            for line in self.lines:
                if line.id == menu_item.id and not line.notes:
                    line.quantity += quantity
                    return line
        values = {f.name: getattr(menu_item, f.name) for f in fields(MenuItem)}
        line = CartItem(**values, quantity=quantity, notes=notes, temp_id=uuid.uuid4().hex[:10])
        self.lines.append(line)
        return line

    def update_quantity(self, temp_id, delta):
        line = self._line(temp_id)
        line.quantity = max(0, line.quantity + delta)
        if line.quantity == 0:
            self.lines.remove(line)

    def update_notes(self, temp_id, notes):
        self._line(temp_id).notes = notes or ""

    @property
    def total(self):
        return sum((line.line_total for line in self.lines), Decimal("0"))

    def clear(self):
        self.lines = []

    def submit(self, store, customer_name):
        """Send the cart as one order; validation happens before the store is called."""
        if not self.lines:
            raise EmptyCart("cannot submit an empty order")
        customer_name = (customer_name or "").strip()
        if not customer_name:
            raise MissingCustomerName("a name is required to place an order")
        order_id = store.create_order(self.table_id, list(self.lines), customer_name)
        self.clear()
        return order_id
