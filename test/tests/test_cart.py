from decimal import Decimal

import pytest

from cart import Cart
from domain import Category, MenuItem
from errors import EmptyCart, MissingCustomerName, NotFound

SODA = MenuItem(id="6", name="Italian Soda", price=Decimal("14.00"), category=Category.DRINKS)
RISOTTO = MenuItem(id="3", name="Mushroom Risotto", price=Decimal("58.00"))


class RecordingStore:
    def __init__(self):
        self.created = []

    def create_order(self, table_id, items, customer_name):
        self.created.append((table_id, items, customer_name))
        return "order-1"


def test_same_item_without_notes_is_merged():
    cart = Cart("4")
    cart.add(SODA)
    cart.add(SODA)
    assert len(cart.lines) == 1
    assert cart.lines[0].quantity == 2
    assert cart.total == Decimal("28.00")


def test_lines_with_notes_stay_separate():
    cart = Cart("4")
    plain = cart.add(RISOTTO)
    noted = cart.add(RISOTTO, notes="no parmesan")
    cart.add(RISOTTO)
    assert plain.temp_id != noted.temp_id
    assert [(l.quantity, l.notes) for l in cart.lines] == [(2, ""), (1, "no parmesan")]


def test_update_quantity_and_notes():
    cart = Cart("4")
    line = cart.add(SODA)
    cart.update_quantity(line.temp_id, 2)
    assert line.quantity == 3
    cart.update_notes(line.temp_id, "lemon")
    assert line.notes == "lemon"
    cart.update_quantity(line.temp_id, -3)
    assert cart.lines == []
    with pytest.raises(NotFound):
        cart.update_notes(line.temp_id, "x")


def test_submit_validates_before_reaching_store():
    store = RecordingStore()
    cart = Cart("4")
    with pytest.raises(EmptyCart):
        cart.submit(store, "Ana")
    cart.add(SODA)
    with pytest.raises(MissingCustomerName):
        cart.submit(store, "   ")
    assert store.created == []


def test_submit_sends_lines_and_clears_cart():
    store = RecordingStore()
    cart = Cart(4)
    cart.add(SODA)
    assert cart.submit(store, " Ana ") == "order-1"
    table_id, items, name = store.created[0]
    assert (table_id, name) == ("4", "Ana")
    assert items[0].name == "Italian Soda"
    assert cart.lines == []
