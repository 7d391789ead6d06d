"""
Project: SmartOrder Restaurant POS
Date: October 2025

Description:
Main application entry point. Initializes Flask, the data store and
Socket.IO, and registers the routes for sessions, menu, users, orders,
kitchen, tables/billing, reports, company settings and QR codes.
"""

import logging
from datetime import date

from flask import Flask, jsonify, request
from flask_socketio import SocketIO

from auth import current_staff, end_session, requires, start_session
from billing import close_table, compute_bill, settle
from cart import Cart
from config import Config
from domain import CompanySettings, OrderStatus, PaymentMethod, parse_enum
from errors import AdapterFailure, InvalidTransition, NotFound, ServiceError, ValidationError
from lifecycle import (
    active_order_count,
    advance_status,
    best_selling_item,
    check_transition,
    customer_orders,
    filter_history,
    group_open_orders_by_customer,
    history_revenue,
    kitchen_queue,
    occupied_table_count,
    sales_by_category,
    TableStatus,
    table_overview,
    table_status,
    table_total,
    total_sales,
)
from models import db
from qr import table_ids, table_qr_codes
from receipt import build_receipt, receipt_text
from seed import seed_defaults
from store import build_store

log = logging.getLogger(__name__)

# Create SocketIO once (no app yet), then bind inside factory
socketio = SocketIO(cors_allowed_origins="*")


def _flag(value, default=True):
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() not in ("0", "false", "no", "off", "")


def create_app(testing: bool = False, overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)

    if testing:
        app.config["TESTING"] = True
        app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite:///:memory:"
        app.config["SOCKETIO_ASYNC_MODE"] = "threading"
    if overrides:
        app.config.update(overrides)

    app.logger.setLevel(app.config["LOG_LEVEL"])
    db.init_app(app)
    socketio.init_app(app, async_mode=app.config["SOCKETIO_ASYNC_MODE"])

    store = build_store(app, db)
    app.extensions["store"] = store
    tables = table_ids(app.config["TABLE_COUNT"])

    def push_orders(orders):
        socketio.emit("event", {"type": "orders.snapshot", "orders": [o.to_dict() for o in orders]})

    with app.app_context():
        if app.config["DATA_STORE"] == "sql":
            db.create_all()
        seed_defaults(store, app.config)
        store.subscribe_to_orders(push_orders)

    # --------- helpers ---------
    def payload():
        return request.get_json(silent=True) or {}

    def check_table(table_id):
        if table_id not in tables:
            raise NotFound(f"table {table_id} does not exist")

    @app.errorhandler(ServiceError)
    def service_error(exc):
        return jsonify(exc.to_dict()), exc.status_code

    # --------- session ---------
    @app.post("/login")
    def login():
        data = request.form if request.form else payload()
        email = (data.get("email") or "").strip()
        user = store.login(email, data.get("password") or "")
        if user is None:
            log.warning("failed login for %r", email)
            return jsonify({"ok": False, "error": "Invalid credentials"}), 401
        staff = start_session(user)
        return jsonify({"ok": True, "session": staff.to_dict()})

    @app.post("/logout")
    def logout():
        end_session()
        return jsonify({"ok": True})

    @app.get("/api/session")
    def get_session():
        staff = current_staff()
        if staff is None:
            return jsonify({"error": "login_required"}), 401
        return jsonify(staff.to_dict())

    # ---------- MENU ----------
    @app.get("/api/menu")
    def list_menu():
        return jsonify([m.to_dict() for m in store.get_menu()])

    @app.post("/api/menu")
    @requires("menu")
    def create_menu(staff):
        item = store.add_menu_item(payload())
        socketio.emit("event", {"type": "menu.created", "item": item.to_dict()})
        return jsonify(item.to_dict()), 201

    @app.put("/api/menu/<item_id>")
    @requires("menu")
    def update_menu(item_id, staff):
        item = store.update_menu_item(item_id, payload())
        socketio.emit("event", {"type": "menu.updated", "item": item.to_dict()})
        return jsonify(item.to_dict())

    @app.delete("/api/menu/<item_id>")
    @requires("menu")
    def delete_menu(item_id, staff):
        store.delete_menu_item(item_id)
        socketio.emit("event", {"type": "menu.deleted", "id": item_id})
        return jsonify({"ok": True})

    # ---------- USERS ----------
    @app.get("/api/users")
    @requires("users")
    def list_users(staff):
        return jsonify([u.to_dict() for u in store.get_users()])

    @app.post("/api/users")
    @requires("users")
    def create_user(staff):
        user = store.add_user(payload())
        socketio.emit("event", {"type": "user.created", "user": user.to_dict()})
        return jsonify(user.to_dict()), 201

    @app.put("/api/users/<user_id>")
    @requires("users")
    def update_user(user_id, staff):
        user = store.update_user(user_id, payload())
        socketio.emit("event", {"type": "user.updated", "user": user.to_dict()})
        return jsonify(user.to_dict())

    @app.delete("/api/users/<user_id>")
    @requires("users")
    def delete_user(user_id, staff):
        store.delete_user(user_id)
        socketio.emit("event", {"type": "user.deleted", "id": user_id})
        return jsonify({"ok": True})

    # ---------- CUSTOMER ORDERING ----------
    @app.get("/api/tables/<table_id>/orders")
    def list_table_orders(table_id):
        check_table(table_id)
        orders = customer_orders(store.get_orders(), table_id)
        return jsonify({
            "table_id": table_id,
            "orders": [o.to_dict() for o in orders],
            "total": float(table_total(orders, table_id)),
        })

    @app.post("/api/tables/<table_id>/orders")
    def submit_order(table_id):
        check_table(table_id)
        data = payload()
        menu = {m.id: m for m in store.get_menu()}
        cart = Cart(table_id)
        for line in data.get("items") or []:
            item = menu.get(str(line.get("menu_item_id")))
            if item is None:
                raise ValidationError(f"unknown menu item {line.get('menu_item_id')!r}")
            try:
                quantity = int(line.get("quantity", 1))
            except (TypeError, ValueError):
                raise ValidationError("quantity must be an integer")
            if quantity < 1:
                raise ValidationError("quantity must be at least 1")
            cart.add(item, quantity=quantity, notes=(line.get("notes") or "").strip())
        order_id = cart.submit(store, data.get("customer_name"))
        log.info("order %s placed at table %s", order_id, table_id)
        return jsonify(store.get_order(order_id).to_dict()), 201

    # ---------- KITCHEN ----------
    @app.get("/api/orders")
    @requires("kitchen")
    def list_orders(staff):
        return jsonify([o.to_dict() for o in store.get_orders()])

    @app.get("/api/kitchen")
    @requires("kitchen")
    def kitchen(staff):
        orders = kitchen_queue(store.get_orders())
        return jsonify({"active": len(orders), "orders": [o.to_dict() for o in orders]})

    @app.post("/api/orders/<order_id>/status")
    @requires("kitchen")
    def advance_order(order_id, staff):
        order = store.get_order(order_id)
        requested = payload().get("status")
        if requested is None:
            nxt = advance_status(order)
        else:
            nxt = check_transition(order, parse_enum(OrderStatus, requested, "status"))
        if nxt == OrderStatus.CLOSED:
            # orders are only closed through the table bill
            raise InvalidTransition(order.status.value, nxt.value)
        store.update_order_status(order_id, nxt)
        log.info("order %s: %s -> %s (%s)", order_id, order.status.value, nxt.value, staff.user.email)
        return jsonify(store.get_order(order_id).to_dict())

    # ---------- TABLES / BILLING ----------
    @app.get("/api/tables")
    @requires("tables")
    def list_tables(staff):
        return jsonify(table_overview(store.get_orders(), tables))

    @app.get("/api/tables/<table_id>/bill")
    @requires("tables")
    def table_bill(table_id, staff):
        check_table(table_id)
        orders = store.get_orders()
        bill = compute_bill(table_total(orders, table_id), _flag(request.args.get("service_fee")))
        groups = group_open_orders_by_customer(orders, table_id)
        return jsonify({
            "table_id": table_id,
            "status": table_status(orders, table_id).value,
            "customers": [
                {
                    "customer_name": name,
                    "orders": [o.to_dict() for o in person_orders],
                    "total": float(sum(o.total for o in person_orders)),
                }
                for name, person_orders in groups.items()
            ],
            "bill": bill.to_dict(),
        })

    @app.post("/api/tables/<table_id>/close")
    @requires("tables")
    def close(table_id, staff):
        check_table(table_id)
        data = payload()
        method = parse_enum(PaymentMethod, data.get("payment_method") or "cash", "payment_method")
        # live orders at the moment of closing, never an earlier preview
        orders = store.get_orders()
        if table_status(orders, table_id) == TableStatus.FREE:
            raise ValidationError(f"table {table_id} has no open orders")
        bill = compute_bill(table_total(orders, table_id), _flag(data.get("include_service_fee")))
        settlement = settle(bill.total, method, data.get("amount_paid"))
        receipt = build_receipt(orders, table_id, bill, settlement, store.get_company_settings())
        try:
            closed = close_table(store, orders, table_id)
        except AdapterFailure as exc:
            status = table_status(store.get_orders(), table_id)
            body = exc.to_dict()
            body.update({"closed_ids": exc.closed_ids, "table_status": status.value})
            return jsonify(body), exc.status_code
        return jsonify({
            "closed_ids": closed,
            "table_status": table_status(store.get_orders(), table_id).value,
            "bill": bill.to_dict(),
            "receipt": receipt.to_dict(),
            "receipt_text": receipt_text(receipt),
        })

    # ---------- REPORTS ----------
    @app.get("/api/dashboard")
    @requires("dashboard")
    def dashboard(staff):
        orders = store.get_orders()
        return jsonify({
            "total_sales": float(total_sales(orders)),
            "active_orders": active_order_count(orders),
            "occupied_tables": occupied_table_count(orders),
            "best_seller": best_selling_item(orders).to_dict(),
            "sales_by_category": {k: float(v) for k, v in sales_by_category(orders).items()},
        })

    @app.get("/api/history")
    @requires("history")
    def history(staff):
        table_id = request.args.get("table") or None
        on_date = request.args.get("date") or None
        if on_date:
            try:
                on_date = date.fromisoformat(on_date)
            except ValueError:
                raise ValidationError("date must be YYYY-MM-DD")
        orders = filter_history(store.get_orders(), table_id=table_id, on_date=on_date)
        return jsonify({
            "orders": [o.to_dict() for o in orders],
            "count": len(orders),
            "revenue": float(history_revenue(orders)),
        })

    # ---------- COMPANY SETTINGS ----------
    @app.get("/api/settings/company")
    @requires("settings")
    def get_company(staff):
        settings = store.get_company_settings()
        return jsonify(dict(settings.to_dict(), address=settings.address_line))

    @app.put("/api/settings/company")
    @requires("settings")
    def save_company(staff):
        settings = store.save_company_settings(CompanySettings.from_dict(payload()))
        return jsonify(dict(settings.to_dict(), address=settings.address_line))

    # ---------- QR CODES ----------
    @app.get("/api/qrcodes")
    @requires("qrcodes")
    def qrcodes(staff):
        base_url = request.args.get("base_url") or app.config["PUBLIC_BASE_URL"]
        size = request.args.get("size", 250, type=int)
        return jsonify(table_qr_codes(base_url, app.config["QR_SERVICE_URL"], len(tables), size))

    # ---------- HEALTH ----------
    @app.get("/api/health")
    def health():
        return jsonify({"status": "ok", "store": app.config["DATA_STORE"]})

    return app


if __name__ == "__main__":
    logging.basicConfig(level=Config.LOG_LEVEL)
    # Runs with eventlet server automatically
    socketio.run(create_app(), host="0.0.0.0", port=5013, debug=True)
