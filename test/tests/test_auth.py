import pytest

from auth import ROLE_CAPABILITIES, StaffSession
from conftest import ADMIN_LOGIN
from domain import Role, User


def test_login_flow(client):
    resp = client.post("/login", json=ADMIN_LOGIN)
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["ok"] is True
    assert data["session"]["user"]["role"] == "Admin"
    assert "users" in data["session"]["capabilities"]
    assert client.get("/api/session").status_code == 200

    assert client.post("/logout").status_code == 200
    assert client.get("/api/session").status_code == 401


def test_form_login(client):
    resp = client.post("/login", data=ADMIN_LOGIN)
    assert resp.status_code == 200


def test_bad_and_inactive_logins_look_the_same(admin_client, client):
    created = admin_client.post("/api/users", json={
        "name": "Old Waiter", "email": "old@x.io", "password": "pw", "role": "Waiter", "status": "Inactive",
    })
    assert created.status_code == 201

    wrong = client.post("/login", json={"email": ADMIN_LOGIN["email"], "password": "nope"})
    inactive = client.post("/login", json={"email": "old@x.io", "password": "pw"})
    assert wrong.status_code == inactive.status_code == 401
    assert wrong.get_json() == inactive.get_json()


def test_anonymous_staff_routes_require_login(client):
    for path in ("/api/orders", "/api/tables", "/api/dashboard", "/api/users"):
        r = client.get(path)
        assert r.status_code == 401
        assert r.get_json() == {"error": "login_required"}


@pytest.mark.parametrize("path,kitchen,waiter", [
    ("/api/kitchen", 200, 200),
    ("/api/tables", 403, 200),
    ("/api/dashboard", 403, 403),
    ("/api/history", 403, 403),
    ("/api/users", 403, 403),
    ("/api/settings/company", 403, 403),
    ("/api/qrcodes", 403, 403),
])
def test_role_capabilities_at_routing_boundary(kitchen_client, waiter_client, path, kitchen, waiter):
    assert kitchen_client.get(path).status_code == kitchen
    assert waiter_client.get(path).status_code == waiter


def test_deactivated_user_loses_access(app, admin_client, kitchen_client):
    assert kitchen_client.get("/api/kitchen").status_code == 200
    with app.app_context():
        store = app.extensions["store"]
        kitchen_user = next(u for u in store.get_users() if u.role == Role.KITCHEN)
        store.update_user(kitchen_user.id, {"status": "Inactive"})
    assert kitchen_client.get("/api/kitchen").status_code == 401


def test_capability_table():
    assert ROLE_CAPABILITIES[Role.KITCHEN] == {"kitchen"}
    waiter = StaffSession(User(id="1", name="W", email="w@x.io", role=Role.WAITER))
    assert waiter.can("tables") and not waiter.can("menu")
    admin = StaffSession(User(id="2", name="A", email="a@x.io", role=Role.ADMIN))
    assert all(admin.can(c) for c in ("dashboard", "users", "settings", "qrcodes"))
