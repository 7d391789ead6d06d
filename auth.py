"""
Project: SmartOrder Restaurant POS
Date: October 2025

Description:
Staff sessions and role capabilities. The cookie only holds the user id;
a StaffSession is rebuilt from the store on every request and handed to the
view, so a deactivated user loses access on their next call.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from functools import wraps

from flask import current_app, jsonify, session

from domain import Role, utcnow

log = logging.getLogger(__name__)

CAPABILITIES = ("dashboard", "tables", "qrcodes", "kitchen", "menu", "history", "users", "settings")

ROLE_CAPABILITIES = {
    Role.ADMIN: frozenset(CAPABILITIES),
    Role.KITCHEN: frozenset({"kitchen"}),
    Role.WAITER: frozenset({"tables", "kitchen"}),
}


@dataclass
class StaffSession:
    user: object
    started_at: datetime = field(default_factory=utcnow)

    @property
    def capabilities(self):
        return ROLE_CAPABILITIES.get(self.user.role, frozenset())

    def can(self, capability):
        return capability in self.capabilities

    def to_dict(self):
        return {
            "user": self.user.to_dict(),
            "capabilities": sorted(self.capabilities),
            "started_at": self.started_at.isoformat(),
        }


def start_session(user):
    session.clear()
    session["user_id"] = user.id
    session["started_at"] = utcnow().isoformat()
    log.info("staff login: %s (%s)", user.email, user.role.value)
    return StaffSession(user)


def end_session():
    session.clear()


def current_staff():
    user_id = session.get("user_id")
    if not user_id:
        return None
    user = current_app.extensions["store"].get_user(user_id)
    if user is None or not user.is_active:
        session.clear()
        return None
    started = session.get("started_at")
    return StaffSession(user, datetime.fromisoformat(started) if started else utcnow())


def requires(capability):
    """Inject the current StaffSession as `staff`, or answer 401/403."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            staff = current_staff()
            if staff is None:
                return jsonify({"error": "login_required"}), 401
            if not staff.can(capability):
                return jsonify({"error": "forbidden", "capability": capability}), 403
            return view(*args, staff=staff, **kwargs)

        return wrapper

    return decorator
