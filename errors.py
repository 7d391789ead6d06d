"""
Project: SmartOrder Restaurant POS
Date: October 2025

Description:
Error types shared by the order engine, the data stores and the HTTP layer.
Each error carries the HTTP status the API answers with.
"""


class ServiceError(Exception):
    status_code = 400
    code = "error"

    def __init__(self, message=None):
        super().__init__(message or self.code)
        self.message = message or self.code

    def to_dict(self):
        return {"error": self.code, "message": self.message}


class ValidationError(ServiceError):
    code = "invalid_request"


class EmptyCart(ServiceError):
    code = "empty_cart"


class MissingCustomerName(ServiceError):
    code = "missing_customer_name"


class InvalidTransition(ServiceError):
    status_code = 409
    code = "invalid_transition"

    def __init__(self, current, target=None):
        if target is None:
            message = f"order in status {current} cannot advance"
        else:
            message = f"cannot move order from {current} to {target}"
        super().__init__(message)
        self.current = current
        self.target = target


class NotFound(ServiceError):
    status_code = 404
    code = "not_found"


class ProtectedRecord(ServiceError):
    status_code = 403
    code = "protected"


class AdapterFailure(ServiceError):
    """A store call failed. `closed_ids` lists orders already closed when a
    table close stopped partway."""

    status_code = 502
    code = "store_failure"

    def __init__(self, message=None, closed_ids=None):
        super().__init__(message)
        self.closed_ids = list(closed_ids or [])
