# Overview: Error taxonomy shared by the engine, the backend services and the HTTP client.

"""
Every failure the transaction engine can report is an EngineError.

Each error is terminal for the operation that raised it: nothing is
partially committed and nothing is compensated automatically. The HTTP
status travels with the class so routes can answer uniformly and the
client can rebuild the same exception from a response body.
"""

from __future__ import annotations


class EngineError(Exception):
    """Base class for transaction engine errors."""

    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {
            "error": self.message,
            "error_type": type(self).__name__,
            "details": self.details,
        }


class ValidationError(EngineError):
    """Missing or malformed input; never reaches the database."""

    def __init__(self, message: str, field: str | None = None, details: dict | None = None):
        details = dict(details or {})
        if field is not None:
            details.setdefault("field", field)
        super().__init__(message, details)
        self.field = field


class NotFoundError(EngineError):
    status_code = 404


class PaymentMismatchError(EngineError):
    """Payments do not add up to the receipt total."""

    status_code = 409

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, details)
        self.remaining = self.details.get("remaining")
        self.kind = self.details.get("kind")


class ConflictError(EngineError):
    """Business rule conflict (duplicate code, record still referenced)."""

    status_code = 409


class InsufficientStockError(EngineError):
    """A negative delta would take an item below zero."""

    status_code = 409


class InvalidStockError(EngineError):
    """An absolute stock value is negative or not an integer."""


class InvalidTransitionError(EngineError):
    """Order status change not allowed from the current status."""

    status_code = 409


class BackendUnavailableError(EngineError):
    """Network failure or server error; local state must stay unchanged."""

    status_code = 503


_BY_NAME = {
    cls.__name__: cls
    for cls in (
        ValidationError,
        NotFoundError,
        PaymentMismatchError,
        ConflictError,
        InsufficientStockError,
        InvalidStockError,
        InvalidTransitionError,
        BackendUnavailableError,
    )
}


def error_from_payload(payload: dict, status_code: int) -> EngineError:
    """Rebuild an EngineError from an API error body."""
    message = payload.get("error") or f"Request failed with status {status_code}"
    details = payload.get("details") or {}
    cls = _BY_NAME.get(payload.get("error_type") or "")
    if cls is None:
        if status_code == 404:
            cls = NotFoundError
        elif status_code >= 500:
            cls = BackendUnavailableError
        else:
            cls = ValidationError
    if cls is ValidationError:
        return ValidationError(message, field=details.get("field"), details=details)
    return cls(message, details)
