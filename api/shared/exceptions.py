"""Shared exceptions for the Convai gateway API.

Every error a feature raises on purpose derives from ``GatewayException`` and
carries the HTTP status it maps to. The translation into a response happens in
one place, the exception handler registered in ``api.main``.
"""
from typing import Any, Dict, Optional


class GatewayException(Exception):
    """Base exception for the gateway."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class Unauthenticated(GatewayException):
    """No session, or the session expired."""

    status_code = 401

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, "UNAUTHENTICATED")


class Forbidden(GatewayException):
    """Authenticated, but the account does not own the resource."""

    status_code = 403

    def __init__(self, message: str = "Forbidden", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "FORBIDDEN", details)


class InvalidIdentifier(GatewayException):
    """Raised when a client-supplied identifier is empty or malformed."""

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "INVALID_IDENTIFIER", details)


class NotFoundError(GatewayException):
    """Raised when a resource is not found."""

    status_code = 404

    def __init__(self, resource: str, identifier: str):
        message = f"{resource} with identifier '{identifier}' not found"
        super().__init__(message, "NOT_FOUND", {"resource": resource, "identifier": identifier})


class UpstreamUnavailable(GatewayException):
    """The upstream conversation API failed or timed out.

    Upstream 5xx statuses are passed through; everything else (4xx other than
    a legitimate 404, timeouts, transport errors) is reported as 502.
    """

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        status = upstream_status if upstream_status and upstream_status >= 500 else 502
        super().__init__(
            message,
            "UPSTREAM_UNAVAILABLE",
            {"upstream_status": upstream_status},
            status_code=status,
        )
        self.upstream_status = upstream_status


class IdentityExchangeError(GatewayException):
    """The identity provider rejected the assertion, or required claims are missing."""

    status_code = 401

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "IDENTITY_EXCHANGE_ERROR", details)


class DatabaseError(GatewayException):
    """Raised when database operations fail."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "DATABASE_ERROR", details)
