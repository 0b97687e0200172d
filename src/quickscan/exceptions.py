"""Error taxonomy shared by every QuickScan component.

Each error carries the ``error_type`` and ``status_code`` that the HTTP layer
renders in the response envelope. Components raise these directly; the
orchestrator only attaches request context before re-raising.
"""

from __future__ import annotations

from typing import Any


class QuickScanError(Exception):
    """Base class for all errors surfaced to API callers."""

    error_type: str = "internal_error"
    status_code: int = 500

    def __init__(self, message: str, *, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = dict(context or {})

    def with_context(self, **context: Any) -> "QuickScanError":
        """Attach request context (operation, file id, ...) and return self."""
        for key, value in context.items():
            if value is not None:
                self.context.setdefault(key, value)
        return self

    def __str__(self) -> str:
        return self.message


class ValidationError(QuickScanError):
    """Bad input shape, size or type."""

    error_type = "validation_error"
    status_code = 400


class PayloadTooLargeError(ValidationError):
    """Upload body larger than the configured limit."""

    error_type = "payload_too_large"
    status_code = 413


class AuthError(QuickScanError):
    """Missing, expired or invalid credential."""

    error_type = "authentication_error"
    status_code = 401


class NotFoundError(QuickScanError):
    error_type = "not_found"
    status_code = 404


class ConflictError(QuickScanError):
    error_type = "conflict"
    status_code = 409


class UnsupportedError(QuickScanError):
    """Operation not offered by the active storage backend."""

    error_type = "unsupported"
    status_code = 501


class StorageError(QuickScanError):
    """I/O or network failure while talking to a storage backend.

    Safe for the caller to retry; never retried internally. Remote backends
    raise it with ``status_code=502``.
    """

    error_type = "storage_error"
    status_code = 500

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        if status_code is not None:
            self.status_code = status_code


class InternalError(QuickScanError):
    """Invariant violation such as a registry/backend desync."""

    error_type = "internal_error"
    status_code = 500


__all__ = [
    "QuickScanError",
    "ValidationError",
    "PayloadTooLargeError",
    "AuthError",
    "NotFoundError",
    "ConflictError",
    "UnsupportedError",
    "StorageError",
    "InternalError",
]
