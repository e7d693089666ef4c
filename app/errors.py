"""Application-wide error types."""

from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base class for application-level errors."""

    def __init__(self, message: str, *, payload: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.payload = payload or {}


class ValidationError(AppError, ValueError):
    """Raised when a caller passes malformed input such as a blank currency code."""


def require_currency_code(value: Any, *, field: str = "base_currency_code") -> str:
    """Return ``value`` stripped and uppercased, or raise ``ValidationError`` if blank."""

    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} must not be blank", payload={"field": field})
    normalized = value.strip().upper()
    if not normalized.isascii() or not normalized.isalpha():
        raise ValidationError(
            f"{field} must contain ASCII letters only: {value!r}", payload={"field": field}
        )
    return normalized
