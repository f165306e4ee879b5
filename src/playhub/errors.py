"""Domain exceptions.

Services raise these; the global handlers in ``playhub.middleware.error_handler``
turn them into ``{"message": ...}`` responses with the matching status code.
"""

from __future__ import annotations


class AppError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = 400

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    status_code = 400


class InsufficientFunds(AppError):
    status_code = 400

    def __init__(self, message: str = "Insufficient credits") -> None:
        super().__init__(message)


class InvalidTier(ValidationError):
    def __init__(self, tier: str) -> None:
        super().__init__(f"Invalid subscription tier: {tier}")
        self.tier = tier


class Unauthorized(AppError):
    status_code = 401


class Forbidden(AppError):
    status_code = 403


class NotFound(AppError):
    status_code = 404


class CooldownActive(AppError):
    """A time-gated action was attempted before its cooldown expired."""

    status_code = 429

    def __init__(self, message: str, retry_after: int) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class QuotaExceeded(AppError):
    status_code = 429
