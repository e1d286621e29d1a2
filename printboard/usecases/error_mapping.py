"""Translate domain and adapter errors into user-facing UseCaseError instances."""

from __future__ import annotations


from typing import Optional

from printboard.adapters.api_errors import (
    ApiClientError,
    ApiError,
    BadRequestError,
    ForbiddenError,
    NetworkError,
    RateLimitedError,
    RemoteNotFoundError,
    ServerError,
    UnauthorizedError,
)
from printboard.domain.errors import (
    AuthError,
    NotConfiguredError,
    NotFoundError,
    PartialSyncError,
    ValidationError,
)
from printboard.domain.ports import UseCaseError


def map_api_error(
    exc: Exception,
    *,
    default_code: str,
    default_message: Optional[str] = None,
) -> UseCaseError:
    """Map workflow exceptions to stable UseCaseError codes.

    Args:
        exc: Exception raised by a use case, adapter, or the auth provider.
        default_code: Code used when ``exc`` is not a known error type.
        default_message: Message used for unknown errors instead of ``str(exc)``.

    Returns:
        UseCaseError carrying a stable code and a message fit for display.
    """
    if isinstance(exc, UseCaseError):
        return exc
    if isinstance(exc, ValidationError):
        return UseCaseError("VALIDATION_FAILED", str(exc))
    if isinstance(exc, PartialSyncError):
        return UseCaseError(
            "PARTIAL_SYNC",
            _compose_error_message("Saved, but the board could not be refreshed", str(exc.cause)),
        )
    if isinstance(exc, NetworkError):
        return UseCaseError("NETWORK_ERROR", "No response from SharePoint. Check connection.")
    if isinstance(exc, RateLimitedError):
        wait = f" Retry in {exc.retry_after:g}s." if exc.retry_after else ""
        return UseCaseError("RATE_LIMITED", f"Too many requests.{wait}".strip())
    if isinstance(exc, UnauthorizedError):
        return UseCaseError("AUTH_EXPIRED", "Session expired. Please sign in again.")
    if isinstance(exc, ForbiddenError):
        return UseCaseError(
            "FORBIDDEN", "You do not have permission to access the print requests list."
        )
    if isinstance(exc, RemoteNotFoundError):
        return UseCaseError("NOT_FOUND", _compose_error_message("Request not found", exc.hint))
    if isinstance(exc, NotFoundError):
        return UseCaseError("NOT_FOUND", str(exc))
    if isinstance(exc, BadRequestError):
        return UseCaseError("INVALID_REQUEST", _compose_error_message("Request rejected", exc.hint))
    if isinstance(exc, ApiClientError):
        status = exc.status or 0
        label = f"Request failed (HTTP {status})" if status else "Request failed"
        return UseCaseError("REQUEST_FAILED", _compose_error_message(label, exc.hint))
    if isinstance(exc, ServerError):
        return UseCaseError("SERVER_ERROR", "SharePoint error, try again.")
    if isinstance(exc, ApiError):
        return UseCaseError("API_ERROR", str(exc))
    if isinstance(exc, AuthError):
        return UseCaseError("AUTH_FAILED", _compose_error_message("Sign-in failed", exc.reason))
    if isinstance(exc, NotConfiguredError):
        return UseCaseError("NOT_CONFIGURED", str(exc) or "SharePoint connection is not configured.")

    message = default_message or str(exc) or "Unexpected error."
    return UseCaseError(default_code, message)


def _compose_error_message(base: str, hint: Optional[str]) -> str:
    """Compose a user-facing error message with optional hint text."""
    hint_text = (hint or "").strip()
    if hint_text:
        return f"{base}: {hint_text}"
    if base.endswith("."):
        return base
    return f"{base}."


__all__ = ["map_api_error"]
