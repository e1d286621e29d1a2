"""Domain-level error types for use-case and adapter mapping.

This module is the home for shared domain errors that must cross layer
boundaries without leaking transport-specific exception details. Transport
failures live in ``printboard.adapters.api_errors`` and subclass these where
the meaning overlaps (a remote 404 is also a ``NotFoundError``).
"""

from __future__ import annotations

from typing import Any, Iterable, Optional


class PrintboardError(Exception):
    """Base class for all errors raised by the card workflow."""


class ValidationError(PrintboardError):
    """Local, pre-network rejection listing the invalid field names."""

    def __init__(self, fields: Iterable[str], message: Optional[str] = None) -> None:
        self.fields = frozenset(fields)
        names = ", ".join(sorted(self.fields))
        super().__init__(message or f"Invalid or missing fields: {names}")


class NotConfiguredError(PrintboardError):
    """The store cannot be used: configuration is incomplete or no token is set."""


class ResourceNotFoundError(NotConfiguredError):
    """A configured list or image library does not exist on the site."""

    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"{kind} '{name}' not found")


class AuthError(PrintboardError):
    """Token acquisition failed (no account, or silent and interactive failed)."""

    def __init__(self, message: str, *, reason: Optional[str] = None) -> None:
        super().__init__(message)
        self.reason = reason


class NotFoundError(PrintboardError):
    """A card id is absent locally or remotely."""

    def __init__(self, card_id: str, message: Optional[str] = None) -> None:
        self.card_id = card_id
        super().__init__(message or f"Card '{card_id}' not found")


class PartialSyncError(PrintboardError):
    """The store write succeeded but the follow-up read did not.

    ``card`` holds the authoritative result of the write when there is one
    (``None`` after a delete or when the re-read itself failed); ``card_id``
    names the written item; ``cause`` is the read failure.
    """

    def __init__(
        self,
        operation: str,
        card: Any,
        cause: BaseException,
        *,
        card_id: Optional[str] = None,
    ) -> None:
        self.operation = operation
        self.card = card
        self.card_id = card_id if card_id is not None else getattr(card, "id", None)
        self.cause = cause
        super().__init__(f"{operation} succeeded but refresh failed: {cause}")


__all__ = [
    "AuthError",
    "NotConfiguredError",
    "NotFoundError",
    "PartialSyncError",
    "PrintboardError",
    "ResourceNotFoundError",
    "ValidationError",
]
