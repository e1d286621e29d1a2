"""Domain package exports for card value objects and pipeline rules."""

from .cards import Card, CardDraft, CardStatus, derive_profit
from .errors import (
    AuthError,
    NotConfiguredError,
    NotFoundError,
    PartialSyncError,
    ResourceNotFoundError,
    ValidationError,
)
from .mapping import FIELD_MAP, parse_remote_item
from .status_flow import STATUS_ORDER, next_status
from .store_config import StoreConfig

__all__ = [
    "AuthError",
    "Card",
    "CardDraft",
    "CardStatus",
    "FIELD_MAP",
    "NotConfiguredError",
    "NotFoundError",
    "PartialSyncError",
    "ResourceNotFoundError",
    "STATUS_ORDER",
    "StoreConfig",
    "ValidationError",
    "derive_profit",
    "next_status",
    "parse_remote_item",
]
