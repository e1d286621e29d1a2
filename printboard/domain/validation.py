"""Local checks run before any network call."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Mapping

from .cards import EDITABLE_FIELDS, CardDraft
from .errors import ValidationError
from .status_flow import coerce_status

REQUIRED_TEXT_FIELDS = ("title", "requester_name", "department", "part_name")
_OPTIONAL_DATE_FIELDS = ("deadline",)
_MONEY_FIELDS = ("part_value", "printing_cost")


def _is_blank(value: Any) -> bool:
    return value is None or not str(value).strip()


def _valid_quantity(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    try:
        return int(value) > 0 and int(value) == value
    except (TypeError, ValueError):
        return False


def validate_draft(draft: CardDraft) -> None:
    """Raise ``ValidationError`` naming every invalid field of ``draft``."""
    invalid: List[str] = [name for name in REQUIRED_TEXT_FIELDS if _is_blank(getattr(draft, name))]
    if not _valid_quantity(draft.quantity):
        invalid.append("quantity")
    for name in _MONEY_FIELDS:
        value = getattr(draft, name)
        if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
            invalid.append(name)
    if invalid:
        raise ValidationError(invalid)


def normalize_changes(changes: Mapping[str, Any]) -> Dict[str, Any]:
    """Check a partial update and return it with normalized values.

    Unknown names, derived fields, the id and audit fields are rejected.
    """
    if not changes:
        raise ValidationError([], "No fields to update")
    invalid: List[str] = []
    normalized: Dict[str, Any] = {}
    for name, value in changes.items():
        if name not in EDITABLE_FIELDS:
            invalid.append(name)
            continue
        if name in REQUIRED_TEXT_FIELDS and _is_blank(value):
            invalid.append(name)
            continue
        if name == "quantity":
            if not _valid_quantity(value):
                invalid.append(name)
                continue
            value = int(value)
        elif name == "status":
            try:
                value = coerce_status(value)
            except ValueError:
                invalid.append(name)
                continue
        elif name in _MONEY_FIELDS:
            if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
                invalid.append(name)
                continue
            value = None if value is None else float(value)
        elif name in _OPTIONAL_DATE_FIELDS or name == "request_date":
            if value is not None and not isinstance(value, datetime):
                invalid.append(name)
                continue
        normalized[name] = value
    if invalid:
        raise ValidationError(invalid)
    return normalized


__all__ = ["REQUIRED_TEXT_FIELDS", "normalize_changes", "validate_draft"]
