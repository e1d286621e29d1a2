from __future__ import annotations

"""Datetime helpers for Graph list item timestamps."""

from datetime import date, datetime, timezone
from typing import Any, Optional


def parse_remote_datetime(value: Any) -> Optional[datetime]:
    """Parse a Graph timestamp into a timezone-aware UTC datetime.

    Returns ``None`` for empty or unparseable input. Naive values are taken
    as UTC, which is how SharePoint serializes date columns.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if not text:
            return None
        normalized = text.replace(" ", "T")
        if normalized.endswith("Z"):
            normalized = normalized[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(normalized)
        except ValueError:
            parsed = _parse_with_fallback(text)
            if parsed is None:
                return None

    if parsed.tzinfo is None or parsed.tzinfo.utcoffset(parsed) is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_remote_datetime(value: Optional[datetime]) -> Optional[str]:
    """Serialize to the ``YYYY-MM-DDTHH:MM:SSZ`` form Graph accepts."""
    if value is None:
        return None
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _parse_with_fallback(text: str) -> Optional[datetime]:
    fallback_formats = (
        "%Y-%m-%d",
        "%d/%m/%Y",
        "%d/%m/%Y %H:%M",
        "%Y-%m-%d %H:%M:%S",
    )
    for fmt in fallback_formats:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


__all__ = ["format_remote_datetime", "parse_remote_datetime"]
