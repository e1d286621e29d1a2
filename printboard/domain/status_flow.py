"""Fixed forward order of the print pipeline."""

from __future__ import annotations

from typing import Optional, Tuple

from .cards import CardStatus


STATUS_ORDER: Tuple[CardStatus, ...] = (
    CardStatus.REQUESTED,
    CardStatus.APPROVED,
    CardStatus.QUEUED_FOR_PRODUCTION,
    CardStatus.IN_PRODUCTION,
    CardStatus.FINISHED,
)


def is_terminal(status: CardStatus) -> bool:
    return status is STATUS_ORDER[-1]


def next_status(status: CardStatus) -> Optional[CardStatus]:
    """Return the immediate successor of ``status``, or ``None`` when finished."""
    index = STATUS_ORDER.index(CardStatus(status))
    if index + 1 >= len(STATUS_ORDER):
        return None
    return STATUS_ORDER[index + 1]


def coerce_status(value: object) -> CardStatus:
    """Accept a ``CardStatus``, its native value, or its member name."""
    if isinstance(value, CardStatus):
        return value
    text = str(value or "").strip()
    try:
        return CardStatus(text)
    except ValueError:
        pass
    key = text.upper().replace(" ", "_")
    try:
        return CardStatus[key]
    except KeyError:
        raise ValueError(f"Unknown card status '{value}'") from None


__all__ = ["STATUS_ORDER", "coerce_status", "is_terminal", "next_status"]
