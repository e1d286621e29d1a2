from __future__ import annotations

"""Card value objects shared across adapters, use-cases, and the workflow engine."""

from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class CardStatus(str, Enum):
    """Position of a card in the print pipeline.

    Values are the literal choices stored in the SharePoint ``Status`` column.
    """

    REQUESTED = "Solicitado"
    APPROVED = "Aprovado"
    QUEUED_FOR_PRODUCTION = "Fila de Produção"
    IN_PRODUCTION = "Em Produção"
    FINISHED = "Finalizado"

    def __str__(self) -> str:
        return self.value


def derive_profit(
    part_value: Optional[float], printing_cost: Optional[float]
) -> Tuple[Optional[float], Optional[bool]]:
    """Return ``(profit_loss, is_profitable)`` for the given monetary inputs.

    Both results are ``None`` unless both inputs are present.
    """
    if part_value is None or printing_cost is None:
        return None, None
    profit_loss = float(part_value) - float(printing_cost)
    return profit_loss, profit_loss > 0


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


@dataclass(frozen=True)
class CardDraft:
    """User-supplied fields for a new print request."""

    title: str
    requester_name: str
    department: str
    part_name: str
    quantity: int = 1
    brand: str = ""
    model: str = ""
    part_description: str = ""
    deadline: Optional[datetime] = None
    part_image_url: Optional[str] = None
    application_image_url: Optional[str] = None
    part_value: Optional[float] = None
    printing_cost: Optional[float] = None
    status: CardStatus = CardStatus.REQUESTED
    request_date: datetime = field(default_factory=utc_now)

    @property
    def profit_loss(self) -> Optional[float]:
        return derive_profit(self.part_value, self.printing_cost)[0]

    @property
    def is_profitable(self) -> Optional[bool]:
        return derive_profit(self.part_value, self.printing_cost)[1]

    def as_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class Card:
    """Authoritative print request as last read from the store."""

    id: str
    """Store-assigned item identifier, immutable after creation."""

    title: str
    status: CardStatus
    request_date: datetime
    requester_name: str
    department: str
    part_name: str
    quantity: int = 1
    brand: str = ""
    model: str = ""
    part_description: str = ""
    deadline: Optional[datetime] = None
    part_image_url: Optional[str] = None
    application_image_url: Optional[str] = None
    part_value: Optional[float] = None
    printing_cost: Optional[float] = None
    profit_loss: Optional[float] = None
    """Derived: ``part_value - printing_cost`` when both are known."""

    is_profitable: Optional[bool] = None
    """Derived: ``profit_loss > 0`` when ``profit_loss`` is known."""

    created_by: str = ""
    created_at: Optional[datetime] = None
    modified_by: str = ""
    modified_at: Optional[datetime] = None

    def with_changes(self, **changes: Any) -> "Card":
        """Return a copy with ``changes`` applied and the derived pair recomputed."""
        for name in DERIVED_FIELDS:
            if name in changes:
                raise ValueError(f"{name} is derived and cannot be set directly")
        updated = replace(self, **changes)
        profit_loss, is_profitable = derive_profit(updated.part_value, updated.printing_cost)
        return replace(updated, profit_loss=profit_loss, is_profitable=is_profitable)


DERIVED_FIELDS: Tuple[str, ...] = ("profit_loss", "is_profitable")
MONETARY_FIELDS: Tuple[str, ...] = ("part_value", "printing_cost")
AUDIT_FIELDS: Tuple[str, ...] = ("id", "created_by", "created_at", "modified_by", "modified_at")

# Fields a caller may send in a partial update.
EDITABLE_FIELDS: Tuple[str, ...] = tuple(
    f.name
    for f in fields(Card)
    if f.name not in DERIVED_FIELDS and f.name not in AUDIT_FIELDS
)

# Fields persisted inside the list item's ``fields`` object.
STORED_FIELDS: Tuple[str, ...] = EDITABLE_FIELDS + DERIVED_FIELDS


__all__ = [
    "AUDIT_FIELDS",
    "Card",
    "CardDraft",
    "CardStatus",
    "DERIVED_FIELDS",
    "EDITABLE_FIELDS",
    "MONETARY_FIELDS",
    "STORED_FIELDS",
    "derive_profit",
    "utc_now",
]
