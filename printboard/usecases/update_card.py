from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from printboard.domain.cards import Card
from printboard.domain.status_flow import next_status
from printboard.domain.validation import normalize_changes
from printboard.usecases.sync_cards import Authenticate


@dataclass
class UpdateCard:
    """Send a partial update and return the store's post-write card."""

    authenticate: Authenticate

    def __call__(self, card_id: str, changes: Mapping[str, Any]) -> Card:
        normalized = normalize_changes(changes)
        self.authenticate()
        return self.authenticate.store.update_card(card_id, normalized)


@dataclass
class AdvanceCardStatus:
    """Move a card one step along the pipeline.

    A finished card is returned as-is without touching the store.
    """

    update_card: UpdateCard

    def __call__(self, card: Card) -> Card:
        successor = next_status(card.status)
        if successor is None:
            return card
        return self.update_card(card.id, {"status": successor})


__all__ = ["AdvanceCardStatus", "UpdateCard"]
