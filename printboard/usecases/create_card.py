from __future__ import annotations

from dataclasses import dataclass

from printboard.domain.cards import Card, CardDraft
from printboard.domain.validation import validate_draft
from printboard.usecases.sync_cards import Authenticate


@dataclass
class CreateCard:
    """Validate a draft locally, then create it in the store.

    Validation runs before authentication so a rejected draft never causes a
    network call.
    """

    authenticate: Authenticate

    def __call__(self, draft: CardDraft) -> Card:
        validate_draft(draft)
        self.authenticate()
        return self.authenticate.store.create_card(draft)


__all__ = ["CreateCard"]
