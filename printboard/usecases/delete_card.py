from __future__ import annotations
from dataclasses import dataclass

from printboard.usecases.sync_cards import Authenticate


@dataclass
class DeleteCard:
    authenticate: Authenticate

    def __call__(self, card_id: str) -> None:
        self.authenticate()
        self.authenticate.store.delete_card(card_id)
