from __future__ import annotations

from dataclasses import dataclass
from typing import List

from printboard.domain.cards import Card
from printboard.domain.ports import CardStorePort, TokenProvider


@dataclass
class Authenticate:
    """Fetch a fresh token and hand it to the store before a remote call."""

    token_provider: TokenProvider
    store: CardStorePort

    def __call__(self) -> None:
        self.store.set_auth_token(self.token_provider.get_token())


@dataclass
class LoadCards:
    """Re-authenticate and read the whole board, newest request first."""

    authenticate: Authenticate

    def __call__(self) -> List[Card]:
        self.authenticate()
        return list(self.authenticate.store.get_cards())


__all__ = ["Authenticate", "LoadCards"]
