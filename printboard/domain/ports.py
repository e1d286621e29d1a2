from __future__ import annotations
from typing import Any, List, Literal, Mapping, Optional, Protocol, Sequence

from .auth_models import Account, TokenResult
from .cards import Card, CardDraft

CardId = str
ImageKind = Literal["part", "application"]


# ---- Error model ----
class UseCaseError(Exception):
    """Base class for use case level errors (user-presentable)."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


# ---- Ports (Hexagonal boundaries) ----
class CardStorePort(Protocol):
    """CRUD for print request cards against the remote list store."""

    def set_auth_token(self, token: str) -> None: ...
    def get_cards(self) -> List[Card]: ...  # newest request first
    def get_card(self, card_id: CardId) -> Card: ...
    def create_card(self, draft: CardDraft) -> Card: ...  # full re-fetch
    def update_card(self, card_id: CardId, changes: Mapping[str, Any]) -> Card: ...
    def delete_card(self, card_id: CardId) -> None: ...
    def upload_image(
        self, data: bytes, filename: str, content_type: str, kind: ImageKind = "part"
    ) -> str: ...  # returns web URL


class TokenSourcePort(Protocol):
    """Silent and interactive bearer token acquisition."""

    def accounts(self) -> Sequence[Account]: ...
    def acquire_silent(self, scopes: Sequence[str], account: Account) -> TokenResult: ...
    def acquire_interactive(self, scopes: Sequence[str]) -> TokenResult: ...
    def sign_out(self, account: Optional[Account]) -> None: ...


class TokenProvider(Protocol):
    """What the workflow engine needs from the auth layer."""

    @property
    def is_authenticated(self) -> bool: ...
    def get_token(self) -> str: ...
