from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping

import pytest

from printboard.domain.cards import Card, CardDraft, CardStatus
from printboard.domain.errors import ValidationError
from printboard.usecases.create_card import CreateCard
from printboard.usecases.sync_cards import Authenticate, LoadCards
from printboard.usecases.update_card import AdvanceCardStatus, UpdateCard
from printboard.usecases.upload_card_image import UploadCardImage


class _TokenProviderStub:
    is_authenticated = True

    def __init__(self) -> None:
        self.calls = 0

    def get_token(self) -> str:
        self.calls += 1
        return f"tok-{self.calls}"


class _StoreSpy:
    def __init__(self) -> None:
        self.tokens: List[str] = []
        self.updates: List[Dict[str, Any]] = []
        self.uploads: List[Any] = []

    def set_auth_token(self, token: str) -> None:
        self.tokens.append(token)

    def get_cards(self) -> List[Card]:
        return [_card()]

    def create_card(self, draft: CardDraft) -> Card:
        return _card(title=draft.title)

    def update_card(self, card_id: str, changes: Mapping[str, Any]) -> Card:
        self.updates.append(dict(changes))
        return _card(id=card_id).with_changes(**changes)

    def upload_image(self, data: bytes, filename: str, content_type: str, kind: str = "part") -> str:
        self.uploads.append((filename, content_type, kind))
        return "https://contoso/img.png"


def _card(**overrides: Any) -> Card:
    values: Dict[str, Any] = dict(
        id="1",
        title="Suporte",
        status=CardStatus.REQUESTED,
        request_date=datetime(2024, 5, 1, tzinfo=timezone.utc),
        requester_name="Carla",
        department="TI",
        part_name="Suporte",
    )
    values.update(overrides)
    return Card(**values)


def _auth() -> Authenticate:
    return Authenticate(token_provider=_TokenProviderStub(), store=_StoreSpy())


def test_every_call_fetches_a_fresh_token() -> None:
    auth = _auth()
    load = LoadCards(auth)

    load()
    load()

    assert auth.store.tokens == ["tok-1", "tok-2"]


def test_create_rejects_invalid_draft_before_authenticating() -> None:
    auth = _auth()
    draft = CardDraft(title="", requester_name="Carla", department="TI", part_name="x")

    with pytest.raises(ValidationError):
        CreateCard(auth)(draft)
    assert auth.store.tokens == []


def test_update_normalizes_changes_before_store() -> None:
    auth = _auth()

    card = UpdateCard(auth)("1", {"status": "Aprovado", "part_value": 10})

    assert auth.store.updates == [{"status": CardStatus.APPROVED, "part_value": 10.0}]
    assert card.status is CardStatus.APPROVED


def test_advance_moves_one_step_and_finished_is_a_no_op() -> None:
    auth = _auth()
    advance = AdvanceCardStatus(UpdateCard(auth))

    moved = advance(_card(status=CardStatus.QUEUED_FOR_PRODUCTION))
    finished = _card(status=CardStatus.FINISHED)

    assert moved.status is CardStatus.IN_PRODUCTION
    assert advance(finished) is finished
    assert auth.store.tokens == ["tok-1"]


def test_upload_checks_kind_and_content_type() -> None:
    auth = _auth()
    upload = UploadCardImage(auth)

    with pytest.raises(ValidationError):
        upload(b"x", filename="a.pdf", content_type="application/pdf")
    with pytest.raises(ValidationError):
        upload(b"", filename="a.png", content_type="image/png")
    with pytest.raises(ValidationError):
        upload(b"x", filename="a.png", content_type="image/png", kind="cover")  # type: ignore[arg-type]

    url = upload(b"x", filename="a.png", content_type="image/png", kind="application")

    assert url == "https://contoso/img.png"
    assert auth.store.uploads == [("a.png", "image/png", "application")]
    assert auth.store.tokens == ["tok-1"]
