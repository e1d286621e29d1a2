"""Card workflow engine: the canonical in-memory board and its mutations.

The engine owns the card collection that the UI renders. Every mutation goes
through the store (via use cases) and the local copy is then reconciled with
the store's authoritative answer:

    create  -> store create, then full refresh
    update  -> store update, local copy replaced by the re-read card
    advance -> same as update with the successor status (finished: no-op)
    delete  -> store delete, local removal, then full refresh

When the store accepts a write but cannot read the item back, the card is
refetched (or patched locally if that fails too) and PartialSyncError is
raised, so the board never keeps the pre-write copy.

Callers must not run two mutations of the same card at once; there is no
internal queue or lock and the collection is last-write-wins.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional

from printboard.domain.cards import Card, CardDraft, CardStatus
from printboard.domain.errors import NotFoundError, PartialSyncError
from printboard.domain.ports import CardStorePort, ImageKind, TokenProvider
from printboard.domain.reports import BoardReport, build_report, group_by_status
from printboard.domain.status_flow import next_status
from printboard.domain.validation import normalize_changes
from printboard.usecases.create_card import CreateCard
from printboard.usecases.delete_card import DeleteCard
from printboard.usecases.error_mapping import map_api_error
from printboard.usecases.sync_cards import Authenticate, LoadCards
from printboard.usecases.update_card import AdvanceCardStatus, UpdateCard
from printboard.usecases.upload_card_image import UploadCardImage


class CardWorkflow:
    """Create/update/advance/delete cards and keep ``cards`` in sync.

    State read by the UI:
        cards: Current board, newest request first.
        loading: ``True`` while a network operation runs.
        error: User-facing message of the latest failure, cleared when the
            next operation starts.
        error_code: Stable code matching ``error``.
    """

    def __init__(self, store: CardStorePort, token_provider: TokenProvider) -> None:
        self.store = store
        self.token_provider = token_provider
        self.cards: List[Card] = []
        self.loading = False
        self.error: Optional[str] = None
        self.error_code: Optional[str] = None
        self._log = logging.getLogger(__name__)

        auth = Authenticate(token_provider=token_provider, store=store)
        self.uc_load = LoadCards(auth)
        self.uc_create = CreateCard(auth)
        self.uc_update = UpdateCard(auth)
        self.uc_advance = AdvanceCardStatus(self.uc_update)
        self.uc_delete = DeleteCard(auth)
        self.uc_upload = UploadCardImage(auth)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def mount(self) -> List[Card]:
        """Initial load; only touches the network when someone is signed in."""
        if not self.token_provider.is_authenticated:
            return list(self.cards)
        return self.refresh()

    def refresh(self) -> List[Card]:
        with self._operation("refresh"):
            self.cards = self.uc_load()
            return list(self.cards)

    def create_card(self, draft: CardDraft) -> Card:
        """Create a card and reload the board.

        Raises:
            ValidationError: Draft is incomplete; no network call was made.
            PartialSyncError: The card was created but reading it back or the
                reload failed. The created card is in ``cards`` and on
                ``exc.card`` whenever it could be read; ``exc.card_id`` names it
                either way so a retry does not create a duplicate.
        """
        with self._operation("create_card"):
            try:
                card = self.uc_create(draft)
            except PartialSyncError as exc:
                try:
                    self.cards = self.uc_load()
                except Exception as load_exc:
                    self._log.warning("Reload after create of %s failed: %s", exc.card_id, load_exc)
                created = self.get_card_by_id(exc.card_id) if exc.card_id else None
                raise PartialSyncError("create_card", created, exc.cause, card_id=exc.card_id) from exc
            try:
                self.cards = self.uc_load()
            except Exception as exc:
                self._upsert(card)
                raise PartialSyncError("create_card", card, exc) from exc
            return self.get_card_by_id(card.id) or card

    def update_card(self, card_id: str, changes: Mapping[str, Any]) -> Card:
        """Apply a partial update; ``cards`` changes only after the store accepts it.

        Raises:
            PartialSyncError: The store accepted the update but the re-read
                failed. The local copy is refetched, or patched with ``changes``
                when the refetch fails too, and is on ``exc.card``.
        """
        with self._operation("update_card"):
            current = self._require(card_id)
            try:
                card = self.uc_update(card_id, changes)
            except PartialSyncError as exc:
                card = self._settle_written(current, normalize_changes(changes))
                raise PartialSyncError("update_card", card, exc.cause) from exc
            self._upsert(card)
            return card

    def advance_status(self, card_id: str) -> Card:
        """Move a card to the next status; a finished card is returned unchanged."""
        with self._operation("advance_status"):
            current = self._require(card_id)
            try:
                card = self.uc_advance(current)
            except PartialSyncError as exc:
                card = self._settle_written(current, {"status": next_status(current.status)})
                raise PartialSyncError("advance_status", card, exc.cause) from exc
            if card is not current:
                self._upsert(card)
            return card

    def delete_card(self, card_id: str) -> None:
        with self._operation("delete_card"):
            self._require(card_id)
            self.uc_delete(card_id)
            self.cards = [card for card in self.cards if card.id != card_id]
            try:
                self.cards = self.uc_load()
            except Exception as exc:
                raise PartialSyncError("delete_card", None, exc) from exc

    def upload_image(
        self,
        data: bytes,
        *,
        filename: str,
        content_type: str,
        kind: ImageKind = "part",
    ) -> str:
        with self._operation("upload_image"):
            return self.uc_upload(data, filename=filename, content_type=content_type, kind=kind)

    # ------------------------------------------------------------------
    # Local reads (never touch the network)
    # ------------------------------------------------------------------
    def get_card_by_id(self, card_id: str) -> Optional[Card]:
        for card in self.cards:
            if card.id == card_id:
                return card
        return None

    def columns(self) -> Dict[CardStatus, List[Card]]:
        return group_by_status(self.cards)

    def report(self) -> BoardReport:
        return build_report(self.cards)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @contextmanager
    def _operation(self, name: str) -> Iterator[None]:
        self.loading = True
        self.error = None
        self.error_code = None
        try:
            yield
        except Exception as exc:
            mapped = map_api_error(exc, default_code=f"{name.upper()}_FAILED")
            self.error = mapped.message
            self.error_code = mapped.code
            self._log.warning("%s failed: %s", name, exc)
            raise
        finally:
            self.loading = False

    def _require(self, card_id: str) -> Card:
        card = self.get_card_by_id(card_id)
        if card is None:
            raise NotFoundError(card_id)
        return card

    def _settle_written(self, current: Card, changes: Mapping[str, Any]) -> Card:
        """Replace the stale local copy of a card whose post-write re-read failed."""
        try:
            card = self.store.get_card(current.id)
        except Exception as exc:
            self._log.warning("Refetch of card %s failed, patching local copy: %s", current.id, exc)
            card = current.with_changes(**changes)
        self._upsert(card)
        return card

    def _upsert(self, card: Card) -> None:
        for index, existing in enumerate(self.cards):
            if existing.id == card.id:
                self.cards[index] = card
                return
        self.cards.append(card)
        self.cards.sort(key=lambda item: item.request_date, reverse=True)


__all__ = ["CardWorkflow"]
