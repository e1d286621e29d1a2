"""REST adapter storing print request cards in a SharePoint list via Microsoft Graph."""

from __future__ import annotations

import logging
import mimetypes
import re
import time
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import quote
from uuid import uuid4

import requests

from printboard.adapters.api_errors import RemoteNotFoundError, ensure_ok
from printboard.adapters.http_client import GraphSession, HttpConfig
from printboard.domain.cards import (
    DERIVED_FIELDS,
    EDITABLE_FIELDS,
    MONETARY_FIELDS,
    Card,
    CardDraft,
    derive_profit,
)
from printboard.domain.errors import (
    NotConfiguredError,
    PartialSyncError,
    ResourceNotFoundError,
    ValidationError,
)
from printboard.domain.mapping import parse_remote_item, to_native_fields
from printboard.domain.ports import CardId, CardStorePort, ImageKind
from printboard.domain.store_config import StoreConfig

log = logging.getLogger(__name__)

# Sent on every create; the list schema defaults the remaining columns.
_REQUIRED_ON_CREATE = (
    "title",
    "status",
    "request_date",
    "requester_name",
    "department",
    "part_name",
    "quantity",
)
_PAGE_SIZE = 200


class SharePointCardStore(CardStorePort):
    """HTTP adapter for ``/sites/{site}/lists/{list}/items*`` and image drive uploads.

    The site, list and image library are resolved on first use and cached for
    the lifetime of the instance.
    """

    def __init__(
        self,
        config: StoreConfig,
        *,
        session: Optional[GraphSession] = None,
    ) -> None:
        self.config = config
        self.cfg = HttpConfig(
            request_timeout_s=config.request_timeout_s,
            upload_timeout_s=config.upload_timeout_s,
        )
        self.session = session or GraphSession(self.cfg)
        self._site_id: Optional[str] = None
        self._list_id: Optional[str] = None
        self._drive_id: Optional[str] = None

    # ------------------------------------------------------------------
    # CardStorePort
    # ------------------------------------------------------------------
    def set_auth_token(self, token: str) -> None:
        self.session.set_token(token)

    def get_cards(self) -> List[Card]:
        """Return all cards, newest request first.

        An unusable configuration yields an empty list so the board can still
        render; every other failure propagates.
        """
        problems = self.config.problems()
        if problems:
            log.warning("Card store not configured (%s); returning no cards", "; ".join(problems))
            return []
        self._require_token()

        url: Optional[str] = self._list_url("/items")
        params: Optional[Dict[str, Any]] = {
            "$expand": "fields",
            "$orderby": "createdDateTime desc",
            "$top": _PAGE_SIZE,
        }
        cards: List[Card] = []
        while url:
            resp = self.session.get(url, context="get_cards", params=params)
            ensure_ok(resp, "get_cards")
            payload = self._json_dict(resp)
            for raw in payload.get("value") or []:
                cards.append(parse_remote_item(raw))
            url = payload.get("@odata.nextLink")
            params = None
        cards.sort(key=lambda card: card.request_date, reverse=True)
        log.debug("Loaded %d cards from list '%s'", len(cards), self.config.list_name)
        return cards

    def get_card(self, card_id: CardId) -> Card:
        self._require_ready()
        item_id = self._normalize_id(card_id)
        ctx = f"get_card[{item_id}]"
        resp = self.session.get(
            self._list_url(f"/items/{quote(item_id)}"),
            context=ctx,
            params={"$expand": "fields"},
        )
        ensure_ok(resp, ctx, card_id=item_id)
        return parse_remote_item(self._json_dict(resp))

    def create_card(self, draft: CardDraft) -> Card:
        """Create a list item and return it re-read from the store."""
        self._require_ready()
        values = self._create_values(draft)
        resp = self.session.post(
            self._list_url("/items"),
            context="create_card",
            json_body={"fields": to_native_fields(values)},
        )
        ensure_ok(resp, "create_card")
        new_id = str(self._json_dict(resp).get("id") or "").strip()
        if not new_id:
            raise RuntimeError("Invalid create response: id missing")
        log.info("Created card %s (%s)", new_id, draft.title)
        return self._reread("create_card", new_id)

    def update_card(self, card_id: CardId, changes: Mapping[str, Any]) -> Card:
        """Patch only the given fields and return the item re-read from the store.

        When a monetary input changes, the current record is read first so the
        derived pair is computed from the other input's stored value, and both
        derived columns are written in the same request.
        """
        self._require_ready()
        item_id = self._normalize_id(card_id)
        bad = [name for name in changes if name not in EDITABLE_FIELDS]
        if bad:
            raise ValidationError(bad)
        values: Dict[str, Any] = dict(changes)
        if not values:
            return self.get_card(item_id)

        if any(name in values for name in MONETARY_FIELDS):
            current = self.get_card(item_id)
            part_value = values["part_value"] if "part_value" in values else current.part_value
            printing_cost = (
                values["printing_cost"] if "printing_cost" in values else current.printing_cost
            )
            profit_loss, is_profitable = derive_profit(part_value, printing_cost)
            values["profit_loss"] = profit_loss
            values["is_profitable"] = is_profitable

        ctx = f"update_card[{item_id}]"
        resp = self.session.patch(
            self._list_url(f"/items/{quote(item_id)}/fields"),
            context=ctx,
            json_body=to_native_fields(values),
        )
        ensure_ok(resp, ctx, card_id=item_id)
        log.info("Updated card %s fields: %s", item_id, ", ".join(sorted(changes)))
        return self._reread("update_card", item_id)

    def delete_card(self, card_id: CardId) -> None:
        self._require_ready()
        item_id = self._normalize_id(card_id)
        ctx = f"delete_card[{item_id}]"
        resp = self.session.delete(self._list_url(f"/items/{quote(item_id)}"), context=ctx)
        ensure_ok(resp, ctx, card_id=item_id)
        log.info("Deleted card %s", item_id)

    def upload_image(
        self,
        data: bytes,
        filename: str,
        content_type: str,
        kind: ImageKind = "part",
    ) -> str:
        """Upload image bytes to the images library and return the file's web URL."""
        self._require_ready()
        if not data:
            raise ValidationError(["image"], "Image is empty")
        mime = (content_type or "").strip() or mimetypes.guess_type(filename or "")[0]
        if not mime:
            mime = "application/octet-stream"
        name = build_image_name(filename, kind)
        ctx = f"upload_image[{name}]"
        url = (
            f"{self._site_url()}/drives/{quote(self._resolve_drive_id())}"
            f"/root:/{quote(name)}:/content"
        )
        resp = self.session.put_bytes(url, context=ctx, data=data, content_type=mime)
        ensure_ok(resp, ctx)
        web_url = str(self._json_dict(resp).get("webUrl") or "").strip()
        if not web_url:
            raise RuntimeError("Invalid upload response: webUrl missing")
        log.info("Uploaded %s image %s (%d bytes)", kind, name, len(data))
        return web_url

    def check_connection(self) -> int:
        """Return how many cards are readable; raises if the store is unreachable."""
        self._require_config()
        return len(self.get_cards())

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------
    def _resolve_site_id(self) -> str:
        if self._site_id:
            return self._site_id
        if self.config.site_id.strip():
            self._site_id = self.config.site_id.strip()
            return self._site_id
        site_path = self.config.site_path()
        if site_path is None:
            raise NotConfiguredError("site_id or site_url is required")
        try:
            resp = self.session.get(self._url(site_path), context="resolve_site")
            ensure_ok(resp, "resolve_site")
        except RemoteNotFoundError as exc:
            raise ResourceNotFoundError("Site", self.config.site_url) from exc
        site_id = str(self._json_dict(resp).get("id") or "").strip()
        if not site_id:
            raise ResourceNotFoundError("Site", self.config.site_url)
        self._site_id = site_id
        return site_id

    def _resolve_list_id(self) -> str:
        if self._list_id:
            return self._list_id
        name = self.config.list_name
        resp = self.session.get(
            f"{self._site_url()}/lists",
            context="resolve_list",
            params={"$filter": f"displayName eq '{_odata_quote(name)}'"},
        )
        ensure_ok(resp, "resolve_list")
        entry = _pick_named(self._json_dict(resp).get("value"), "displayName", name)
        if entry is None:
            raise ResourceNotFoundError("List", name)
        self._list_id = str(entry["id"])
        log.debug("Resolved list '%s' -> %s", name, self._list_id)
        return self._list_id

    def _resolve_drive_id(self) -> str:
        if self._drive_id:
            return self._drive_id
        name = self.config.images_library
        resp = self.session.get(
            f"{self._site_url()}/drives",
            context="resolve_images_library",
            params={"$filter": f"name eq '{_odata_quote(name)}'"},
        )
        ensure_ok(resp, "resolve_images_library")
        entry = _pick_named(self._json_dict(resp).get("value"), "name", name)
        if entry is None:
            raise ResourceNotFoundError("Image library", name)
        self._drive_id = str(entry["id"])
        log.debug("Resolved images library '%s' -> %s", name, self._drive_id)
        return self._drive_id

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _require_config(self) -> None:
        problems = self.config.problems()
        if problems:
            raise NotConfiguredError("Card store not configured: " + "; ".join(problems))

    def _require_token(self) -> None:
        if not self.session.has_token:
            raise NotConfiguredError("No auth token set; call set_auth_token first")

    def _require_ready(self) -> None:
        self._require_config()
        self._require_token()

    def _url(self, path: str) -> str:
        base = self.config.base_url
        if base.endswith("/"):
            base = base[:-1]
        return f"{base}{path}"

    def _site_url(self) -> str:
        return self._url(f"/sites/{quote(self._resolve_site_id(), safe=',')}")

    def _list_url(self, path: str) -> str:
        return f"{self._site_url()}/lists/{quote(self._resolve_list_id())}{path}"

    @staticmethod
    def _normalize_id(card_id: CardId) -> str:
        item_id = str(card_id or "").strip()
        if not item_id:
            raise ValueError("card_id is required")
        return item_id

    def _reread(self, operation: str, item_id: str) -> Card:
        """Read back a written item; the write already happened, so failures are partial."""
        try:
            return self.get_card(item_id)
        except Exception as exc:
            log.warning("%s[%s] written but re-read failed: %s", operation, item_id, exc)
            raise PartialSyncError(operation, None, exc, card_id=item_id) from exc

    @staticmethod
    def _create_values(draft: CardDraft) -> Dict[str, Any]:
        values = {name: getattr(draft, name) for name in _REQUIRED_ON_CREATE}
        for name in ("brand", "model", "part_description"):
            text = getattr(draft, name)
            if text:
                values[name] = text
        for name in ("deadline", "part_image_url", "application_image_url", *MONETARY_FIELDS):
            value = getattr(draft, name)
            if value is not None and value != "":
                values[name] = value
        profit_loss, is_profitable = derive_profit(draft.part_value, draft.printing_cost)
        if profit_loss is not None:
            values[DERIVED_FIELDS[0]] = profit_loss
            values[DERIVED_FIELDS[1]] = is_profitable
        return values

    @staticmethod
    def _json_dict(resp: requests.Response) -> Dict[str, Any]:
        """Parse response JSON and require object payload."""
        try:
            payload = resp.json()
        except Exception:
            snippet = getattr(resp, "text", "")[:400]
            raise RuntimeError(f"Invalid JSON response: {snippet}")
        if not isinstance(payload, dict):
            raise RuntimeError("Invalid JSON response shape: expected object")
        return dict(payload)


def build_image_name(filename: str, kind: str = "part") -> str:
    """Collision-resistant drive file name: ``{kind}_{epoch_ms}_{rand}_{original}``."""
    base = re.split(r"[\\/]", filename or "")[-1]
    safe = re.sub(r"[^A-Za-z0-9._-]+", "_", base).strip("._") or "image"
    return f"{kind}_{int(time.time() * 1000)}_{uuid4().hex[:8]}_{safe}"


def _odata_quote(value: str) -> str:
    return value.replace("'", "''")


def _pick_named(entries: Any, key: str, name: str) -> Optional[Dict[str, Any]]:
    if not isinstance(entries, list):
        return None
    for entry in entries:
        if isinstance(entry, dict) and entry.get(key) == name and entry.get("id"):
            return entry
    return None


__all__ = ["SharePointCardStore", "build_image_name"]
