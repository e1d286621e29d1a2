"""Translation between ``Card`` fields and SharePoint list columns.

The list uses Portuguese column names. ``FIELD_MAP`` is the single source of
truth for both directions: adapters call :func:`to_native_fields` when
writing and :func:`parse_remote_item` when reading a Graph ``listItem``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from .cards import STORED_FIELDS, Card, CardStatus, derive_profit
from .status_flow import coerce_status
from .time_utils import format_remote_datetime, parse_remote_datetime

log = logging.getLogger(__name__)

FIELD_MAP: Dict[str, str] = {
    "title": "Titulo",
    "status": "Status",
    "request_date": "DataSolicitacao",
    "requester_name": "NomeSolicitante",
    "department": "SetorSolicitacao",
    "brand": "Marca",
    "model": "Modelo",
    "part_name": "NomePeca",
    "part_description": "DescricaoPeca",
    "quantity": "Quantidade",
    "deadline": "PrazoEntrega",
    "part_image_url": "ImagemPeca",
    "application_image_url": "ImagemAplicacao",
    "part_value": "ValorPeca",
    "printing_cost": "CustoImpressao",
    "profit_loss": "GanhoPrejuizo",
    "is_profitable": "Lucrativo",
}

def _check_field_map() -> None:
    missing = set(STORED_FIELDS) - set(FIELD_MAP)
    extra = set(FIELD_MAP) - set(STORED_FIELDS)
    if missing or extra:
        raise RuntimeError(
            f"FIELD_MAP out of sync with Card: missing={sorted(missing)} extra={sorted(extra)}"
        )
    if len(set(FIELD_MAP.values())) != len(FIELD_MAP):
        raise RuntimeError("FIELD_MAP native names must be unique")


_check_field_map()


def native_name(domain_name: str) -> str:
    try:
        return FIELD_MAP[domain_name]
    except KeyError as exc:
        raise KeyError(f"No list column mapped for field '{domain_name}'") from exc


def to_native_value(value: Any) -> Any:
    if isinstance(value, CardStatus):
        return value.value
    if isinstance(value, datetime):
        return format_remote_datetime(value)
    return value


def to_native_fields(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Rename domain keys to list columns and serialize their values."""
    return {native_name(name): to_native_value(value) for name, value in values.items()}


def parse_remote_item(raw: Mapping[str, Any]) -> Card:
    """Build a ``Card`` from a Graph ``listItem`` expanded with ``fields``.

    Defaulting rules:
      - title falls back to the built-in ``Title`` column, then ``""``
      - missing text columns become ``""``; missing image URLs become ``None``
      - quantity defaults to 1 when absent or not a positive number
      - request date falls back to the item's ``createdDateTime``
      - unknown status text falls back to ``REQUESTED`` with a warning
      - profit/loss and profitability are always recomputed from the inputs
    """
    if not isinstance(raw, Mapping):
        raise RuntimeError("Invalid list item payload: expected object")
    fields = raw.get("fields")
    if not isinstance(fields, Mapping):
        fields = {}

    item_id = str(raw.get("id") or fields.get("id") or "").strip()
    if not item_id:
        raise RuntimeError("Invalid list item payload: id missing")

    created_at = parse_remote_datetime(raw.get("createdDateTime"))
    part_value = _float_or_none(fields.get(FIELD_MAP["part_value"]))
    printing_cost = _float_or_none(fields.get(FIELD_MAP["printing_cost"]))
    profit_loss, is_profitable = derive_profit(part_value, printing_cost)

    return Card(
        id=item_id,
        title=_text(fields.get(FIELD_MAP["title"])) or _text(fields.get("Title")),
        status=_status(fields.get(FIELD_MAP["status"]), item_id),
        request_date=(
            parse_remote_datetime(fields.get(FIELD_MAP["request_date"]))
            or created_at
            or datetime.fromtimestamp(0, timezone.utc)
        ),
        requester_name=_text(fields.get(FIELD_MAP["requester_name"])),
        department=_text(fields.get(FIELD_MAP["department"])),
        part_name=_text(fields.get(FIELD_MAP["part_name"])),
        quantity=_quantity(fields.get(FIELD_MAP["quantity"])),
        brand=_text(fields.get(FIELD_MAP["brand"])),
        model=_text(fields.get(FIELD_MAP["model"])),
        part_description=_text(fields.get(FIELD_MAP["part_description"])),
        deadline=parse_remote_datetime(fields.get(FIELD_MAP["deadline"])),
        part_image_url=_text(fields.get(FIELD_MAP["part_image_url"])) or None,
        application_image_url=_text(fields.get(FIELD_MAP["application_image_url"])) or None,
        part_value=part_value,
        printing_cost=printing_cost,
        profit_loss=profit_loss,
        is_profitable=is_profitable,
        created_by=_display_name(raw.get("createdBy")),
        created_at=created_at,
        modified_by=_display_name(raw.get("lastModifiedBy")),
        modified_at=parse_remote_datetime(raw.get("lastModifiedDateTime")),
    )


def _text(value: Any) -> str:
    if value is None:
        return ""
    # Hyperlink columns come back as {"Url": ..., "Description": ...}.
    if isinstance(value, Mapping):
        value = value.get("Url") or value.get("url") or ""
    return str(value).strip()


def _float_or_none(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _quantity(value: Any) -> int:
    number = _float_or_none(value)
    if number is None or number < 1:
        return 1
    return int(number)


def _status(value: Any, item_id: str) -> CardStatus:
    try:
        return coerce_status(value)
    except ValueError:
        log.warning("Item %s has unknown status %r; treating as requested", item_id, value)
        return CardStatus.REQUESTED


def _display_name(identity: Any) -> str:
    if not isinstance(identity, Mapping):
        return ""
    user = identity.get("user")
    if not isinstance(user, Mapping):
        return ""
    return _text(user.get("displayName"))


__all__ = [
    "FIELD_MAP",
    "native_name",
    "parse_remote_item",
    "to_native_fields",
    "to_native_value",
]
