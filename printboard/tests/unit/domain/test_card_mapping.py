from __future__ import annotations

from datetime import datetime, timezone

import pytest

from printboard.domain.cards import STORED_FIELDS, CardStatus
from printboard.domain.mapping import (
    FIELD_MAP,
    parse_remote_item,
    to_native_fields,
)


def _item(fields: dict, **extra) -> dict:
    raw = {
        "id": "7",
        "createdDateTime": "2024-05-01T08:00:00Z",
        "lastModifiedDateTime": "2024-05-03T09:30:00Z",
        "createdBy": {"user": {"displayName": "Ana Souza"}},
        "lastModifiedBy": {"user": {"displayName": "Bruno Lima"}},
        "fields": fields,
    }
    raw.update(extra)
    return raw


def test_field_map_covers_every_stored_field_once() -> None:
    assert set(FIELD_MAP) == set(STORED_FIELDS)
    assert len(set(FIELD_MAP.values())) == len(FIELD_MAP) == 17
    assert FIELD_MAP["profit_loss"] == "GanhoPrejuizo"
    assert FIELD_MAP["is_profitable"] == "Lucrativo"


def test_parse_remote_item_reads_native_columns() -> None:
    card = parse_remote_item(
        _item(
            {
                "Titulo": "Suporte de sensor",
                "Status": "Em Produção",
                "DataSolicitacao": "2024-05-02T10:00:00Z",
                "NomeSolicitante": "Carla",
                "SetorSolicitacao": "Manutenção",
                "Marca": "Bosch",
                "Modelo": "X1",
                "NomePeca": "Suporte",
                "DescricaoPeca": "PLA preto",
                "Quantidade": 3,
                "PrazoEntrega": "2024-06-01T00:00:00Z",
                "ImagemPeca": {"Url": "https://contoso/img/part.png", "Description": "part"},
                "ValorPeca": 100,
                "CustoImpressao": 40,
            }
        )
    )

    assert card.id == "7"
    assert card.title == "Suporte de sensor"
    assert card.status is CardStatus.IN_PRODUCTION
    assert card.request_date == datetime(2024, 5, 2, 10, 0, tzinfo=timezone.utc)
    assert card.quantity == 3
    assert card.deadline == datetime(2024, 6, 1, tzinfo=timezone.utc)
    assert card.part_image_url == "https://contoso/img/part.png"
    assert card.application_image_url is None
    assert card.profit_loss == pytest.approx(60.0)
    assert card.is_profitable is True
    assert card.created_by == "Ana Souza"
    assert card.modified_by == "Bruno Lima"
    assert card.modified_at == datetime(2024, 5, 3, 9, 30, tzinfo=timezone.utc)


def test_parse_remote_item_defaults_for_sparse_fields() -> None:
    card = parse_remote_item(_item({"Title": "Built-in title", "Quantidade": "0"}))

    assert card.title == "Built-in title"
    assert card.status is CardStatus.REQUESTED
    assert card.quantity == 1
    assert card.brand == ""
    assert card.deadline is None
    assert card.request_date == datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)
    assert card.part_value is None
    assert card.profit_loss is None
    assert card.is_profitable is None


def test_parse_remote_item_recomputes_derived_pair_from_inputs() -> None:
    card = parse_remote_item(
        _item(
            {
                "Titulo": "Engrenagem",
                "ValorPeca": "100",
                "CustoImpressao": "150",
                "GanhoPrejuizo": 999,
                "Lucrativo": True,
            }
        )
    )

    assert card.profit_loss == pytest.approx(-50.0)
    assert card.is_profitable is False


def test_parse_remote_item_ignores_stored_derived_without_inputs() -> None:
    card = parse_remote_item(_item({"Titulo": "Tampa", "GanhoPrejuizo": 10, "Lucrativo": True}))

    assert card.profit_loss is None
    assert card.is_profitable is None


def test_parse_remote_item_unknown_status_falls_back_to_requested(caplog) -> None:
    card = parse_remote_item(_item({"Titulo": "Peça", "Status": "Cancelado"}))

    assert card.status is CardStatus.REQUESTED
    assert "unknown status" in caplog.text


def test_parse_remote_item_without_any_date_uses_epoch() -> None:
    card = parse_remote_item({"id": "3", "fields": {"Titulo": "x"}})

    assert card.request_date == datetime.fromtimestamp(0, timezone.utc)
    assert card.created_at is None


def test_parse_remote_item_requires_id() -> None:
    with pytest.raises(RuntimeError, match="id missing"):
        parse_remote_item({"fields": {"Titulo": "no id"}})


def test_to_native_fields_serializes_status_and_dates() -> None:
    native = to_native_fields(
        {
            "status": CardStatus.QUEUED_FOR_PRODUCTION,
            "deadline": datetime(2024, 7, 1, 12, 0, tzinfo=timezone.utc),
            "printing_cost": 12.5,
        }
    )

    assert native == {
        "Status": "Fila de Produção",
        "PrazoEntrega": "2024-07-01T12:00:00Z",
        "CustoImpressao": 12.5,
    }


def test_to_native_fields_rejects_unmapped_names() -> None:
    with pytest.raises(KeyError):
        to_native_fields({"created_by": "someone"})
