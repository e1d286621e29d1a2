from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from printboard.domain.cards import Card, CardDraft, CardStatus, derive_profit
from printboard.domain.errors import ValidationError
from printboard.domain.status_flow import STATUS_ORDER, coerce_status, is_terminal, next_status
from printboard.domain.time_utils import format_remote_datetime, parse_remote_datetime
from printboard.domain.validation import normalize_changes, validate_draft


def _draft(**overrides) -> CardDraft:
    values = dict(
        title="Suporte",
        requester_name="Carla",
        department="Manutenção",
        part_name="Suporte de motor",
    )
    values.update(overrides)
    return CardDraft(**values)


def _card(**overrides) -> Card:
    values = dict(
        id="1",
        title="Suporte",
        status=CardStatus.REQUESTED,
        request_date=datetime(2024, 5, 1, tzinfo=timezone.utc),
        requester_name="Carla",
        department="Manutenção",
        part_name="Suporte de motor",
    )
    values.update(overrides)
    return Card(**values)


# ---- status flow ----
def test_next_status_walks_the_pipeline_in_order() -> None:
    walked = [CardStatus.REQUESTED]
    while next_status(walked[-1]) is not None:
        walked.append(next_status(walked[-1]))

    assert tuple(walked) == STATUS_ORDER
    assert next_status(CardStatus.FINISHED) is None
    assert is_terminal(CardStatus.FINISHED)
    assert not is_terminal(CardStatus.IN_PRODUCTION)


def test_coerce_status_accepts_values_and_member_names() -> None:
    assert coerce_status("Fila de Produção") is CardStatus.QUEUED_FOR_PRODUCTION
    assert coerce_status("in production") is CardStatus.IN_PRODUCTION
    assert coerce_status(CardStatus.APPROVED) is CardStatus.APPROVED
    with pytest.raises(ValueError):
        coerce_status("Cancelado")


# ---- derived pair ----
def test_derive_profit_needs_both_inputs() -> None:
    assert derive_profit(100, 40) == (60.0, True)
    assert derive_profit(100, 100) == (0.0, False)
    assert derive_profit(None, 40) == (None, None)
    assert derive_profit(100, None) == (None, None)


def test_with_changes_recomputes_derived_fields() -> None:
    card = _card(part_value=100.0, printing_cost=40.0).with_changes(printing_cost=150.0)

    assert card.profit_loss == pytest.approx(-50.0)
    assert card.is_profitable is False
    assert card.with_changes(part_value=None).profit_loss is None


def test_with_changes_refuses_derived_fields() -> None:
    with pytest.raises(ValueError):
        _card().with_changes(profit_loss=5.0)


def test_draft_exposes_derived_preview() -> None:
    draft = _draft(part_value=100.0, printing_cost=40.0)

    assert draft.profit_loss == pytest.approx(60.0)
    assert draft.is_profitable is True
    assert draft.status is CardStatus.REQUESTED


# ---- validation ----
def test_validate_draft_lists_every_missing_field() -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate_draft(_draft(title=" ", department="", quantity=0))

    assert excinfo.value.fields == {"title", "department", "quantity"}


def test_validate_draft_accepts_complete_draft() -> None:
    validate_draft(_draft(quantity=2, part_value=10, printing_cost=2.5))


def test_validate_draft_rejects_boolean_money() -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate_draft(_draft(part_value=True, printing_cost=False))

    assert excinfo.value.fields == {"part_value", "printing_cost"}


def test_normalize_changes_coerces_values() -> None:
    deadline = datetime(2024, 6, 1, tzinfo=timezone.utc)
    normalized = normalize_changes(
        {"status": "Aprovado", "quantity": 4.0, "part_value": 10, "deadline": deadline}
    )

    assert normalized == {
        "status": CardStatus.APPROVED,
        "quantity": 4,
        "part_value": 10.0,
        "deadline": deadline,
    }
    assert isinstance(normalized["part_value"], float)


def test_normalize_changes_allows_clearing_money() -> None:
    assert normalize_changes({"printing_cost": None}) == {"printing_cost": None}


@pytest.mark.parametrize(
    "changes, bad",
    [
        ({"profit_loss": 1.0}, "profit_loss"),
        ({"id": "9"}, "id"),
        ({"modified_by": "x"}, "modified_by"),
        ({"colour": "red"}, "colour"),
        ({"title": ""}, "title"),
        ({"quantity": -1}, "quantity"),
        ({"status": "Cancelado"}, "status"),
        ({"part_value": "cheap"}, "part_value"),
        ({"deadline": "tomorrow"}, "deadline"),
    ],
)
def test_normalize_changes_rejects_invalid_fields(changes: dict, bad: str) -> None:
    with pytest.raises(ValidationError) as excinfo:
        normalize_changes(changes)

    assert bad in excinfo.value.fields


def test_normalize_changes_rejects_empty_update() -> None:
    with pytest.raises(ValidationError, match="No fields"):
        normalize_changes({})


# ---- timestamps ----
def test_parse_remote_datetime_variants() -> None:
    expected = datetime(2024, 5, 2, 10, 0, tzinfo=timezone.utc)

    assert parse_remote_datetime("2024-05-02T10:00:00Z") == expected
    assert parse_remote_datetime("2024-05-02T07:00:00-03:00") == expected
    assert parse_remote_datetime("2024-05-02 10:00:00") == expected
    assert parse_remote_datetime("02/05/2024") == datetime(2024, 5, 2, tzinfo=timezone.utc)
    assert parse_remote_datetime("") is None
    assert parse_remote_datetime("not a date") is None


def test_format_remote_datetime_converts_to_utc() -> None:
    local = datetime(2024, 5, 2, 7, 0, tzinfo=timezone(timedelta(hours=-3)))

    assert format_remote_datetime(local) == "2024-05-02T10:00:00Z"
    assert format_remote_datetime(None) is None
