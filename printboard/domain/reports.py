"""Aggregate views over the card collection (board columns and cost report)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from .cards import Card, CardStatus
from .status_flow import STATUS_ORDER


@dataclass(frozen=True)
class CostRow:
    """One finished card in the cost analysis table."""

    card_id: str
    title: str
    part_name: str
    part_value: float
    printing_cost: float
    profit_loss: float
    is_profitable: bool


@dataclass(frozen=True)
class BoardReport:
    """Counts and cost totals for a snapshot of the board."""

    total: int = 0
    by_status: Tuple[Tuple[CardStatus, int], ...] = ()
    by_department: Tuple[Tuple[str, int], ...] = ()
    total_savings: float = 0.0
    total_loss: float = 0.0
    profitable_count: int = 0
    unprofitable_count: int = 0
    cost_rows: Tuple[CostRow, ...] = ()

    def status_count(self, status: CardStatus) -> int:
        return dict(self.by_status).get(status, 0)

    @property
    def net_result(self) -> float:
        return self.total_savings - self.total_loss


def group_by_status(cards: Iterable[Card]) -> Dict[CardStatus, List[Card]]:
    """Return one column per status, in pipeline order, preserving card order."""
    columns: Dict[CardStatus, List[Card]] = {status: [] for status in STATUS_ORDER}
    for card in cards:
        columns[card.status].append(card)
    return columns


def build_report(cards: Iterable[Card]) -> BoardReport:
    """Summarize ``cards``.

    Cost figures only consider finished cards with both a part value and a
    printing cost. Losses are reported as positive amounts.
    """
    items = list(cards)
    status_counts: Dict[CardStatus, int] = {}
    department_counts: Dict[str, int] = {}
    for card in items:
        status_counts[card.status] = status_counts.get(card.status, 0) + 1
        department = card.department or "-"
        department_counts[department] = department_counts.get(department, 0) + 1

    savings = 0.0
    loss = 0.0
    profitable = 0
    unprofitable = 0
    rows: List[CostRow] = []
    for card in items:
        if card.status is not CardStatus.FINISHED:
            continue
        if card.part_value is None or card.printing_cost is None:
            continue
        profit_loss: Optional[float] = card.profit_loss
        if profit_loss is None:
            profit_loss = card.part_value - card.printing_cost
        if profit_loss > 0:
            savings += profit_loss
            profitable += 1
        else:
            loss += abs(profit_loss)
            unprofitable += 1
        rows.append(
            CostRow(
                card_id=card.id,
                title=card.title,
                part_name=card.part_name,
                part_value=card.part_value,
                printing_cost=card.printing_cost,
                profit_loss=profit_loss,
                is_profitable=profit_loss > 0,
            )
        )

    return BoardReport(
        total=len(items),
        by_status=tuple((status, status_counts[status]) for status in STATUS_ORDER if status in status_counts),
        by_department=tuple(sorted(department_counts.items(), key=lambda kv: (-kv[1], kv[0]))),
        total_savings=savings,
        total_loss=loss,
        profitable_count=profitable,
        unprofitable_count=unprofitable,
        cost_rows=tuple(rows),
    )


__all__ = ["BoardReport", "CostRow", "build_report", "group_by_status"]
