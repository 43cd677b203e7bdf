# stock_reuse/metrics.py
# Metrics for a matching run:
# - stock pieces used per kind
# - consumed vs. leftover (waste) length on used pieces
# - mean utilization of used pieces
# - reclaimed share of assigned demand volume
#
# These metrics are engine-agnostic: they only read the final MatchResult.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from .types import MatchResult, StockElement, StockKind


@dataclass(frozen=True)
class Metrics:
    num_demands: int
    num_assigned: int
    num_unassigned: int
    pieces_used: Dict[str, int] = field(default_factory=dict)
    consumed_length: float = 0.0
    leftover_length: float = 0.0
    mean_utilization: float = 0.0
    reclaimed_volume_share: float = 0.0

    @property
    def assigned_fraction(self) -> float:
        return self.num_assigned / self.num_demands if self.num_demands else 0.0


def stock_utilization(stock: StockElement) -> float:
    """Consumed / original length of one master piece."""
    return stock.utilization()


def compute_metrics(result: MatchResult) -> Metrics:
    used = result.used_stock()
    volumes = {d.id: d.volume for d in result.demands}

    pieces: Dict[str, int] = {}
    consumed = 0.0
    leftover = 0.0
    util_sum = 0.0
    reclaimed_vol = 0.0
    total_vol = 0.0

    for s in used:
        pieces[s.kind.value] = pieces.get(s.kind.value, 0) + 1
        consumed += s.consumed_length
        leftover += s.current_leftover_length
        util_sum += stock_utilization(s)
        vol = sum(volumes[did] for did in s.assigned_demand_ids)
        total_vol += vol
        if s.kind == StockKind.ORIGINAL:
            reclaimed_vol += vol

    n_assigned = len(result.assigned_demands())
    return Metrics(
        num_demands=len(result.demands),
        num_assigned=n_assigned,
        num_unassigned=len(result.demands) - n_assigned,
        pieces_used=pieces,
        consumed_length=consumed,
        leftover_length=leftover,
        mean_utilization=util_sum / len(used) if used else 0.0,
        reclaimed_volume_share=reclaimed_vol / total_vol if total_vol > 0 else 0.0,
    )
