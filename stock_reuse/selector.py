# stock_reuse/selector.py
# Best-fit selection of one stock piece for one demand.
# Pure with respect to the pool: the caller commits the returned Assignment.

from __future__ import annotations

from typing import Iterable, Optional

from .config import EngineParams
from .feasibility import feasible
from .scoring import score
from .types import Assignment, Demand, StockElement


def select_best(
    demand: Demand,
    pool: Iterable[StockElement],
    params: EngineParams,
) -> Optional[Assignment]:
    """
    Filter the pool by feasibility, then keep the max-score piece.
    Exact ties keep the first piece in pool order. Returns None if nothing fits.
    """
    best: Optional[StockElement] = None
    best_score = float("-inf")

    for stock in pool:
        if not feasible(demand, stock, params):
            continue
        s = score(demand, stock)
        if best is None or s > best_score:
            best = stock
            best_score = s

    if best is None:
        return None

    remaining = best.current_leftover_length - demand.length
    return Assignment(
        stock=best,
        demand_ids=[demand.id],
        remaining_length=remaining,
        score=best_score,
        utilization=(best.original_length - remaining) / best.original_length,
    )
