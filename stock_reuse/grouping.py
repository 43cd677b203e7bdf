# stock_reuse/grouping.py
# Multi-demand consolidation onto one chosen stock piece.
#
# Once a piece is opened for a "lead" demand, other unassigned demands are packed
# onto the same piece greedily:
#   - only demands that fit the remaining length / section / class
#   - priority tiers: lead-compatible section ratio first, then xlarge, large,
#     medium, small (by demandArea / stockArea)
#   - longest first inside a tier
# This drives multi-demand utilization instead of one-demand-per-piece.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .config import DEFAULTS, EPS, EngineParams
from .feasibility import cross_section_ok, fits_physically
from .types import Assignment, Demand, StockElement

TIER_ORDER = ("lead", "xlarge", "large", "medium", "small")


@dataclass
class GroupingTiers:
    buckets: Dict[str, List[Demand]] = field(default_factory=lambda: {t: [] for t in TIER_ORDER})

    def ordered(self) -> List[Demand]:
        out: List[Demand] = []
        for t in TIER_ORDER:
            out.extend(sorted(self.buckets[t], key=lambda d: -d.length))
        return out


def section_ratio(demand: Demand, stock: StockElement) -> float:
    s_area = stock.cross_section_area
    if s_area < EPS:
        return 0.0
    return demand.cross_section_area / s_area


def size_tier(ratio: float) -> str:
    if ratio >= DEFAULTS.xlarge_ratio:
        return "xlarge"
    if ratio >= DEFAULTS.large_ratio:
        return "large"
    if ratio >= DEFAULTS.medium_ratio:
        return "medium"
    return "small"


def bucket_candidates(
    lead: Demand,
    stock: StockElement,
    candidates: Iterable[Demand],
    remaining_length: float,
    min_cross_section_ratio: float,
    cross_section_tolerance: float,
    params: EngineParams,
    class_level: Optional[float] = None,
) -> GroupingTiers:
    lead_ratio = section_ratio(lead, stock)
    tiers = GroupingTiers()

    for d in candidates:
        if d.assigned or d.id == lead.id:
            continue
        if class_level is not None and d.strength_class > class_level:
            continue
        if not fits_physically(d, stock, remaining_length):
            continue
        if not cross_section_ok(d, stock, params):
            continue
        ratio = section_ratio(d, stock)
        if ratio < min_cross_section_ratio:
            continue
        # lead-compatible demands never also land in a size tier
        if abs(ratio - lead_ratio) <= cross_section_tolerance:
            tiers.buckets["lead"].append(d)
        else:
            tiers.buckets[size_tier(ratio)].append(d)

    return tiers


def simulate_grouping(
    lead: Demand,
    stock: StockElement,
    all_demands: Iterable[Demand],
    min_cross_section_ratio: float,
    cross_section_tolerance: float,
    params: EngineParams,
    class_level: Optional[float] = None,
) -> Assignment:
    """
    Pack the lead plus as many followers as fit onto `stock`.
    With a class level, only followers of class <= class_level are drawn.
    Does not mutate demands or stock.
    """
    remaining = stock.current_leftover_length - lead.length
    demand_ids = [lead.id]

    if remaining > EPS:
        tiers = bucket_candidates(
            lead,
            stock,
            all_demands,
            remaining,
            min_cross_section_ratio,
            cross_section_tolerance,
            params,
            class_level,
        )
        for d in tiers.ordered():
            if remaining < EPS:
                break
            if d.length <= remaining:
                demand_ids.append(d.id)
                remaining -= d.length

    consumed = stock.original_length - remaining
    utilization = consumed / stock.original_length if stock.original_length > 0 else 0.0
    return Assignment(
        stock=stock,
        demand_ids=demand_ids,
        remaining_length=remaining,
        utilization=utilization,
    )
