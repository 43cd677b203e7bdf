# stock_reuse/scoring.py
# Candidate ranking. Higher is better.
#
# Three weighted terms in strict priority order:
#   1) tight length fit        -(leftover after cut)          * 1000
#   2) cross-section match      demandArea / stockArea          * 100
#   3) class over-provisioning  -(stock class - demand class)   * 10

from __future__ import annotations

from .config import DEFAULTS, EPS
from .types import Demand, StockElement


def section_match(demand: Demand, stock: StockElement) -> float:
    """1/ratio where ratio = stockArea/demandArea; 0 when the ratio is undefined."""
    d_area = demand.cross_section_area
    s_area = stock.cross_section_area
    if d_area < EPS or s_area < EPS:
        return 0.0
    return d_area / s_area


def score(demand: Demand, stock: StockElement) -> float:
    leftover = stock.current_leftover_length - demand.length
    over_class = stock.strength_class - demand.strength_class
    return (
        -leftover * DEFAULTS.length_weight
        + section_match(demand, stock) * DEFAULTS.section_weight
        - over_class * DEFAULTS.class_weight
    )
