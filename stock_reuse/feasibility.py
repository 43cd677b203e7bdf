# stock_reuse/feasibility.py
# Physical / structural compatibility of one demand with one stock piece.
#
# A piece is feasible when it is long, wide, tall and strong enough, and its
# cross-section is not grossly mismatched. The mismatch check has two forms:
#   - ceiling: stockArea / demandArea <= max ratio (caps oversizing)
#   - floor:   demandArea / stockArea >= min ratio (demand must fill the section)

from __future__ import annotations

from .config import CEILING, EPS, EngineParams
from .types import Demand, StockElement


def cross_section_ok(demand: Demand, stock: StockElement, params: EngineParams) -> bool:
    d_area = demand.cross_section_area
    s_area = stock.cross_section_area

    if d_area < EPS:
        return s_area < EPS
    if s_area < EPS:
        return False

    if params.cross_section_mode == CEILING:
        return s_area / d_area <= params.max_stock_to_demand_area_ratio
    return d_area / s_area >= float(params.min_cross_section_ratio)


def fits_physically(demand: Demand, stock: StockElement, remaining_length: float) -> bool:
    """Length, width, height and strength class, against a given remaining length."""
    return (
        remaining_length >= demand.length
        and stock.width >= demand.width
        and stock.height >= demand.height
        and stock.strength_class >= demand.strength_class
    )


def feasible(demand: Demand, stock: StockElement, params: EngineParams) -> bool:
    return fits_physically(demand, stock, stock.current_leftover_length) and cross_section_ok(
        demand, stock, params
    )
