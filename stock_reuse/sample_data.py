# stock_reuse/sample_data.py
# Utilities to generate sample / random demand and stock lists for quick benchmarking.
# This helps you stress-test thresholds and ratios without needing real CSVs.

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Tuple

from .types import Demand, StockElement, StockKind

# Common timber sections (width, height) in mm
SECTIONS: Tuple[Tuple[int, int], ...] = (
    (45, 95),
    (45, 145),
    (45, 195),
    (60, 120),
    (80, 160),
    (100, 200),
)


@dataclass(frozen=True)
class RandomJobConfig:
    seed: int = 123
    n_demands: int = 40
    n_stock: int = 25
    n_market: int = 4

    demand_length_range: Tuple[int, int] = (300, 3000)
    stock_length_range: Tuple[int, int] = (800, 6000)
    market_length: int = 6000

    # strength classes, e.g. C16 / C24 / C30
    classes: Tuple[int, ...] = (16, 24, 30)

    # probability a stock piece comes with a larger section than its demand peers
    p_oversize: float = 0.3


def generate_random_demands(cfg: RandomJobConfig) -> List[Demand]:
    rnd = random.Random(cfg.seed)
    out: List[Demand] = []
    for i in range(cfg.n_demands):
        w, h = rnd.choice(SECTIONS)
        out.append(
            Demand(
                id=i + 1,
                length=float(rnd.randint(*cfg.demand_length_range)),
                width=float(w),
                height=float(h),
                strength_class=float(rnd.choice(cfg.classes)),
            )
        )
    return out


def generate_random_stock(cfg: RandomJobConfig, *, first_id: int = 1001) -> List[StockElement]:
    rnd = random.Random(cfg.seed + 1)
    out: List[StockElement] = []
    for i in range(cfg.n_stock):
        k = rnd.randrange(len(SECTIONS))
        if rnd.random() < cfg.p_oversize:
            k = min(len(SECTIONS) - 1, k + 1)
        w, h = SECTIONS[k]
        out.append(
            StockElement.original(
                id=first_id + i,
                length=float(rnd.randint(*cfg.stock_length_range)),
                width=float(w),
                height=float(h),
                strength_class=float(rnd.choice(cfg.classes)),
            )
        )
    return out


def generate_market_templates(cfg: RandomJobConfig, *, first_id: int = 9001) -> List[StockElement]:
    """One template per section (up to n_market), at the top class."""
    top = float(max(cfg.classes))
    return [
        StockElement.original(
            id=first_id + i,
            length=float(cfg.market_length),
            width=float(w),
            height=float(h),
            strength_class=top,
            kind=StockKind.MARKET_TEMPLATE,
        )
        for i, (w, h) in enumerate(SECTIONS[: cfg.n_market])
    ]
