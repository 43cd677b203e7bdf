# stock_reuse/types.py
# Core data structures for stock-reuse cutting assignment.
# Keep this file dependency-light so it can be imported everywhere.

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, TypeVar

T = TypeVar("T")
K = TypeVar("K")


# ----------------------------
# Inputs
# ----------------------------

class StockKind(str, Enum):
    ORIGINAL = "Original"
    LEFTOVER = "Leftover"
    MARKET_TEMPLATE = "MarketTemplate"
    MARKET_INSTANCE = "MarketInstance"
    CUSTOM = "Custom"


@dataclass
class Demand:
    """A required cut piece. Only `assigned` changes during matching."""
    id: int
    length: float
    width: float
    height: float
    strength_class: float
    assigned: bool = False

    def __post_init__(self):
        sizes = (self.length, self.width, self.height)
        if not all(math.isfinite(v) and v > 0 for v in sizes):
            raise ValueError(
                f"Invalid demand size for {self.id}: {self.length}x{self.width}x{self.height}"
            )

    @property
    def cross_section_area(self) -> float:
        return self.width * self.height

    @property
    def volume(self) -> float:
        return self.length * self.cross_section_area


@dataclass
class StockElement:
    """
    A linear stock piece.

    Original, MarketInstance and Custom pieces are roots (parent_id == id).
    A Leftover is a view on a used root: it carries the root's id in
    parent_id and is never reported on its own.
    """
    id: int
    original_length: float
    current_leftover_length: float
    width: float
    height: float
    strength_class: float
    kind: StockKind = StockKind.ORIGINAL
    parent_id: Optional[int] = None
    used_at_all: bool = False
    assigned_demand_ids: List[int] = field(default_factory=list)

    def __post_init__(self):
        if self.parent_id is None:
            self.parent_id = self.id

    @classmethod
    def original(
        cls,
        id: int,
        length: float,
        width: float,
        height: float,
        strength_class: float,
        kind: StockKind = StockKind.ORIGINAL,
    ) -> "StockElement":
        return cls(
            id=id,
            original_length=length,
            current_leftover_length=length,
            width=width,
            height=height,
            strength_class=strength_class,
            kind=kind,
        )

    @property
    def cross_section_area(self) -> float:
        return self.width * self.height

    @property
    def consumed_length(self) -> float:
        return self.original_length - self.current_leftover_length

    @property
    def is_root(self) -> bool:
        return self.parent_id == self.id and self.kind != StockKind.LEFTOVER

    def utilization(self) -> float:
        if self.original_length <= 0:
            return 0.0
        return self.consumed_length / self.original_length


# ----------------------------
# Selection / outputs
# ----------------------------

@dataclass(frozen=True)
class Assignment:
    """
    Ephemeral candidate produced by the selector or the grouping simulator.
    Consumed immediately by the engine; never stored.
    """
    stock: StockElement
    demand_ids: List[int]
    remaining_length: float
    score: float = 0.0
    utilization: float = 0.0


@dataclass(frozen=True)
class TraceEntry:
    """One committed placement, in commit order."""
    demand_id: int
    stock_id: int
    root_id: int
    tier: str
    class_level: Optional[float] = None


@dataclass(frozen=True)
class MatchRow:
    stock_id: int
    demand_id: int
    leftover_length: float
    stock_length: float
    stock_height: float
    stock_width: float
    stock_class: float


@dataclass(frozen=True)
class UnmatchedRow:
    placeholder_id: int
    demand_id: int
    leftover_length: float
    length: float
    height: float
    width: float
    strength_class: float


@dataclass
class MatchResult:
    """Final engine state handed to the report builder."""
    demands: List[Demand]
    stock: Dict[int, StockElement]
    input_stock_ids: List[int] = field(default_factory=list)
    minted_ids: List[int] = field(default_factory=list)
    trace: List[TraceEntry] = field(default_factory=list)

    def assigned_demands(self) -> List[Demand]:
        return [d for d in self.demands if d.assigned]

    def unassigned_demands(self) -> List[Demand]:
        return [d for d in self.demands if not d.assigned]

    def used_stock(self) -> List[StockElement]:
        return sorted(
            (s for s in self.stock.values() if s.used_at_all),
            key=lambda s: s.id,
        )

    def demand_to_stock(self) -> Dict[int, int]:
        out: Dict[int, int] = {}
        for s in self.used_stock():
            for did in s.assigned_demand_ids:
                out[did] = s.id
        return out


# ----------------------------
# Helper utilities
# ----------------------------

def group_by_class(items: Iterable[T], key: Callable[[T], K]) -> Dict[K, List[T]]:
    """
    Bucket items by an ordered class value taken from `key`.
    Buckets come back in ascending key order; items keep input order inside a bucket.
    """
    by: Dict[K, List[T]] = {}
    for it in items:
        by.setdefault(key(it), []).append(it)
    return {k: by[k] for k in sorted(by)}


def demand_priority_order(demands: Iterable[Demand]) -> List[Demand]:
    """Descending volume, then class, then length. Stable on exact ties."""
    return sorted(
        demands,
        key=lambda d: (-d.volume, -d.strength_class, -d.length),
    )
