# stock_reuse/engine.py
# Assignment engine: ordered fallback tiers over mutable stock/demand state.
#
# Tiers (each only sees demands still unassigned when it starts):
#   1) original  - reclaimed input stock
#   2) leftover  - significant remnants of used originals, re-derived until a
#                  round places nothing; cuts are booked on the parent original
#   3) market    - purchasable templates; a hit clones a fresh MarketInstance,
#                  one purchase per round so later demands fill it first
#   4) synthesis - custom piece sized to the demand plus a buffer; cannot fail
#
# Every tier runs "sweeps". A sweep first tries to consolidate each pending demand
# into an already-used piece of its pool, then opens the best unused piece for the
# demands that are left (optionally packing followers onto it via grouping).
# With class_upgrade, a tier runs one sweep per demand class c in ascending order,
# drawing demands of class <= c and stock of class >= c.
#
# Demand order is fixed once per run: descending volume, class, length.

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .config import EPS, EngineParams
from .errors import InputError, InvariantViolation
from .grouping import simulate_grouping
from .leftovers import derive_leftovers
from .logger import Logger, get_logger
from .selector import select_best
from .types import (
    Assignment,
    Demand,
    MatchResult,
    StockElement,
    StockKind,
    TraceEntry,
    demand_priority_order,
    group_by_class,
)

ClassLevel = Optional[float]
PoolFn = Callable[[], List[StockElement]]


@dataclass
class _EngineState:
    params: EngineParams
    log: Logger
    demands: List[Demand]                     # priority order
    by_id: Dict[int, Demand]
    master: Dict[int, StockElement]           # roots only, insertion order
    templates: List[StockElement] = field(default_factory=list)
    next_id: int = 1
    minted: List[int] = field(default_factory=list)
    trace: List[TraceEntry] = field(default_factory=list)

    def mint_id(self) -> int:
        nid = self.next_id
        self.next_id += 1
        self.minted.append(nid)
        return nid

    def unassigned(self) -> List[Demand]:
        return [d for d in self.demands if not d.assigned]

    def class_levels(self) -> List[ClassLevel]:
        if not self.params.class_upgrade:
            return [None]
        return list(group_by_class(self.unassigned(), key=lambda d: d.strength_class).keys())


Tier = Callable[[_EngineState], int]


# ----------------------------
# Commit (the only mutation path)
# ----------------------------

def _instantiate_template(state: _EngineState, template: StockElement) -> StockElement:
    inst = StockElement.original(
        id=state.mint_id(),
        length=template.original_length,
        width=template.width,
        height=template.height,
        strength_class=template.strength_class,
        kind=StockKind.MARKET_INSTANCE,
    )
    state.master[inst.id] = inst
    state.log.debug(f"market template {template.id} -> instance {inst.id}")
    return inst


def _commit(
    state: _EngineState,
    assignment: Assignment,
    tier: str,
    class_level: ClassLevel = None,
) -> int:
    stock = assignment.stock
    if stock.kind == StockKind.MARKET_TEMPLATE:
        stock = _instantiate_template(state, stock)

    root = state.master.get(stock.parent_id)
    if root is None:
        raise InvariantViolation(f"Stock {stock.id} has no master record (parent {stock.parent_id})")

    for did in assignment.demand_ids:
        d = state.by_id[did]
        if d.assigned:
            raise InvariantViolation(f"Demand {did} assigned twice (stock {stock.id})")
        if stock.current_leftover_length - d.length < -EPS:
            raise InvariantViolation(
                f"Negative leftover on stock {stock.id}: {stock.current_leftover_length} - {d.length}"
            )

        stock.current_leftover_length -= d.length
        if stock is not root:
            root.current_leftover_length -= d.length
            if root.current_leftover_length < -EPS:
                raise InvariantViolation(f"Negative leftover on master {root.id}")

        d.assigned = True
        stock.used_at_all = True
        root.used_at_all = True
        root.assigned_demand_ids.append(did)
        state.trace.append(
            TraceEntry(demand_id=did, stock_id=stock.id, root_id=root.id, tier=tier, class_level=class_level)
        )
        state.log.debug(
            f"demand {did} -> stock {stock.id} (root {root.id}), "
            f"leftover {root.current_leftover_length:g}"
        )

    return len(assignment.demand_ids)


# ----------------------------
# Sweeps
# ----------------------------

def _consolidate_into_used(
    state: _EngineState,
    pending: Sequence[Demand],
    pool: Sequence[StockElement],
    tier: str,
    class_level: ClassLevel,
) -> int:
    placed = 0
    for d in pending:
        if d.assigned:
            continue
        used = [s for s in pool if s.used_at_all]
        best = select_best(d, used, state.params)
        if best is not None:
            placed += _commit(state, best, tier, class_level)
    return placed


def _place_into_unused(
    state: _EngineState,
    pending: Sequence[Demand],
    pool: Sequence[StockElement],
    tier: str,
    class_level: ClassLevel,
    max_opened: Optional[int] = None,
) -> int:
    p = state.params
    placed = 0
    opened = 0
    for d in pending:
        if max_opened is not None and opened >= max_opened:
            break
        if d.assigned:
            continue
        unused = [s for s in pool if not s.used_at_all]
        best = select_best(d, unused, p)
        if best is None:
            continue
        if p.grouping:
            best = simulate_grouping(
                d,
                best.stock,
                pending,
                float(p.min_cross_section_ratio),
                float(p.cross_section_tolerance),
                p,
                class_level=class_level,
            )
        placed += _commit(state, best, tier, class_level)
        opened += 1
    return placed


def _sweep(state: _EngineState, pool_fn: PoolFn, tier: str, max_opened: Optional[int] = None) -> int:
    placed = 0
    for c in state.class_levels():
        pending = [d for d in state.demands if not d.assigned and (c is None or d.strength_class <= c)]
        if not pending:
            continue
        pool = [s for s in pool_fn() if c is None or s.strength_class >= c]
        if not pool:
            continue
        placed += _consolidate_into_used(state, pending, pool, tier, c)
        placed += _place_into_unused(state, pending, pool, tier, c, max_opened)
    return placed


# ----------------------------
# Tiers
# ----------------------------

def original_tier(state: _EngineState) -> int:
    return _sweep(
        state,
        lambda: [s for s in state.master.values() if s.kind == StockKind.ORIGINAL],
        "original",
    )


def leftover_tier(state: _EngineState) -> int:
    total = 0
    while state.unassigned():
        views = derive_leftovers(
            state.master.values(),
            state.params.minimum_significant_leftover_length,
            state.mint_id,
        )
        if not views:
            break
        placed = _sweep(state, lambda: views, "leftover")
        total += placed
        if placed == 0:
            break
    return total


def market_tier(state: _EngineState) -> int:
    # Templates never become used, so each round buys at most one instance and
    # the next round consolidates into it before buying another.
    total = 0
    while state.unassigned():
        placed = _sweep(
            state,
            lambda: [s for s in state.master.values() if s.kind == StockKind.MARKET_INSTANCE] + state.templates,
            "market",
            max_opened=1,
        )
        total += placed
        if placed == 0:
            break
    return total


def synthesis_tier(state: _EngineState) -> int:
    p = state.params
    placed = 0
    for d in state.unassigned():
        custom = StockElement.original(
            id=state.mint_id(),
            length=d.length * (1.0 + p.custom_length_buffer),
            width=d.width * (1.0 + p.custom_section_buffer),
            height=d.height * (1.0 + p.custom_section_buffer),
            strength_class=d.strength_class,
            kind=StockKind.CUSTOM,
        )
        state.master[custom.id] = custom
        placed += _commit(
            state,
            Assignment(
                stock=custom,
                demand_ids=[d.id],
                remaining_length=custom.original_length - d.length,
            ),
            "synthesis",
        )
    return placed


def build_tiers(params: EngineParams) -> List[Tuple[str, Tier]]:
    """Ordered fallback strategies for the given configuration."""
    tiers: List[Tuple[str, Tier]] = [("original", original_tier)]
    if params.recover_leftovers:
        tiers.append(("leftover", leftover_tier))
    if params.use_market:
        tiers.append(("market", market_tier))
    if params.synthesize:
        tiers.append(("synthesis", synthesis_tier))
    return tiers


# ----------------------------
# Entry point
# ----------------------------

def _check_unique(ids: Iterable[int], what: str) -> None:
    seen = set()
    for i in ids:
        if i in seen:
            raise InputError(f"Duplicate {what} id: {i}")
        seen.add(i)


def run_engine(
    demands: List[Demand],
    stock: List[StockElement],
    market: Optional[List[StockElement]] = None,
    *,
    params: Optional[EngineParams] = None,
    logger: Optional[Logger] = None,
) -> MatchResult:
    """
    Assign demands to stock. Inputs are copied, so repeated runs on the same
    records are independent and give identical results.
    """
    params = params or EngineParams()
    log = logger or get_logger()
    market = list(market or [])

    _check_unique((d.id for d in demands), "demand")
    _check_unique((s.id for s in stock), "stock")
    _check_unique((s.id for s in market), "market stock")

    work = [replace(d, assigned=False) for d in demands]
    master: Dict[int, StockElement] = {}
    for s in stock:
        master[s.id] = StockElement.original(s.id, s.original_length, s.width, s.height, s.strength_class)
    templates = [
        StockElement.original(s.id, s.original_length, s.width, s.height, s.strength_class, StockKind.MARKET_TEMPLATE)
        for s in market
    ]

    input_stock_ids = [s.id for s in stock] + [s.id for s in market]
    max_input = max(input_stock_ids + [d.id for d in demands], default=0)

    state = _EngineState(
        params=params,
        log=log,
        demands=demand_priority_order(work),
        by_id={d.id: d for d in work},
        master=master,
        templates=templates if params.use_market else [],
        next_id=max_input + 1,
    )

    log.info(f"Matching {len(work)} demand(s) against {len(stock)} reclaimed / {len(market)} market piece(s)")
    for name, tier in build_tiers(params):
        if not state.unassigned():
            break
        state.log = log.child(name)
        placed = tier(state)
        state.log.info(f"placed {placed}, unassigned {len(state.unassigned())}")

    return MatchResult(
        demands=work,
        stock=state.master,
        input_stock_ids=input_stock_ids,
        minted_ids=state.minted,
        trace=state.trace,
    )
