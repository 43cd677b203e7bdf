# stock_reuse/debug.py
# Debug / inspection helpers:
# - pretty-print used stock pieces and their cuts
# - print the commit trace (which tier placed which demand)
# - helpful when tuning thresholds and ratios

from __future__ import annotations

from typing import Dict, Iterable

from .types import MatchResult, StockElement, TraceEntry


def print_stock(stock: StockElement, lengths: Dict[int, float]) -> None:
    cuts = ", ".join(f"{did}:{lengths.get(did, 0):g}" for did in sorted(stock.assigned_demand_ids))
    print(
        f"[{stock.kind.value:14s}] #{stock.id:<6d} L={stock.original_length:8.1f} "
        f"left={stock.current_leftover_length:8.1f} util={stock.utilization():6.1%}  {cuts}"
    )


def print_trace(trace: Iterable[TraceEntry]) -> None:
    for t in trace:
        lvl = "" if t.class_level is None else f" class<={t.class_level:g}"
        print(f"{t.tier:10s}{lvl}: demand {t.demand_id} -> stock {t.stock_id} (root {t.root_id})")


def print_result(result: MatchResult) -> None:
    lengths = {d.id: d.length for d in result.demands}
    used = result.used_stock()
    print(f"Used stock pieces: {len(used)}")
    for s in used:
        print_stock(s, lengths)
    unmatched = sorted(d.id for d in result.unassigned_demands())
    if unmatched:
        print(f"UNMATCHED: {unmatched}")
    print("-- Trace --")
    print_trace(result.trace)
