# stock_reuse/leftovers.py
# Leftover recovery: significant remnants of used root pieces are re-offered
# as virtual Leftover stock that points back at its root through parent_id.

from __future__ import annotations

from typing import Callable, Iterable, List

from .types import StockElement, StockKind


def derive_leftovers(
    master_stock: Iterable[StockElement],
    significance_threshold: float,
    mint_id: Callable[[], int],
) -> List[StockElement]:
    """
    One Leftover view per used root whose leftover is >= threshold.
    Master records are not touched; views get fresh ids from `mint_id`.
    """
    out: List[StockElement] = []
    for s in master_stock:
        if s.kind != StockKind.ORIGINAL or not s.used_at_all:
            continue
        if s.current_leftover_length < significance_threshold:
            continue
        out.append(
            StockElement(
                id=mint_id(),
                original_length=s.current_leftover_length,
                current_leftover_length=s.current_leftover_length,
                width=s.width,
                height=s.height,
                strength_class=s.strength_class,
                kind=StockKind.LEFTOVER,
                parent_id=s.id,
                used_at_all=False,
            )
        )
    return out
