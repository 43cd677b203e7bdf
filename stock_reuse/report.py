# stock_reuse/report.py
# Report builder: final engine state -> matched / unmatched row tables.

from __future__ import annotations

from typing import List

from .types import MatchResult, MatchRow, UnmatchedRow


def build_matched_rows(result: MatchResult) -> List[MatchRow]:
    """
    One row per assigned demand, stock ascending by id, demands ascending by id.
    """
    rows: List[MatchRow] = []
    for s in result.used_stock():
        for did in sorted(s.assigned_demand_ids):
            rows.append(
                MatchRow(
                    stock_id=s.id,
                    demand_id=did,
                    leftover_length=s.current_leftover_length,
                    stock_length=s.original_length,
                    stock_height=s.height,
                    stock_width=s.width,
                    stock_class=s.strength_class,
                )
            )
    return rows


def build_unmatched_rows(result: MatchResult) -> List[UnmatchedRow]:
    """
    Unassigned demands in ascending id order, each with a placeholder stock id
    max(input stock id) + 1, + 2, ... and leftover 0.
    """
    base = max(result.input_stock_ids, default=0)
    rows: List[UnmatchedRow] = []
    for k, d in enumerate(sorted(result.unassigned_demands(), key=lambda d: d.id), start=1):
        rows.append(
            UnmatchedRow(
                placeholder_id=base + k,
                demand_id=d.id,
                leftover_length=0.0,
                length=d.length,
                height=d.height,
                width=d.width,
                strength_class=d.strength_class,
            )
        )
    return rows
