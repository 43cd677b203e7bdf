# stock_reuse/io_csv.py
# CSV import/export helpers:
# - read demand / stock tables into column sets (see loader.py)
# - export matched rows, unmatched rows and a per-stock summary

from __future__ import annotations

import csv
from pathlib import Path
from typing import Dict, List

from .report import build_matched_rows, build_unmatched_rows
from .types import MatchResult


def read_columns_csv(path: str | Path) -> Dict[str, List[str]]:
    """
    Read a CSV with a header row into {column: [values...]}.
    Values stay strings; typing happens in the loader. Blank lines are skipped.
    """
    path = Path(path)
    with path.open("r", newline="", encoding="utf-8") as f:
        reader = csv.reader(f)
        header = next(reader, None)
        if header is None:
            return {}
        names = [h.strip() for h in header]
        cols: Dict[str, List[str]] = {n: [] for n in names}
        for row in reader:
            if not row or all(c.strip() == "" for c in row):
                continue
            # short rows leave their column short; the loader flags the mismatch
            for name, value in zip(names, row):
                cols[name].append(value)
    return cols


def export_matched_csv(result: MatchResult, path: str | Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = [
        "stock_id",
        "demand_id",
        "leftover_length",
        "stock_length",
        "stock_height",
        "stock_width",
        "stock_class",
    ]

    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fieldnames)
        w.writeheader()
        for r in build_matched_rows(result):
            w.writerow(
                {
                    "stock_id": r.stock_id,
                    "demand_id": r.demand_id,
                    "leftover_length": r.leftover_length,
                    "stock_length": r.stock_length,
                    "stock_height": r.stock_height,
                    "stock_width": r.stock_width,
                    "stock_class": r.stock_class,
                }
            )


def export_unmatched_csv(result: MatchResult, path: str | Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = [
        "stock_id",
        "demand_id",
        "leftover_length",
        "length",
        "height",
        "width",
        "strength_class",
    ]

    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fieldnames)
        w.writeheader()
        for r in build_unmatched_rows(result):
            w.writerow(
                {
                    "stock_id": r.placeholder_id,
                    "demand_id": r.demand_id,
                    "leftover_length": r.leftover_length,
                    "length": r.length,
                    "height": r.height,
                    "width": r.width,
                    "strength_class": r.strength_class,
                }
            )


def export_summary_csv(result: MatchResult, path: str | Path) -> None:
    """
    One-row-per-used-stock summary (useful for quick purchasing / offcut lists).
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = [
        "stock_id",
        "kind",
        "length",
        "width",
        "height",
        "strength_class",
        "num_demands",
        "consumed_length",
        "leftover_length",
        "utilization",
    ]

    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fieldnames)
        w.writeheader()
        for s in result.used_stock():
            w.writerow(
                {
                    "stock_id": s.id,
                    "kind": s.kind.value,
                    "length": s.original_length,
                    "width": s.width,
                    "height": s.height,
                    "strength_class": s.strength_class,
                    "num_demands": len(s.assigned_demand_ids),
                    "consumed_length": s.consumed_length,
                    "leftover_length": s.current_leftover_length,
                    "utilization": round(s.utilization(), 4),
                }
            )


def export_all(result: MatchResult, out_dir: str | Path, prefix: str = "plan") -> None:
    """
    Export matched, unmatched and per-stock summary tables into out_dir.
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    export_matched_csv(result, out_dir / f"{prefix}_matched.csv")
    export_unmatched_csv(result, out_dir / f"{prefix}_unmatched.csv")
    export_summary_csv(result, out_dir / f"{prefix}_summary.csv")
