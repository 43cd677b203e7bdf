# stock_reuse/run.py
# High-level convenience runner that ties together:
# - lenient record loading (issues reported, run continues)
# - assignment engine
# - validation
# - metrics + summary
# - optional CSV / JSON export
#
# Example:
#   from stock_reuse.run import run_matching
#   res = run_matching(demand_cols, stock_cols, params=make_reclaimed_params(), out_dir="out")

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .config import EngineParams
from .engine import run_engine
from .io_csv import export_all
from .loader import Columns, LoadResult, load_records
from .logger import Logger, get_logger
from .metrics import Metrics, compute_metrics
from .report import build_matched_rows, build_unmatched_rows
from .types import MatchResult, MatchRow, UnmatchedRow
from .utils import save_result_json, timer
from .validate import ValidationIssue, raise_on_errors, validate_result


@dataclass(frozen=True)
class RunResult:
    result: MatchResult
    matched: List[MatchRow]
    unmatched: List[UnmatchedRow]
    metrics: Metrics
    issues: List[ValidationIssue] = field(default_factory=list)
    seconds: float = 0.0


def run_records(
    records: LoadResult,
    *,
    params: Optional[EngineParams] = None,
    validate: bool = True,
    out_dir: Optional[str | Path] = None,
    export_prefix: str = "plan",
    json_path: Optional[str | Path] = None,
    logger: Optional[Logger] = None,
) -> RunResult:
    """
    Run the engine on already-loaded records end-to-end.
    Input issues from loading are carried into RunResult.issues.
    """
    log = logger or get_logger()

    with timer("match") as t:
        result = run_engine(
            records.demands,
            records.stock,
            records.market,
            params=params,
            logger=log,
        )

    issues = list(records.issues)
    if validate:
        checks = validate_result(result)
        raise_on_errors(checks)
        issues.extend(checks)

    res = RunResult(
        result=result,
        matched=build_matched_rows(result),
        unmatched=build_unmatched_rows(result),
        metrics=compute_metrics(result),
        issues=issues,
        seconds=t["seconds"],
    )

    if out_dir is not None:
        export_all(result, out_dir=Path(out_dir), prefix=export_prefix)
    if json_path is not None:
        save_result_json(result, json_path)

    return res


def run_matching(
    demand_columns: Optional[Columns],
    stock_columns: Optional[Columns],
    market_columns: Optional[Columns] = None,
    **kwargs,
) -> RunResult:
    """
    Load column sets leniently and run the engine end-to-end.
    Keyword arguments are passed to run_records().
    """
    records = load_records(demand_columns, stock_columns, market_columns, logger=kwargs.get("logger"))
    return run_records(records, **kwargs)
