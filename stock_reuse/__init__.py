# stock_reuse/__init__.py
"""
Stock-reuse cutting assignment.

Assigns demanded linear pieces (length, cross-section, minimum strength class)
to reclaimed stock first, then to recovered leftovers, purchasable market stock
and finally custom-sized pieces, with:
  - feasibility filtering (length, section, class, cross-section ratio)
  - weighted best-fit scoring (tight length > section match > class economy)
  - greedy multi-demand grouping on each opened piece
  - deterministic, priority-ordered passes
"""

from .types import (
    StockKind,
    Demand,
    StockElement,
    Assignment,
    TraceEntry,
    MatchRow,
    UnmatchedRow,
    MatchResult,
    group_by_class,
    demand_priority_order,
)

from .errors import InputError, InvariantViolation

from .config import (
    DEFAULTS,
    EngineParams,
    make_reclaimed_params,
    make_extended_params,
)

from .feasibility import feasible
from .scoring import score
from .selector import select_best
from .grouping import simulate_grouping
from .leftovers import derive_leftovers
from .engine import run_engine

from .loader import LoadResult, load_records, demands_from_columns, stock_from_columns
from .report import build_matched_rows, build_unmatched_rows
from .metrics import Metrics, compute_metrics
from .run import RunResult, run_matching, run_records

__all__ = [
    # types
    "StockKind",
    "Demand",
    "StockElement",
    "Assignment",
    "TraceEntry",
    "MatchRow",
    "UnmatchedRow",
    "MatchResult",
    "group_by_class",
    "demand_priority_order",
    # errors
    "InputError",
    "InvariantViolation",
    # config
    "DEFAULTS",
    "EngineParams",
    "make_reclaimed_params",
    "make_extended_params",
    # engine
    "feasible",
    "score",
    "select_best",
    "simulate_grouping",
    "derive_leftovers",
    "run_engine",
    # load / report
    "LoadResult",
    "load_records",
    "demands_from_columns",
    "stock_from_columns",
    "build_matched_rows",
    "build_unmatched_rows",
    "Metrics",
    "compute_metrics",
    "RunResult",
    "run_matching",
    "run_records",
]
