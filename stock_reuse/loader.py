# stock_reuse/loader.py
# Record loader: parallel column sets -> typed Demand / StockElement records.
#
# Column set = mapping of column name -> sequence of values, all the same length:
#   id, length, height, width, strength_class   ("class" is accepted as an alias)
#
# Strict helpers raise InputError. load_records() is the lenient path used by the
# runner: it reports issues, logs them and continues with empty/partial data.

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .errors import InputError
from .logger import Logger, get_logger
from .types import Demand, StockElement, StockKind
from .validate import ValidationIssue

COLUMNS = ("id", "length", "height", "width", "strength_class")
ALIASES = {"class": "strength_class", "strengthclass": "strength_class", "grade": "strength_class"}

_NUM_RE = re.compile(r"(\d+(?:\.\d+)?)")

Columns = Mapping[str, Sequence[Any]]


def parse_strength_class(v: Any) -> float:
    """
    Numeric class, or a grade label with a numeric part:
      '3' -> 3.0, 'C24' -> 24.0, 'GL28h' -> 28.0
    """
    s = str(v).strip()
    try:
        x = float(s)
    except ValueError:
        x = None
    if x is not None:
        if not math.isfinite(x):
            raise InputError(f"Invalid strength class: {v!r} (not finite)")
        return x
    m = _NUM_RE.search(s)
    if not m:
        raise InputError(f"Invalid strength class: {v!r}")
    return float(m.group(1))


def _parse_id(v: Any) -> int:
    x = _parse_real(v, "id")
    try:
        return int(x)
    except (ValueError, OverflowError) as e:
        raise InputError(f"Invalid id: {v!r}") from e


def _parse_real(v: Any, name: str) -> float:
    try:
        x = float(str(v).strip())
    except ValueError as e:
        raise InputError(f"Invalid {name}: {v!r}") from e
    if not math.isfinite(x):
        raise InputError(f"Invalid {name}: {v!r} (not finite)")
    return x


def normalize_columns(columns: Columns) -> Dict[str, List[Any]]:
    """Lowercase names, resolve aliases, check presence and equal lengths."""
    out: Dict[str, List[Any]] = {}
    for k, vals in columns.items():
        name = str(k).strip().lower()
        out[ALIASES.get(name, name)] = list(vals)

    if not out or all(len(v) == 0 for v in out.values()):
        return {c: [] for c in COLUMNS}

    missing = [c for c in COLUMNS if c not in out]
    if missing:
        raise InputError(f"Missing columns: {missing}")

    lengths = {c: len(out[c]) for c in COLUMNS}
    if len(set(lengths.values())) != 1:
        raise InputError(f"Column length mismatch: {lengths}")
    return {c: out[c] for c in COLUMNS}


def _rows(cols: Dict[str, List[Any]]):
    n = len(cols["id"])
    for i in range(n):
        yield i, {c: cols[c][i] for c in COLUMNS}


def _demand_from_row(row: Dict[str, Any]) -> Demand:
    try:
        return Demand(
            id=_parse_id(row["id"]),
            length=_parse_real(row["length"], "length"),
            width=_parse_real(row["width"], "width"),
            height=_parse_real(row["height"], "height"),
            strength_class=parse_strength_class(row["strength_class"]),
        )
    except ValueError as e:
        if isinstance(e, InputError):
            raise
        raise InputError(str(e)) from e


def _stock_from_row(row: Dict[str, Any], kind: StockKind) -> StockElement:
    length = _parse_real(row["length"], "length")
    width = _parse_real(row["width"], "width")
    height = _parse_real(row["height"], "height")
    if length <= 0 or width <= 0 or height <= 0:
        raise InputError(f"Invalid stock size for {row['id']}: {length}x{width}x{height}")
    return StockElement.original(
        id=_parse_id(row["id"]),
        length=length,
        width=width,
        height=height,
        strength_class=parse_strength_class(row["strength_class"]),
        kind=kind,
    )


def demands_from_columns(columns: Columns) -> List[Demand]:
    cols = normalize_columns(columns)
    return [_demand_from_row(row) for _, row in _rows(cols)]


def stock_from_columns(columns: Columns, kind: StockKind = StockKind.ORIGINAL) -> List[StockElement]:
    cols = normalize_columns(columns)
    out: List[StockElement] = []
    seen = set()
    for _, row in _rows(cols):
        s = _stock_from_row(row, kind)
        if s.id in seen:
            raise InputError(f"Duplicate stock id: {s.id}")
        seen.add(s.id)
        out.append(s)
    return out


# ----------------------------
# Lenient path
# ----------------------------

@dataclass
class LoadResult:
    demands: List[Demand] = field(default_factory=list)
    stock: List[StockElement] = field(default_factory=list)
    market: List[StockElement] = field(default_factory=list)
    issues: List[ValidationIssue] = field(default_factory=list)


def _issue(issues: List[ValidationIssue], log: Logger, pool: str, msg: str) -> None:
    issue = ValidationIssue(level="ERROR", message=f"{pool}: {msg}")
    issues.append(issue)
    log.warn(issue.message)


def _load_set(columns: Optional[Columns], pool: str, issues: List[ValidationIssue], log: Logger) -> Dict[str, List[Any]]:
    if not columns:
        return {c: [] for c in COLUMNS}
    try:
        return normalize_columns(columns)
    except InputError as e:
        _issue(issues, log, pool, f"{e}; set ignored")
        return {c: [] for c in COLUMNS}


def load_records(
    demand_columns: Optional[Columns],
    stock_columns: Optional[Columns],
    market_columns: Optional[Columns] = None,
    *,
    logger: Optional[Logger] = None,
) -> LoadResult:
    """
    Convert all column sets, never raising on data problems:
      - column length mismatch / missing column: that set becomes empty
      - bad row value: row skipped
      - duplicate stock id within a pool: first occurrence kept
    """
    log = logger or get_logger()
    res = LoadResult()

    cols = _load_set(demand_columns, "demands", res.issues, log)
    seen_demands = set()
    for i, row in _rows(cols):
        try:
            d = _demand_from_row(row)
        except InputError as e:
            _issue(res.issues, log, "demands", f"row {i}: {e}; row skipped")
            continue
        if d.id in seen_demands:
            _issue(res.issues, log, "demands", f"duplicate id {d.id}; row {i} skipped")
            continue
        seen_demands.add(d.id)
        res.demands.append(d)

    for pool, columns, kind, target in (
        ("stock", stock_columns, StockKind.ORIGINAL, res.stock),
        ("market", market_columns, StockKind.MARKET_TEMPLATE, res.market),
    ):
        cols = _load_set(columns, pool, res.issues, log)
        seen = set()
        for i, row in _rows(cols):
            try:
                s = _stock_from_row(row, kind)
            except InputError as e:
                _issue(res.issues, log, pool, f"row {i}: {e}; row skipped")
                continue
            if s.id in seen:
                _issue(res.issues, log, pool, f"duplicate stock id {s.id}; row {i} skipped")
                continue
            seen.add(s.id)
            target.append(s)

    return res
