# stock_reuse/validate.py
# Validation utilities:
# - conservation: every demand assigned exactly once or reported unmatched
# - leftover bounds and length bookkeeping per master stock piece
# - attribution: demands only ever recorded on root records
# - minted id monotonicity
#
# Useful both during development and to sanity-check engine output.

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional

from .config import EPS
from .errors import InvariantViolation
from .types import MatchResult, StockKind


@dataclass(frozen=True)
class ValidationIssue:
    level: str   # "ERROR" or "WARN"
    message: str
    stock_id: Optional[int] = None
    demand_id: Optional[int] = None


def validate_conservation(result: MatchResult) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    seen: Dict[int, int] = {}
    for s in result.stock.values():
        for did in s.assigned_demand_ids:
            if did in seen:
                issues.append(
                    ValidationIssue(
                        level="ERROR",
                        message=f"Demand recorded on stock {seen[did]} and {s.id}",
                        stock_id=s.id,
                        demand_id=did,
                    )
                )
            seen[did] = s.id

    for d in result.demands:
        if d.assigned and d.id not in seen:
            issues.append(ValidationIssue(level="ERROR", message="Assigned demand missing from all stock", demand_id=d.id))
        if not d.assigned and d.id in seen:
            issues.append(
                ValidationIssue(
                    level="ERROR",
                    message="Unassigned demand recorded on stock",
                    stock_id=seen[d.id],
                    demand_id=d.id,
                )
            )

    n_assigned = len(result.assigned_demands())
    n_unassigned = len(result.unassigned_demands())
    if n_assigned + n_unassigned != len(result.demands):
        issues.append(
            ValidationIssue(
                level="ERROR",
                message=f"Conservation broken: {n_assigned} + {n_unassigned} != {len(result.demands)}",
            )
        )
    return issues


def validate_stock(result: MatchResult) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    lengths = {d.id: d.length for d in result.demands}

    for s in result.stock.values():
        if s.kind in (StockKind.LEFTOVER, StockKind.MARKET_TEMPLATE):
            issues.append(ValidationIssue(level="ERROR", message=f"{s.kind.value} stored as master record", stock_id=s.id))
        if not s.is_root:
            issues.append(ValidationIssue(level="ERROR", message=f"Master record has parent {s.parent_id}", stock_id=s.id))
        if s.current_leftover_length < -EPS:
            issues.append(ValidationIssue(level="ERROR", message=f"Negative leftover {s.current_leftover_length}", stock_id=s.id))
        if s.current_leftover_length > s.original_length + EPS:
            issues.append(ValidationIssue(level="ERROR", message="Leftover exceeds original length", stock_id=s.id))
        if s.used_at_all != bool(s.assigned_demand_ids):
            issues.append(ValidationIssue(level="ERROR", message="used_at_all out of sync with assignments", stock_id=s.id))

        consumed = sum(lengths.get(did, 0.0) for did in s.assigned_demand_ids)
        if not math.isclose(s.original_length - consumed, s.current_leftover_length, rel_tol=1e-9, abs_tol=EPS):
            issues.append(
                ValidationIssue(
                    level="ERROR",
                    message=(
                        f"Length bookkeeping off: {s.original_length} - {consumed} != {s.current_leftover_length}"
                    ),
                    stock_id=s.id,
                )
            )
    return issues


def validate_ids(result: MatchResult) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    floor = max(result.input_stock_ids, default=0)
    prev = None
    for nid in result.minted_ids:
        if nid <= floor:
            issues.append(ValidationIssue(level="ERROR", message=f"Minted id {nid} <= input id {floor}", stock_id=nid))
        if prev is not None and nid <= prev:
            issues.append(ValidationIssue(level="ERROR", message=f"Minted id {nid} not increasing", stock_id=nid))
        prev = nid
    return issues


def validate_attribution(result: MatchResult) -> List[ValidationIssue]:
    """Every traced placement must be booked on the root it names."""
    issues: List[ValidationIssue] = []
    for t in result.trace:
        root = result.stock.get(t.root_id)
        if root is None or t.demand_id not in root.assigned_demand_ids:
            issues.append(
                ValidationIssue(
                    level="ERROR",
                    message=f"{t.tier} placement not recorded on root {t.root_id}",
                    stock_id=t.stock_id,
                    demand_id=t.demand_id,
                )
            )
        elif t.tier == "leftover" and root.kind != StockKind.ORIGINAL:
            issues.append(
                ValidationIssue(
                    level="ERROR",
                    message=f"Leftover placement booked on {root.kind.value}",
                    stock_id=t.root_id,
                    demand_id=t.demand_id,
                )
            )
    return issues


def validate_result(result: MatchResult) -> List[ValidationIssue]:
    """
    Validate a full engine result.
    Returns a list of issues (empty if OK).
    """
    issues: List[ValidationIssue] = []
    issues.extend(validate_conservation(result))
    issues.extend(validate_stock(result))
    issues.extend(validate_ids(result))
    issues.extend(validate_attribution(result))

    if result.demands and not result.assigned_demands():
        issues.append(ValidationIssue(level="WARN", message="No demand could be assigned."))

    return issues


def raise_on_errors(issues: List[ValidationIssue]) -> None:
    errs = [i for i in issues if i.level.upper() == "ERROR"]
    if errs:
        msg = "\n".join(
            f"[{e.level}] stock={e.stock_id} demand={e.demand_id} :: {e.message}" for e in errs
        )
        raise InvariantViolation("Validation failed:\n" + msg)
