# stock_reuse/utils.py
# Small utilities used across the project:
# - timing context manager
# - simple JSON export for results (assignments + unmatched + metrics)
#
# Keeps dependencies minimal (stdlib only).

from __future__ import annotations

import json
import time
from contextlib import contextmanager
from dataclasses import asdict, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator

from .metrics import compute_metrics
from .report import build_matched_rows, build_unmatched_rows
from .types import MatchResult


@contextmanager
def timer(label: str = "timer") -> Iterator[Dict[str, float]]:
    """
    Usage:
      with timer("match") as t:
          ...
      print(t["seconds"])
    """
    t0 = time.perf_counter()
    payload: Dict[str, float] = {}
    try:
        yield payload
    finally:
        payload["seconds"] = time.perf_counter() - t0


def _to_jsonable(obj: Any) -> Any:
    """Convert dataclasses and other objects to JSON-serializable structures."""
    if is_dataclass(obj) and not isinstance(obj, type):
        return _to_jsonable(asdict(obj))
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, dict):
        return {str(k): _to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_to_jsonable(x) for x in obj]
    if isinstance(obj, Path):
        return str(obj)
    return obj


def result_to_dict(result: MatchResult) -> Dict[str, Any]:
    """
    Convert MatchResult to a JSON-friendly dict.
    Keeps only the report tables, the used stock and metrics.
    """
    m = compute_metrics(result)
    return {
        "matched": [_to_jsonable(r) for r in build_matched_rows(result)],
        "unmatched": [_to_jsonable(r) for r in build_unmatched_rows(result)],
        "stock": [
            {
                "id": s.id,
                "kind": s.kind.value,
                "length": s.original_length,
                "leftover_length": s.current_leftover_length,
                "width": s.width,
                "height": s.height,
                "strength_class": s.strength_class,
                "demand_ids": list(s.assigned_demand_ids),
            }
            for s in result.used_stock()
        ],
        "totals": {
            "num_demands": m.num_demands,
            "num_assigned": m.num_assigned,
            "num_unassigned": m.num_unassigned,
            "pieces_used": dict(m.pieces_used),
            "consumed_length": m.consumed_length,
            "leftover_length": m.leftover_length,
            "mean_utilization": m.mean_utilization,
            "reclaimed_volume_share": m.reclaimed_volume_share,
        },
    }


def save_result_json(result: MatchResult, path: str | Path, *, indent: int = 2) -> None:
    """Save result (assignments+unmatched+metrics) into JSON for debugging/integration."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = result_to_dict(result)
    with path.open("w", encoding="utf-8") as f:
        json.dump(_to_jsonable(payload), f, ensure_ascii=False, indent=indent)
