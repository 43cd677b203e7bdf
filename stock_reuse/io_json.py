# stock_reuse/io_json.py
# Load a job definition from JSON into column sets + engine settings.
#
# Expected JSON shape:
# {
#   "demands": [{"id": 1, "length": 1000, "width": 50, "height": 50, "class": 1}, ...],
#   "stock":   [{"id": 10, "length": 1500, "width": 50, "height": 50, "class": 1}, ...],
#   "market":  [...],                     (optional)
#   "settings": {"mode": "reclaimed", "threshold": 100, "max_ratio": 10,
#                "min_ratio": 0.3, "tolerance": 0.1, "grouping": false}
# }

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import EngineParams, make_extended_params, make_reclaimed_params
from .loader import LoadResult, load_records
from .logger import Logger


@dataclass
class JsonJob:
    records: LoadResult
    params: EngineParams
    settings: Dict[str, Any] = field(default_factory=dict)


def rows_to_columns(rows: List[Dict[str, Any]]) -> Dict[str, List[Any]]:
    """Row objects -> column set. Missing keys become None so the loader can flag them."""
    names: List[str] = []
    for r in rows:
        for k in r:
            if k not in names:
                names.append(k)
    return {n: [r.get(n) for r in rows] for n in names}


def params_from_settings(settings: Dict[str, Any]) -> EngineParams:
    mode = str(settings.get("mode", "reclaimed")).lower()
    threshold = settings.get("threshold")
    if mode == "extended":
        if settings.get("min_ratio") is None or settings.get("tolerance") is None:
            raise ValueError("extended mode needs settings.min_ratio and settings.tolerance")
        return make_extended_params(
            float(settings["min_ratio"]),
            float(settings["tolerance"]),
            threshold=threshold,
            grouping=bool(settings.get("grouping", True)),
        )
    if mode != "reclaimed":
        raise ValueError(f"Unknown mode: {mode!r} (expected 'reclaimed' or 'extended')")
    return make_reclaimed_params(
        max_ratio=settings.get("max_ratio"),
        threshold=threshold,
        grouping=bool(settings.get("grouping", False)),
        min_ratio=settings.get("min_ratio"),
        tolerance=settings.get("tolerance"),
    )


def load_job_json(path: str | Path, *, logger: Optional[Logger] = None) -> JsonJob:
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)

    settings = data.get("settings") or {}
    records = load_records(
        rows_to_columns(data.get("demands") or []),
        rows_to_columns(data.get("stock") or []),
        rows_to_columns(data.get("market") or []) if data.get("market") is not None else None,
        logger=logger,
    )
    return JsonJob(records=records, params=params_from_settings(settings), settings=settings)
