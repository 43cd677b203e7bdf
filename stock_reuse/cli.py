# stock_reuse/cli.py
# Command line runner:
# - CSV input (demands, reclaimed stock, optional market stock) or a JSON job
# - optional CSV export folder and JSON dump
# - prints the cutting plan summary (matched / unmatched / utilization)
#
# Run:
#   python -m stock_reuse --demands demands.csv --stock stock.csv --out out/
#   python -m stock_reuse --demands d.csv --stock s.csv --market m.csv --mode extended --min_ratio 0.3 --tolerance 0.1
#   python -m stock_reuse --job job.json
#
# CSV format (header required):
#   id,length,height,width,strength_class

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from .config import DEFAULTS, EngineParams, make_extended_params, make_reclaimed_params
from .io_csv import read_columns_csv
from .io_json import load_job_json
from .loader import load_records
from .logger import get_logger, set_enabled, set_verbose
from .run import run_records


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Assign demanded pieces to reclaimed (and market) stock")
    p.add_argument("--demands", type=str, default="", help="Path to demands CSV")
    p.add_argument("--stock", type=str, default="", help="Path to reclaimed stock CSV")
    p.add_argument("--market", type=str, default="", help="Path to market stock CSV (extended mode)")
    p.add_argument("--job", type=str, default="", help="Path to job JSON (demands/stock/market/settings)")

    p.add_argument("--mode", type=str, default="reclaimed", choices=["reclaimed", "extended"], help="Engine mode")
    p.add_argument(
        "--threshold",
        type=float,
        default=DEFAULTS.minimum_significant_leftover_length,
        help="Minimum leftover length re-offered as stock",
    )
    p.add_argument(
        "--max_ratio",
        type=float,
        default=DEFAULTS.max_stock_to_demand_area_ratio,
        help="Reclaimed: max stockArea/demandArea",
    )
    p.add_argument("--min_ratio", type=float, default=None, help="Min demandArea/stockArea (extended, grouping)")
    p.add_argument("--tolerance", type=float, default=None, help="Lead-compatible section ratio band (grouping)")
    p.add_argument("--grouping", action="store_true", help="Reclaimed: pack several demands per opened piece")
    p.add_argument("--no_grouping", action="store_true", help="Extended: one demand per opened piece")
    p.add_argument("--no_leftovers", action="store_true", help="Skip leftover recovery")
    p.add_argument("--no_synthesis", action="store_true", help="Extended: leave demands unmatched instead of custom pieces")

    p.add_argument("--out", type=str, default="", help="Output directory for CSV exports (optional)")
    p.add_argument("--prefix", type=str, default="plan", help="Export filename prefix")
    p.add_argument("--json", type=str, default="", help="Save result JSON (optional)")
    p.add_argument("--quiet", action="store_true", help="Silence engine logging")
    p.add_argument("--verbose", action="store_true", help="Log every committed placement")
    return p


def params_from_args(args: argparse.Namespace) -> EngineParams:
    if args.mode == "extended":
        if args.min_ratio is None or args.tolerance is None:
            raise SystemExit("--mode extended needs --min_ratio and --tolerance")
        params = make_extended_params(
            args.min_ratio,
            args.tolerance,
            threshold=args.threshold,
            grouping=not args.no_grouping,
            synthesize=not args.no_synthesis,
        )
    else:
        params = make_reclaimed_params(
            max_ratio=args.max_ratio,
            threshold=args.threshold,
            grouping=bool(args.grouping),
            min_ratio=args.min_ratio,
            tolerance=args.tolerance,
        )
    if args.no_leftovers:
        params = replace(params, recover_leftovers=False)
    return params


def main(argv: Optional[List[str]] = None) -> None:
    args = build_argparser().parse_args(argv)

    set_enabled(not args.quiet)
    set_verbose(bool(args.verbose))
    log = get_logger()

    if args.job:
        job_path = Path(args.job)
        if not job_path.exists():
            raise SystemExit(f"Job file not found: {job_path}")
        try:
            job = load_job_json(job_path, logger=log)
        except ValueError as e:
            raise SystemExit(f"Invalid job {job_path}: {e}")
        records, params = job.records, job.params
    else:
        if not args.demands or not args.stock:
            raise SystemExit("Need --job, or --demands and --stock")
        try:
            params = params_from_args(args)
        except ValueError as e:
            raise SystemExit(str(e))
        records = load_records(
            read_columns_csv(Path(args.demands)),
            read_columns_csv(Path(args.stock)),
            read_columns_csv(Path(args.market)) if args.market else None,
            logger=log,
        )

    if records.market and not params.use_market:
        log.warn(f"{len(records.market)} market piece(s) ignored; market stock is only used in extended mode")

    res = run_records(
        records,
        params=params,
        validate=True,
        out_dir=args.out.strip() or None,
        export_prefix=args.prefix,
        json_path=args.json.strip() or None,
        logger=log,
    )

    m = res.metrics
    print(f"Demands: {m.num_demands}  assigned: {m.num_assigned}  unmatched: {m.num_unassigned}")
    for kind, n in sorted(m.pieces_used.items()):
        print(f"  {kind} pieces used: {n}")
    print(f"Consumed length: {m.consumed_length:,.1f}  leftover on used pieces: {m.leftover_length:,.1f}")
    print(f"Mean utilization: {m.mean_utilization:.1%}  reclaimed volume share: {m.reclaimed_volume_share:.1%}")

    for r in res.matched:
        print(f"- stock {r.stock_id}: demand {r.demand_id}, leftover {r.leftover_length:g}")
    for r in res.unmatched:
        print(f"- UNMATCHED demand {r.demand_id} (placeholder {r.placeholder_id})")

    input_issues = [i for i in res.issues if i.level.upper() == "ERROR"]
    if input_issues:
        print(f"Input issues: {len(input_issues)} (see warnings above)")


if __name__ == "__main__":
    main()
