# stock_reuse/tests_smoke.py
# Very small smoke tests you can run with:
#   python -m stock_reuse.tests_smoke
#
# These are not full unit tests, but they quickly tell you if
# the engine, validation and reporting are wired correctly.

from __future__ import annotations

from stock_reuse.config import make_extended_params, make_reclaimed_params
from stock_reuse.logger import Logger
from stock_reuse.run import run_matching
from stock_reuse.validate import raise_on_errors, validate_result

QUIET = Logger(enabled=False)

DEMANDS = {
    "id": [1, 2, 3, 4],
    "length": [2400, 1200, 800, 3000],
    "height": [145, 145, 95, 195],
    "width": [45, 45, 45, 45],
    "strength_class": ["C24", "C24", "C16", "C30"],
}

STOCK = {
    "id": [101, 102],
    "length": [4000, 1000],
    "height": [145, 95],
    "width": [45, 45],
    "strength_class": ["C24", "C24"],
}

MARKET = {
    "id": [900],
    "length": [6000],
    "height": [195],
    "width": [45],
    "strength_class": ["C30"],
}


def test_reclaimed_only() -> None:
    res = run_matching(DEMANDS, STOCK, params=make_reclaimed_params(), logger=QUIET)
    raise_on_errors(validate_result(res.result))

    assert len(res.matched) + len(res.unmatched) == 4
    # the C30 demand has no reclaimed stock strong enough
    assert 4 in [r.demand_id for r in res.unmatched]


def test_extended_assigns_all() -> None:
    res = run_matching(
        DEMANDS,
        STOCK,
        MARKET,
        params=make_extended_params(0.3, 0.1),
        logger=QUIET,
    )
    raise_on_errors(validate_result(res.result))

    assert res.unmatched == []
    assert res.metrics.num_assigned == 4
    assert 0.0 < res.metrics.reclaimed_volume_share < 1.0


def main() -> None:
    print("Running smoke tests...")
    test_reclaimed_only()
    test_extended_assigns_all()
    print("OK")


if __name__ == "__main__":
    main()
