import math
from dataclasses import replace

import pytest

from stock_reuse.config import make_extended_params, make_reclaimed_params
from stock_reuse.engine import build_tiers, run_engine
from stock_reuse.errors import InputError, InvariantViolation
from stock_reuse.logger import Logger
from stock_reuse.report import build_matched_rows, build_unmatched_rows
from stock_reuse.sample_data import (
    RandomJobConfig,
    generate_market_templates,
    generate_random_demands,
    generate_random_stock,
)
from stock_reuse.types import Demand, MatchRow, StockElement, StockKind
from stock_reuse.validate import raise_on_errors, validate_result

QUIET = Logger(enabled=False)


def D(id, length, w=50.0, h=50.0, cls=1.0):
    return Demand(id=id, length=length, width=w, height=h, strength_class=cls)


def S(id, length, w=50.0, h=50.0, cls=1.0):
    return StockElement.original(id, length, w, h, cls)


def T(id, length, w=50.0, h=50.0, cls=1.0):
    return StockElement.original(id, length, w, h, cls, StockKind.MARKET_TEMPLATE)


def tiers_by_demand(result):
    return {t.demand_id: t.tier for t in result.trace}


def test_single_demand_single_stock():
    res = run_engine([D(1, 1000)], [S(10, 1500)], params=make_reclaimed_params(), logger=QUIET)

    assert build_matched_rows(res) == [MatchRow(10, 1, 500.0, 1500.0, 50.0, 50.0, 1.0)]
    assert build_unmatched_rows(res) == []
    raise_on_errors(validate_result(res))


def test_grouping_packs_two_demands_on_one_piece():
    params = make_reclaimed_params(grouping=True, min_ratio=0.1, tolerance=0.05)
    res = run_engine([D(1, 600), D(2, 300)], [S(10, 1000)], params=params, logger=QUIET)

    s = res.stock[10]
    assert s.assigned_demand_ids == [1, 2]
    assert math.isclose(s.current_leftover_length, 100)
    assert tiers_by_demand(res) == {1: "original", 2: "original"}


def test_without_grouping_second_demand_falls_to_leftover_tier():
    res = run_engine([D(1, 600), D(2, 300)], [S(10, 1000)], params=make_reclaimed_params(), logger=QUIET)

    assert tiers_by_demand(res) == {1: "original", 2: "leftover"}
    second = [t for t in res.trace if t.demand_id == 2][0]
    assert second.stock_id != 10 and second.root_id == 10
    assert res.stock[10].assigned_demand_ids == [1, 2]
    assert math.isclose(res.stock[10].current_leftover_length, 100)

    no_recovery = replace(make_reclaimed_params(), recover_leftovers=False)
    res = run_engine([D(1, 600), D(2, 300)], [S(10, 1000)], params=no_recovery, logger=QUIET)
    assert [d.id for d in res.unassigned_demands()] == [2]


def test_leftover_recovery_books_on_parent():
    # demand 1 (larger volume) opens the piece; demand 2 only fits the 110 remnant
    demands = [D(1, 40), D(2, 105, w=30, h=30)]
    res = run_engine(demands, [S(10, 150)], params=make_reclaimed_params(threshold=100), logger=QUIET)

    assert tiers_by_demand(res) == {1: "original", 2: "leftover"}
    assert res.stock[10].assigned_demand_ids == [1, 2]
    assert math.isclose(res.stock[10].current_leftover_length, 5)
    assert all(s.kind != StockKind.LEFTOVER for s in res.stock.values())
    raise_on_errors(validate_result(res))


def test_remnant_below_threshold_is_not_recovered():
    demands = [D(1, 40), D(2, 105, w=30, h=30)]
    res = run_engine(demands, [S(10, 150)], params=make_reclaimed_params(threshold=120), logger=QUIET)
    assert [d.id for d in res.unassigned_demands()] == [2]


def test_class_shortfall_reclaimed_mode_reports_unmatched():
    res = run_engine([D(1, 1000, cls=3)], [S(10, 1500, cls=2)], params=make_reclaimed_params(), logger=QUIET)

    assert build_matched_rows(res) == []
    rows = build_unmatched_rows(res)
    assert len(rows) == 1
    assert rows[0].placeholder_id == 11 and rows[0].demand_id == 1
    assert rows[0].leftover_length == 0


def test_class_shortfall_extended_mode_synthesizes_custom_piece():
    params = make_extended_params(0.5, 0.1)
    res = run_engine([D(1, 1000, cls=3)], [S(10, 1500, cls=2)], params=params, logger=QUIET)

    assert not res.unassigned_demands()
    custom = [s for s in res.used_stock() if s.kind == StockKind.CUSTOM]
    assert len(custom) == 1
    c = custom[0]
    assert c.id > 10 and c.assigned_demand_ids == [1]
    assert math.isclose(c.original_length, 1050)
    assert math.isclose(c.width, 52.5) and c.strength_class == 3
    assert math.isclose(c.current_leftover_length, 50)
    assert tiers_by_demand(res) == {1: "synthesis"}
    raise_on_errors(validate_result(res))


def test_empty_input():
    res = run_engine([], [], params=make_reclaimed_params(), logger=QUIET)
    assert build_matched_rows(res) == []
    assert build_unmatched_rows(res) == []
    assert validate_result(res) == []


def test_market_template_is_cloned_not_consumed():
    params = make_extended_params(0.5, 0.1, grouping=False)
    res = run_engine([D(1, 2000), D(2, 2000)], [], [T(500, 6000)], params=params, logger=QUIET)

    # the second demand fills the instance bought for the first instead of buying another
    instances = [s for s in res.used_stock() if s.kind == StockKind.MARKET_INSTANCE]
    assert [(s.id, s.assigned_demand_ids) for s in instances] == [(501, [1, 2])]
    assert instances[0].original_length == 6000
    assert math.isclose(instances[0].current_leftover_length, 2000)
    assert res.minted_ids == [501]
    assert 500 not in res.stock
    assert tiers_by_demand(res) == {1: "market", 2: "market"}
    raise_on_errors(validate_result(res))


def test_market_buys_another_instance_only_when_full():
    params = make_extended_params(0.5, 0.1, grouping=False)
    demands = [D(1, 4000), D(2, 3000), D(3, 1500)]
    res = run_engine(demands, [], [T(500, 6000)], params=params, logger=QUIET)

    instances = [s for s in res.used_stock() if s.kind == StockKind.MARKET_INSTANCE]
    assert [(s.id, s.assigned_demand_ids) for s in instances] == [(501, [1, 3]), (502, [2])]
    assert math.isclose(instances[0].current_leftover_length, 500)
    assert math.isclose(instances[1].current_leftover_length, 3000)
    raise_on_errors(validate_result(res))


def test_market_with_grouping_fills_one_instance():
    params = make_extended_params(0.5, 0.1)
    res = run_engine([D(1, 2000), D(2, 2000), D(3, 2500)], [], [T(500, 6000)], params=params, logger=QUIET)

    # demand 3 leads (largest volume) and pulls demand 1 along; demand 2 no longer fits
    instances = [s for s in res.used_stock() if s.kind == StockKind.MARKET_INSTANCE]
    assert [(s.id, s.assigned_demand_ids) for s in instances] == [(501, [3, 1]), (502, [2])]
    assert math.isclose(instances[0].current_leftover_length, 1500)
    assert math.isclose(instances[1].current_leftover_length, 4000)
    raise_on_errors(validate_result(res))


def test_reclaimed_before_market():
    params = make_extended_params(0.5, 0.1)
    res = run_engine([D(1, 1000)], [S(10, 1200)], [T(500, 1000)], params=params, logger=QUIET)
    assert res.demand_to_stock() == {1: 10}


def test_class_levels_ascending_and_upgrade():
    params = make_extended_params(0.5, 0.1, grouping=False)
    demands = [D(1, 900, cls=2), D(2, 500, cls=1)]
    stock = [S(10, 1000, cls=2), S(11, 600, cls=1)]
    res = run_engine(demands, stock, params=params, logger=QUIET)

    levels = {t.demand_id: t.class_level for t in res.trace}
    assert levels == {2: 1.0, 1: 2.0}
    assert res.demand_to_stock() == {1: 10, 2: 11}

    # a lower-class demand may take higher-class stock
    res = run_engine([D(2, 500, cls=1)], [S(10, 600, cls=2)], params=params, logger=QUIET)
    assert res.demand_to_stock() == {2: 10}


def test_demand_priority_order_largest_volume_first():
    # both fit only the one piece; the larger-volume demand wins it
    res = run_engine(
        [D(1, 500), D(2, 800)],
        [S(10, 900)],
        params=replace(make_reclaimed_params(), recover_leftovers=False),
        logger=QUIET,
    )
    assert res.demand_to_stock() == {2: 10}


def test_inputs_are_not_mutated():
    demands = [D(1, 1000)]
    stock = [S(10, 1500)]
    run_engine(demands, stock, params=make_reclaimed_params(), logger=QUIET)
    assert not demands[0].assigned
    assert stock[0].current_leftover_length == 1500 and not stock[0].used_at_all


def test_duplicate_ids_rejected():
    with pytest.raises(InputError):
        run_engine([D(1, 10)], [S(10, 100), S(10, 200)], logger=QUIET)
    with pytest.raises(InputError):
        run_engine([D(1, 10), D(1, 20)], [S(10, 100)], logger=QUIET)


def test_tier_list_follows_configuration():
    assert [n for n, _ in build_tiers(make_reclaimed_params())] == ["original", "leftover"]
    assert [n for n, _ in build_tiers(make_extended_params(0.3, 0.1))] == [
        "original",
        "leftover",
        "market",
        "synthesis",
    ]


def _random_job():
    cfg = RandomJobConfig(seed=7, n_demands=60, n_stock=30)
    return generate_random_demands(cfg), generate_random_stock(cfg), generate_market_templates(cfg)


def test_random_job_extended_assigns_everything_and_validates():
    demands, stock, market = _random_job()
    res = run_engine(demands, stock, market, params=make_extended_params(0.3, 0.05), logger=QUIET)

    assert not res.unassigned_demands()
    raise_on_errors(validate_result(res))

    floor = max([s.id for s in stock] + [s.id for s in market] + [d.id for d in demands])
    assert all(i > floor for i in res.minted_ids)
    assert res.minted_ids == sorted(set(res.minted_ids))
    assert all(s.current_leftover_length >= 0 for s in res.stock.values())


def test_random_job_reclaimed_conservation():
    demands, stock, _ = _random_job()
    res = run_engine(demands, stock, params=make_reclaimed_params(), logger=QUIET)

    assert len(res.assigned_demands()) + len(res.unassigned_demands()) == len(demands)
    assert len(build_matched_rows(res)) == len(res.assigned_demands())
    assert len(build_unmatched_rows(res)) == len(res.unassigned_demands())
    raise_on_errors(validate_result(res))


def test_runs_are_deterministic():
    demands, stock, market = _random_job()
    params = make_extended_params(0.3, 0.05)
    a = run_engine(demands, stock, market, params=params, logger=QUIET)
    b = run_engine(demands, stock, market, params=params, logger=QUIET)
    assert a.trace == b.trace
    assert build_matched_rows(a) == build_matched_rows(b)


def test_validation_catches_double_booking():
    res = run_engine([D(1, 600), D(2, 300)], [S(10, 1000), S(11, 1000)], params=make_reclaimed_params(), logger=QUIET)
    res.stock[11].assigned_demand_ids.append(1)
    res.stock[11].used_at_all = True
    with pytest.raises(InvariantViolation):
        raise_on_errors(validate_result(res))
