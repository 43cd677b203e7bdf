import math

import pytest

from stock_reuse.config import EngineParams, make_extended_params, make_reclaimed_params
from stock_reuse.feasibility import cross_section_ok, feasible
from stock_reuse.scoring import score, section_match
from stock_reuse.types import Demand, StockElement


def D(id, length, w=50.0, h=50.0, cls=1.0):
    return Demand(id=id, length=length, width=w, height=h, strength_class=cls)


def S(id, length, w=50.0, h=50.0, cls=1.0):
    return StockElement.original(id, length, w, h, cls)


RECLAIMED = make_reclaimed_params()


def test_feasible_basic_fit():
    assert feasible(D(1, 1000), S(10, 1500), RECLAIMED)
    assert feasible(D(1, 1500), S(10, 1500), RECLAIMED)


def test_feasible_rejects_short_narrow_low_and_weak():
    assert not feasible(D(1, 1600), S(10, 1500), RECLAIMED)
    assert not feasible(D(1, 1000, w=60), S(10, 1500), RECLAIMED)
    assert not feasible(D(1, 1000, h=60), S(10, 1500), RECLAIMED)
    # class is a minimum: stock may exceed, never fall short
    assert not feasible(D(1, 1000, cls=3), S(10, 1500, cls=2), RECLAIMED)
    assert feasible(D(1, 1000, cls=2), S(10, 1500, cls=3), RECLAIMED)


def test_ratio_ceiling_caps_oversized_stock():
    big = S(10, 2000, w=100, h=100)
    assert not cross_section_ok(D(1, 500, w=10, h=10), big, RECLAIMED)  # 100x
    assert cross_section_ok(D(1, 500, w=40, h=40), big, RECLAIMED)  # 6.25x

    loose = make_reclaimed_params(max_ratio=200)
    assert cross_section_ok(D(1, 500, w=10, h=10), big, loose)


def test_ratio_floor_requires_meaningful_occupancy():
    params = EngineParams(cross_section_mode="floor", min_cross_section_ratio=0.5)
    big = S(10, 2000, w=100, h=100)
    assert not feasible(D(1, 500, w=50, h=50), big, params)  # 0.25
    assert feasible(D(1, 500, w=80, h=80), big, params)  # 0.64


def test_near_zero_demand_area_only_matches_near_zero_stock():
    tiny = D(1, 100, w=1e-4, h=1e-4)
    assert not feasible(tiny, S(10, 500), RECLAIMED)
    assert feasible(tiny, S(11, 500, w=1e-4, h=1e-4), RECLAIMED)


def test_score_prefers_tight_length_then_section_then_class():
    d = D(1, 1000)
    assert score(d, S(10, 1100)) > score(d, S(11, 1500))
    assert score(d, S(10, 1500, w=50, h=50)) > score(d, S(11, 1500, w=60, h=60))
    assert score(d, S(10, 1500, cls=1)) > score(d, S(11, 1500, cls=3))
    # length dominates section
    assert score(d, S(10, 1100, w=100, h=100)) > score(d, S(11, 1101))


def test_section_match_is_inverse_ratio():
    assert math.isclose(section_match(D(1, 10, w=50, h=50), S(10, 10, w=100, h=100)), 0.25)
    assert section_match(D(1, 10, w=1e-4, h=1e-4), S(10, 10)) == 0.0


def test_engine_params_validation():
    with pytest.raises(ValueError):
        EngineParams(cross_section_mode="floor")
    with pytest.raises(ValueError):
        EngineParams(grouping=True, min_cross_section_ratio=0.3)
    with pytest.raises(ValueError):
        EngineParams(cross_section_mode="middle")

    p = make_extended_params(0.3, 0.1)
    assert p.class_upgrade and p.grouping and p.use_market and p.synthesize
    assert p.cross_section_mode == "floor"
