import math

from stock_reuse.config import make_reclaimed_params
from stock_reuse.grouping import simulate_grouping, size_tier
from stock_reuse.leftovers import derive_leftovers
from stock_reuse.selector import select_best
from stock_reuse.types import Demand, StockElement, StockKind


def D(id, length, w=50.0, h=50.0, cls=1.0):
    return Demand(id=id, length=length, width=w, height=h, strength_class=cls)


def S(id, length, w=50.0, h=50.0, cls=1.0):
    return StockElement.original(id, length, w, h, cls)


PARAMS = make_reclaimed_params()
GROUPING = make_reclaimed_params(grouping=True, min_ratio=0.2, tolerance=0.1)


def test_select_best_picks_tightest_feasible():
    pool = [S(10, 3000), S(11, 1200), S(12, 900)]
    a = select_best(D(1, 1000), pool, PARAMS)
    assert a is not None
    assert a.stock.id == 11
    assert a.demand_ids == [1]
    assert math.isclose(a.remaining_length, 200)


def test_select_best_none_when_nothing_fits():
    assert select_best(D(1, 1000), [S(10, 900), S(11, 2000, cls=0)], PARAMS) is None
    assert select_best(D(1, 1000), [], PARAMS) is None


def test_select_best_ties_keep_input_order_and_pool_untouched():
    pool = [S(10, 1500), S(11, 1500)]
    a = select_best(D(1, 1000), pool, PARAMS)
    assert a.stock.id == 10
    assert all(s.current_leftover_length == 1500 and not s.used_at_all for s in pool)


def test_grouping_lead_compatible_tier_goes_first():
    stock = S(10, 1000, w=100, h=100)
    lead = D(1, 400, w=100, h=100)
    small_long = D(2, 500, w=50, h=50)  # ratio 0.25 -> small tier
    same_section = D(3, 300, w=100, h=100)  # ratio 1.0 -> lead tier

    a = simulate_grouping(lead, stock, [lead, small_long, same_section], 0.2, 0.1, GROUPING)
    assert a.demand_ids == [1, 3]
    assert math.isclose(a.remaining_length, 300)
    assert math.isclose(a.utilization, 0.7)


def test_grouping_longest_first_and_stops_when_full():
    stock = S(10, 1000)
    lead = D(1, 100)
    others = [D(2, 300), D(3, 500), D(4, 400), D(5, 50)]

    a = simulate_grouping(lead, stock, [lead] + others, 0.2, 0.1, GROUPING)
    assert a.demand_ids == [1, 3, 4]
    assert math.isclose(a.remaining_length, 0.0)
    assert math.isclose(a.utilization, 1.0)


def test_grouping_skips_assigned_and_below_min_ratio():
    stock = S(10, 1000, w=100, h=100)
    lead = D(1, 200, w=100, h=100)
    done = D(2, 300, w=100, h=100)
    done.assigned = True
    thin = D(3, 300, w=20, h=20)  # ratio 0.04 < 0.2

    a = simulate_grouping(lead, stock, [lead, done, thin], 0.2, 0.1, GROUPING)
    assert a.demand_ids == [1]


def test_grouping_full_lead_returns_only_lead():
    stock = S(10, 1000)
    a = simulate_grouping(D(1, 1000), stock, [D(2, 10)], 0.2, 0.1, GROUPING)
    assert a.demand_ids == [1]
    assert a.remaining_length == 0


def test_grouping_draws_followers_up_to_class_level():
    stock = S(10, 1000, cls=2)
    lead = D(1, 400, cls=1)
    stronger = D(2, 300, cls=2)
    weaker = D(3, 200, cls=1)
    demands = [lead, stronger, weaker]

    a = simulate_grouping(lead, stock, demands, 0.2, 0.1, GROUPING, class_level=1.0)
    assert a.demand_ids == [1, 3]

    a = simulate_grouping(lead, stock, demands, 0.2, 0.1, GROUPING)
    assert a.demand_ids == [1, 2, 3]


def test_size_tiers():
    assert size_tier(0.9) == "xlarge"
    assert size_tier(0.8) == "xlarge"
    assert size_tier(0.6) == "large"
    assert size_tier(0.45) == "medium"
    assert size_tier(0.1) == "small"


def test_derive_leftovers_significant_remnant():
    used = S(10, 150)
    used.current_leftover_length = 110.0
    used.used_at_all = True
    used.assigned_demand_ids.append(1)
    unused = S(11, 5000)

    ids = iter(range(100, 200))
    views = derive_leftovers([used, unused], 100, lambda: next(ids))

    assert len(views) == 1
    v = views[0]
    assert v.kind == StockKind.LEFTOVER
    assert v.parent_id == 10 and v.id == 100
    assert v.current_leftover_length == 110.0
    assert not v.used_at_all and v.assigned_demand_ids == []
    # master untouched
    assert used.current_leftover_length == 110.0 and used.assigned_demand_ids == [1]

    assert derive_leftovers([used], 120, lambda: next(ids)) == []
