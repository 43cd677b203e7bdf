# stock_reuse/config.py
# Centralized defaults and configuration helpers.
# Keeps "magic numbers" (thresholds, ratios, score weights) in one place.

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

CEILING = "ceiling"
FLOOR = "floor"
CROSS_SECTION_MODES = (CEILING, FLOOR)


@dataclass(frozen=True)
class Defaults:
    # Remnants at or above this length are re-offered as Leftover stock
    minimum_significant_leftover_length: float = 100.0

    # Ratio-ceiling mode: stockArea / demandArea must not exceed this
    max_stock_to_demand_area_ratio: float = 10.0

    # Synthesized custom pieces are oversized by these fractions
    custom_length_buffer: float = 0.05
    custom_section_buffer: float = 0.05

    # Scorer weights (length fit >> cross-section match >> class over-provisioning)
    length_weight: float = 1000.0
    section_weight: float = 100.0
    class_weight: float = 10.0

    # Size tiers used by grouping (demandArea / stockArea)
    xlarge_ratio: float = 0.8
    large_ratio: float = 0.6
    medium_ratio: float = 0.4

    eps: float = 1e-6


DEFAULTS = Defaults()
EPS = DEFAULTS.eps


@dataclass(frozen=True)
class EngineParams:
    """
    Engine switches. Two presets reproduce the two known operating modes:
      - reclaimed: ratio ceiling, class as hard minimum, reclaimed stock only
      - extended: ratio floor, class upgrade sweeps, grouping, market + synthesis
    """
    cross_section_mode: str = CEILING
    max_stock_to_demand_area_ratio: float = DEFAULTS.max_stock_to_demand_area_ratio
    min_cross_section_ratio: Optional[float] = None
    cross_section_tolerance: Optional[float] = None
    minimum_significant_leftover_length: float = DEFAULTS.minimum_significant_leftover_length

    class_upgrade: bool = False
    grouping: bool = False
    recover_leftovers: bool = True
    use_market: bool = False
    synthesize: bool = False

    custom_length_buffer: float = DEFAULTS.custom_length_buffer
    custom_section_buffer: float = DEFAULTS.custom_section_buffer

    def __post_init__(self):
        if self.cross_section_mode not in CROSS_SECTION_MODES:
            raise ValueError(
                f"cross_section_mode must be one of {CROSS_SECTION_MODES}, got {self.cross_section_mode!r}"
            )
        if self.cross_section_mode == FLOOR and self.min_cross_section_ratio is None:
            raise ValueError("floor mode needs min_cross_section_ratio")
        if self.grouping and (self.min_cross_section_ratio is None or self.cross_section_tolerance is None):
            raise ValueError("grouping needs min_cross_section_ratio and cross_section_tolerance")
        if self.max_stock_to_demand_area_ratio <= 0:
            raise ValueError("max_stock_to_demand_area_ratio must be > 0")
        if self.minimum_significant_leftover_length < 0:
            raise ValueError("minimum_significant_leftover_length must be >= 0")
        if self.custom_length_buffer < 0 or self.custom_section_buffer < 0:
            raise ValueError("custom buffers must be >= 0")


def make_reclaimed_params(
    *,
    max_ratio: Optional[float] = None,
    threshold: Optional[float] = None,
    grouping: bool = False,
    min_ratio: Optional[float] = None,
    tolerance: Optional[float] = None,
) -> EngineParams:
    """
    Reclaimed-only mode: demands may legitimately end unmatched.
    """
    return EngineParams(
        cross_section_mode=CEILING,
        max_stock_to_demand_area_ratio=float(
            max_ratio if max_ratio is not None else DEFAULTS.max_stock_to_demand_area_ratio
        ),
        min_cross_section_ratio=min_ratio,
        cross_section_tolerance=tolerance,
        minimum_significant_leftover_length=float(
            threshold if threshold is not None else DEFAULTS.minimum_significant_leftover_length
        ),
        grouping=grouping,
    )


def make_extended_params(
    min_ratio: float,
    tolerance: float,
    *,
    threshold: Optional[float] = None,
    grouping: bool = True,
    use_market: bool = True,
    synthesize: bool = True,
) -> EngineParams:
    """
    Extended mode: class upgrade sweeps, ratio floor, market stock and custom synthesis.
    With synthesis on, every demand ends assigned.
    """
    return EngineParams(
        cross_section_mode=FLOOR,
        min_cross_section_ratio=float(min_ratio),
        cross_section_tolerance=float(tolerance),
        minimum_significant_leftover_length=float(
            threshold if threshold is not None else DEFAULTS.minimum_significant_leftover_length
        ),
        class_upgrade=True,
        grouping=grouping,
        use_market=use_market,
        synthesize=synthesize,
    )
