"""
Utility functions shared by the scoring engine and exporters.

Provides helper functions for:
- Averaging score lists with the "no data is 0" convention
- Score to colour / heat band conversion
- Rounding the way presentation code expects
"""

import math
from typing import Iterable, Union

from .analysis_outputs import HeatBand, ScoreBand


Number = Union[int, float]


def average(values: Iterable[Number]) -> float:
    """Arithmetic mean, 0.0 for an empty input (callers read 0 as "no data")."""
    values = list(values)
    if not values:
        return 0.0
    return sum(values) / len(values)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def score_to_band(score: float) -> ScoreBand:
    """Convert an average score to its display colour band."""
    if score >= 3.2:
        return ScoreBand.GREEN
    elif score >= 2.5:
        return ScoreBand.YELLOW
    elif score >= 1.8:
        return ScoreBand.ORANGE
    else:
        return ScoreBand.RED


def score_to_heat_band(score: float) -> HeatBand:
    """Convert a sub-category average to its heat-map band."""
    if score >= 3.5:
        return HeatBand.EXCELLENT
    elif score >= 3.0:
        return HeatBand.GOOD
    elif score >= 2.5:
        return HeatBand.MEDIUM
    elif score >= 2.0:
        return HeatBand.HIGH_CHALLENGE
    else:
        return HeatBand.CRITICAL_CHALLENGE
