"""
Jukes-Cantor correction of mismatch fractions, with defined values for the degenerate and saturated cases.
"""
from math import log, inf
from typing import Final

from maf2dist.engines.compare import ComparisonStat


# Constants ------------------------------------------------------------------------------------------------------------
SATURATION: Final = 0.75
"""Mismatch fraction at and above which the Jukes-Cantor distance is undefined."""
SATURATED: Final = inf
"""Default distance reported for saturated pairs."""
DEGENERATE: Final = 0.0
"""Distance reported for pairs without a single gap-free compared position."""


# Functions ------------------------------------------------------------------------------------------------------------
def jukes_cantor(raw: float, saturated: float = SATURATED) -> float:
    """
    Applies the Jukes-Cantor correction to a mismatch fraction.

    Args:
        raw: Fraction of mismatching positions among compared positions, in [0, 1].
        saturated: Value returned when the correction is undefined (``raw >= 0.75``).

    Returns:
        ``-0.75 * ln(1 - 4/3 * raw)``, clamped to 0.0 when not positive.

    Raises:
        ValueError: If `raw` is outside [0, 1] or NaN.

    Examples:
        >>> round(jukes_cantor(0.25), 4)
        0.3041
        >>> jukes_cantor(0.8)
        inf
    """
    if not 0.0 <= raw <= 1.0: raise ValueError(f'Mismatch fraction must be within [0, 1], got {raw}')
    if raw >= SATURATION: return saturated
    argument = 1.0 - (4.0 / 3.0) * raw
    if argument <= 0.0: return saturated
    dist = -0.75 * log(argument)
    return dist if dist > 0.0 else 0.0


def distance(stat: ComparisonStat, saturated: float = SATURATED) -> float:
    """
    Corrected distance of an accumulated statistic.

    Args:
        stat: The pair's ComparisonStat.
        saturated: Value returned for saturated pairs.

    Returns:
        The Jukes-Cantor distance; 0.0 if nothing was compared.
    """
    if not stat.compared: return DEGENERATE
    return jukes_cantor(stat.mismatches / stat.compared, saturated)


def is_saturated(stat: ComparisonStat) -> bool:
    """Whether the pair's distance falls back to the saturation value."""
    return bool(stat.compared) and stat.mismatches / stat.compared >= SATURATION
