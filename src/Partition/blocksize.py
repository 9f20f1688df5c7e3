"""Block size selection.

Smaller blocks let more land be discarded, but every block carries a halo
of HALO_WIDTH points on each side that is computed as well. The cost of a
block size is the number of ocean blocks times the haloed block area.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

import pandas as pd

from .datastructures import HALO_WIDTH
from .exceptions import ConfigurationError
from .topography import Topography

log = logging.getLogger(__name__)

# Relative distances from the best cost reported by near_optimal
OVERHEAD_STEPS = (0.005, 0.01, 0.015, 0.02, 0.025)


def divisors(value: int) -> List[int]:
    """All divisors of `value`, ascending."""
    if value <= 0:
        raise ConfigurationError(f"Cannot find divisors of {value}")
    return [i for i in range(1, value + 1) if value % i == 0]


def prime_factors(value: int) -> List[int]:
    """Prime factors of `value`, largest first.

    >>> prime_factors(60)
    [5, 3, 2, 2]
    """
    if value <= 1:
        raise ConfigurationError(f"Value must be >= 2, got {value}")

    factors = []
    d = 2
    while d * d <= value:
        while value % d == 0:
            factors.append(d)
            value //= d
        d += 1
    if value > 1:
        factors.append(value)
    return factors[::-1]


def haloed_area(block_width: int, block_height: int) -> int:
    return (block_width + 2 * HALO_WIDTH) * (block_height + 2 * HALO_WIDTH)


def block_cost(topography: Topography, block_width: int, block_height: int) -> int:
    """Points computed per step: ocean blocks times haloed block area."""
    return topography.active_blocks(block_width, block_height) * haloed_area(block_width, block_height)


def rank_block_sizes(topography: Topography, min_size: int = 1) -> pd.DataFrame:
    """Cost of every block size that divides the topography.

    Parameters
    ----------
    topography : Topography
        Depth field to subdivide.
    min_size : int
        Smallest block width/height considered.

    Returns
    -------
    pd.DataFrame
        Columns block_width, block_height, blocks, cost and overhead
        (relative to the best cost), sorted by cost.
    """
    rows = []
    for bw in divisors(topography.width):
        if bw < min_size:
            continue
        for bh in divisors(topography.height):
            if bh < min_size:
                continue
            blocks = topography.active_blocks(bw, bh)
            rows.append({
                "block_width": bw,
                "block_height": bh,
                "blocks": blocks,
                "cost": blocks * haloed_area(bw, bh),
            })

    if not rows:
        raise ConfigurationError(f"No block sizes >= {min_size} divide {topography.width}x{topography.height}")

    df = pd.DataFrame(rows).sort_values(["cost", "block_width", "block_height"], ignore_index=True)
    best = df["cost"].iloc[0]
    df["overhead"] = df["cost"] / best - 1.0 if best > 0 else 0.0

    log.debug(
        f"Best block size {df['block_width'].iloc[0]}x{df['block_height'].iloc[0]} => {best} work "
        f"out of {len(df)} candidates"
    )
    return df


def near_optimal(ranking: pd.DataFrame, steps: Sequence[float] = OVERHEAD_STEPS) -> pd.DataFrame:
    """Candidates within the largest step of the best cost.

    Adds a column ``within`` holding the smallest step (as a fraction) each
    candidate falls under.
    """
    df = ranking[ranking["overhead"] <= max(steps)].copy()
    df["within"] = [min(s for s in steps if o <= s) for o in df["overhead"]]
    return df
