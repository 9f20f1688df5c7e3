"""Test problem setup.

Provides the small carved-coastline topography used to exercise the
partitioning engine end to end.
"""

import numpy as np

from .topography import Topography

# Land points of the 12x10 test topography as (row, column) in drawing order,
# row 0 drawn at the top
TEST_LAND_POINTS = (
    (0, 3), (0, 4), (0, 10), (0, 11),
    (1, 10), (1, 11),
    (2, 11),
    (7, 0), (7, 9), (7, 10),
    (8, 0), (8, 1), (8, 10),
    (9, 0), (9, 1), (9, 2), (9, 3), (9, 4), (9, 10), (9, 11),
)

TEST_WIDTH = 12
TEST_HEIGHT = 10


def create_test_pattern() -> np.ndarray:
    """Drawn 10x12 coastline pattern (1 = ocean, 0 = land), top row first."""
    pattern = np.ones((TEST_HEIGHT, TEST_WIDTH), dtype=np.int64)
    rows, cols = zip(*TEST_LAND_POINTS)
    pattern[list(rows), list(cols)] = 0
    return pattern


def create_test_topography(block_width: int = 1, block_height: int = 1) -> Topography:
    """Create the 12x10 test topography, each point scaled to a block.

    The drawn pattern is stored with its bottom row first, so drawn row
    ``r`` becomes topography row ``9 - r``.

    Parameters
    ----------
    block_width, block_height : int
        Number of topography points per pattern point.

    Returns
    -------
    Topography
        Topography of size (12*block_width) x (10*block_height) with
        100 ocean blocks of the given size.
    """
    pattern = create_test_pattern()[::-1]
    return Topography(np.kron(pattern, np.ones((block_height, block_width), dtype=np.int64)))
