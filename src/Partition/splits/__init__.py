"""Split strategies.

- SimpleSplit: linear zigzag, 1 x k arrangement
- RoughlyRectangularSplit: near-square bands and parts
- SearchSplit: RoughlyRectangularSplit with an exhaustive order/orientation search
"""

from enum import Enum

from ..exceptions import ConfigurationError
from .base import (
    Splitter,
    cut,
    split_horizontal,
    split_vertical,
    split_work,
    split_work_slices,
    zigzag_columns,
    zigzag_rows,
)
from .rectangular import RoughlyRectangularSplit, create_sub_parts, slice_layout
from .search import SearchSplit, communication_score, distinct_permutations
from .simple import SimpleSplit


class SplitMethod(Enum):
    """Available split strategies."""

    SIMPLE = "simple"
    ROUGHLYRECT = "roughlyrect"
    SEARCH = "search"


def create_splitter(method="search", comparison: str = "sum") -> Splitter:
    """Factory for split strategies.

    Parameters
    ----------
    method : str or SplitMethod
        'simple', 'roughlyrect' or 'search' (case-insensitive).
    comparison : str
        Comparison policy for 'search': 'sum' or 'max'.
    """
    if not isinstance(method, SplitMethod):
        try:
            method = SplitMethod(str(method).lower())
        except ValueError:
            raise ConfigurationError(f"Unknown split method: {method}") from None

    if method is SplitMethod.SIMPLE:
        return SimpleSplit()
    if method is SplitMethod.ROUGHLYRECT:
        return RoughlyRectangularSplit()
    return SearchSplit(comparison)


__all__ = [
    "Splitter",
    "SplitMethod",
    "create_splitter",
    "SimpleSplit",
    "RoughlyRectangularSplit",
    "SearchSplit",
    # Helpers
    "split_work",
    "split_work_slices",
    "split_horizontal",
    "split_vertical",
    "zigzag_rows",
    "zigzag_columns",
    "cut",
    "create_sub_parts",
    "slice_layout",
    "distinct_permutations",
    "communication_score",
]
