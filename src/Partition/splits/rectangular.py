"""Recursive near-square split."""

from __future__ import annotations

import logging
import math
from typing import List, Sequence

from ..sets import BlockSet
from .base import Splitter, split_horizontal, split_vertical, split_work, split_work_slices

log = logging.getLogger(__name__)


def create_sub_parts(parts: int, sub_parts: int, left_over: int) -> List[int]:
    """`parts` slices of `sub_parts` each, adjusted by `left_over`.

    A positive `left_over` adds one to the first slices, a negative one
    removes one from the last slices.

    >>> create_sub_parts(3, 3, -2)
    [3, 2, 2]
    """
    result = [sub_parts] * parts
    if left_over > 0:
        for i in range(left_over):
            result[i] += 1
    elif left_over < 0:
        for i in range(parts + left_over, parts):
            result[i] -= 1
    return result


def slice_layout(parts: int) -> List[int]:
    """Number of sub-parts per slice for a roughly square arrangement of `parts`.

    Parameters
    ----------
    parts : int
        Total number of parts.

    Returns
    -------
    list of int
        One entry per slice (row or column band), summing to `parts`.
    """
    low = math.isqrt(parts)
    high = low if low * low == parts else low + 1

    if low == high:
        log.debug(f"Grid is perfect square: {low}x{low}")
        return create_sub_parts(low, low, 0)
    if parts == low * high:
        log.debug(f"Grid is perfect rectangle: {high}x{low}")
        return create_sub_parts(high, low, 0)
    if parts < low * high:
        log.debug(f"Grid is imperfect: {high}x{low} - {low * high - parts}")
        return create_sub_parts(high, low, -(low * high - parts))

    log.debug(f"Grid is imperfect: {high}x{high} - {high * high - parts}")
    return create_sub_parts(high, high, -(high * high - parts))


class RoughlyRectangularSplit(Splitter):
    """Split into a ceil(sqrt(k)) x floor(sqrt(k)) style arrangement.

    The set is first cut into bands along its longer axis, with work in
    proportion to each band's number of parts, then every band is cut
    across.

    Examples
    --------
    >>> parts = RoughlyRectangularSplit().split(ocean, 4)
    >>> [p.size for p in parts]
    [25, 25, 25, 25]
    """

    name = "roughlyrect"

    def _split(self, block_set: BlockSet, subsets: int) -> List[BlockSet]:
        slices = slice_layout(subsets)
        log.debug(f"Splitting set of size {block_set.size} into {slices}")
        return self._split_slices(block_set, slices, subsets)

    def _split_slices(self, block_set: BlockSet, slices: Sequence[int], subsets: int) -> List[BlockSet]:
        work_per_slice = split_work_slices(block_set.size, slices, subsets)
        log.debug(f" Work per slice: {work_per_slice}")

        if block_set.width < block_set.height:
            bands, across = split_horizontal(block_set, work_per_slice), split_vertical
        else:
            bands, across = split_vertical(block_set, work_per_slice), split_horizontal

        result = []
        for band, parts in zip(bands, slices):
            result.extend(across(band, split_work(band.size, parts)))
        return result
