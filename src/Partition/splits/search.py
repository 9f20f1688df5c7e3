"""Exhaustive orientation/order search over the near-square split.

For the slice layout chosen by RoughlyRectangularSplit, every distinct
ordering of the slices is tried with all four band traversals (rows or
columns, forward or reversed). Inside each band, every distinct ordering
of the part sizes is tried with the same four traversals. The candidate
with the best communication score is kept.

Scores are computed from BlockSet.communication of the final subsets.
Nothing is written to the blocks while searching.
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Iterator, List, Sequence, Tuple

from ..exceptions import ConfigurationError
from ..sets import BlockSet
from .base import split_horizontal, split_vertical, split_work, split_work_slices
from .rectangular import RoughlyRectangularSplit

log = logging.getLogger(__name__)

# Band traversals tried for every ordering: (split function, reverse)
ORIENTATIONS = (
    (split_horizontal, False),
    (split_horizontal, True),
    (split_vertical, False),
    (split_vertical, True),
)

COMPARISONS = ("sum", "max")


def distinct_permutations(items: Sequence) -> Iterator[tuple]:
    """Every distinct ordering of `items`, each exactly once.

    Items are first sorted into canonical order and then stepped through
    lexicographic successors, so equal items never produce duplicates.

    >>> list(distinct_permutations([2, 1, 1]))
    [(1, 1, 2), (1, 2, 1), (2, 1, 1)]
    """
    current = sorted(items)
    n = len(current)
    while True:
        yield tuple(current)

        i = n - 2
        while i >= 0 and current[i] >= current[i + 1]:
            i -= 1
        if i < 0:
            return

        j = n - 1
        while current[j] <= current[i]:
            j -= 1
        current[i], current[j] = current[j], current[i]
        current[i + 1:] = reversed(current[i + 1:])


def communication_score(sets: Sequence[BlockSet]) -> Tuple[int, int]:
    """(sum, max) of the communication of `sets`."""
    values = [s.communication for s in sets]
    return sum(values), max(values)


# (total, peak, subsets)
Option = Tuple[int, int, List[BlockSet]]


class SearchSplit(RoughlyRectangularSplit):
    """Search variant of RoughlyRectangularSplit.

    Parameters
    ----------
    comparison : str
        'sum' (default) minimises the summed communication of the subsets,
        ties going to the lower maximum. 'max' minimises the maximum, ties
        going to the lower sum.
    """

    name = "search"

    def __init__(self, comparison: str = "sum"):
        comparison = str(comparison).lower()
        if comparison not in COMPARISONS:
            raise ConfigurationError(f"Unknown comparison policy: {comparison}")
        self.comparison = comparison

    def _key(self, total: int, peak: int) -> Tuple[int, int]:
        return (total, peak) if self.comparison == "sum" else (peak, total)

    def _best(self, options: List[Option]) -> Option:
        best = options[0]
        for option in options[1:]:
            if self._key(option[0], option[1]) < self._key(best[0], best[1]):
                best = option
        return best

    # =========================================================================
    # Search
    # =========================================================================

    def _split_slices(self, block_set: BlockSet, slices: Sequence[int], subsets: int) -> List[BlockSet]:
        work_per_slice = split_work_slices(block_set.size, slices, subsets)
        log.debug(f"Searching set of size {block_set.size}, slices {list(slices)}, work {work_per_slice}")

        # Band results are reused between candidates of this call only
        band_cache: Dict[Tuple[FrozenSet[int], int], List[Option]] = {}

        best = None
        candidates = 0
        for order in distinct_permutations(list(zip(work_per_slice, slices))):
            work = [w for w, _ in order]
            for split, reverse in ORIENTATIONS:
                bands = split(block_set, work, reverse)
                per_band = [self._band_options(band, parts, band_cache) for band, (_, parts) in zip(bands, order)]
                candidate = self._combine(per_band)
                candidates += 1
                if best is None or self._key(candidate[0], candidate[1]) < self._key(best[0], best[1]):
                    best = candidate

        log.debug(f"Evaluated {candidates} candidates, best (sum, max) = ({best[0]}, {best[1]})")
        return best[2]

    def _band_options(self, band: BlockSet, parts: int,
                      cache: Dict[Tuple[FrozenSet[int], int], List[Option]]) -> List[Option]:
        """Every distinct way of cutting one band into `parts` subsets."""
        key = (frozenset(b.block_id for b in band), parts)
        if key in cache:
            return cache[key]

        if parts == 1:
            options = [(band.communication, band.communication, [band])]
        else:
            options = []
            for work in distinct_permutations(split_work(band.size, parts)):
                for split, reverse in ORIENTATIONS:
                    sets = split(band, work, reverse)
                    total, peak = communication_score(sets)
                    options.append((total, peak, sets))

        cache[key] = options
        return options

    def _combine(self, per_band: List[List[Option]]) -> Option:
        """Best combination of one option per band under the comparison policy."""
        if self.comparison == "sum":
            # Minimal total needs every band at its own minimum; the peak then
            # follows from the per-band tie-break
            chosen = [self._best(options) for options in per_band]
        else:
            peak = max(min(o[1] for o in options) for options in per_band)
            chosen = [
                min((o for o in options if o[1] <= peak), key=lambda o: (o[0], o[1]))
                for options in per_band
            ]

        subsets = [s for option in chosen for s in option[2]]
        return sum(o[0] for o in chosen), max(o[1] for o in chosen), subsets
