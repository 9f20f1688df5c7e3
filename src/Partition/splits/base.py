"""Split strategy base class and shared traversal helpers.

A split divides a BlockSet into exactly ``k`` non-empty, balanced subsets
whose union is the input. Subset sizes follow the standard remainder
distribution: the first ``n % k`` subsets get one extra block.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable, Iterator, List, Sequence

from ..datastructures import Block
from ..exceptions import ConfigurationError, GridInvariantError
from ..sets import BlockSet

log = logging.getLogger(__name__)


# =============================================================================
# Work accounting
# =============================================================================


def split_work(work: int, parts: int) -> List[int]:
    """Divide `work` evenly over `parts`, earlier parts take the remainder.

    >>> split_work(10, 4)
    [3, 3, 2, 2]
    """
    base, left = divmod(work, parts)
    return [base + 1 if i < left else base for i in range(parts)]


def split_work_slices(work: int, slices: Sequence[int], total_parts: int) -> List[int]:
    """Divide `work` over slices holding `slices[i]` parts each.

    Every part receives ``work // total_parts``; the remainder is handed out
    one block per part, filling earlier slices first.

    >>> split_work_slices(11, [2, 2], 4)
    [6, 5]
    """
    base, left = divmod(work, total_parts)
    result = [base * s for s in slices]
    index = 0
    while left > 0:
        assign = min(slices[index], left)
        result[index] += assign
        left -= assign
        index += 1
    return result


# =============================================================================
# Zigzag traversals
# =============================================================================


def zigzag_rows(block_set: BlockSet, reverse: bool = False) -> Iterator[Block]:
    """Row by row, bottom to top; even rows run west to east (odd rows when reversed)."""
    direction = 1 if reverse else 0
    for y in range(block_set.min_y, block_set.max_y + 1):
        if y % 2 == direction:
            xs = range(block_set.min_x, block_set.max_x + 1)
        else:
            xs = range(block_set.max_x, block_set.min_x - 1, -1)
        for x in xs:
            block = block_set.get(x, y)
            if block is not None:
                yield block


def zigzag_columns(block_set: BlockSet, reverse: bool = False) -> Iterator[Block]:
    """Column by column, west to east; even columns run south to north (odd when reversed)."""
    direction = 1 if reverse else 0
    for x in range(block_set.min_x, block_set.max_x + 1):
        if x % 2 == direction:
            ys = range(block_set.min_y, block_set.max_y + 1)
        else:
            ys = range(block_set.max_y, block_set.min_y - 1, -1)
        for y in ys:
            block = block_set.get(x, y)
            if block is not None:
                yield block


def cut(blocks: Iterable[Block], target_work: Sequence[int]) -> List[BlockSet]:
    """Cut an ordered block sequence into consecutive sets of the target sizes."""
    result = []
    current = []
    for block in blocks:
        current.append(block)
        if len(current) == target_work[len(result)]:
            result.append(BlockSet(current, len(result)))
            current = []
            if len(result) == len(target_work):
                break

    if len(result) != len(target_work):
        raise GridInvariantError(
            f"Traversal produced {len(result)} of {len(target_work)} sets for work {list(target_work)}"
        )
    return result


def split_horizontal(block_set: BlockSet, target_work: Sequence[int], reverse: bool = False) -> List[BlockSet]:
    """Horizontal bands, following the row zigzag."""
    return cut(zigzag_rows(block_set, reverse), target_work)


def split_vertical(block_set: BlockSet, target_work: Sequence[int], reverse: bool = False) -> List[BlockSet]:
    """Vertical bands, following the column zigzag."""
    return cut(zigzag_columns(block_set, reverse), target_work)


# =============================================================================
# Strategy interface
# =============================================================================


class Splitter(ABC):
    """Abstract base for split strategies."""

    name = "base"

    def split(self, block_set: BlockSet, subsets: int) -> List[BlockSet]:
        """Split `block_set` into `subsets` balanced sets.

        Parameters
        ----------
        block_set : BlockSet
            Set to divide.
        subsets : int
            Number of subsets, 1 <= subsets <= len(block_set).

        Returns
        -------
        list of BlockSet
            Exactly `subsets` non-empty sets, indexed 0..subsets-1.
        """
        if subsets < 1:
            raise ConfigurationError(f"Cannot split into {subsets} parts")
        if block_set.size < subsets:
            raise ConfigurationError(
                f"Cannot split set with {block_set.size} blocks into {subsets} parts"
            )

        log.debug(f"{self.name}: splitting set of size {block_set.size} into {subsets} parts")
        result = self._split(block_set, subsets)
        self._verify(block_set, subsets, result)

        for index, s in enumerate(result):
            s.index = index
        return result

    @abstractmethod
    def _split(self, block_set: BlockSet, subsets: int) -> List[BlockSet]:
        """Produce the subsets in order."""
        pass

    @staticmethod
    def _verify(block_set: BlockSet, subsets: int, result: List[BlockSet]):
        if len(result) != subsets or any(s.size == 0 for s in result):
            raise GridInvariantError(f"Split produced {len(result)} sets, expected {subsets} non-empty")

        covered = set()
        for s in result:
            covered.update(b.coordinate for b in s)
        if len(covered) != block_set.size or sum(s.size for s in result) != block_set.size:
            raise GridInvariantError("Split result does not partition its input set")
