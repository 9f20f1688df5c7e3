"""Linear zigzag split."""

from typing import List

from ..sets import BlockSet
from .base import Splitter, split_horizontal, split_vertical, split_work


class SimpleSplit(Splitter):
    """Cut the zigzag ordering of a set into k consecutive pieces.

    Rows are followed when the set is taller than it is wide, columns
    otherwise, giving a 1 x k or k x 1 arrangement.
    """

    name = "simple"

    def _split(self, block_set: BlockSet, subsets: int) -> List[BlockSet]:
        target = split_work(block_set.size, subsets)
        if block_set.width < block_set.height:
            return split_horizontal(block_set, target)
        return split_vertical(block_set, target)
