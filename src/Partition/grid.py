"""Block grid built on top of a topography.

The grid owns one Block per coordinate. Blocks are reachable both by
coordinate (dense ``width x height`` slots) and by block id (a parallel
array indexed 1..capacity). Neighbour and halo data is computed once, at
construction, and is keyed by block id so that it survives relocation.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional

from .datastructures import Block, BoundaryWrap, Coordinate
from .exceptions import ConfigurationError, GridInvariantError
from .neighbours import Neighbours
from .topography import Topography

log = logging.getLogger(__name__)


class Grid:
    """Dense grid of Blocks.

    Parameters
    ----------
    width, height : int
        Grid size in blocks.
    block_width, block_height : int
        Block size in topography points.
    capacity : int, optional
        Highest block id the grid can address. Defaults to width*height.

    Examples
    --------
    >>> grid = Grid.from_topography(topo, 60, 60, "cyclic", "tripole")
    >>> grid.get(3, 4).block_id == 4 * grid.width + 3 + 1
    True
    """

    def __init__(self, width: int, height: int, block_width: int, block_height: int,
                 capacity: Optional[int] = None):
        if min(width, height, block_width, block_height) <= 0:
            raise ConfigurationError(f"Invalid grid {width}x{height} of {block_width}x{block_height} blocks")

        self.width = width
        self.height = height
        self.block_width = block_width
        self.block_height = block_height
        self.capacity = width * height if capacity is None else capacity
        self.neighbours: Optional[Neighbours] = None

        self._slots: List[Optional[Block]] = [None] * (width * height)
        self._by_id: List[Optional[Block]] = [None] * (self.capacity + 1)

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def from_neighbours(cls, neighbours: Neighbours) -> Grid:
        """Create one Block per coordinate with precomputed halo data."""
        grid = cls(neighbours.grid_width, neighbours.grid_height,
                   neighbours.block_width, neighbours.block_height)
        grid.neighbours = neighbours

        for y in range(grid.height):
            for x in range(grid.width):
                c = Coordinate(x, y)
                grid._put(Block(
                    block_id=neighbours.block_id(c),
                    coordinate=c,
                    ocean=neighbours.is_ocean(x, y),
                    neighbours=neighbours.neighbours(c),
                    communication=neighbours.communication(c),
                ))

        log.debug(f"Created grid {grid.width}x{grid.height} with {grid.count} ocean blocks")
        return grid

    @classmethod
    def from_topography(cls, topography: Topography, block_width: int, block_height: int,
                        boundary_x=BoundaryWrap.CYCLIC, boundary_y=BoundaryWrap.TRIPOLE) -> Grid:
        """Subdivide a topography into blocks.

        Parameters
        ----------
        topography : Topography
            Depth field to subdivide.
        block_width, block_height : int
            Block size; must divide the topography size.
        boundary_x, boundary_y : BoundaryWrap or str
            Wrap policies for the X and Y axes.

        Returns
        -------
        Grid
            Grid of (width/block_width) x (height/block_height) blocks.
        """
        if block_width <= 0 or block_height <= 0:
            raise ConfigurationError(f"Invalid block size {block_width}x{block_height}")
        if block_width > topography.width or block_height > topography.height:
            raise ConfigurationError(
                f"Block size {block_width}x{block_height} exceeds topography "
                f"{topography.width}x{topography.height}"
            )
        if topography.width % block_width:
            raise ConfigurationError(
                f"Cannot subdivide topography: block width {block_width} does not divide {topography.width}"
            )
        if topography.height % block_height:
            raise ConfigurationError(
                f"Cannot subdivide topography: block height {block_height} does not divide {topography.height}"
            )

        neighbours = Neighbours(
            topography,
            topography.width // block_width,
            topography.height // block_height,
            block_width,
            block_height,
            boundary_x,
            boundary_y,
        )
        return cls.from_neighbours(neighbours)

    def _put(self, block: Block):
        self._slots[self._slot(block.x, block.y)] = block
        if block.block_id > 0:
            self._by_id[block.block_id] = block

    def _slot(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Coordinate ({x}, {y}) outside grid {self.width}x{self.height}")
        return y * self.width + x

    # =========================================================================
    # Query Interface
    # =========================================================================

    def get(self, x: int, y: int) -> Optional[Block]:
        """Block at (x, y); None only for empty slots of an extended grid."""
        return self._slots[self._slot(x, y)]

    def get_by_id(self, block_id: int) -> Optional[Block]:
        if not (1 <= block_id <= self.capacity):
            raise IndexError(f"Block id {block_id} outside 1..{self.capacity}")
        return self._by_id[block_id]

    @property
    def count(self) -> int:
        """Number of ocean blocks."""
        return sum(1 for b in self._slots if b is not None and b.ocean)

    def ocean_blocks(self) -> List[Block]:
        return [b for b in self._slots if b is not None and b.ocean]

    def rectangle(self, x: int, y: int, width: int, height: int) -> List[Block]:
        """Blocks inside a window, clipped to the grid."""
        result = []
        for j in range(max(y, 0), min(y + height, self.height)):
            for i in range(max(x, 0), min(x + width, self.width)):
                block = self._slots[j * self.width + i]
                if block is not None:
                    result.append(block)
        return result

    def __iter__(self) -> Iterator[Block]:
        return (b for b in self._slots if b is not None)

    def __len__(self):
        return sum(1 for b in self._slots if b is not None)

    # =========================================================================
    # Tripole folding support
    # =========================================================================

    def extended(self, extra_rows: int) -> Grid:
        """Copy of this grid with `extra_rows` empty rows added on top.

        Blocks keep their identity and halo data; the new rows are empty
        until blocks are relocated into them or `insert_land` is called.
        """
        if extra_rows < 0:
            raise ConfigurationError(f"extra_rows must be non-negative, got {extra_rows}")

        grid = Grid(self.width, self.height + extra_rows, self.block_width, self.block_height,
                    capacity=self.capacity)
        grid.neighbours = self.neighbours
        for block in self:
            grid._put(block)
        return grid

    def relocate(self, from_x: int, from_y: int, to_x: int, to_y: int) -> Block:
        """Move a block to an empty slot, keeping its id and halo data."""
        source = self._slot(from_x, from_y)
        target = self._slot(to_x, to_y)

        block = self._slots[source]
        if block is None:
            raise GridInvariantError(f"Cannot relocate from empty slot ({from_x}, {from_y})")
        if self._slots[target] is not None:
            raise GridInvariantError(f"Cannot relocate into occupied slot ({to_x}, {to_y})")

        moved = block.relocated(Coordinate(to_x, to_y))
        self._slots[source] = None
        self._put(moved)
        return moved

    def insert_land(self) -> int:
        """Fill every empty slot with a synthetic land block. Returns the number filled."""
        filled = 0
        for index, block in enumerate(self._slots):
            if block is None:
                self._slots[index] = Block.land(Coordinate(index % self.width, index // self.width))
                filled += 1
        return filled
