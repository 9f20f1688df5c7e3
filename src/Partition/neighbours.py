"""Neighbour and halo message-size model.

Encodes how blocks connect under CLOSED, CYCLIC and TRIPOLE boundary
wrapping, and how much halo data each block sends to each of its eight
neighbours.

Block ids are ``y * grid_width + x + 1``; 0 means "no neighbour". North is
``y + 1``. At a TRIPOLE northern seam a block's northern neighbours are
folded back onto the same row: the north neighbour of ``(x, H-1)`` is
``(W - x - 1, H-1)``.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

from .datastructures import HALO_WIDTH, BoundaryWrap, Coordinate, Neighbourhood
from .exceptions import ConfigurationError
from .topography import Topography


class Direction(Enum):
    """Compass directions as (dx, dy) offsets, north is +y."""

    NORTHWEST = (-1, 1)
    NORTH = (0, 1)
    NORTHEAST = (1, 1)
    WEST = (-1, 0)
    EAST = (1, 0)
    SOUTHWEST = (-1, -1)
    SOUTH = (0, -1)
    SOUTHEAST = (1, -1)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    @property
    def opposite(self) -> Direction:
        return Direction((-self.dx, -self.dy))


# Position of each direction in a 3x3 neighbourhood (None is the block itself)
LAYOUT = (
    (Direction.NORTHWEST, Direction.NORTH, Direction.NORTHEAST),
    (Direction.WEST, None, Direction.EAST),
    (Direction.SOUTHWEST, Direction.SOUTH, Direction.SOUTHEAST),
)


class Neighbours:
    """Neighbour ids and halo message sizes for a block grid.

    Parameters
    ----------
    topography : Topography
        Depth field used to decide which blocks contain ocean.
    grid_width, grid_height : int
        Grid size in blocks.
    block_width, block_height : int
        Block size in topography points.
    boundary_x : BoundaryWrap or str
        CLOSED or CYCLIC.
    boundary_y : BoundaryWrap or str
        CLOSED, CYCLIC or TRIPOLE.

    Examples
    --------
    >>> nb = Neighbours(topo, 12, 10, 1, 1, "cyclic", "tripole")
    >>> nb.neighbour(Coordinate(2, 9), Direction.NORTH)   # folded to (9, 9)
    118
    """

    def __init__(self, topography: Topography, grid_width: int, grid_height: int,
                 block_width: int, block_height: int,
                 boundary_x=BoundaryWrap.CYCLIC, boundary_y=BoundaryWrap.TRIPOLE):
        if min(grid_width, grid_height, block_width, block_height) <= 0:
            raise ConfigurationError(
                f"Invalid grid {grid_width}x{grid_height} of {block_width}x{block_height} blocks"
            )

        self.topography = topography
        self.grid_width = grid_width
        self.grid_height = grid_height
        self.block_width = block_width
        self.block_height = block_height
        self.boundary_x = BoundaryWrap.parse(boundary_x, axis="x")
        self.boundary_y = BoundaryWrap.parse(boundary_y, axis="y")

        # Halo message sizes per direction class
        self.message_size_east_west = block_height * HALO_WIDTH
        self.message_size_north_south = block_width * HALO_WIDTH
        self.message_size_corner = HALO_WIDTH * HALO_WIDTH
        self.message_size_tripole = block_width * (HALO_WIDTH + 1)

    def is_ocean(self, x: int, y: int) -> bool:
        """True if the block footprint at (x, y) holds at least one ocean point."""
        return self.topography.rectangle_work(
            x * self.block_width, y * self.block_height, self.block_width, self.block_height
        ) > 0

    # =========================================================================
    # Coordinate wrapping
    # =========================================================================

    def resolve(self, c: Coordinate, direction: Direction) -> Optional[Tuple[Coordinate, bool]]:
        """Apply the boundary policies to the neighbour of `c` in `direction`.

        Parameters
        ----------
        c : Coordinate
            Source block coordinate.
        direction : Direction
            Direction to look in.

        Returns
        -------
        tuple of (Coordinate, bool) or None
            The neighbour coordinate and whether it was folded across a
            tripole seam, or None if the neighbour does not exist.
        """
        x = c.x + direction.dx
        y = c.y + direction.dy

        # X is wrapped first, then Y
        if x < 0 or x >= self.grid_width:
            if self.boundary_x is BoundaryWrap.CLOSED:
                return None
            x %= self.grid_width

        folded = False
        if y >= self.grid_height:
            if self.boundary_y is BoundaryWrap.CLOSED:
                return None
            if self.boundary_y is BoundaryWrap.CYCLIC:
                y = 0
            else:
                # Fold onto the same row, mirrored around the seam
                x = (self.grid_width - c.x - 1 - direction.dx) % self.grid_width
                y = c.y
                folded = True
        elif y < 0:
            if self.boundary_y is not BoundaryWrap.CYCLIC:
                return None
            y = self.grid_height - 1

        return Coordinate(x, y), folded

    def block_id(self, c: Coordinate) -> int:
        return c.y * self.grid_width + c.x + 1

    # =========================================================================
    # Per-direction queries
    # =========================================================================

    def neighbour(self, c: Coordinate, direction: Direction) -> int:
        """Id of the neighbour of `c` in `direction`, 0 if there is none."""
        resolved = self.resolve(c, direction)
        if resolved is None:
            return 0
        return self.block_id(resolved[0])

    def message_size(self, c: Coordinate, direction: Direction) -> int:
        """Halo message size sent from `c` to its neighbour in `direction`.

        Zero if the neighbour does not exist or is a land block.
        """
        resolved = self.resolve(c, direction)
        if resolved is None:
            return 0

        target, folded = resolved
        if not self.is_ocean(target.x, target.y):
            return 0

        if folded:
            return self.message_size_tripole
        if direction.dx == 0:
            return self.message_size_north_south
        if direction.dy == 0:
            return self.message_size_east_west
        return self.message_size_corner

    # =========================================================================
    # 3x3 neighbourhoods
    # =========================================================================

    def neighbours(self, c: Coordinate) -> Neighbourhood:
        """Neighbour ids laid out as [[NW, N, NE], [W, -, E], [SW, S, SE]]."""
        return tuple(
            tuple(0 if d is None else self.neighbour(c, d) for d in row)
            for row in LAYOUT
        )

    def communication(self, c: Coordinate) -> Neighbourhood:
        """Message sizes in the same layout; all zero for a land block."""
        if not self.is_ocean(c.x, c.y):
            return ((0, 0, 0), (0, 0, 0), (0, 0, 0))
        return tuple(
            tuple(0 if d is None else self.message_size(c, d) for d in row)
            for row in LAYOUT
        )
