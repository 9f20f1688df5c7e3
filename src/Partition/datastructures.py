"""Data structures for grid addressing, run configuration and results.

Architecture: grid records vs run records

                 Grid records (immutable)      Run records
                 ────────────────────────      ───────────
                 Coordinate, Block,            BalanceParams (input/config)
                 BoundaryWrap                  BalanceMetrics (output/results)
"""

from __future__ import annotations

import dataclasses
import functools
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from .exceptions import ConfigurationError

# Width of the ghost-cell border exchanged between neighbouring blocks
HALO_WIDTH = 2


# ============================================================================
# Boundary wrapping
# ============================================================================


class BoundaryWrap(Enum):
    """How a grid edge connects to the opposite edge."""

    TRIPOLE = 0
    CYCLIC = 1
    CLOSED = 2

    @classmethod
    def parse(cls, value, axis: str = "x") -> "BoundaryWrap":
        """Parse a wrap policy for one axis (case-insensitive).

        Parameters
        ----------
        value : str or BoundaryWrap
            Policy name: 'closed', 'cyclic' or (Y axis only) 'tripole'.
        axis : str
            'x' or 'y'. TRIPOLE is only valid on the Y axis.

        Returns
        -------
        BoundaryWrap
            Parsed policy.
        """
        if isinstance(value, cls):
            wrap = value
        else:
            try:
                wrap = cls[str(value).strip().upper()]
            except KeyError:
                raise ConfigurationError(f"Unknown boundary wrap: {value}") from None

        if axis == "x" and wrap is cls.TRIPOLE:
            raise ConfigurationError("TRIPOLE wrapping is only valid on the Y axis")
        return wrap


# ============================================================================
# Grid records
# ============================================================================


@functools.total_ordering
@dataclass(frozen=True)
class Coordinate:
    """Integer grid position. Ordered by (y, x)."""

    x: int
    y: int

    def offset(self, dx: int, dy: int) -> Coordinate:
        return Coordinate(self.x + dx, self.y + dy)

    def __lt__(self, other):
        if not isinstance(other, Coordinate):
            return NotImplemented
        return (self.y, self.x) < (other.y, other.x)


# 3x3 neighbour layout: row 0 is north, row 2 is south, column 0 is west
Neighbourhood = Tuple[Tuple[int, int, int], Tuple[int, int, int], Tuple[int, int, int]]

EMPTY_NEIGHBOURHOOD: Neighbourhood = ((0, 0, 0), (0, 0, 0), (0, 0, 0))


@dataclass(frozen=True)
class Block:
    """A fixed-size tile of the grid and the unit of work assignment.

    Neighbour ids and halo message sizes are stored as 3x3 tuples laid out
    as ``[[NW, N, NE], [W, -, E], [SW, S, SE]]``. An id of 0 means no
    neighbour; a message size of 0 means nothing is exchanged.
    """

    block_id: int
    coordinate: Coordinate
    ocean: bool
    neighbours: Neighbourhood = EMPTY_NEIGHBOURHOOD
    communication: Neighbourhood = EMPTY_NEIGHBOURHOOD

    @property
    def x(self) -> int:
        return self.coordinate.x

    @property
    def y(self) -> int:
        return self.coordinate.y

    def neighbour(self, dx: int, dy: int) -> int:
        """Id of the neighbour at offset (dx, dy); north is dy=+1."""
        return self.neighbours[1 - dy][dx + 1]

    def message_size(self, dx: int, dy: int) -> int:
        """Halo message size towards the neighbour at offset (dx, dy)."""
        return self.communication[1 - dy][dx + 1]

    def relocated(self, coordinate: Coordinate) -> Block:
        """Same identity and halo data at a new coordinate."""
        return dataclasses.replace(self, coordinate=coordinate)

    @classmethod
    def land(cls, coordinate: Coordinate) -> Block:
        """Synthetic land block used to fill empty grid slots."""
        return cls(block_id=-1, coordinate=coordinate, ocean=False)


# ============================================================================
# Run records
# ============================================================================


@dataclass
class BalanceParams:
    """Run configuration - built from the Hydra config.

    Immutable configuration set before a balancing run.
    """

    # Required
    topography_width: int
    topography_height: int
    block_width: int
    block_height: int

    # Input
    topography_file: Optional[str] = None

    # Hardware hierarchy
    clusters: int = 1
    nodes_per_cluster: int = 1
    cores_per_node: int = 1

    # Topology
    boundary_x: str = "CYCLIC"  # "closed" | "cyclic"
    boundary_y: str = "TRIPOLE"  # "closed" | "cyclic" | "tripole"

    # Splitting
    method: str = "search"  # "simple" | "roughlyrect" | "search"
    comparison: str = "sum"  # "sum" | "max"

    # Output
    output: Optional[str] = None
    text_output: Optional[str] = None
    statistics: Optional[str] = None  # layer name, e.g. "CORES" or "ALL"

    # Derived (not from config)
    grid_width: int = field(init=False)
    grid_height: int = field(init=False)
    total_cores: int = field(init=False)

    def __post_init__(self):
        """Validate dimensions and compute derived values."""
        for name in ("topography_width", "topography_height", "block_width", "block_height",
                     "clusters", "nodes_per_cluster", "cores_per_node"):
            value = getattr(self, name)
            if value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value}")

        if self.block_width > self.topography_width or self.block_height > self.topography_height:
            raise ConfigurationError(
                f"Block size {self.block_width}x{self.block_height} exceeds topography "
                f"{self.topography_width}x{self.topography_height}"
            )
        if self.topography_width % self.block_width or self.topography_height % self.block_height:
            raise ConfigurationError(
                f"Block size {self.block_width}x{self.block_height} does not divide topography "
                f"{self.topography_width}x{self.topography_height}"
            )

        self.boundary_x = BoundaryWrap.parse(self.boundary_x, axis="x").name
        self.boundary_y = BoundaryWrap.parse(self.boundary_y, axis="y").name
        self.method = self.method.lower()
        self.comparison = self.comparison.lower()

        self.grid_width = self.topography_width // self.block_width
        self.grid_height = self.topography_height // self.block_height
        self.total_cores = self.clusters * self.nodes_per_cluster * self.cores_per_node

    @classmethod
    def from_config(cls, cfg) -> BalanceParams:
        """Build parameters from a Hydra/OmegaConf config."""
        return cls(
            topography_width=cfg.topography.width,
            topography_height=cfg.topography.height,
            block_width=cfg.block.width,
            block_height=cfg.block.height,
            topography_file=cfg.topography.get("file"),
            clusters=cfg.get("clusters", 1),
            nodes_per_cluster=cfg.get("nodes_per_cluster", 1),
            cores_per_node=cfg.get("cores_per_node", 1),
            boundary_x=cfg.get("boundary_x", "CYCLIC"),
            boundary_y=cfg.get("boundary_y", "TRIPOLE"),
            method=cfg.get("method", "search"),
            comparison=cfg.get("comparison", "sum"),
            output=cfg.get("output"),
            text_output=cfg.get("text_output"),
            statistics=cfg.get("statistics"),
        )


@dataclass
class BalanceMetrics:
    """Results of one balancing run."""

    total_blocks: int = 0
    ocean_blocks: int = 0
    min_blocks_per_core: int = 0
    max_blocks_per_core: int = 0
    total_communication: int = 0  # Summed over core sets
    max_communication: int = 0
    wall_time: Optional[float] = None
