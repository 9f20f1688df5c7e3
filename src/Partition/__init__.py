"""Static load balancing for block-structured ocean grids.

Partitions the ocean blocks of a topography over a cluster/node/core
hierarchy in balanced, contiguous groups while keeping the halo exchange
between groups small. Supports CLOSED, CYCLIC and TRIPOLE boundary
wrapping.

Components
----------
Topology:
- Topography: immutable depth field with rectangle queries
- Neighbours: boundary wrapping and halo message sizes
- Grid: blocks with precomputed neighbours

Hierarchy:
- BlockSet, Layer, Layers: groups of blocks and partition levels

Splitting:
- SimpleSplit, RoughlyRectangularSplit, SearchSplit

Result:
- LoadBalancer: cluster -> node -> core splitting
- Distribution: persisted block -> core assignment
- Statistics: per-layer size and communication tables
"""

from .datastructures import (
    HALO_WIDTH,
    BalanceMetrics,
    BalanceParams,
    Block,
    BoundaryWrap,
    Coordinate,
)
from .exceptions import (
    ConfigurationError,
    DataConsistencyError,
    GridInvariantError,
    PartitionError,
)
from .topography import Topography
from .neighbours import Direction, Neighbours
from .grid import Grid
from .sets import BlockSet, Layer, Layers, Line, build_layers
from .splits import (
    RoughlyRectangularSplit,
    SearchSplit,
    SimpleSplit,
    SplitMethod,
    Splitter,
    create_splitter,
)
from .distribution import Distribution
from .balancer import LoadBalancer
from .statistics import Statistics
from .blocksize import block_cost, divisors, near_optimal, prime_factors, rank_block_sizes
from .problems import create_test_pattern, create_test_topography

__all__ = [
    # Data structures
    "HALO_WIDTH",
    "BalanceParams",
    "BalanceMetrics",
    "Block",
    "BoundaryWrap",
    "Coordinate",
    # Errors
    "PartitionError",
    "ConfigurationError",
    "DataConsistencyError",
    "GridInvariantError",
    # Topology
    "Topography",
    "Direction",
    "Neighbours",
    "Grid",
    # Hierarchy
    "BlockSet",
    "Layer",
    "Layers",
    "Line",
    "build_layers",
    # Splitting
    "Splitter",
    "SplitMethod",
    "create_splitter",
    "SimpleSplit",
    "RoughlyRectangularSplit",
    "SearchSplit",
    # Result
    "LoadBalancer",
    "Distribution",
    "Statistics",
    # Block size selection
    "divisors",
    "prime_factors",
    "block_cost",
    "rank_block_sizes",
    "near_optimal",
    # Problem setup
    "create_test_pattern",
    "create_test_topography",
]
