"""Hierarchical load balancer.

Splits the ocean blocks of a grid into clusters, every cluster into nodes
and every node into cores, using one split strategy at all three levels.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

import numpy as np

from .datastructures import BalanceMetrics
from .distribution import Distribution
from .exceptions import ConfigurationError, GridInvariantError
from .grid import Grid
from .sets import BlockSet, Layers, build_layers
from .splits import create_splitter

log = logging.getLogger(__name__)


class LoadBalancer:
    """Static distribution of grid blocks over a cluster/node/core hierarchy.

    Parameters
    ----------
    grid : Grid
        Grid whose ocean blocks are distributed.
    clusters, nodes_per_cluster, cores_per_node : int
        Hardware hierarchy.
    method : str
        Split strategy: 'simple', 'roughlyrect' or 'search'.
    comparison : str
        Comparison policy of the 'search' strategy: 'sum' or 'max'.

    Examples
    --------
    >>> balancer = LoadBalancer(grid, clusters=1, nodes_per_cluster=2, cores_per_node=4)
    >>> layers = balancer.split()
    >>> balancer.get_distribution().write("run.dist")
    """

    def __init__(self, grid: Grid, clusters: int = 1, nodes_per_cluster: int = 1, cores_per_node: int = 1,
                 method: str = "search", comparison: str = "sum"):
        for name, value in (("clusters", clusters), ("nodes_per_cluster", nodes_per_cluster),
                            ("cores_per_node", cores_per_node)):
            if value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value}")

        self.grid = grid
        self.clusters = clusters
        self.nodes_per_cluster = nodes_per_cluster
        self.cores_per_node = cores_per_node
        self.splitter = create_splitter(method, comparison)

        self.metrics = BalanceMetrics()
        self._layers: Optional[Layers] = None
        self._marks: Optional[np.ndarray] = None

    @property
    def total_cores(self) -> int:
        return self.clusters * self.nodes_per_cluster * self.cores_per_node

    # =========================================================================
    # Balancing
    # =========================================================================

    def split(self) -> Layers:
        """Run the three split levels and build the layer hierarchy.

        Returns
        -------
        Layers
            ALL, BLOCKS, CORES, NODES and CLUSTERS.
        """
        t_start = time.perf_counter()

        ocean = BlockSet(self.grid.ocean_blocks())
        if ocean.size < self.total_cores:
            raise ConfigurationError(
                f"Cannot distribute {ocean.size} ocean blocks over {self.total_cores} cores"
            )

        clusters = self.splitter.split(ocean, self.clusters)
        for cluster in clusters:
            nodes = self.splitter.split(cluster, self.nodes_per_cluster)
            cluster.add_subsets(nodes)
            for node in nodes:
                node.add_subsets(self.splitter.split(node, self.cores_per_node))
        log.debug(f"Split sizes per cluster: {[c.size for c in clusters]}")

        layers = build_layers(clusters)
        self._commit(layers)
        self._layers = layers

        cores = list(layers["CORES"])
        sizes = [core.size for core in cores]
        communication = [core.communication for core in cores]
        self.metrics = BalanceMetrics(
            total_blocks=self.grid.width * self.grid.height,
            ocean_blocks=ocean.size,
            min_blocks_per_core=min(sizes),
            max_blocks_per_core=max(sizes),
            total_communication=sum(communication),
            max_communication=max(communication),
            wall_time=time.perf_counter() - t_start,
        )

        log.info(
            f"Distributed {ocean.size} ocean blocks over {self.total_cores} cores with {self.splitter.name}: "
            f"{self.metrics.min_blocks_per_core}-{self.metrics.max_blocks_per_core} blocks per core, "
            f"communication total {self.metrics.total_communication}, max {self.metrics.max_communication} "
            f"({self.metrics.wall_time:.3f}s)"
        )
        return layers

    def _commit(self, layers: Layers):
        """Record the 0-based core number of every block, indexed by block id."""
        marks = np.full(self.grid.capacity + 1, -1, dtype=np.int64)
        for core in layers["CORES"]:
            for block in core:
                if marks[block.block_id] != -1:
                    raise GridInvariantError(f"Block {block.block_id} assigned to more than one core")
                marks[block.block_id] = core.index
        self._marks = marks

    @property
    def layers(self) -> Layers:
        if self._layers is None:
            raise RuntimeError("split() has not been run")
        return self._layers

    @property
    def marks(self) -> np.ndarray:
        """Core number per block id (index 0 unused), -1 for unassigned blocks."""
        if self._marks is None:
            raise RuntimeError("split() has not been run")
        return self._marks

    # =========================================================================
    # Result
    # =========================================================================

    def get_distribution(self) -> Distribution:
        """Package the assignment as a Distribution, splitting first if needed."""
        if self._marks is None:
            self.split()

        grid = self.grid
        owners = np.zeros(grid.width * grid.height, dtype=np.int64)
        for block in grid:
            if block.block_id > 0:
                owners[block.y * grid.width + block.x] = self._marks[block.block_id] + 1

        return Distribution(
            topography_width=grid.width * grid.block_width,
            topography_height=grid.height * grid.block_height,
            block_width=grid.block_width,
            block_height=grid.block_height,
            clusters=self.clusters,
            nodes_per_cluster=self.nodes_per_cluster,
            cores_per_node=self.cores_per_node,
            min_blocks_per_core=self.metrics.min_blocks_per_core,
            max_blocks_per_core=self.metrics.max_blocks_per_core,
            total_blocks=grid.width * grid.height,
            distribution=owners,
        )
