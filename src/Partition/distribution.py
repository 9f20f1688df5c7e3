"""Block to core assignment and its on-disk layouts.

Binary layout (big-endian int32)::

    topographyWidth, topographyHeight,
    blockWidth, blockHeight,
    clusters, nodesPerCluster, coresPerNode,
    minBlocksPerCore, maxBlocksPerCore,
    totalBlocks,
    owner[0..totalBlocks)        # 1-based core number, 0 = unused/land

The text layout holds the same integers, one per line.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence

import numpy as np

from .exceptions import ConfigurationError, DataConsistencyError
from .grid import Grid
from .sets import BlockSet, Layers, build_layers
from .topography import FILE_DTYPE, read_int32

log = logging.getLogger(__name__)

HEADER_FIELDS = (
    "topography_width",
    "topography_height",
    "block_width",
    "block_height",
    "clusters",
    "nodes_per_cluster",
    "cores_per_node",
    "min_blocks_per_core",
    "max_blocks_per_core",
    "total_blocks",
)


def _check_header(header: Sequence[int]):
    """Validate the ten header values, in file order."""
    tw, th, bw, bh, clusters, nodes, cores, min_blocks, max_blocks, total = header

    if tw <= 0 or th <= 0:
        raise DataConsistencyError(f"Illegal topography dimensions {tw}x{th}")
    if bw <= 0 or bh <= 0:
        raise DataConsistencyError(f"Illegal block dimensions {bw}x{bh}")
    if tw % bw or th % bh:
        raise DataConsistencyError(f"Blocks do not perfectly fit topography ({tw}x{th} {bw}x{bh})")
    if clusters <= 0:
        raise DataConsistencyError(f"Illegal cluster count {clusters}")
    if nodes <= 0:
        raise DataConsistencyError(f"Illegal nodes_per_cluster count {nodes}")
    if cores <= 0:
        raise DataConsistencyError(f"Illegal cores_per_node count {cores}")
    if min_blocks < 0:
        raise DataConsistencyError(f"Illegal min_blocks_per_core count {min_blocks}")
    if max_blocks < 0:
        raise DataConsistencyError(f"Illegal max_blocks_per_core count {max_blocks}")
    if max_blocks < min_blocks:
        raise DataConsistencyError(
            f"max_blocks_per_core is smaller than min_blocks_per_core {max_blocks} < {min_blocks}"
        )

    expected = (tw // bw) * (th // bh)
    if total != expected:
        raise DataConsistencyError(
            f"total_blocks is inconsistent with topography and block size: {total} != {expected}"
        )


class Distribution:
    """Final block to core assignment plus the parameters that produced it.

    Parameters
    ----------
    topography_width, topography_height : int
        Topography size in points.
    block_width, block_height : int
        Block size in points.
    clusters, nodes_per_cluster, cores_per_node : int
        Hardware hierarchy.
    min_blocks_per_core, max_blocks_per_core : int
        Balance achieved by the partition.
    total_blocks : int
        Number of grid blocks, (topography_width/block_width)*(topography_height/block_height).
    distribution : array_like
        Owner per grid block in row-major block order, 1-based core number or 0.

    Examples
    --------
    >>> d = Distribution.read("run.dist")
    >>> d.owner(0), d.total_cores
    """

    def __init__(self, topography_width: int, topography_height: int, block_width: int, block_height: int,
                 clusters: int, nodes_per_cluster: int, cores_per_node: int,
                 min_blocks_per_core: int, max_blocks_per_core: int, total_blocks: int, distribution):
        self.topography_width = int(topography_width)
        self.topography_height = int(topography_height)
        self.block_width = int(block_width)
        self.block_height = int(block_height)
        self.clusters = int(clusters)
        self.nodes_per_cluster = int(nodes_per_cluster)
        self.cores_per_node = int(cores_per_node)
        self.min_blocks_per_core = int(min_blocks_per_core)
        self.max_blocks_per_core = int(max_blocks_per_core)
        self.total_blocks = int(total_blocks)

        _check_header(self.header)

        owners = np.array(distribution, dtype=np.int64).ravel()
        if owners.size != self.total_blocks:
            raise DataConsistencyError(
                f"Distribution holds {owners.size} owners, expected {self.total_blocks}"
            )
        bad = np.flatnonzero((owners < 0) | (owners > self.total_cores))
        if bad.size:
            raise DataConsistencyError(
                f"Inconsistent core number at position {bad[0]}: {owners[bad[0]]} "
                f"(total cores {self.total_cores})"
            )

        owners.flags.writeable = False
        self._owners = owners

    # =========================================================================
    # Query Interface
    # =========================================================================

    @property
    def header(self) -> List[int]:
        return [getattr(self, name) for name in HEADER_FIELDS]

    @property
    def total_cores(self) -> int:
        return self.clusters * self.nodes_per_cluster * self.cores_per_node

    @property
    def blocks_per_row(self) -> int:
        return self.topography_width // self.block_width

    @property
    def distribution(self) -> np.ndarray:
        """Read-only owner array."""
        return self._owners

    def owner(self, index: int) -> int:
        """Owner of grid block `index` (row-major), 0 if unused."""
        return int(self._owners[index])

    def __eq__(self, other):
        if not isinstance(other, Distribution):
            return NotImplemented
        return self.header == other.header and np.array_equal(self._owners, other._owners)

    def __repr__(self):
        return (f"Distribution({self.topography_width}x{self.topography_height}, "
                f"blocks {self.block_width}x{self.block_height}, "
                f"{self.clusters}x{self.nodes_per_cluster}x{self.cores_per_node} cores)")

    # =========================================================================
    # Binary and text layouts
    # =========================================================================

    @classmethod
    def from_values(cls, values: Sequence[int], source: str = "input") -> Distribution:
        """Build from the flat integer sequence used by both layouts."""
        values = [int(v) for v in values]
        if len(values) < len(HEADER_FIELDS):
            raise DataConsistencyError(f"{source} is too short for a distribution header ({len(values)} values)")

        header = values[:len(HEADER_FIELDS)]
        _check_header(header)

        owners = values[len(HEADER_FIELDS):]
        if len(owners) != header[-1]:
            raise DataConsistencyError(
                f"{source} holds {len(owners)} owners, header announces {header[-1]}"
            )
        return cls(*header, owners)

    @classmethod
    def read(cls, path) -> Distribution:
        """Read the binary layout."""
        values = read_int32(path)
        return cls.from_values(values.tolist(), source=str(path))

    def write(self, path):
        """Write the binary layout."""
        values = np.concatenate([np.array(self.header, dtype=np.int64), self._owners])
        values.astype(FILE_DTYPE).tofile(Path(path))
        log.debug(f"Wrote distribution to {path}")

    @classmethod
    def from_text(cls, path) -> Distribution:
        """Read the text layout (one integer per line)."""
        values = []
        with open(path) as f:
            for number, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    values.append(int(line))
                except ValueError:
                    raise DataConsistencyError(f"{path}:{number}: not an integer: {line!r}") from None
        return cls.from_values(values, source=str(path))

    def to_text(self, path):
        """Write the text layout (one integer per line)."""
        with open(path, "w") as f:
            for value in self.header:
                f.write(f"{value}\n")
            for value in self._owners:
                f.write(f"{int(value)}\n")

    # =========================================================================
    # Hierarchy
    # =========================================================================

    def to_layers(self, grid: Grid) -> Layers:
        """Rebuild the cluster/node/core/block hierarchy on `grid`.

        Core ``c`` (owner ``c + 1``) belongs to node ``c // cores_per_node``,
        which belongs to cluster ``node // nodes_per_cluster``.
        """
        blocks_per_row = self.blocks_per_row
        if grid.width != blocks_per_row or grid.width * grid.height != self.total_blocks:
            raise ConfigurationError(
                f"Grid {grid.width}x{grid.height} does not match distribution of "
                f"{self.total_blocks} blocks, {blocks_per_row} per row"
            )

        per_core = [[] for _ in range(self.total_cores)]
        for index in np.flatnonzero(self._owners).tolist():
            block = grid.get(index % blocks_per_row, index // blocks_per_row)
            if block is None:
                raise DataConsistencyError(f"Distribution assigns empty grid slot {index}")
            per_core[int(self._owners[index]) - 1].append(block)

        cores = [BlockSet(blocks, i) for i, blocks in enumerate(per_core)]

        nodes = []
        for i in range(self.clusters * self.nodes_per_cluster):
            members = cores[i * self.cores_per_node:(i + 1) * self.cores_per_node]
            node = BlockSet([b for core in members for b in core], i)
            node.add_subsets(members)
            nodes.append(node)

        clusters = []
        for i in range(self.clusters):
            members = nodes[i * self.nodes_per_cluster:(i + 1) * self.nodes_per_cluster]
            cluster = BlockSet([b for node in members for b in node], i)
            cluster.add_subsets(members)
            clusters.append(cluster)

        return build_layers(clusters)
