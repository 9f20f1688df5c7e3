"""Block sets and the layer hierarchy built from them.

A BlockSet is an ordered, bounding-boxed group of blocks. Its external
neighbours and its communication (sum of halo message sizes leaving the
set) are computed once, on first access, and cached.

A Layer is a named list of sets representing one level of the partition
(e.g. one set per core); Layers maps names to layers.
"""

from __future__ import annotations

import logging
from functools import cached_property
from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional, Sequence, Tuple

from .datastructures import Block, Coordinate
from .exceptions import ConfigurationError

log = logging.getLogger(__name__)

# Offsets of the eight grid-adjacent cells
_ADJACENT = tuple((dx, dy) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dx, dy) != (0, 0))


class Line(NamedTuple):
    """Unit segment of a set outline, in block coordinates."""

    start: Coordinate
    end: Coordinate


class BlockSet:
    """Ordered, deduplicated group of blocks.

    Blocks are sorted by (y, x). The bounding box is the tightest box around
    all blocks; an empty set has a bounding box of zeros.

    Parameters
    ----------
    blocks : iterable of Block
        Member blocks; duplicates (same coordinate) are dropped.
    index : int
        Position of this set within its layer.
    """

    def __init__(self, blocks: Iterable[Block] = (), index: int = 0):
        self.index = index

        unique = {b.coordinate: b for b in blocks}
        self._blocks: Tuple[Block, ...] = tuple(unique[c] for c in sorted(unique))
        self._by_coordinate: Dict[Coordinate, Block] = dict(unique)
        self._ids = frozenset(b.block_id for b in self._blocks)
        self._subsets: List[BlockSet] = []

        if self._blocks:
            xs = [b.x for b in self._blocks]
            ys = [b.y for b in self._blocks]
            self.min_x, self.max_x = min(xs), max(xs)
            self.min_y, self.max_y = min(ys), max(ys)
        else:
            self.min_x = self.max_x = self.min_y = self.max_y = 0

    # =========================================================================
    # Membership and geometry
    # =========================================================================

    @property
    def size(self) -> int:
        return len(self._blocks)

    def __len__(self):
        return len(self._blocks)

    def __iter__(self) -> Iterator[Block]:
        return iter(self._blocks)

    @property
    def blocks(self) -> Tuple[Block, ...]:
        return self._blocks

    @property
    def width(self) -> int:
        return self.max_x - self.min_x + 1

    @property
    def height(self) -> int:
        return self.max_y - self.min_y + 1

    def block(self, index: int) -> Block:
        """Block at position `index` in (y, x) order."""
        if not 0 <= index < len(self._blocks):
            raise IndexError(f"Invalid block index: {index}")
        return self._blocks[index]

    def get(self, x: int, y: int) -> Optional[Block]:
        """Member block at (x, y), or None."""
        if x < self.min_x or x > self.max_x or y < self.min_y or y > self.max_y:
            return None
        return self._by_coordinate.get(Coordinate(x, y))

    def contains(self, x: int, y: int) -> bool:
        return self.get(x, y) is not None

    def contains_block(self, block_id: int) -> bool:
        return block_id in self._ids

    def __contains__(self, block: Block) -> bool:
        return self._by_coordinate.get(block.coordinate) == block

    def is_on_edge(self, block: Block) -> bool:
        """True if any of the eight cells around `block` is outside the set."""
        return any(not self.contains(block.x + dx, block.y + dy) for dx, dy in _ADJACENT)

    # =========================================================================
    # Communication
    # =========================================================================

    @cached_property
    def _halo(self) -> Tuple[Tuple[int, ...], int]:
        neighbours: Dict[int, None] = {}
        communication = 0

        for block in self._blocks:
            if not self.is_on_edge(block):
                continue
            for ids, sizes in zip(block.neighbours, block.communication):
                for nid, size in zip(ids, sizes):
                    if nid > 0 and nid not in self._ids:
                        communication += size
                        neighbours[nid] = None

        return tuple(neighbours), communication

    @property
    def neighbours(self) -> Tuple[int, ...]:
        """Distinct ids of blocks outside the set that border it."""
        return self._halo[0]

    @property
    def communication(self) -> int:
        """Total halo message size crossing the set boundary."""
        return self._halo[1]

    def edges(self) -> List[Line]:
        """Outline segments between member blocks and neighbouring non-members."""
        result = []
        for b in self._blocks:
            c = b.coordinate
            north, west, east, south = b.neighbour(0, 1), b.neighbour(-1, 0), b.neighbour(1, 0), b.neighbour(0, -1)

            # Id 0 (off the grid) is never a member, so grid borders are outline too
            if north not in self._ids:
                result.append(Line(c.offset(0, 1), c.offset(1, 1)))
            if west not in self._ids:
                result.append(Line(c, c.offset(0, 1)))
            if east not in self._ids:
                result.append(Line(c.offset(1, 0), c.offset(1, 1)))
            if south not in self._ids:
                result.append(Line(c, c.offset(1, 0)))
        return result

    # =========================================================================
    # Hierarchy bookkeeping
    # =========================================================================

    def add_subset(self, subset: BlockSet):
        if subset is None:
            raise ConfigurationError("Cannot add None as subset")
        self._subsets.append(subset)

    def add_subsets(self, subsets: Iterable[BlockSet]):
        for s in subsets:
            self.add_subset(s)

    @property
    def subsets(self) -> List[BlockSet]:
        return list(self._subsets)

    def count_subsets(self) -> int:
        return len(self._subsets)

    def __repr__(self):
        return (f"BlockSet(index={self.index}, size={self.size}, "
                f"bbox=({self.min_x}, {self.max_x}, {self.min_y}, {self.max_y}))")


class Layer:
    """Named collection of sets forming one level of the partition."""

    def __init__(self, name: str, sets: Iterable[BlockSet] = ()):
        self.name = name
        self._sets: List[BlockSet] = []
        for s in sets:
            self.add(s)

    def add(self, block_set: BlockSet):
        if block_set is None:
            raise ConfigurationError("Set may not be None")
        self._sets.append(block_set)

    def add_all(self, sets: Iterable[BlockSet]):
        sets = list(sets)
        if not sets:
            raise ConfigurationError(f"No sets to add to layer {self.name}")
        for s in sets:
            self.add(s)

    def get(self, index: int) -> BlockSet:
        if not 0 <= index < len(self._sets):
            raise IndexError(f"Invalid set index {index} in layer {self.name}")
        return self._sets[index]

    def locate(self, x: int, y: int) -> Optional[BlockSet]:
        """Set containing the block at (x, y), or None."""
        for s in self._sets:
            if s.contains(x, y):
                return s
        return None

    @property
    def size(self) -> int:
        return len(self._sets)

    def __len__(self):
        return len(self._sets)

    def __iter__(self) -> Iterator[BlockSet]:
        return iter(self._sets)

    def __repr__(self):
        return f"Layer(name={self.name!r}, sets={len(self._sets)})"


class Layers:
    """Lookup table of layers keyed by name."""

    def __init__(self):
        self._layers: Dict[str, Layer] = {}

    def add(self, layer: Layer):
        log.debug(f"Add layer {layer.name} with {layer.size} sets at position {len(self._layers)}")
        self._layers[layer.name] = layer

    def get(self, name: str) -> Optional[Layer]:
        if name is None:
            raise ConfigurationError("A layer name must be provided")
        return self._layers.get(name)

    def __getitem__(self, name: str) -> Layer:
        return self._layers[name]

    def contains(self, name: str) -> bool:
        if name is None:
            raise ConfigurationError("A layer name must be provided")
        return name in self._layers

    def __contains__(self, name) -> bool:
        return name in self._layers

    def names(self) -> List[str]:
        return list(self._layers)

    @property
    def size(self) -> int:
        return len(self._layers)

    def __len__(self):
        return len(self._layers)


def build_layers(clusters: Sequence[BlockSet]) -> Layers:
    """Flatten a cluster -> node -> core containment tree into Layers.

    Each cluster set must hold its node sets as subsets, and each node set
    its core sets. Sets are re-indexed by their position in their layer.

    Parameters
    ----------
    clusters : sequence of BlockSet
        Top-level sets of the hierarchy.

    Returns
    -------
    Layers
        Layers named ALL, BLOCKS, CORES, NODES and CLUSTERS.
    """
    nodes = [n for c in clusters for n in c.subsets]
    cores = [core for n in nodes for core in n.subsets]
    blocks = sorted((b for core in cores for b in core), key=lambda b: b.block_id)

    for layer_sets in (clusters, nodes, cores):
        for index, s in enumerate(layer_sets):
            s.index = index

    layers = Layers()
    layers.add(Layer("ALL", [BlockSet(blocks, 0)]))
    layers.add(Layer("BLOCKS", [BlockSet([b], b.block_id - 1) for b in blocks]))
    layers.add(Layer("CORES", cores))
    layers.add(Layer("NODES", nodes))
    layers.add(Layer("CLUSTERS", clusters))
    return layers
