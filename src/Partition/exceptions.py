"""Error types raised by the partitioning engine.

Three kinds of failure are distinguished:

- ConfigurationError: invalid dimensions, non-dividing block sizes, unknown
  boundary wraps or split methods, subset counts the input cannot satisfy.
- DataConsistencyError: malformed or inconsistent topography/distribution
  content, detected while reading and before any value is used.
- GridInvariantError: the partition construction logic itself is broken
  (e.g. relocating a block into an occupied grid cell).
"""


class PartitionError(Exception):
    """Base class for all partitioning errors."""


class ConfigurationError(PartitionError, ValueError):
    """Invalid parameters supplied to a constructor or entry point."""


class DataConsistencyError(PartitionError, ValueError):
    """Stored topography or distribution content is malformed."""


class GridInvariantError(PartitionError, RuntimeError):
    """Internal invariant violated. Not recoverable."""
