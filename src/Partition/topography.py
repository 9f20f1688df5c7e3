"""Ocean bottom topography.

A topography is an immutable ``height x width`` matrix of depth indices
where 0 marks land. It is stored row-major as ``data[y, x]``, matching the
binary file layout (big-endian int32, row ``y`` then column ``x``).
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from .exceptions import ConfigurationError, DataConsistencyError

log = logging.getLogger(__name__)

# On-disk element type
FILE_DTYPE = np.dtype(">i4")


def read_int32(path) -> np.ndarray:
    """Read a whole file of big-endian int32 values.

    Raises
    ------
    DataConsistencyError
        If the file length is not a whole number of values.
    """
    path = Path(path)
    size = path.stat().st_size
    if size % FILE_DTYPE.itemsize:
        raise DataConsistencyError(
            f"{path} is {size} bytes, not a multiple of {FILE_DTYPE.itemsize}"
        )
    return np.fromfile(path, dtype=FILE_DTYPE)


class Topography:
    """Immutable depth field with rectangular aggregate queries.

    Parameters
    ----------
    data : array_like
        2D integer array of shape (height, width); 0 is land.

    Examples
    --------
    >>> topo = Topography.from_file("kmt.bin", width=3600, height=2400)
    >>> topo.rectangle_work(0, 0, 60, 60)   # ocean points in a 60x60 block
    """

    def __init__(self, data):
        data = np.array(data, dtype=np.int64)
        if data.ndim != 2 or data.size == 0:
            raise ConfigurationError(f"Topography must be a non-empty 2D array, got shape {data.shape}")

        data.flags.writeable = False
        self._data = data
        self.height, self.width = data.shape
        self.max = int(data.max())
        self.min = int(data.min())

        nonzero = data[data != 0]
        log.debug(
            f"Topography {self.width}x{self.height}: {nonzero.size} non-zero points, "
            f"depth sum {int(nonzero.sum())}, range [{self.min}, {self.max}]"
        )

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def from_file(cls, path, width: int, height: int) -> Topography:
        """Read a topography from the raw big-endian int32 layout.

        Parameters
        ----------
        path : str or Path
            Binary topography file (no header).
        width, height : int
            Topography dimensions in grid points.

        Returns
        -------
        Topography
            Loaded topography.
        """
        if width <= 0 or height <= 0:
            raise ConfigurationError(f"Invalid topography size {width}x{height}")

        values = read_int32(path)
        if values.size != width * height:
            raise DataConsistencyError(
                f"Topography file {path} holds {values.size} values, expected {width}x{height}"
            )
        if values.min() < 0:
            raise DataConsistencyError(f"Topography file {path} holds negative depth {int(values.min())}")
        return cls(values.reshape(height, width))

    def downscale(self, block_width: int, block_height: int) -> Topography:
        """Block-wise sum onto a coarser topography (one point per block)."""
        if block_width <= 0 or block_height <= 0:
            raise ConfigurationError(f"Invalid block size {block_width}x{block_height}")
        if self.width % block_width or self.height % block_height:
            raise ConfigurationError(
                f"Block size {block_width}x{block_height} does not divide topography "
                f"{self.width}x{self.height}"
            )
        blocks = self._data.reshape(self.height // block_height, block_height,
                                    self.width // block_width, block_width)
        return Topography(blocks.sum(axis=(1, 3)))

    def write(self, path):
        """Write the raw big-endian int32 layout."""
        self._data.astype(FILE_DTYPE).tofile(Path(path))

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def data(self) -> np.ndarray:
        """Read-only view of the depth matrix, indexed [y, x]."""
        return self._data

    def get(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Point ({x}, {y}) outside topography {self.width}x{self.height}")
        return int(self._data[y, x])

    def _rectangle(self, x: int, y: int, w: int, h: int) -> np.ndarray:
        # Clipped to the topography, like the block footprints at the edges
        x0, y0 = max(x, 0), max(y, 0)
        return self._data[y0:max(y + h, y0), x0:max(x + w, x0)]

    def rectangle_sum(self, x: int, y: int, w: int, h: int) -> int:
        return int(self._rectangle(x, y, w, h).sum())

    def rectangle_max(self, x: int, y: int, w: int, h: int) -> int:
        region = self._rectangle(x, y, w, h)
        return int(region.max()) if region.size else 0

    def rectangle_average(self, x: int, y: int, w: int, h: int) -> int:
        """Integer average over the rectangle, 0 when it is empty."""
        region = self._rectangle(x, y, w, h)
        return int(region.sum()) // region.size if region.size else 0

    def rectangle_work(self, x: int, y: int, w: int, h: int) -> int:
        """Number of ocean points (value > 0) in the rectangle."""
        return int(np.count_nonzero(self._rectangle(x, y, w, h) > 0))

    def active_blocks(self, block_width: int, block_height: int) -> int:
        """Number of blocks of the given size containing at least one ocean point."""
        if self.width % block_width or self.height % block_height:
            raise ConfigurationError(
                f"Block size {block_width}x{block_height} does not divide topography "
                f"{self.width}x{self.height}"
            )
        blocks = self._data.reshape(self.height // block_height, block_height,
                                    self.width // block_width, block_width)
        return int(np.count_nonzero((blocks > 0).any(axis=(1, 3))))

    def __repr__(self):
        return f"Topography(width={self.width}, height={self.height}, min={self.min}, max={self.max})"
