"""Tests for boundary wrapping and halo message sizes."""

import pytest
from Partition import ConfigurationError, Coordinate, Direction, Neighbours, create_test_topography

DIRECTIONS = list(Direction)


def make_neighbours(boundary_x="cyclic", boundary_y="tripole", bw=1, bh=1):
    topo = create_test_topography(bw, bh)
    return Neighbours(topo, 12, 10, bw, bh, boundary_x, boundary_y)


class TestDirection:
    """Tests for compass directions."""

    def test_offsets(self):
        assert (Direction.NORTH.dx, Direction.NORTH.dy) == (0, 1)
        assert (Direction.SOUTHWEST.dx, Direction.SOUTHWEST.dy) == (-1, -1)

    @pytest.mark.parametrize("direction", DIRECTIONS)
    def test_opposite(self, direction):
        assert direction.opposite.opposite is direction
        assert direction.opposite.value == (-direction.dx, -direction.dy)


class TestTripoleFold:
    """Tests for the folded northern seam."""

    def test_north_folds_onto_same_row(self):
        """North of (x, H-1) is (W-x-1, H-1)."""
        nb = make_neighbours()
        target, folded = nb.resolve(Coordinate(2, 9), Direction.NORTH)

        assert folded
        assert target == Coordinate(9, 9)
        assert nb.neighbour(Coordinate(2, 9), Direction.NORTH) == 118

    @pytest.mark.parametrize("x", range(12))
    def test_fold_formula(self, x):
        nb = make_neighbours()
        target, _ = nb.resolve(Coordinate(x, 9), Direction.NORTH)
        assert target == Coordinate(12 - x - 1, 9)

    def test_diagonals(self):
        """NE and NW fold to the mirrored column shifted by the offset."""
        nb = make_neighbours()
        assert nb.resolve(Coordinate(2, 9), Direction.NORTHEAST)[0] == Coordinate(8, 9)
        assert nb.resolve(Coordinate(2, 9), Direction.NORTHWEST)[0] == Coordinate(10, 9)

    @pytest.mark.parametrize("x", range(12))
    def test_fold_is_an_involution(self, x):
        """Folding twice in the same direction returns to the start."""
        nb = make_neighbours()
        c = Coordinate(x, 9)

        for d in (Direction.NORTHWEST, Direction.NORTH, Direction.NORTHEAST):
            target, _ = nb.resolve(c, d)
            assert nb.resolve(target, d)[0] == c

    def test_tripole_message_size(self):
        """Folded messages carry blockWidth*(HALO+1) values to an ocean target."""
        nb = make_neighbours(bw=2, bh=3)

        assert nb.message_size(Coordinate(2, 9), Direction.NORTH) == 2 * 3
        # (10, 9) is land
        assert nb.message_size(Coordinate(2, 9), Direction.NORTHWEST) == 0

    def test_no_south_neighbour(self):
        nb = make_neighbours()
        assert nb.neighbour(Coordinate(5, 0), Direction.SOUTH) == 0
        assert nb.resolve(Coordinate(5, 0), Direction.SOUTHEAST) is None

    def test_rows_below_seam_unaffected(self):
        nb = make_neighbours()
        target, folded = nb.resolve(Coordinate(2, 8), Direction.NORTH)
        assert not folded
        assert target == Coordinate(2, 9)


class TestWrapping:
    """Tests for CLOSED and CYCLIC edges."""

    def test_cyclic_x(self):
        nb = make_neighbours("cyclic", "closed")

        assert nb.neighbour(Coordinate(0, 5), Direction.WEST) == 5 * 12 + 11 + 1
        assert nb.neighbour(Coordinate(11, 5), Direction.EAST) == 5 * 12 + 0 + 1
        assert nb.resolve(Coordinate(0, 5), Direction.NORTHWEST)[0] == Coordinate(11, 6)

    def test_cyclic_y(self):
        """Cyclic Y connects the top row to the bottom row."""
        nb = make_neighbours("closed", "cyclic")

        assert nb.resolve(Coordinate(5, 9), Direction.NORTH) == (Coordinate(5, 0), False)
        assert nb.resolve(Coordinate(5, 0), Direction.SOUTH) == (Coordinate(5, 9), False)

    def test_closed(self):
        nb = make_neighbours("closed", "closed")

        assert nb.neighbour(Coordinate(0, 5), Direction.WEST) == 0
        assert nb.neighbour(Coordinate(11, 5), Direction.NORTHEAST) == 0
        assert nb.neighbour(Coordinate(2, 9), Direction.NORTH) == 0
        assert nb.neighbour(Coordinate(5, 0), Direction.SOUTH) == 0

    def test_tripole_x_rejected(self):
        with pytest.raises(ConfigurationError):
            make_neighbours("tripole", "tripole")


class TestMessageSizes:
    """Tests for halo message sizes."""

    def test_sizes_by_direction(self):
        """East/west, north/south and corner sizes for 2x3 blocks."""
        nb = make_neighbours("closed", "closed", bw=2, bh=3)
        c = Coordinate(5, 5)

        assert nb.message_size(c, Direction.EAST) == 3 * 2
        assert nb.message_size(c, Direction.NORTH) == 2 * 2
        assert nb.message_size(c, Direction.NORTHEAST) == 2 * 2

    def test_land_target(self):
        """A land neighbour keeps its id but receives nothing."""
        nb = make_neighbours()
        c = Coordinate(2, 1)

        assert nb.neighbour(c, Direction.WEST) == 1 * 12 + 1 + 1
        assert nb.message_size(c, Direction.WEST) == 0

    def test_land_source(self):
        """Land blocks have neighbour ids but no communication."""
        nb = make_neighbours()
        c = Coordinate(1, 1)

        assert not nb.is_ocean(1, 1)
        assert nb.communication(c) == ((0, 0, 0), (0, 0, 0), (0, 0, 0))
        assert nb.neighbours(c)[0][1] == 2 * 12 + 1 + 1

    @pytest.mark.parametrize("boundary_x,boundary_y", [
        ("closed", "closed"),
        ("cyclic", "closed"),
        ("cyclic", "cyclic"),
        ("cyclic", "tripole"),
    ])
    def test_symmetric(self, boundary_x, boundary_y):
        """Every ocean pair exchanges the same amount both ways."""
        nb = make_neighbours(boundary_x, boundary_y, bw=2, bh=3)

        for y in range(10):
            for x in range(12):
                if not nb.is_ocean(x, y):
                    continue
                c = Coordinate(x, y)
                for d in DIRECTIONS:
                    resolved = nb.resolve(c, d)
                    if resolved is None:
                        continue
                    target, folded = resolved
                    back = d if folded else d.opposite
                    assert nb.resolve(target, back)[0] == c
                    if nb.is_ocean(target.x, target.y):
                        assert nb.message_size(c, d) == nb.message_size(target, back) > 0
                    else:
                        assert nb.message_size(c, d) == 0
