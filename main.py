#!/usr/bin/env python3
"""Main entry point for distribution tools - CLI driven."""

import argparse
import logging
import sys
from pathlib import Path

# Ensure src directory is in python path
sys.path.append(str(Path(__file__).parent / "src"))

from Partition import (  # noqa: E402
    Distribution,
    Grid,
    Statistics,
    Topography,
    create_test_topography,
    near_optimal,
    prime_factors,
    rank_block_sizes,
)

log = logging.getLogger(__name__)


def create_test_topo(path: str, block_size: int):
    """Write the 12x10 test topography, every point scaled to a square block."""
    topo = create_test_topography(block_size, block_size)
    topo.write(path)
    print(f"  ✓ Test topography {topo.width}x{topo.height} written to {path}")


def to_text(source: str, target: str):
    """Convert a binary distribution to text."""
    Distribution.read(source).to_text(target)
    print(f"  ✓ {source} -> {target}")


def from_text(source: str, target: str):
    """Convert a text distribution to binary."""
    Distribution.from_text(source).write(target)
    print(f"  ✓ {source} -> {target}")


def print_statistics(distribution_file: str, topography_file: str, layer: str,
                     boundary_x: str, boundary_y: str):
    """Rebuild the hierarchy of a stored distribution and print one layer."""
    d = Distribution.read(distribution_file)
    topo = Topography.from_file(topography_file, d.topography_width, d.topography_height)
    grid = Grid.from_topography(topo, d.block_width, d.block_height, boundary_x, boundary_y)
    Statistics(d.to_layers(grid)).print_statistics(layer)


def optimize_block_size(topography_file: str, width: int, height: int, min_size: int):
    """Rank the block sizes that divide the topography by computed points."""
    topo = Topography.from_file(topography_file, width, height)
    ranking = rank_block_sizes(topo, min_size=min_size)

    best = ranking.iloc[0]
    print(f"# Best block size {best.block_width} x {best.block_height} => {best.cost} work")
    print("# Solutions within 2.5% of best")
    for row in near_optimal(ranking).itertuples():
        print(f"[{row.within * 100:.1f}] {row.block_width}x{row.block_height} "
              f"{row.blocks} blocks {row.cost}")


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Distribution tools for the ocean grid load balancer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    actions = parser.add_argument_group("Actions")
    actions.add_argument("--create-test-topo", metavar="PATH", help="Write the 12x10 test topography")
    actions.add_argument("--to-text", nargs=2, metavar=("DIST", "TEXT"), help="Convert a distribution to text")
    actions.add_argument("--from-text", nargs=2, metavar=("TEXT", "DIST"), help="Convert text to a distribution")
    actions.add_argument("--statistics", nargs=3, metavar=("DIST", "TOPO", "LAYER"),
                         help="Print statistics of a stored distribution (LAYER may be ALL)")
    actions.add_argument("--optimize-blocksize", nargs=3, metavar=("TOPO", "WIDTH", "HEIGHT"),
                         help="Find the block size with the least computed points")
    actions.add_argument("--factor", type=int, metavar="N", help="Print the prime factors of N")

    options = parser.add_argument_group("Options")
    options.add_argument("--block-size", type=int, default=1, help="Test topography block size (default: 1)")
    options.add_argument("--min-size", type=int, default=1, help="Smallest block size to consider (default: 1)")
    options.add_argument("--boundary-x", default="cyclic", help="X wrap for --statistics (default: cyclic)")
    options.add_argument("--boundary-y", default="tripole", help="Y wrap for --statistics (default: tripole)")
    options.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    if len(sys.argv) == 1:
        parser.print_help()
        sys.exit(1)

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="[%(levelname)s] %(message)s")

    if args.create_test_topo:
        create_test_topo(args.create_test_topo, args.block_size)

    if args.to_text:
        to_text(*args.to_text)

    if args.from_text:
        from_text(*args.from_text)

    if args.statistics:
        print_statistics(*args.statistics, args.boundary_x, args.boundary_y)

    if args.optimize_blocksize:
        path, width, height = args.optimize_blocksize
        optimize_block_size(path, int(width), int(height), args.min_size)

    if args.factor is not None:
        print(" ".join(str(f) for f in prime_factors(args.factor)))


if __name__ == "__main__":
    main()
