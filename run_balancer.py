"""
Load Balancing Runner - computes a block distribution for one topography.

Usage:
    uv run python run_balancer.py
    uv run python run_balancer.py -cn experiment/test_topo
    uv run python run_balancer.py cores_per_node=8 method=roughlyrect output=run.dist
    uv run python run_balancer.py -cn experiment/test_topo method=simple,roughlyrect,search --multirun
"""

import logging
import sys
from dataclasses import asdict
from pathlib import Path

import hydra
from omegaconf import DictConfig

# Ensure src directory is in python path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from Partition import (  # noqa: E402
    BalanceParams,
    ConfigurationError,
    Grid,
    LoadBalancer,
    Statistics,
    Topography,
    create_test_topography,
)

log = logging.getLogger(__name__)


def _load_topography(params: BalanceParams) -> Topography:
    """Read the configured topography, or the built-in test topography if none is given."""
    if not params.topography_file:
        log.info("No topography file configured, using the 12x10 test topography")
        topo = create_test_topography(
            params.topography_width // 12, params.topography_height // 10
        )
    else:
        path = Path(hydra.utils.to_absolute_path(params.topography_file))
        topo = Topography.from_file(path, params.topography_width, params.topography_height)

    if (topo.width, topo.height) != (params.topography_width, params.topography_height):
        raise ConfigurationError(
            f"Topography is {topo.width}x{topo.height}, configured "
            f"{params.topography_width}x{params.topography_height}"
        )
    return topo


@hydra.main(config_path="Experiments/hydra-conf", config_name="config", version_base=None)
def main(cfg: DictConfig) -> None:
    """Entry point - balance, then write the distribution and statistics."""
    params = BalanceParams.from_config(cfg)
    log.info(
        f"{params.method}, topography {params.topography_width}x{params.topography_height}, "
        f"blocks {params.block_width}x{params.block_height}, "
        f"{params.clusters}x{params.nodes_per_cluster}x{params.cores_per_node} cores, "
        f"wrap {params.boundary_x}/{params.boundary_y}"
    )

    if not (params.output or params.text_output or params.statistics):
        log.warning("No output selected: set output, text_output or statistics")

    topo = _load_topography(params)
    grid = Grid.from_topography(topo, params.block_width, params.block_height,
                                params.boundary_x, params.boundary_y)

    balancer = LoadBalancer(
        grid,
        clusters=params.clusters,
        nodes_per_cluster=params.nodes_per_cluster,
        cores_per_node=params.cores_per_node,
        method=params.method,
        comparison=params.comparison,
    )
    layers = balancer.split()
    distribution = balancer.get_distribution()

    if params.output:
        path = hydra.utils.to_absolute_path(params.output)
        distribution.write(path)
        log.info(f"Distribution written to {path}")

    if params.text_output:
        path = hydra.utils.to_absolute_path(params.text_output)
        distribution.to_text(path)
        log.info(f"Text distribution written to {path}")

    if params.statistics:
        Statistics(layers).print_statistics(params.statistics)

    log.info(f"Done: {asdict(balancer.metrics)}")


if __name__ == "__main__":
    main()
