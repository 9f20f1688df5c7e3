"""Per-layer partition statistics."""

from __future__ import annotations

import sys
from typing import Dict, List

import pandas as pd

from .exceptions import ConfigurationError
from .sets import Layer, Layers

# Layers reported for the name "ALL"
SUMMARY_LAYERS = ("CLUSTERS", "NODES", "CORES")


class Statistics:
    """Size and communication of every set in a layer hierarchy.

    Parameters
    ----------
    layers : Layers
        Hierarchy produced by LoadBalancer.split or Distribution.to_layers.
    """

    def __init__(self, layers: Layers):
        self.layers = layers

    def layer(self, name: str) -> Layer:
        layer = self.layers.get(name)
        if layer is None:
            raise ConfigurationError(f"Layer {name} not found")
        return layer

    def _selected(self, name: str) -> List[Layer]:
        if name.upper() == "ALL":
            return [self.layers[n] for n in SUMMARY_LAYERS if n in self.layers]
        return [self.layer(name)]

    def to_dataframe(self, name: str) -> pd.DataFrame:
        """One row per set: bounding box, size, neighbours and communication."""
        rows = []
        for s in self.layer(name):
            rows.append({
                "index": s.index,
                "min_x": s.min_x,
                "max_x": s.max_x,
                "min_y": s.min_y,
                "max_y": s.max_y,
                "blocks": s.size,
                "neighbours": len(s.neighbours),
                "communication": s.communication,
            })
        return pd.DataFrame(rows)

    def summary(self, name: str) -> Dict[str, float]:
        """Aggregate balance and communication of a layer."""
        df = self.to_dataframe(name)
        return {
            "sets": len(df),
            "min_blocks": int(df["blocks"].min()),
            "max_blocks": int(df["blocks"].max()),
            "mean_blocks": float(df["blocks"].mean()),
            "total_communication": int(df["communication"].sum()),
            "max_communication": int(df["communication"].max()),
        }

    def print_statistics(self, name: str, output=None):
        """Print the per-set report of a layer, or of CLUSTERS, NODES and CORES for 'ALL'."""
        output = output or sys.stdout
        for layer in self._selected(name):
            print(f"Statistics for layer: {layer.name}", file=output)
            print(f"  Sets: {layer.size}", file=output)
            for i, s in enumerate(layer):
                print(f"   {i} ({s.min_x},{s.min_y}) - ({s.max_x},{s.max_y}) {s.size} {s.communication}",
                      file=output)
