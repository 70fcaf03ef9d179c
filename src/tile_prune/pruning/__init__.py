"""
Pruning Module

Style-driven rewriting of vector tiles. Drops source-layers a style never
draws at a tile's zoom and features no style rule would paint.
"""

from .tile_pruner import PrunedTile, TileCoord, TilePruner

__all__ = [
    "PrunedTile",
    "TileCoord",
    "TilePruner"
]
