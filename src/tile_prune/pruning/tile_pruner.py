"""
Tile Pruner

Rewrites Mapbox Vector Tiles so that only what a style would actually draw
survives. Each tile is decoded, every source-layer and feature is checked
against a shared read-only ``StyleDocument``, and the surviving features are
re-encoded.

This module handles:
- Layer-level pruning (source-layers unused or hidden at the tile's zoom)
- Feature-level pruning through style filter evaluation
- Gzip-compressed tile blobs as stored in MBTiles
- Concurrent pruning of many tiles with a thread pool
"""

import gzip
import time
import concurrent.futures
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import mapbox_vector_tile
import structlog
from shapely.geometry import shape

from ..monitoring.metrics import MetricsCollector
from ..style.document import StyleDocument, read_style
from ..style.evaluator import FilterResult
from ..style.features import FeatureView
from ..utils.config import PruneConfig, StyleMode
from ..utils.logging_config import configure_logging


GZIP_MAGIC = b"\x1f\x8b"
DEFAULT_EXTENT = 4096


@dataclass(frozen=True)
class TileCoord:
    """Address of a single tile."""
    z: int
    x: int
    y: int

    @property
    def tile_id(self) -> str:
        return f"{self.z}/{self.x}/{self.y}"


@dataclass
class PrunedTile:
    """Result of pruning one tile."""
    data: bytes
    layers_kept: List[str] = field(default_factory=list)
    layers_dropped: List[str] = field(default_factory=list)
    features_kept: int = 0
    features_dropped: int = 0
    unknown_features: int = 0
    unknown_occurrences: int = 0


class TilePruner:
    """
    Style-driven vector tile pruner.

    One instance may be used from many threads at once; the style document is
    read-only and statistics updates are funnelled through the calling thread
    in ``prune_tiles``.
    """

    def __init__(
        self,
        style: Optional[StyleDocument],
        config: Optional[PruneConfig] = None,
        metrics: Optional[MetricsCollector] = None
    ):
        """
        Initialize the pruner.

        Args:
            style: Style used to decide what is drawn; None keeps everything
            config: Pruning configuration
            metrics: Optional metrics collector
        """
        self.style = style
        self.config = config or PruneConfig()
        self.metrics = metrics or MetricsCollector()

        self.logger = structlog.get_logger(
            pruner_type="TilePruner",
            style_mode=self.config.style_mode.value
        )

        self.stats = self._empty_stats()

        self.logger.info(
            "Tile pruner initialized",
            source_layers=sorted(style.source_layers()) if style else None,
            keep_unknown=self.config.keep_unknown,
            max_workers=self.config.max_workers
        )

    @classmethod
    def from_config(
        cls,
        config: PruneConfig,
        metrics: Optional[MetricsCollector] = None
    ) -> "TilePruner":
        """
        Build a pruner from configuration alone.

        Configures logging at ``config.log_level`` and reads the style from
        ``config.style_path``; without a style path every tile is kept intact.

        Raises:
            StyleError: the configured style cannot be read
        """
        configure_logging(config.log_level)
        style = read_style(config.style_path) if config.style_path is not None else None
        return cls(style, config, metrics)

    @staticmethod
    def _empty_stats() -> Dict[str, Any]:
        return {
            'tiles_processed': 0,
            'tiles_failed': 0,
            'tiles_oversized': 0,
            'bytes_in': 0,
            'bytes_out': 0,
            'features_kept': 0,
            'features_dropped': 0,
            'unknown_features': 0,
            'unknown_occurrences': 0,
            'errors': []
        }

    def prune_tile(self, data: bytes, zoom: int) -> PrunedTile:
        """
        Prune a single tile blob.

        Args:
            data: Raw or gzip-compressed MVT bytes
            zoom: Zoom level of the tile

        Returns:
            The rewritten tile and per-tile counts
        """
        start_time = time.time()

        compressed = data[:2] == GZIP_MAGIC
        raw = gzip.decompress(data) if compressed else data

        decoded = mapbox_vector_tile.decode(raw)
        result = PrunedTile(data=b"")
        layers_out = []
        layer_options = {}

        for layer_name, layer in decoded.items():
            features = layer.get('features', [])

            if not self._keep_layer(layer_name, zoom):
                result.layers_dropped.append(layer_name)
                result.features_dropped += len(features)
                continue

            kept_features = []
            for feature in features:
                if self._keep_feature(layer_name, zoom, feature, result):
                    kept_features.append(self._prepare_feature(feature))
                else:
                    result.features_dropped += 1

            if not kept_features:
                result.layers_dropped.append(layer_name)
                continue

            result.layers_kept.append(layer_name)
            result.features_kept += len(kept_features)
            layers_out.append({'name': layer_name, 'features': kept_features})
            # coordinates are not rescaled, so each layer keeps its own extent
            layer_options[layer_name] = {'extents': layer.get('extent', DEFAULT_EXTENT)}

        encoded = mapbox_vector_tile.encode(
            layers_out,
            per_layer_options=layer_options,
            default_options={'extents': DEFAULT_EXTENT}
        ) if layers_out else b""
        result.data = gzip.compress(encoded) if compressed else encoded

        self.metrics.record_histogram('duration_seconds', time.time() - start_time)
        self.metrics.increment_counter('layers_total', len(result.layers_kept), {'result': 'kept'})
        self.metrics.increment_counter('layers_total', len(result.layers_dropped), {'result': 'dropped'})
        self.metrics.increment_counter('features_total', result.features_kept, {'result': 'kept'})
        self.metrics.increment_counter('features_total', result.features_dropped, {'result': 'dropped'})
        self.metrics.increment_counter('unknown_features_total', result.unknown_features)
        self.metrics.increment_counter('unknown_occurrences_total', result.unknown_occurrences)

        return result

    def _keep_layer(self, layer_name: str, zoom: int) -> bool:
        if self.style is None or self.config.style_mode is StyleMode.NONE:
            return True
        return self.style.is_layer_visible_on_zoom(layer_name, zoom)

    def _keep_feature(
        self,
        layer_name: str,
        zoom: int,
        feature: Mapping[str, Any],
        result: PrunedTile
    ) -> bool:
        if self.style is None or self.config.style_mode is not StyleMode.LAYER_FILTER:
            return True

        decision, unknown_count = self.style.evaluate_feature(
            layer_name, zoom, FeatureView.from_mvt(feature)
        )
        result.unknown_occurrences += unknown_count

        if decision is FilterResult.TRUE:
            return True
        if decision is FilterResult.UNKNOWN:
            result.unknown_features += 1
            return self.config.keep_unknown
        return False

    @staticmethod
    def _prepare_feature(feature: Mapping[str, Any]) -> Dict[str, Any]:
        """Convert a decoded feature back into the shape ``encode`` accepts."""
        geometry = feature.get('geometry')
        if isinstance(geometry, Mapping):
            geometry = shape(geometry)

        prepared = {
            'geometry': geometry,
            'properties': dict(feature.get('properties') or {})
        }
        if feature.get('id') is not None:
            prepared['id'] = feature['id']
        return prepared

    def prune_tiles(
        self,
        tiles: Mapping[TileCoord, bytes],
        max_workers: Optional[int] = None
    ) -> Dict[TileCoord, bytes]:
        """
        Prune many tiles concurrently.

        A tile that cannot be decoded is passed through unchanged and the
        error is recorded in the statistics.

        Args:
            tiles: Mapping of tile coordinates to tile bytes
            max_workers: Thread pool size, defaults to the configured value

        Returns:
            Mapping of tile coordinates to pruned tile bytes
        """
        start_time = time.time()
        workers = max_workers or self.config.max_workers
        output: Dict[TileCoord, bytes] = {}

        self.logger.info("Starting tile pruning", tiles=len(tiles), max_workers=workers)

        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
            future_to_tile = {
                executor.submit(self.prune_tile, data, coord.z): coord
                for coord, data in tiles.items()
            }

            for future in concurrent.futures.as_completed(future_to_tile):
                coord = future_to_tile[future]
                original = tiles[coord]
                self.stats['bytes_in'] += len(original)

                try:
                    pruned = future.result()
                except Exception as e:
                    self.logger.error(
                        "Error pruning tile",
                        tile_id=coord.tile_id,
                        error=str(e)
                    )
                    self.stats['tiles_failed'] += 1
                    self.stats['errors'].append(f"Tile {coord.tile_id}: {str(e)}")
                    self.metrics.increment_counter('tiles_total', labels={'status': 'failed'})
                    output[coord] = original
                    self.stats['bytes_out'] += len(original)
                    continue

                output[coord] = pruned.data
                self._record_tile(coord, pruned)

        self.logger.info(
            "Tile pruning completed",
            tiles_processed=self.stats['tiles_processed'],
            tiles_failed=self.stats['tiles_failed'],
            bytes_in=self.stats['bytes_in'],
            bytes_out=self.stats['bytes_out'],
            processing_time=time.time() - start_time
        )

        return output

    def _record_tile(self, coord: TileCoord, pruned: PrunedTile) -> None:
        self.stats['tiles_processed'] += 1
        self.stats['bytes_out'] += len(pruned.data)
        self.stats['features_kept'] += pruned.features_kept
        self.stats['features_dropped'] += pruned.features_dropped
        self.stats['unknown_features'] += pruned.unknown_features
        self.stats['unknown_occurrences'] += pruned.unknown_occurrences
        self.metrics.increment_counter('tiles_total', labels={'status': 'pruned'})

        if len(pruned.data) > self.config.max_tile_bytes:
            self.stats['tiles_oversized'] += 1
            self.logger.warning(
                "Tile exceeds size limit after pruning",
                tile_id=coord.tile_id,
                size=len(pruned.data),
                max_tile_bytes=self.config.max_tile_bytes
            )

        self.logger.debug(
            "Pruned tile",
            tile_id=coord.tile_id,
            layers_kept=pruned.layers_kept,
            layers_dropped=pruned.layers_dropped,
            features_dropped=pruned.features_dropped
        )

    def get_prune_stats(self) -> Dict[str, Any]:
        """Get pruning statistics."""
        return self.stats.copy()

    def reset_stats(self) -> None:
        """Reset pruning statistics."""
        self.stats = self._empty_stats()
