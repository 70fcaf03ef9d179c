"""
Unit Tests for Configuration, Logging and Metrics
"""

import json
import unittest
from pathlib import Path
from unittest.mock import patch

from tile_prune.monitoring.metrics import MetricsCollector
from tile_prune.utils.config import PruneConfig, StyleMode
from tile_prune.utils.logging_config import configure_logging


class TestStyleMode(unittest.TestCase):
    """Parsing style modes."""

    def test_parse(self):
        self.assertIs(StyleMode.parse("none"), StyleMode.NONE)
        self.assertIs(StyleMode.parse("layer"), StyleMode.LAYER)
        self.assertIs(StyleMode.parse(" Layer+Filter "), StyleMode.LAYER_FILTER)

    def test_invalid(self):
        with self.assertRaises(ValueError) as context:
            StyleMode.parse("everything")
        self.assertIn("layer+filter", str(context.exception))


class TestPruneConfig(unittest.TestCase):
    """Config defaults and sources."""

    def test_defaults(self):
        config = PruneConfig()
        self.assertIsNone(config.style_path)
        self.assertIs(config.style_mode, StyleMode.LAYER_FILTER)
        self.assertTrue(config.keep_unknown)
        self.assertEqual(config.max_workers, 4)
        self.assertEqual(config.max_tile_bytes, 1_280_000)

    def test_from_env(self):
        config = PruneConfig.from_env({
            "TILE_PRUNE_STYLE": "style.json",
            "TILE_PRUNE_STYLE_MODE": "layer",
            "TILE_PRUNE_KEEP_UNKNOWN": "false",
            "TILE_PRUNE_THREADS": "8",
            "TILE_PRUNE_MAX_TILE_BYTES": "2048",
            "TILE_PRUNE_LOG_LEVEL": "debug",
        })
        self.assertEqual(config.style_path, Path("style.json"))
        self.assertIs(config.style_mode, StyleMode.LAYER)
        self.assertFalse(config.keep_unknown)
        self.assertEqual(config.max_workers, 8)
        self.assertEqual(config.max_tile_bytes, 2048)
        self.assertEqual(config.log_level, "DEBUG")

    def test_from_process_environment(self):
        with patch.dict("os.environ", {"TILE_PRUNE_THREADS": "3"}, clear=True):
            config = PruneConfig.from_env()
        self.assertEqual(config.max_workers, 3)
        self.assertIs(config.style_mode, StyleMode.LAYER_FILTER)

    def test_from_dict_invalid_values(self):
        for values in (
            {"max_workers": "many"},
            {"max_workers": 0},
            {"keep_unknown": "maybe"},
            {"style_mode": "all"},
        ):
            with self.subTest(values=values):
                with self.assertRaises(ValueError):
                    PruneConfig.from_dict(values)

    def test_direct_validation(self):
        with self.assertRaises(ValueError):
            PruneConfig(max_workers=0)


class TestMetricsCollector(unittest.TestCase):
    """Prometheus-backed metrics."""

    def setUp(self):
        self.metrics = MetricsCollector()

    def test_counters(self):
        self.metrics.increment_counter('features_total', 5, {'result': 'kept'})
        self.metrics.increment_counter('features_total', 2, {'result': 'kept'})
        self.assertEqual(self.metrics.get_sample_value('features_total', {'result': 'kept'}), 7)
        self.assertEqual(self.metrics.get_sample_value('features_total', {'result': 'dropped'}), 0)

    def test_unknown_metric_is_ignored(self):
        self.metrics.increment_counter('nope')
        self.metrics.record_histogram('nope', 1.0)

    def test_collectors_are_independent(self):
        other = MetricsCollector()
        self.metrics.increment_counter('tiles_total', labels={'status': 'pruned'})
        self.assertEqual(other.get_sample_value('tiles_total', {'status': 'pruned'}), 0)

    def test_export(self):
        self.metrics.record_histogram('duration_seconds', 0.25)
        text = self.metrics.export_metrics("prometheus")
        self.assertIn("tile_prune_duration_seconds_count 1.0", text)

        exported = json.loads(self.metrics.export_metrics("json"))
        names = {sample['name'] for sample in exported['metrics']}
        self.assertIn("tile_prune_duration_seconds_sum", names)

        with self.assertRaises(ValueError):
            self.metrics.export_metrics("xml")


class TestConfigureLogging(unittest.TestCase):
    """Logging setup."""

    def test_configure_logging(self):
        with patch("structlog.configure") as mock_configure:
            configure_logging("debug")
        mock_configure.assert_called_once()
        processors = mock_configure.call_args.kwargs["processors"]
        self.assertTrue(len(processors) > 0)


if __name__ == '__main__':
    unittest.main(verbosity=2)
