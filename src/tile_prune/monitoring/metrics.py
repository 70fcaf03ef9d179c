"""
Metrics Collection

Prometheus counters and histograms for the tile pruning pass. Each collector
owns a private registry, so independent pruners (and tests) never share
metric state.
"""

import json
import threading
from typing import Dict, List, Optional, Union

import structlog
from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest


class MetricsCollector:
    """Thread-safe wrapper over a private Prometheus registry."""

    def __init__(self, namespace: str = "tile_prune"):
        self.namespace = namespace
        self.logger = structlog.get_logger(collector_type="MetricsCollector")
        self.registry = CollectorRegistry()
        self.lock = threading.RLock()

        self.counters: Dict[str, Counter] = {}
        self.histograms: Dict[str, Histogram] = {}

        self._create_metric(
            'counter', 'tiles_total',
            'Tiles processed by the pruning pass',
            ['status']
        )
        self._create_metric(
            'counter', 'layers_total',
            'Tile layers kept or dropped',
            ['result']
        )
        self._create_metric(
            'counter', 'features_total',
            'Tile features by pruning decision',
            ['result']
        )
        self._create_metric(
            'counter', 'unknown_features_total',
            'Features whose keep decision was unknown'
        )
        self._create_metric(
            'counter', 'unknown_occurrences_total',
            'Style layers whose filter was unknown for a feature'
        )
        self._create_metric(
            'histogram', 'duration_seconds',
            'Time spent pruning one tile'
        )

    def _create_metric(
        self,
        metric_type: str,
        name: str,
        description: str,
        labels: Optional[List[str]] = None
    ) -> None:
        full_name = f"{self.namespace}_{name}"
        if metric_type == 'counter':
            self.counters[name] = Counter(
                full_name, description, labels or [],
                registry=self.registry
            )
        elif metric_type == 'histogram':
            self.histograms[name] = Histogram(
                full_name, description, labels or [],
                registry=self.registry
            )
        else:
            raise ValueError(f"Unsupported metric type: {metric_type}")

    def increment_counter(
        self,
        name: str,
        value: Union[int, float] = 1,
        labels: Optional[Dict[str, str]] = None
    ) -> None:
        if name not in self.counters:
            self.logger.warning("Unknown counter", metric_name=name)
            return
        with self.lock:
            counter = self.counters[name]
            if labels:
                counter.labels(**labels).inc(value)
            else:
                counter.inc(value)

    def record_histogram(
        self,
        name: str,
        value: Union[int, float],
        labels: Optional[Dict[str, str]] = None
    ) -> None:
        if name not in self.histograms:
            self.logger.warning("Unknown histogram", metric_name=name)
            return
        with self.lock:
            histogram = self.histograms[name]
            if labels:
                histogram.labels(**labels).observe(value)
            else:
                histogram.observe(value)

    def get_sample_value(
        self,
        name: str,
        labels: Optional[Dict[str, str]] = None
    ) -> float:
        """Current value of a sample, e.g. ``features_total``; 0.0 if never recorded."""
        value = self.registry.get_sample_value(f"{self.namespace}_{name}", labels or {})
        return value if value is not None else 0.0

    def export_metrics(self, format: str = "prometheus") -> str:
        """Export metrics in Prometheus text format or as JSON."""
        if format.lower() == "prometheus":
            return generate_latest(self.registry).decode('utf-8')

        if format.lower() == "json":
            samples = []
            for metric in self.registry.collect():
                for sample in metric.samples:
                    samples.append({
                        'name': sample.name,
                        'labels': sample.labels,
                        'value': sample.value
                    })
            return json.dumps({'metrics': samples}, indent=2)

        raise ValueError(f"Unsupported export format: {format}")
