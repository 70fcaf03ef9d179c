"""
Monitoring Module

Prometheus metrics for the tile pruning pass.
"""

from .metrics import MetricsCollector

__all__ = [
    "MetricsCollector"
]
