"""
Utilities

Configuration and logging setup shared by the tile pruning pipeline.
"""

from .config import PruneConfig, StyleMode
from .logging_config import configure_logging

__all__ = [
    "PruneConfig",
    "StyleMode",
    "configure_logging"
]
