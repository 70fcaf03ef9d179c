"""
Tile Prune

Shrinks vector map tiles by removing every source-layer and feature that a
given cartographic style would not render, without visible change to the map.
"""

__version__ = "1.0.0"

from . import style
from . import pruning
from . import monitoring
from . import utils
from .exceptions import MissingLayersError, StyleError, StyleParseError, StyleReadError
from .style import FeatureView, FilterResult, StyleDocument, read_style

__all__ = [
    "style",
    "pruning",
    "monitoring",
    "utils",
    "StyleError",
    "StyleReadError",
    "StyleParseError",
    "MissingLayersError",
    "FeatureView",
    "FilterResult",
    "StyleDocument",
    "read_style"
]
