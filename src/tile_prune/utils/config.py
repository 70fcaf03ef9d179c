"""
Pruning Configuration

Settings for a tile pruning run, read from a mapping or from ``TILE_PRUNE_*``
environment variables.
"""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional


class StyleMode(Enum):
    """How much of the style is used to prune tiles."""
    NONE = "none"
    LAYER = "layer"
    LAYER_FILTER = "layer+filter"

    @classmethod
    def parse(cls, value: str) -> "StyleMode":
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(mode.value for mode in cls)
            raise ValueError(f"Invalid style mode {value!r}, expected one of: {choices}")


_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off"}


def _parse_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise ValueError(f"Invalid boolean for {name}: {value!r}")


def _parse_positive_int(value: Any, name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid integer for {name}: {value!r}")
    if number < 1:
        raise ValueError(f"{name} must be at least 1, got {number}")
    return number


@dataclass
class PruneConfig:
    """Configuration for a tile pruning run."""
    style_path: Optional[Path] = None
    style_mode: StyleMode = StyleMode.LAYER_FILTER
    keep_unknown: bool = True
    max_workers: int = 4
    max_tile_bytes: int = 1_280_000
    log_level: str = "INFO"

    def __post_init__(self):
        if isinstance(self.style_mode, str):
            self.style_mode = StyleMode.parse(self.style_mode)
        if self.style_path is not None:
            self.style_path = Path(self.style_path)
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")
        if self.max_tile_bytes < 1:
            raise ValueError(f"max_tile_bytes must be at least 1, got {self.max_tile_bytes}")

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "PruneConfig":
        kwargs = {}
        if values.get("style_path") is not None:
            kwargs["style_path"] = Path(values["style_path"])
        if values.get("style_mode") is not None:
            kwargs["style_mode"] = StyleMode.parse(str(values["style_mode"]))
        if values.get("keep_unknown") is not None:
            kwargs["keep_unknown"] = _parse_bool(values["keep_unknown"], "keep_unknown")
        if values.get("max_workers") is not None:
            kwargs["max_workers"] = _parse_positive_int(values["max_workers"], "max_workers")
        if values.get("max_tile_bytes") is not None:
            kwargs["max_tile_bytes"] = _parse_positive_int(values["max_tile_bytes"], "max_tile_bytes")
        if values.get("log_level") is not None:
            kwargs["log_level"] = str(values["log_level"]).upper()
        return cls(**kwargs)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PruneConfig":
        env = os.environ if environ is None else environ
        return cls.from_dict({
            "style_path": env.get("TILE_PRUNE_STYLE"),
            "style_mode": env.get("TILE_PRUNE_STYLE_MODE"),
            "keep_unknown": env.get("TILE_PRUNE_KEEP_UNKNOWN"),
            "max_workers": env.get("TILE_PRUNE_THREADS"),
            "max_tile_bytes": env.get("TILE_PRUNE_MAX_TILE_BYTES"),
            "log_level": env.get("TILE_PRUNE_LOG_LEVEL"),
        })
