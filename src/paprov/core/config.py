"""
Run configuration.

Parameters for a private-allele run can come from the command line or from a
YAML file such as:

    focal: UC_00146
    nmin: 10
    threshold: 1
    verbosity: 3
    threads: 4
    plot: true
"""

import logging
from dataclasses import dataclass, fields, asdict, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from paprov.core.result import Result, Ok, Err

logger = logging.getLogger(__name__)


INT_FIELDS = ("nmin", "threshold", "verbosity", "threads")


def _as_int(name: str, value: Any) -> int:
    """Integer value of a config entry (YAML may hand over strings or floats)."""
    if isinstance(value, bool) or value is None:
        raise ValueError(f"'{name}' must be an integer, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"'{name}' must be an integer, got {value!r}")
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"'{name}' must be an integer, got {value!r}") from None


@dataclass(frozen=True)
class ReportPaConfig:
    """Parameters of a private-allele run."""
    focal: Optional[str] = None
    nmin: int = 10
    threshold: int = 0
    verbosity: int = 2
    threads: int = 1
    mono_rm: bool = True
    plot: bool = False

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> Result["ReportPaConfig", str]:
        """Build a config from a dict, rejecting unknown keys and non-integer counts."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            return Err(f"Unknown configuration keys: {unknown}. Allowed: {sorted(known)}")
        values = dict(data)
        try:
            if values.get("focal") is not None:
                values["focal"] = str(values["focal"])
            for name in INT_FIELDS:
                if name in values:
                    values[name] = _as_int(name, values[name])
            return Ok(cls(**values))
        except (TypeError, ValueError) as e:
            return Err(f"Invalid configuration: {e}")

    def override(self, **values: Any) -> "ReportPaConfig":
        """Return a copy with every non-None value applied."""
        return replace(self, **{k: v for k, v in values.items() if v is not None})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(config_path: Path) -> Result[Dict[str, Any], str]:
    """
    Load a YAML configuration file.

    An empty file yields an empty mapping.
    """
    try:
        with open(config_path) as f:
            config = yaml.safe_load(f)
    except Exception as e:
        return Err(f"Failed to load config: {e}")

    if config is None:
        return Ok({})
    if not isinstance(config, dict):
        return Err(f"Config must be a mapping, got {type(config).__name__}")

    logger.debug(f"Loaded config from {config_path}: {config}")
    return Ok(config)
