"""
Configuration for k-means runs.
"""

from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

import yaml

__all__ = [
    "KMeansConfig",
    "load_config",
    "DEFAULT_K",
    "DEFAULT_MAX_ITERATIONS",
    "OUTPUT_FORMATS",
]

DEFAULT_K = 3
DEFAULT_MAX_ITERATIONS = 1000

OUTPUT_FORMATS = ("text", "json")


@dataclass
class KMeansConfig:
    """Run parameters for a single clustering run."""

    # Algorithm
    k: int = DEFAULT_K
    max_iterations: int = DEFAULT_MAX_ITERATIONS

    # Output
    output_format: str = "text"
    verbose: bool = False
    log_dir: Optional[str] = None  # JSONL run log directory; None = no log

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "KMeansConfig":
        """Create from dict, filtering out unknown keys."""
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered)


def load_config(config_path: Path) -> KMeansConfig:
    """
    Load run parameters from a YAML file.

    Args:
        config_path: Path to a YAML mapping of KMeansConfig fields

    Returns:
        KMeansConfig with file values over defaults

    Raises:
        ValueError: If the file is missing, not valid YAML, or not a mapping
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise ValueError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")

    config = KMeansConfig.from_dict(data)
    if config.output_format not in OUTPUT_FORMATS:
        raise ValueError(
            f"Unknown output_format {config.output_format!r} (expected one of {OUTPUT_FORMATS})"
        )
    return config
