"""
Configuration management for dbfs.

Handles loading and saving user defaults from:
- XDG config directory: ~/.config/dbfs/config.json
- Fallback: ~/.dbfs/config.json

Command-line options always win over values from the file.
"""

import json
import logging
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

from .db.dialects import DIALECTS
from .vfs.codec import DEFAULT_MARKER, DEFAULT_MAX_BYTES

logger = logging.getLogger(__name__)


@dataclass
class DBFSConfig:
    """Mount configuration."""
    backend: Optional[str] = None
    verbose: int = 0
    allow_other: bool = False
    mount_dir: Optional[str] = None
    marker: str = DEFAULT_MARKER
    max_bytes: int = DEFAULT_MAX_BYTES

    def validate(self) -> 'DBFSConfig':
        """
        Check option values.

        Returns:
            self, for chaining

        Raises:
            ValueError: If an option is out of range
        """
        if self.backend is not None and self.backend not in DIALECTS:
            supported = ", ".join(sorted(DIALECTS))
            raise ValueError(f"Unknown backend '{self.backend}' (expected one of: {supported})")
        if len(self.marker) != 1:
            raise ValueError(f"Marker must be a single character, got '{self.marker}'")
        if self.max_bytes <= 0:
            raise ValueError(f"max_bytes must be positive, got {self.max_bytes}")
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DBFSConfig':
        """Create from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    def override(self, **options: Any) -> 'DBFSConfig':
        """Copy with every option that is not None replaced."""
        return replace(self, **{key: value for key, value in options.items() if value is not None})


def get_config_path() -> Path:
    """
    Get configuration file path.

    Follows XDG Base Directory specification:
    1. ~/.config/dbfs/config.json
    2. Fallback: ~/.dbfs/config.json

    Returns:
        Path to config file
    """
    xdg_config_home = Path.home() / ".config"
    if xdg_config_home.exists():
        config_dir = xdg_config_home / "dbfs"
    else:
        config_dir = Path.home() / ".dbfs"

    return config_dir / "config.json"


def load_config() -> DBFSConfig:
    """
    Load configuration from file.

    Returns:
        DBFSConfig instance with loaded values or defaults
    """
    config_path = get_config_path()

    if not config_path.exists():
        return DBFSConfig()

    try:
        with open(config_path, 'r') as f:
            data = json.load(f)
        return DBFSConfig.from_dict(data)
    except (json.JSONDecodeError, OSError, TypeError, AttributeError) as e:
        logger.warning(f"Failed to load config from {config_path}: {e}")
        logger.warning("Using default configuration")
        return DBFSConfig()


def save_config(config: DBFSConfig) -> Path:
    """
    Save configuration to file.

    Args:
        config: Configuration to save

    Returns:
        Path the configuration was written to
    """
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w') as f:
        json.dump(config.to_dict(), f, indent=2)

    logger.info(f"Configuration saved to {config_path}")
    return config_path
