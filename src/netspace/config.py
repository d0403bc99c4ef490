"""
Netspace configuration.

Configuration is an explicit value handed to Netspace / the registries.
It can be built from defaults, environment variables or a YAML file.
"""

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

BACKENDS = ("file", "memory")

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "netspace.yaml"


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class NetspaceConfig:
    """Store locations and mode for a netspace."""

    # Store directories
    store_live: str = ".data/netspace/live"
    store_test: str = ".data/netspace/test"

    # True selects store_test and enables the testing-only operations
    testing: bool = False

    # "file" (fsspec flat files) or "memory"
    backend: str = "file"

    # Store names
    gsn_store_name: str = "node_geosub"
    gtn_store_name: str = "node_geotop"

    def __post_init__(self):
        if self.backend not in BACKENDS:
            raise ValueError(f"Unknown backend '{self.backend}'. Supported: {list(BACKENDS)}")

    @property
    def store_dir(self) -> str:
        """Directory of the active stores."""
        return self.store_test if self.testing else self.store_live

    def with_overrides(self, **overrides: Any) -> "NetspaceConfig":
        """Copy of this config with the given non-None fields replaced."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def from_env(cls, base: Optional["NetspaceConfig"] = None) -> "NetspaceConfig":
        """Load configuration from environment variables."""
        base = base or cls()
        return cls(
            store_live=os.getenv("NETSPACE_STORE_LIVE", base.store_live),
            store_test=os.getenv("NETSPACE_STORE_TEST", base.store_test),
            testing=_env_bool(os.getenv("NETSPACE_TESTING", str(base.testing))),
            backend=os.getenv("NETSPACE_BACKEND", base.backend),
            gsn_store_name=os.getenv("NETSPACE_GSN_STORE", base.gsn_store_name),
            gtn_store_name=os.getenv("NETSPACE_GTN_STORE", base.gtn_store_name),
        )

    @classmethod
    def from_yaml(cls, config_path: Optional[str] = None) -> "NetspaceConfig":
        """
        Load configuration from a YAML file.

        Values are read from the "netspace" section. Missing or unreadable
        files leave the defaults in place.

        Args:
            config_path: Path to netspace.yaml. If None, uses the default path.
        """
        values: Dict[str, Any] = {}

        if config_path is None and DEFAULT_CONFIG_PATH.exists():
            config_path = str(DEFAULT_CONFIG_PATH)

        if config_path and Path(config_path).exists():
            try:
                with open(config_path) as f:
                    file_config = yaml.safe_load(f)
                section = file_config.get("netspace") if isinstance(file_config, dict) else None
                if section is not None and not isinstance(section, dict):
                    logger.warning(f"Ignoring config in {config_path}: 'netspace' is not a mapping")
                elif section:
                    known = {field.name for field in fields(cls)}
                    for key, value in section.items():
                        if key in known:
                            values[key] = value
                        else:
                            logger.warning(f"Ignoring unknown config key: {key}")
                    logger.info(f"Loaded config from {config_path}")
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load config from {config_path}: {e}")

        if isinstance(values.get("testing"), str):
            values["testing"] = _env_bool(values["testing"])
        elif "testing" in values:
            values["testing"] = bool(values["testing"])

        return cls(**values)

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "NetspaceConfig":
        """YAML file first, then environment overrides."""
        return cls.from_env(cls.from_yaml(config_path))
