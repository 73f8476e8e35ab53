"""
Configuration for hostfacts.

Settings come from a YAML file, then ``HOSTFACTS_*`` environment variables.
"""

import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Optional
import yaml


@dataclass
class CollectorConfig:
    """Collector context settings."""

    backend: str = "auto"  # auto, linux or psutil
    hwaddr_strategy: str = "auto"  # auto, direct, scan or neighbor
    ifconf_max_rounds: int = 8
    fqdn_len: int = 512


@dataclass
class LoggingConfig:
    """Log level, format and optional rotating log file."""

    level: str = "WARNING"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size_mb: int = 10
    backup_count: int = 5


# variable -> (section, option, type)
ENV_OVERRIDES = {
    "HOSTFACTS_BACKEND": ("collector", "backend", str),
    "HOSTFACTS_HWADDR_STRATEGY": ("collector", "hwaddr_strategy", str),
    "HOSTFACTS_FQDN_LEN": ("collector", "fqdn_len", int),
    "HOSTFACTS_LOG_LEVEL": ("logging", "level", str),
    "HOSTFACTS_LOG_FILE": ("logging", "file_path", str),
}


@dataclass
class Config:
    """All configuration sections."""

    collector: CollectorConfig = field(default_factory=CollectorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: str) -> "Config":
        """Load ``path`` if it exists, then apply environment overrides."""
        data = {}
        config_path = Path(path)
        if config_path.exists():
            with open(config_path, "r") as f:
                data = yaml.safe_load(f) or {}

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict) -> "Config":
        config = cls(
            collector=CollectorConfig(**data.get("collector", {})),
            logging=LoggingConfig(**data.get("logging", {})),
        )
        config._apply_env_overrides()
        return config

    def _apply_env_overrides(self):
        for variable, (section, option, convert) in ENV_OVERRIDES.items():
            value = os.getenv(variable)
            if value:
                setattr(getattr(self, section), option, convert(value))

    def to_yaml(self, path: str):
        """Write every section to ``path``."""
        with open(path, "w") as f:
            yaml.safe_dump(asdict(self), f, default_flow_style=False, sort_keys=False)


def get_default_config_path() -> str:
    """Return the first existing config file, or the project-local default."""
    candidates = [
        Path("config/hostfacts.yaml"),
        Path("hostfacts.yaml"),
        Path.home() / ".hostfacts" / "config.yaml",
        Path("/etc/hostfacts/config.yaml"),
    ]

    for path in candidates:
        if path.exists():
            return str(path)

    return str(candidates[0])
