"""
Runtime Configuration

Central configuration for tree building, dump loading and logging.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

load_dotenv()


ENV_PREFIX = "MERKLE_"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class MerkleConfig:
    """Configuration for tree building and loading."""
    hash: str = "standard"
    validate_on_load: bool = True


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables (and a .env file)
    - YAML file
    - Programmatic construction
    """
    merkle: MerkleConfig = field(default_factory=MerkleConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - MERKLE_HASH: Registered hasher name
        - MERKLE_VALIDATE_ON_LOAD: Validate dumps when loading (true/false)
        - MERKLE_LOG_LEVEL: Log level
        - MERKLE_LOG_FILE: Optional log file path
        """
        overrides: dict[str, Any] = {}

        if os.getenv(f"{ENV_PREFIX}HASH"):
            overrides.setdefault("merkle", {})["hash"] = os.getenv(f"{ENV_PREFIX}HASH")
        if os.getenv(f"{ENV_PREFIX}VALIDATE_ON_LOAD"):
            overrides.setdefault("merkle", {})["validate_on_load"] = _env_flag(
                f"{ENV_PREFIX}VALIDATE_ON_LOAD", "true"
            )

        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            overrides.setdefault("logging", {})["level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL")
        if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
            overrides.setdefault("logging", {})["file"] = os.getenv(f"{ENV_PREFIX}LOG_FILE")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Load configuration purely from environment variables."""
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        merkle_data = data.get("merkle", {})
        logging_data = data.get("logging", {})

        merkle = MerkleConfig(**merkle_data) if merkle_data else MerkleConfig()
        log = LoggingConfig(**logging_data) if logging_data else LoggingConfig()

        return cls(
            merkle=merkle,
            logging=log,
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)
        for key, value in overrides.get("merkle", {}).items():
            setattr(new_config.merkle, key, value)
        for key, value in overrides.get("logging", {}).items():
            setattr(new_config.logging, key, value)
        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "merkle": {
                "hash": self.merkle.hash,
                "validate_on_load": self.merkle.validate_on_load,
            },
            "logging": {
                "level": self.logging.level,
                "file": self.logging.file,
            },
            "extra": self.extra,
        }


# Global default configuration
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = RuntimeConfig.from_env()
    return _default_config


def set_default_config(config: RuntimeConfig) -> None:
    """Set the default runtime configuration."""
    global _default_config
    _default_config = config


def load_config(config_path: Path | None = None) -> RuntimeConfig:
    """
    Load configuration from a YAML file and/or environment.

    Environment variables override file settings. Without an explicit
    path, ./merkle.yaml and ~/.config/felt-merkle/config.yaml are tried.
    """
    if config_path is not None:
        return RuntimeConfig.from_yaml(config_path).with_env_overrides()

    default_paths = [
        Path.cwd() / "merkle.yaml",
        Path.home() / ".config" / "felt-merkle" / "config.yaml",
    ]
    for default_path in default_paths:
        if default_path.exists():
            return RuntimeConfig.from_yaml(default_path).with_env_overrides()

    return RuntimeConfig.from_env()
