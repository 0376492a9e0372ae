"""
Configuration management using Pydantic models loaded from YAML.
"""

import logging
from pathlib import Path
from typing import Literal, Optional, Union

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .adapters.memory_store import MemoryStore
from .adapters.mongo_store import MongoStore
from .domain.models import Mode


class StoreConfig(BaseModel):
    """Record store selection."""
    backend: Literal["memory", "mongo"] = "memory"
    uri: str = ""
    database: str = "therapyslots"
    seed_file: Optional[Path] = None

    @model_validator(mode="after")
    def validate_backend_settings(self) -> "StoreConfig":
        """A mongo backend needs somewhere to connect to."""
        if self.backend == "mongo" and not self.uri:
            raise ValueError("store.uri is required when store.backend is 'mongo'")
        return self


class DefaultsConfig(BaseModel):
    """Default settings for requests that leave a value out."""
    mode: Mode = Mode.ONLINE

    @field_validator("mode", mode="before")
    @classmethod
    def parse_mode(cls, value) -> Mode:
        """Accept modes in any case."""
        return Mode.parse(value)


class LoggingConfig(BaseModel):
    level: str = "INFO"

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        """Ensure the level is one the logging module knows."""
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown logging level: {value}")
        return level


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "UTC"
    store: StoreConfig = Field(default_factory=StoreConfig)
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except (KeyError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        A relative ``store.seed_file`` is resolved against the config file's
        directory.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)
        seed_file = config.store.seed_file
        if seed_file is not None and not seed_file.is_absolute():
            config.store.seed_file = config_path.parent / seed_file
        return config


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path


def build_store(config: AppConfig) -> Union[MemoryStore, MongoStore]:
    """Construct the configured record store; the caller connects and closes it."""
    if config.store.backend == "mongo":
        return MongoStore(uri=config.store.uri, database=config.store.database)
    return MemoryStore(seed_file=config.store.seed_file)
