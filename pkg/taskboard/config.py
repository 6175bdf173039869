# Task board: configuration
# Defaults below, overridden by taskboard.yaml, then by environment variables.

import logging
import os
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

from .api import TaskApiClient
from .store import BoardStore
from .sync import SyncDispatcher

CONFIG_FILENAME = "taskboard.yaml"

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


class ConfigError(Exception):
    """Raised when configuration is invalid or unreadable."""
    pass


@dataclass
class Config:
    """Runtime configuration for the board store."""

    # Remote task API
    api_base_url: str = "http://localhost:3000/api"
    request_timeout: float = 10.0
    api_key: str = ""

    # Behavior
    background_sync: bool = True   # False = send mutations inline (tests, scripts)
    log_level: str = "INFO"

    def apply_env(self) -> None:
        """Environment wins over the YAML file."""
        url = os.environ.get("TASKBOARD_API_URL")
        if url:
            self.api_base_url = url
        key = os.environ.get("TASKBOARD_API_KEY")
        if key:
            self.api_key = key
        timeout = os.environ.get("TASKBOARD_TIMEOUT")
        if timeout:
            try:
                self.request_timeout = float(timeout)
            except ValueError:
                raise ConfigError(f"TASKBOARD_TIMEOUT must be a number, got {timeout!r}") from None

    def validate(self) -> None:
        for name in ("api_base_url", "api_key", "log_level"):
            value = getattr(self, name)
            if not isinstance(value, str):
                raise ConfigError(f"{name} must be a string, got {value!r}")
        if not isinstance(self.background_sync, bool):
            raise ConfigError(f"background_sync must be true or false, got {self.background_sync!r}")
        if isinstance(self.request_timeout, bool) or not isinstance(self.request_timeout, (int, float)):
            raise ConfigError(f"request_timeout must be a number, got {self.request_timeout!r}")

        if not self.api_base_url:
            raise ConfigError("api_base_url is empty")
        if self.request_timeout <= 0:
            raise ConfigError(f"request_timeout must be positive, got {self.request_timeout}")

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Config":
        """Load config from YAML file, falling back to defaults."""
        cfg_path = Path(path) if path else Path.cwd() / CONFIG_FILENAME
        known = {f.name for f in fields(cls)}
        if cfg_path.exists():
            try:
                with open(cfg_path, "r") as f:
                    data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigError(f"Cannot read {cfg_path}: {e}") from e
            if not isinstance(data, dict):
                raise ConfigError(f"{cfg_path} must contain a mapping, got {type(data).__name__}")
            cfg = cls(**{k: v for k, v in data.items() if k in known})
        else:
            cfg = cls()
        cfg.apply_env()
        cfg.validate()
        return cfg

    def build_store(self) -> BoardStore:
        """Wire a BoardStore from this config."""
        client = TaskApiClient(
            self.api_base_url,
            timeout=self.request_timeout,
            api_key=self.api_key,
        )
        return BoardStore(client, SyncDispatcher(background=self.background_sync))


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
