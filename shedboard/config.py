# Shed board configuration
# Override paths and endpoints via shedboard.yaml, env vars or CLI args.

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

from .errors import ConfigError

CONFIG_PATH = Path("shedboard.yaml")


@dataclass
class Config:
    """Runtime configuration for the board server."""

    # Storage
    db_path: str = "~/.local/share/shedboard/board.db"

    # Shared snapshot (None = local only, no reconciliation)
    snapshot_url: Optional[str] = None
    fetch_timeout: Optional[float] = None  # None = wait indefinitely

    # HTTP server
    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "INFO"

    def resolve_paths(self):
        """Apply env overrides and expand ~."""
        env_db = os.environ.get("SHEDBOARD_DB")
        if env_db:
            self.db_path = env_db
        env_url = os.environ.get("SHEDBOARD_SNAPSHOT_URL")
        if env_url:
            self.snapshot_url = env_url
        self.db_path = str(Path(self.db_path).expanduser())

    def validate(self):
        if not isinstance(self.port, int) or not 0 < self.port < 65536:
            raise ConfigError(f"port must be an integer in 1..65535, got {self.port!r}")
        if self.fetch_timeout is not None:
            try:
                self.fetch_timeout = float(self.fetch_timeout)
            except (TypeError, ValueError):
                raise ConfigError(f"fetch_timeout must be a number, got {self.fetch_timeout!r}")
        if self.snapshot_url is not None and not isinstance(self.snapshot_url, str):
            raise ConfigError("snapshot_url must be a string")

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Config":
        """Load config from YAML file, falling back to defaults."""
        cfg_path = Path(path) if path else CONFIG_PATH
        if cfg_path.exists():
            try:
                with open(cfg_path, "r") as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Cannot parse {cfg_path}: {e}")
            if not isinstance(data, dict):
                raise ConfigError(f"{cfg_path} must contain a mapping")
            known = {f.name for f in fields(cls)}
            cfg = cls(**{k: v for k, v in data.items() if k in known})
        else:
            cfg = cls()
        cfg.resolve_paths()
        cfg.validate()
        return cfg
