"""
Central configuration for the MindEase focus engine.
All values can be overridden via environment variables or a local config.json.

Alert thresholds live in mindease/alerts/constants.py.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

_ROOT = Path(__file__).parent.parent
_CONFIG_FILE = _ROOT / "config.json"


@dataclass
class Config:
    # API
    api_host: str = "127.0.0.1"
    api_port: int = 8765

    # Countdown
    countdown_interval_ms: int = 1000        # one tick per second

    # Storage
    data_dir: Path = field(default_factory=lambda: _ROOT / "data")
    session_store_file: str = "session_store.json"

    # Task document store (empty url = in-memory tasks)
    task_store_url: str = ""
    task_store_user: str = "local"
    task_store_timeout_s: float = 5.0

    # Logging
    log_level: str = "INFO"

    def __post_init__(self):
        self.data_dir = Path(self.data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    @property
    def session_store_path(self) -> Path:
        return self.data_dir / self.session_store_file

    @classmethod
    def load(cls) -> "Config":
        cfg = cls()
        if _CONFIG_FILE.exists():
            overrides = json.loads(_CONFIG_FILE.read_text())
            for k, v in overrides.items():
                if hasattr(cfg, k):
                    setattr(cfg, k, v)
        # environment variable overrides (MINDEASE_*)
        for k in cfg.__dataclass_fields__:  # type: ignore[attr-defined]
            env_key = f"MINDEASE_{k.upper()}"
            if env_key in os.environ:
                setattr(cfg, k, type(getattr(cfg, k))(os.environ[env_key]))
        cfg.data_dir = Path(cfg.data_dir)
        return cfg


# Module-level singleton
config = Config.load()
