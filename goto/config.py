from __future__ import annotations

import os
import sys
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from . import __version__
from .log import get_logger

log = get_logger(__name__)

APP_NAME = "goto"
DEFAULT_SEARCH_ENGINE = "https://duckduckgo.com/?q={query}"


def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    try:
        return int(v)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    try:
        return float(v)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    return v.strip().lower() in ("1", "true", "yes", "y", "on")


def _env_str(name: str, default: str) -> str:
    v = os.getenv(name)
    return default if v is None else v


def default_data_dir() -> Path:
    """Per-user data directory for the bookmark store."""
    home = Path.home()
    if sys.platform == "darwin":
        base = home / "Library" / "Application Support"
    elif sys.platform.startswith("win"):
        base = Path(os.getenv("APPDATA") or home / "AppData" / "Roaming")
    else:
        base = Path(os.getenv("XDG_DATA_HOME") or home / ".local" / "share")
    return base / APP_NAME


def default_config_path() -> Path:
    base = Path(os.getenv("XDG_CONFIG_HOME") or Path.home() / ".config")
    return base / APP_NAME / "config.yaml"


@dataclass
class Settings:
    # Store
    data_dir: Path = field(default_factory=default_data_dir)
    file_ext: str = "yaml"

    # Matching / selection
    search_engine: str = DEFAULT_SEARCH_ENGINE
    min_score: float = 0.05
    limit: int = 8192
    fuzzy_threshold: float = 0.8
    open_first: bool = False

    # Title fetching on add
    fetch_title: bool = True
    fetch_timeout_s: int = 10
    fetch_user_agent: str = f"goto/{__version__}"
    fetch_max_bytes: int = 350_000

    # Capabilities
    enable_migrate: bool = True

    # Logging / UX
    log_level: str = "WARNING"
    no_color: bool = False
    debug: bool = False

    @staticmethod
    def from_env() -> "Settings":
        s = Settings()
        data_dir = os.getenv("GOTO_DATA_DIR")
        if data_dir:
            s.data_dir = Path(data_dir).expanduser()
        s.file_ext = _env_str("GOTO_FILE_EXT", s.file_ext)

        s.search_engine = _env_str("GOTO_SEARCH_ENGINE", s.search_engine)
        s.min_score = _env_float("GOTO_MIN_SCORE", s.min_score)
        s.limit = _env_int("GOTO_LIMIT", s.limit)
        s.fuzzy_threshold = _env_float("GOTO_FUZZY_THRESHOLD", s.fuzzy_threshold)
        s.open_first = _env_bool("GOTO_OPEN_FIRST", s.open_first)

        s.fetch_title = _env_bool("GOTO_FETCH_TITLE", s.fetch_title)
        s.fetch_timeout_s = _env_int("GOTO_FETCH_TIMEOUT_S", s.fetch_timeout_s)
        s.fetch_user_agent = _env_str("GOTO_FETCH_UA", s.fetch_user_agent)
        s.fetch_max_bytes = _env_int("GOTO_FETCH_MAX_BYTES", s.fetch_max_bytes)

        s.enable_migrate = _env_bool("GOTO_ENABLE_MIGRATE", s.enable_migrate)

        s.log_level = _env_str("GOTO_LOG_LEVEL", s.log_level)
        s.no_color = _env_bool("GOTO_NO_COLOR", s.no_color)
        s.debug = _env_bool("GOTO_DEBUG", s.debug)
        return s

    @staticmethod
    def from_file(path: Path) -> "Settings":
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            log.warning("Ignoring config file %s: top level is not a mapping", path)
            data = {}
        s = Settings.from_env()
        for k, v in data.items():
            if not hasattr(s, k):
                continue
            if k == "data_dir":
                v = Path(str(v)).expanduser()
            setattr(s, k, v)
        return s

    def as_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["data_dir"] = str(self.data_dir)
        return d


def load_settings(config_path: Optional[str]) -> Settings:
    if config_path:
        return Settings.from_file(Path(config_path))
    implicit = default_config_path()
    if implicit.is_file():
        return Settings.from_file(implicit)
    return Settings.from_env()
