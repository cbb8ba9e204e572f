from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import Optional

from rich.logging import RichHandler

# -v/--verbosity 0..5, least to most output.
VERBOSITY_LEVELS = {
    0: "CRITICAL",
    1: "ERROR",
    2: "WARNING",
    3: "INFO",
    4: "DEBUG",
    5: "DEBUG",
}


@dataclass(frozen=True)
class LogConfig:
    level: str = "WARNING"
    no_color: bool = False
    verbosity: Optional[int] = None


def level_for(cfg: LogConfig) -> int:
    name = cfg.level
    if cfg.verbosity is not None:
        name = VERBOSITY_LEVELS.get(max(0, min(5, cfg.verbosity)), name)
    return getattr(logging, name.upper(), logging.WARNING)


def setup_logging(cfg: LogConfig) -> None:
    level = level_for(cfg)

    root = logging.getLogger()
    root.setLevel(level)

    for h in list(root.handlers):
        root.removeHandler(h)

    force_no_color = cfg.no_color or os.getenv("NO_COLOR") is not None
    is_tty = sys.stderr.isatty()

    if (not force_no_color) and is_tty:
        handler = RichHandler(rich_tracebacks=True, show_time=False, show_level=True, show_path=False)
        fmt = "%(message)s"
    else:
        handler = logging.StreamHandler()
        fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    root.addHandler(handler)

    # Only the most verbose setting lets third-party chatter through.
    if cfg.verbosity is None or cfg.verbosity < 5:
        for noisy in ("httpx", "httpcore", "filelock", "urllib3"):
            logging.getLogger(noisy).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
