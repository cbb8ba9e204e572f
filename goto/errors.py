from __future__ import annotations

from pathlib import Path
from typing import List, Optional


class GotoError(Exception):
    """Base class for errors raised by goto."""


class StoreIOError(GotoError):
    """Disk or permission failure while touching the bookmark store."""

    def __init__(self, path: Path, cause: OSError):
        super().__init__(f"{path}: {cause.strerror or cause}")
        self.path = path
        self.cause = cause


class ParseError(GotoError):
    """A stored record could not be decoded."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class NotFound(GotoError):
    def __init__(self, what: str, path: Optional[Path] = None):
        super().__init__(f"bookmark not found: {what}")
        self.what = what
        self.path = path


class AmbiguousMatch(GotoError):
    """More than one bookmark matched; the caller has to pick one."""

    def __init__(self, candidates: List):
        super().__init__(f"{len(candidates)} bookmarks match")
        self.candidates = candidates
