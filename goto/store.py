from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Iterator, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import NotFound, ParseError, StoreIOError
from .log import get_logger
from .model import Bookmark

log = get_logger(__name__)


class BookmarkRecord(BaseModel):
    """On-disk shape of one bookmark file."""

    url: str = Field(..., min_length=1)
    title: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def _title_as_text(cls, v: Any) -> Any:
        return None if v is None else str(v)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_as_text(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        if isinstance(v, (list, tuple, set)):
            return [str(x) for x in v if x is not None]
        return v


class BookmarkStore:
    """One YAML file per bookmark: <data_dir>/<domain>/<sha256(url)>.<ext>."""

    def __init__(self, data_dir: Union[Path, str], *, ext: str = "yaml"):
        self.data_dir = Path(data_dir)
        self.ext = ext.lstrip(".")

    def path_for(self, target: Union[Bookmark, str]) -> Path:
        bookmark = target if isinstance(target, Bookmark) else Bookmark(url=target)
        return self.data_dir / bookmark.rel_path(self.ext)

    def save(self, bookmark: Bookmark) -> Bookmark:
        """Write a bookmark, merging into the record already stored for its URL."""
        path = self.path_for(bookmark)
        merged = bookmark
        if path.exists():
            prior = self.load(path)
            merged = bookmark.merge(prior)
            log.debug("Merging %s into existing record %s", bookmark.url, path)
        self._write(path, merged)
        return merged

    def replace(self, bookmark: Bookmark) -> Bookmark:
        """Write a bookmark as-is, discarding whatever was stored for its URL."""
        self._write(self.path_for(bookmark), bookmark)
        return bookmark

    def load(self, path: Path) -> Bookmark:
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise NotFound(str(path), path) from None
        except OSError as e:
            raise StoreIOError(path, e) from e
        except UnicodeDecodeError as e:
            raise ParseError(path, "not valid UTF-8") from e
        return decode_record(path, yaml_load(path, text))

    def find(self, url: str) -> Bookmark:
        path = self.path_for(url)
        if not path.is_file():
            raise NotFound(url, path)
        return self.load(path)

    def iter_paths(self, ext: Optional[str] = None) -> Iterator[Path]:
        suffix = f".{(ext or self.ext).lstrip('.')}"
        if not self.data_dir.is_dir():
            return
        for root, dirs, files in os.walk(self.data_dir, onerror=self._walk_error):
            # Skip .git and other hidden entries, keep traversal order stable.
            dirs[:] = sorted(d for d in dirs if not d.startswith("."))
            for name in sorted(files):
                if name.startswith(".") or not name.endswith(suffix):
                    continue
                yield Path(root) / name

    def load_all(self) -> Iterator[Bookmark]:
        for path in self.iter_paths():
            try:
                yield self.load(path)
            except ParseError as e:
                log.warning("Skipping unreadable bookmark %s", e)
            except NotFound:
                # Removed by another process mid-scan.
                continue

    def delete(self, target: Union[Bookmark, str]) -> Path:
        path = self.path_for(target)
        try:
            path.unlink()
        except FileNotFoundError:
            url = target.url if isinstance(target, Bookmark) else target
            raise NotFound(url, path) from None
        except OSError as e:
            raise StoreIOError(path, e) from e
        self._prune(path.parent)
        return path

    def _write(self, path: Path, bookmark: Bookmark) -> None:
        text = yaml.safe_dump(bookmark.to_record(), allow_unicode=True, default_flow_style=False, sort_keys=True)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            atomic_write(path, text)
        except OSError as e:
            raise StoreIOError(path, e) from e

    def _walk_error(self, err: OSError) -> None:
        # An unlistable directory must not read as an empty store.
        raise StoreIOError(Path(err.filename or self.data_dir), err) from err

    def _prune(self, d: Path) -> None:
        # Drop the domain directory once its last bookmark is gone.
        try:
            if d != self.data_dir and d.is_dir() and not any(d.iterdir()):
                d.rmdir()
        except OSError as e:
            log.debug("Could not prune %s: %s", d, e)


def atomic_write(path: Path, text: str) -> None:
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        try:
            os.unlink(tmp)
        except FileNotFoundError:
            pass
        raise


def yaml_load(path: Path, text: str) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ParseError(path, f"invalid YAML ({e.__class__.__name__})") from e


def decode_record(path: Path, data: Any) -> Bookmark:
    if not isinstance(data, dict):
        raise ParseError(path, "record is not a mapping")
    try:
        rec = BookmarkRecord.model_validate(data)
        return Bookmark(url=rec.url, title=rec.title, tags=rec.tags)
    except ValidationError as e:
        raise ParseError(path, f"invalid record ({e.error_count()} errors)") from e
    except ValueError as e:
        raise ParseError(path, str(e)) from e
