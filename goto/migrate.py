from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from .errors import ParseError, StoreIOError
from .log import get_logger
from .store import BookmarkStore, decode_record

log = get_logger(__name__)

LEGACY_EXT = "json"


@dataclass
class MigrationStats:
    migrated: int = 0
    failed: int = 0


def migrate_legacy(store: BookmarkStore) -> MigrationStats:
    """Re-save every legacy JSON record through the store, then drop the JSON file.

    Saving merges into any YAML record already present for the URL, so running
    this again after a partial run is harmless.
    """
    stats = MigrationStats()
    for path in list(store.iter_paths(LEGACY_EXT)):
        log.info("Migrating %s", path)
        try:
            bookmark = decode_record(path, _read_json(path))
            store.save(bookmark)
        except ParseError as e:
            stats.failed += 1
            log.warning("Not migrating %s", e)
            continue
        try:
            path.unlink()
        except OSError as e:
            raise StoreIOError(path, e) from e
        stats.migrated += 1
    return stats


def _read_json(path: Path):
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise StoreIOError(path, e) from e
    except UnicodeDecodeError as e:
        raise ParseError(path, "not valid UTF-8") from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(path, f"invalid JSON (line {e.lineno})") from e
