from __future__ import annotations

from typing import List

from .log import get_logger
from .model import Bookmark
from .store import BookmarkStore

log = get_logger(__name__)


class BookmarkIndex:
    """In-memory snapshot of the store, rebuilt from disk on every call."""

    def __init__(self, store: BookmarkStore):
        self.store = store

    def all(self) -> List[Bookmark]:
        bookmarks = list(self.store.load_all())
        log.debug("Loaded %d bookmarks from %s", len(bookmarks), self.store.data_dir)
        return bookmarks
