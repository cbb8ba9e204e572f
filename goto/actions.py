"""Operations the command line drives: add, open, select, edit, delete."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .config import Settings
from .fetch import fetch_title
from .index import BookmarkIndex
from .log import get_logger
from .matching import match_bookmarks, parse_keywords
from .model import Bookmark
from .select import Decision, DecisionKind, Mode, SelectOptions, choose, rank
from .store import BookmarkStore
from .tag import parse_tags

log = get_logger(__name__)


@dataclass
class BookmarkChanges:
    title: Optional[str] = None
    tags: Optional[List[str]] = None
    add_tags: List[str] = field(default_factory=list)
    remove_tags: List[str] = field(default_factory=list)
    url: Optional[str] = None

    def is_empty(self) -> bool:
        return (
            self.title is None
            and self.tags is None
            and not self.add_tags
            and not self.remove_tags
            and self.url is None
        )


def add(
    store: BookmarkStore,
    url: str,
    tags: Union[str, Iterable[str], None] = None,
    title: Optional[str] = None,
    *,
    settings: Optional[Settings] = None,
    fetch: bool = False,
) -> Bookmark:
    bookmark = Bookmark(url=url, title=title, tags=parse_tags(tags))
    if fetch and not bookmark.title and settings is not None:
        bookmark.title = fetch_title(
            bookmark.url,
            timeout_s=settings.fetch_timeout_s,
            user_agent=settings.fetch_user_agent,
            max_bytes=settings.fetch_max_bytes,
        )
    saved = store.save(bookmark)
    log.info("Saved %s", store.path_for(saved))
    return saved


def open_keywords(
    index: BookmarkIndex,
    keywords: Sequence[str],
    options: SelectOptions,
    settings: Settings,
) -> Decision:
    decision = _decide(index, keywords, options, settings, Mode.OPEN)
    if decision.kind == DecisionKind.AMBIGUOUS and settings.open_first:
        return Decision(kind=DecisionKind.OPEN, results=decision.results[:1])
    return decision


def select_keywords(
    index: BookmarkIndex,
    keywords: Sequence[str],
    options: SelectOptions,
    settings: Settings,
) -> Decision:
    return _decide(index, keywords, options, settings, Mode.SELECT)


def _decide(index, keywords, options, settings, mode) -> Decision:
    words = parse_keywords(keywords)
    results = match_bookmarks(index.all(), words, fuzzy_threshold=settings.fuzzy_threshold)
    if not words:
        options = SelectOptions(min_score=options.min_score, limit=options.limit, unfiltered=True)
    return choose(rank(results), options, mode)


def edit(store: BookmarkStore, bookmark: Bookmark, changes: BookmarkChanges) -> Bookmark:
    """Apply explicit user edits. Unlike add, these replace rather than merge."""
    current = store.find(bookmark.url)
    if changes.is_empty():
        return current

    tags = list(current.tags) if changes.tags is None else parse_tags(changes.tags)
    tags += [t for t in parse_tags(changes.add_tags) if t not in tags]
    removed = set(parse_tags(changes.remove_tags))
    tags = [t for t in tags if t not in removed]
    title = current.title if changes.title is None else changes.title

    updated = Bookmark(url=current.url, title=title, tags=tags)
    if changes.url is not None:
        moved = Bookmark(url=changes.url, title=title, tags=tags)
        if moved.url != current.url:
            saved = store.save(moved)
            store.delete(current)
            log.info("Moved %s -> %s", current.url, saved.url)
            return saved
    return store.replace(updated)


def delete(store: BookmarkStore, target: Union[Bookmark, str]) -> None:
    path = store.delete(target)
    log.info("Deleted %s", path)


def all_tags(index: BookmarkIndex) -> List[Tuple[str, int]]:
    counts: Counter = Counter()
    for b in index.all():
        counts.update(b.tags)
    return sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
