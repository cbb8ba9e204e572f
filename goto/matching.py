"""Keyword relevance scoring.

Every keyword is scored on its best tier against a bookmark:

    exact tag (or root domain)          1.0
    substring of title / URL            0.6
    fuzzy similarity >= threshold       0.4 * similarity

The bookmark score is the mean over keywords, clamped to [0, 1]. Several
keywords are ANDed: one keyword without any match zeroes the bookmark.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Sequence, Set

from rapidfuzz import fuzz

from .log import get_logger
from .model import Bookmark, MatchResult
from .tag import parse_tags

log = get_logger(__name__)

TAG_WEIGHT = 1.0
SUBSTRING_WEIGHT = 0.6
FUZZY_WEIGHT = 0.4
DEFAULT_FUZZY_THRESHOLD = 0.8

_TOKEN_RE = re.compile(r"[^0-9a-z]+")
_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.\-]*://")
_URL_NOISE = {"www", "http", "https", "html", "htm", "php", "index"}


def parse_keywords(words: Iterable[str]) -> List[str]:
    return parse_tags(list(words))


def keyword_score(bookmark: Bookmark, keyword: str, *, fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD) -> float:
    if keyword in bookmark.terms():
        return TAG_WEIGHT

    title = (bookmark.title or "").lower()
    bare_url = _SCHEME_RE.sub("", bookmark.url.lower())
    if keyword in title or keyword in bare_url:
        return SUBSTRING_WEIGHT

    best = 0.0
    for token in _fuzzy_tokens(bookmark):
        sim = fuzz.ratio(keyword, token) / 100.0
        if sim > best:
            best = sim
    if best >= fuzzy_threshold:
        return FUZZY_WEIGHT * best
    return 0.0


def score_bookmark(
    bookmark: Bookmark,
    keywords: Sequence[str],
    *,
    fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD,
) -> MatchResult:
    if not keywords:
        return MatchResult(bookmark=bookmark, score=0.0)

    contributions = [keyword_score(bookmark, k, fuzzy_threshold=fuzzy_threshold) for k in keywords]
    if len(keywords) > 1 and any(c <= 0.0 for c in contributions):
        return MatchResult(bookmark=bookmark, score=0.0)

    score = sum(contributions) / len(keywords)
    score = min(1.0, max(0.0, score))
    matched = tuple(k for k, c in zip(keywords, contributions) if c > 0.0)
    return MatchResult(bookmark=bookmark, score=score, matched=matched)


def match_bookmarks(
    bookmarks: Iterable[Bookmark],
    keywords: Sequence[str],
    *,
    fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD,
) -> List[MatchResult]:
    """Score bookmarks, keeping only those that match.

    Without keywords everything is returned at score 0.0 so callers can list
    the whole store.
    """
    if not keywords:
        return [MatchResult(bookmark=b, score=0.0) for b in bookmarks]

    out: List[MatchResult] = []
    total = 0
    for b in bookmarks:
        total += 1
        r = score_bookmark(b, keywords, fuzzy_threshold=fuzzy_threshold)
        if r.score > 0.0:
            out.append(r)
    log.debug("Matched %d of %d bookmarks for %s", len(out), total, list(keywords))
    return out


def _fuzzy_tokens(bookmark: Bookmark) -> Set[str]:
    tokens = set(bookmark.terms())
    tokens.update(t for t in _TOKEN_RE.split((bookmark.title or "").lower()) if t)
    bare_url = _SCHEME_RE.sub("", bookmark.url.lower())
    tokens.update(t for t in _TOKEN_RE.split(bare_url) if t and t not in _URL_NOISE and not t.isdigit())
    return tokens
