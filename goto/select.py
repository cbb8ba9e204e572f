from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from .errors import AmbiguousMatch, NotFound
from .model import Bookmark, MatchResult


class Mode(str, Enum):
    OPEN = "open"
    SELECT = "select"


class DecisionKind(str, Enum):
    OPEN = "open"
    AMBIGUOUS = "ambiguous"
    NO_MATCH = "no_match"
    LIST = "list"


@dataclass
class SelectOptions:
    min_score: float = 0.0
    limit: Optional[int] = None
    # Set when results came from a keyword-less listing; min_score is moot then.
    unfiltered: bool = False


@dataclass
class Decision:
    kind: DecisionKind
    results: List[MatchResult] = field(default_factory=list)

    @property
    def bookmarks(self) -> List[Bookmark]:
        return [r.bookmark for r in self.results]

    def single(self) -> Bookmark:
        if self.kind == DecisionKind.OPEN:
            return self.results[0].bookmark
        if self.kind == DecisionKind.NO_MATCH or not self.results:
            raise NotFound("no bookmark matches")
        raise AmbiguousMatch(self.results)


def rank_key(r: MatchResult):
    return (-r.score, -len(r.matched), r.bookmark.url)


def rank(results: Iterable[MatchResult]) -> List[MatchResult]:
    """Best first; ties go to more matched keywords, then URL order."""
    return sorted(results, key=rank_key)


def apply_filters(ranked: List[MatchResult], options: SelectOptions) -> List[MatchResult]:
    out = ranked
    if not options.unfiltered and options.min_score > 0.0:
        out = [r for r in out if r.score >= options.min_score]
    if options.limit is not None:
        out = out[: max(0, options.limit)]
    return out


def choose(ranked: List[MatchResult], options: Optional[SelectOptions] = None, mode: Mode = Mode.OPEN) -> Decision:
    options = options or SelectOptions()
    results = apply_filters(ranked, options)

    if mode == Mode.SELECT:
        return Decision(kind=DecisionKind.LIST, results=results)
    if not results:
        return Decision(kind=DecisionKind.NO_MATCH)
    if len(results) == 1:
        return Decision(kind=DecisionKind.OPEN, results=results)
    return Decision(kind=DecisionKind.AMBIGUOUS, results=results)
