import pytest

from goto.errors import AmbiguousMatch, NotFound
from goto.matching import match_bookmarks
from goto.model import Bookmark, MatchResult
from goto.select import DecisionKind, Mode, SelectOptions, choose, rank


def _r(url, score, matched=("k",)):
    return MatchResult(bookmark=Bookmark(url=url), score=score, matched=tuple(matched))


def test_rank_sorts_by_score_then_matches_then_url():
    results = [
        _r("https://b.example/", 0.5),
        _r("https://a.example/", 0.5),
        _r("https://c.example/", 0.9),
        _r("https://d.example/", 0.5, matched=("x", "y")),
    ]
    got = [r.bookmark.url for r in rank(results)]
    assert got == ["https://c.example/", "https://d.example/", "https://a.example/", "https://b.example/"]


def test_rank_is_deterministic_regardless_of_input_order():
    results = [_r(f"https://{c}.example/", 0.5) for c in "qwertyuiop"]
    first = [r.bookmark.url for r in rank(results)]
    for _ in range(5):
        assert [r.bookmark.url for r in rank(list(reversed(results)))] == first


def test_open_mode_decisions():
    assert choose([], mode=Mode.OPEN).kind == DecisionKind.NO_MATCH
    one = choose([_r("https://a.example/", 1.0)], mode=Mode.OPEN)
    assert one.kind == DecisionKind.OPEN
    assert one.single().url == "https://a.example/"
    many = choose(rank([_r("https://a.example/", 1.0), _r("https://b.example/", 0.6)]), mode=Mode.OPEN)
    assert many.kind == DecisionKind.AMBIGUOUS
    assert [b.url for b in many.bookmarks] == ["https://a.example/", "https://b.example/"]


def test_single_raises_control_signals():
    with pytest.raises(NotFound):
        choose([], mode=Mode.OPEN).single()
    with pytest.raises(AmbiguousMatch) as ei:
        choose([_r("https://a.example/", 1.0), _r("https://b.example/", 1.0)], mode=Mode.OPEN).single()
    assert len(ei.value.candidates) == 2


def test_min_score_filter_can_turn_ambiguous_into_open():
    ranked = rank([_r("https://a.example/", 1.0), _r("https://b.example/", 0.3)])
    d = choose(ranked, SelectOptions(min_score=0.5), Mode.OPEN)
    assert d.kind == DecisionKind.OPEN


def test_select_mode_always_lists():
    ranked = rank([_r("https://a.example/", 1.0)])
    d = choose(ranked, SelectOptions(), Mode.SELECT)
    assert d.kind == DecisionKind.LIST
    assert len(d.results) == 1
    assert choose([], SelectOptions(), Mode.SELECT).kind == DecisionKind.LIST


def test_zero_score_excluded_by_any_positive_filter():
    ranked = rank([_r("https://a.example/", 0.0, matched=())])
    assert choose(ranked, SelectOptions(min_score=0.0001), Mode.SELECT).results == []


def test_unfiltered_listing_ignores_min_score_but_honours_limit():
    ranked = rank([_r(f"https://{c}.example/", 0.0, matched=()) for c in "abc"])
    d = choose(ranked, SelectOptions(min_score=0.5, limit=2, unfiltered=True), Mode.SELECT)
    assert [r.bookmark.url for r in d.results] == ["https://a.example/", "https://b.example/"]


def test_select_rust_with_min_score_and_limit():
    bms = [Bookmark(url=f"https://site{i:02d}.example/", tags=["rust"]) for i in range(25)]
    # Fuzzy-only hits stay below 0.5.
    bms += [Bookmark(url=f"https://other{i}.example/", tags=["rusty"]) for i in range(3)]
    ranked = rank(match_bookmarks(bms, ["rust"]))
    assert len(ranked) == 28

    d = choose(ranked, SelectOptions(min_score=0.5, limit=20), Mode.SELECT)
    assert len(d.results) == 20
    assert all(r.score >= 0.5 for r in d.results)
    scores = [r.score for r in d.results]
    assert scores == sorted(scores, reverse=True)
