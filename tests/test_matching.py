from goto.matching import (
    FUZZY_WEIGHT,
    SUBSTRING_WEIGHT,
    TAG_WEIGHT,
    keyword_score,
    match_bookmarks,
    parse_keywords,
    score_bookmark,
)
from goto.model import Bookmark


def _bm(url, tags=(), title=None):
    return Bookmark(url=url, title=title, tags=list(tags))


def test_exact_tag_beats_substring_beats_fuzzy():
    tagged = _bm("https://example.com/", tags=["github"])
    substring = _bm("https://example.org/mirrors/githubmirror")
    fuzzy = _bm("https://example.net/", title="Githb issues")

    exact_s = keyword_score(tagged, "github")
    sub_s = keyword_score(substring, "github")
    fuzzy_s = keyword_score(fuzzy, "github")

    assert exact_s == TAG_WEIGHT
    assert sub_s == SUBSTRING_WEIGHT
    assert 0.0 < fuzzy_s <= FUZZY_WEIGHT
    assert exact_s > sub_s > fuzzy_s


def test_root_domain_counts_as_exact_term():
    b = _bm("https://github.com/")
    assert keyword_score(b, "github") == TAG_WEIGHT


def test_substring_ignores_url_scheme():
    b = _bm("https://example.com/")
    assert keyword_score(b, "https") == 0.0


def test_zero_overlap_scores_exactly_zero():
    b = _bm("https://example.com/", tags=["news"], title="Daily paper")
    r = score_bookmark(b, ["zzzz"])
    assert r.score == 0.0
    assert r.matched == ()


def test_single_keyword_accepts_any_tier():
    b = _bm("https://example.com/blog/rustacean", tags=["reading"])
    r = score_bookmark(b, ["rustacean"])
    assert r.score == SUBSTRING_WEIGHT
    assert r.matched == ("rustacean",)


def test_multiple_keywords_require_every_keyword():
    both = _bm("https://crates.io/", tags=["rust", "crates"])
    only_rust = _bm("https://www.rust-lang.org/", tags=["rust", "lang"])

    assert score_bookmark(both, ["rust", "crates"]).score == 1.0
    r = score_bookmark(only_rust, ["rust", "crates"])
    assert r.score == 0.0
    assert r.matched == ()
    # On its own the same bookmark is a perfect hit.
    assert score_bookmark(only_rust, ["rust"]).score == 1.0


def test_score_is_mean_of_keyword_tiers_and_clamped():
    b = _bm("https://example.com/docs", tags=["python"])
    r = score_bookmark(b, ["python", "docs"])
    assert abs(r.score - (TAG_WEIGHT + SUBSTRING_WEIGHT) / 2) < 1e-9
    assert 0.0 <= r.score <= 1.0


def test_match_bookmarks_drops_non_matching():
    bms = [_bm("https://github.com/", tags=["git"]), _bm("https://example.com/", tags=["news"])]
    got = match_bookmarks(bms, ["git"])
    assert [r.bookmark.url for r in got] == ["https://github.com/"]


def test_match_bookmarks_without_keywords_returns_everything():
    bms = [_bm("https://a.example/"), _bm("https://b.example/")]
    got = match_bookmarks(bms, [])
    assert len(got) == 2
    assert all(r.score == 0.0 for r in got)


def test_fuzzy_threshold_is_respected():
    b = _bm("https://example.com/", tags=["kubernetes"])
    assert keyword_score(b, "kubernets", fuzzy_threshold=0.8) > 0.0
    assert keyword_score(b, "kubernets", fuzzy_threshold=0.99) == 0.0


def test_parse_keywords_normalizes():
    assert parse_keywords(["Rust", "rust,Crates"]) == ["rust", "crates"]
