import json

from goto.migrate import migrate_legacy
from goto.model import Bookmark


def _legacy(store, url, title=None, tags=()):
    b = Bookmark(url=url)
    path = store.data_dir / b.rel_path("json")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"url": url, "title": title, "tags": list(tags)}), encoding="utf-8")
    return path


def test_migrate_converts_json_records_to_yaml(store):
    src = _legacy(store, "https://github.com/", "GitHub", ["vcs", "git"])
    stats = migrate_legacy(store)

    assert stats.migrated == 1
    assert stats.failed == 0
    assert not src.exists()
    got = store.find("https://github.com/")
    assert got.title == "GitHub"
    assert sorted(got.tags) == ["git", "vcs"]


def test_migrate_merges_into_existing_yaml_record(store):
    store.save(Bookmark(url="https://github.com/", title="Current", tags=["code"]))
    _legacy(store, "https://github.com/", None, ["git"])
    migrate_legacy(store)
    got = store.find("https://github.com/")
    assert got.title == "Current"
    assert sorted(got.tags) == ["code", "git"]


def test_migrate_is_idempotent(store):
    _legacy(store, "https://example.com/", "Ex", ["a"])
    migrate_legacy(store)
    before = store.path_for("https://example.com/").read_text(encoding="utf-8")

    stats = migrate_legacy(store)
    assert stats.migrated == 0
    assert stats.failed == 0
    assert store.path_for("https://example.com/").read_text(encoding="utf-8") == before


def test_migrate_leaves_malformed_json_in_place(store):
    bad = store.data_dir / "bad.example" / "x.json"
    bad.parent.mkdir(parents=True)
    bad.write_text("{not json", encoding="utf-8")
    _legacy(store, "https://ok.example/", None, ["fine"])

    stats = migrate_legacy(store)
    assert stats.migrated == 1
    assert stats.failed == 1
    assert bad.exists()


def test_migrate_counts_non_utf8_json_as_failed(store):
    bad = store.data_dir / "bad.example" / "bin.json"
    bad.parent.mkdir(parents=True)
    bad.write_bytes(b'{"url": "https://bad.example/", "title": "\xff\xfe"}')

    stats = migrate_legacy(store)
    assert stats.migrated == 0
    assert stats.failed == 1
    assert bad.exists()
