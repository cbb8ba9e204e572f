import sys
from pathlib import Path

import pytest

# Allow `import goto` without installing the package.
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def _block_network_and_browser(monkeypatch, tmp_path):
    """Tests must never hit the network, launch a browser or read user config."""

    def _blocked(*_args, **_kwargs):
        raise AssertionError("Real network/browser access attempted during tests")

    import httpx
    import webbrowser

    monkeypatch.setattr(httpx.HTTPTransport, "handle_request", _blocked)
    monkeypatch.setattr(webbrowser, "open", _blocked)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    for name in ("GOTO_DATA_DIR", "GOTO_LOG_LEVEL", "GOTO_MIN_SCORE", "GOTO_LIMIT", "GOTO_OPEN_FIRST", "NO_COLOR"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def store(tmp_path):
    from goto.store import BookmarkStore

    return BookmarkStore(tmp_path / "data")
