from __future__ import annotations

import re
import time
from typing import Optional

import httpx
from bs4 import BeautifulSoup  # type: ignore

from .log import get_logger

log = get_logger(__name__)
_WS_RE = re.compile(r"\s+")


def fetch_title(url: str, *, timeout_s: int, user_agent: str, max_bytes: int) -> Optional[str]:
    """Fetch a page and return its <title>, or None when that is not possible."""
    t0 = time.time()
    timeout = httpx.Timeout(timeout_s, connect=timeout_s)
    headers = {"User-Agent": user_agent}
    try:
        with httpx.Client(follow_redirects=True, headers=headers, timeout=timeout) as client:
            with client.stream("GET", url) as r:
                status = r.status_code
                content = _read_capped(r, max_bytes) if 200 <= status < 400 else b""
    except httpx.HTTPError as e:
        log.debug("Title fetch failed for %s: %s", url, e)
        return None
    ms = int((time.time() - t0) * 1000)
    if not (200 <= status < 400):
        log.debug("Title fetch for %s returned HTTP %d (%d ms)", url, status, ms)
        return None
    title = extract_title(content)
    log.debug("Fetched title for %s in %d ms: %r", url, ms, title)
    return title


def _read_capped(r: httpx.Response, max_bytes: int) -> bytes:
    # Stop reading once max_bytes are in hand; the rest is never downloaded.
    buf = bytearray()
    for chunk in r.iter_bytes():
        buf += chunk
        if len(buf) >= max_bytes:
            break
    return bytes(buf[:max_bytes])


def extract_title(content: bytes) -> Optional[str]:
    if not content:
        return None
    soup = BeautifulSoup(content, "lxml")
    if soup.title is None:
        return None
    title = _WS_RE.sub(" ", soup.title.get_text(" ", strip=True)).strip()
    return title or None
