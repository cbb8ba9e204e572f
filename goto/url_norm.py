from __future__ import annotations

import re
from functools import lru_cache
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

import tldextract  # type: ignore

TRACKING_KEYS_PREFIXES = ("utm_",)
TRACKING_KEYS_EXACT = {"fbclid", "gclid", "mc_cid", "mc_eid"}

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*://")

# Bundled public suffix snapshot only; never reach out to the network.
_EXTRACT = tldextract.TLDExtract(suffix_list_urls=())


def normalize_url(url: str) -> str:
    raw = (url or "").strip()
    if not raw:
        raise ValueError("URL must not be empty")
    if not _SCHEME_RE.match(raw):
        raw = f"https://{raw}"

    p = urlparse(raw)
    scheme = p.scheme.lower()
    if scheme in ("http", "https") and not p.hostname:
        raise ValueError(f"URL has no host: {url!r}")

    netloc = p.netloc
    if "@" in netloc:
        userinfo, host = netloc.rsplit("@", 1)
        netloc = f"{userinfo}@{host.lower()}"
    else:
        netloc = netloc.lower()

    query = p.query
    query_items = parse_qsl(p.query, keep_blank_values=True)
    kept = [(k, v) for k, v in query_items if not _is_tracking_key(k)]
    if len(kept) != len(query_items):
        query = urlencode(kept, doseq=True)

    path = p.path
    if scheme in ("http", "https") and not path:
        path = "/"

    return urlunparse(p._replace(scheme=scheme, netloc=netloc, path=path, query=query))


def _is_tracking_key(key: str) -> bool:
    kl = key.lower()
    if kl in TRACKING_KEYS_EXACT:
        return True
    return any(kl.startswith(pref) for pref in TRACKING_KEYS_PREFIXES)


def domain_of(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


@lru_cache(maxsize=4096)
def root_domain_of(url: str) -> str:
    """Registrable name without its public suffix: gist.github.com -> github."""
    ext = _EXTRACT(url)
    if not ext.suffix:
        return ""
    return ext.domain.lower()
