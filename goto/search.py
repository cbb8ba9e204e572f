from __future__ import annotations

from typing import Iterable
from urllib.parse import quote_plus

from .config import DEFAULT_SEARCH_ENGINE


def build_query(keywords: Iterable[str], engine: str = DEFAULT_SEARCH_ENGINE) -> str:
    """Search-engine URL for the given keywords.

    ``engine`` either holds a ``{query}`` placeholder or is used as a prefix.
    """
    query = "+".join(quote_plus(k) for k in keywords if k)
    if "{query}" in engine:
        return engine.replace("{query}", query)
    return f"{engine}{query}"
