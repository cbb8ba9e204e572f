from __future__ import annotations

import re
from typing import Iterable, List, Union

_TERMINATOR_RE = re.compile(r"[,\s]+")
_DISCARD_RE = re.compile(r'[,\s"\\]+')


def normalize_tag(raw: str) -> str:
    return _DISCARD_RE.sub("", raw or "").lower().strip()


def parse_tags(value: Union[str, Iterable[str], None]) -> List[str]:
    """Split free text (or a list of fragments) into unique, normalized tags.

    First-seen order is kept so tags display the way the user typed them.
    """
    if value is None:
        return []
    chunks = [value] if isinstance(value, str) else list(value)
    out: List[str] = []
    seen = set()
    for chunk in chunks:
        for raw in _TERMINATOR_RE.split(str(chunk or "")):
            tag = normalize_tag(raw)
            if not tag or tag in seen:
                continue
            seen.add(tag)
            out.append(tag)
    return out
