from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional, Set, Tuple

from .tag import normalize_tag, parse_tags
from .url_norm import domain_of, normalize_url, root_domain_of

NO_DOMAIN_DIR = "_"


@dataclass
class Bookmark:
    url: str
    title: Optional[str] = None
    tags: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.url = normalize_url(self.url)
        self.title = (self.title or "").strip() or None
        self.tags = parse_tags(self.tags)

    @property
    def id(self) -> str:
        return hashlib.sha256(self.url.encode("utf-8")).hexdigest()

    @property
    def domain(self) -> str:
        return domain_of(self.url)

    @property
    def root_domain(self) -> str:
        return root_domain_of(self.url)

    def terms(self) -> Set[str]:
        """Tags plus the root domain; the set keywords must hit exactly."""
        out = set(self.tags)
        root = normalize_tag(self.root_domain)
        if root:
            out.add(root)
        return out

    def rel_path(self, ext: str = "yaml") -> PurePosixPath:
        return PurePosixPath(self.domain or NO_DOMAIN_DIR) / f"{self.id}.{ext}"

    def merge(self, prior: "Bookmark") -> "Bookmark":
        """Fold an existing record for the same URL into this submission."""
        if self.url != prior.url:
            return self
        tags = list(prior.tags) + [t for t in self.tags if t not in prior.tags]
        return Bookmark(url=self.url, title=self.title or prior.title, tags=tags)

    def to_record(self) -> Dict[str, Any]:
        rec: Dict[str, Any] = {"url": self.url}
        if self.title:
            rec["title"] = self.title
        rec["tags"] = sorted(self.tags)
        return rec

    @staticmethod
    def from_record(data: Dict[str, Any]) -> "Bookmark":
        return Bookmark(
            url=str(data.get("url") or ""),
            title=data.get("title"),
            tags=list(data.get("tags") or []),
        )

    def label(self) -> str:
        tags = " ".join(self.tags)
        head = f"{self.title} <{self.url}>" if self.title else self.url
        return f"{head} [{tags}]" if tags else head

    def __str__(self) -> str:
        if not self.tags:
            return self.url
        return f"{self.url} - {' '.join(self.tags)}"


@dataclass(frozen=True)
class MatchResult:
    bookmark: Bookmark
    score: float
    matched: Tuple[str, ...] = ()
