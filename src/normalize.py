"""Common item format shared by all fetchers, plus categorization and dedup."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone

SOURCES = ("reddit", "hackernews", "arxiv")
CATEGORIES = ("model", "application", "tutorial", "tool", "research")

SOURCE_LABELS = {
    "reddit": "Reddit",
    "hackernews": "Hacker News",
    "arxiv": "arXiv",
}

CATEGORY_LABELS = {
    "model": "New Model",
    "application": "Application",
    "tutorial": "Tutorial",
    "tool": "Tool",
    "research": "Research",
}

SUMMARY_MAX_CHARS = 300
POPULARITY_MAX = 100
DEFAULT_CATEGORY = "application"


class SourceError(Exception):
    """Raised by a fetcher when it could not produce any items at all."""


# Raised while normalizing one upstream record; out-of-range epochs raise
# OverflowError or OSError from datetime.fromtimestamp.
MALFORMED_ENTRY_ERRORS = (KeyError, TypeError, ValueError, AttributeError, OverflowError, OSError)


@dataclass(frozen=True)
class NewsItem:
    id: str
    title: str
    url: str
    source: str
    source_name: str
    category: str
    published_at: datetime
    popularity: float
    summary: str | None = None
    metadata: dict = field(default_factory=dict)

    def __post_init__(self):
        if self.source not in SOURCES:
            raise ValueError(f"Unknown source: {self.source!r}")
        if self.category not in CATEGORIES:
            raise ValueError(f"Unknown category: {self.category!r}")
        if not self.title:
            raise ValueError("Item title must not be empty")
        if not self.url.startswith(("http://", "https://")):
            raise ValueError(f"Item URL must be absolute: {self.url!r}")

    def to_dict(self) -> dict:
        """Serialize with the field names the dashboard expects."""
        data = {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "source": self.source,
            "sourceName": self.source_name,
            "category": self.category,
            "publishedAt": self.published_at.isoformat(),
            "popularity": self.popularity,
            "metadata": dict(self.metadata),
        }
        if self.summary:
            data["summary"] = self.summary
        return data


def truncate_summary(text: str | None, max_chars: int = SUMMARY_MAX_CHARS) -> str | None:
    """Collapse whitespace and cap length. Empty text becomes None."""
    if not text:
        return None
    text = re.sub(r"\s+", " ", text).strip()
    if not text:
        return None
    return text[:max_chars]


def epoch_to_datetime(seconds) -> datetime:
    return datetime.fromtimestamp(float(seconds), tz=timezone.utc)


def bounded_popularity(primary, secondary) -> float:
    """Map two engagement counts onto the shared 0-100 popularity scale."""
    value = (primary or 0) / 10 + (secondary or 0) / 5
    return max(0.0, min(float(POPULARITY_MAX), value))


def absolute_url(url: str | None, base: str) -> str:
    """Return url when it is already absolute, otherwise join it onto base."""
    if url and url.startswith(("http://", "https://")):
        return url
    path = url or ""
    if path and not path.startswith("/"):
        path = "/" + path
    return base.rstrip("/") + path


# Rules are evaluated top to bottom and the first match wins, so the order
# here is the priority order.
DEFAULT_CATEGORY_RULES = [
    {"category": "tutorial", "keywords": ["tutorial", "guide", "how to"]},
    {"category": "model", "keywords": ["release", "launch", "announcing", "new model"]},
    {"category": "tool", "keywords": ["tool", "library", "framework"]},
    {"category": "research", "keywords": ["paper", "research"]},
]


def build_rules(rule_config: list[dict] | None) -> list[tuple]:
    """Turn catalog rule entries into an ordered list of (predicate, category).

    Each entry has a 'category', title 'keywords' and optional
    'tag_keywords' matched against a source-native tag such as a flair.
    """
    rules = []
    for entry in rule_config or DEFAULT_CATEGORY_RULES:
        category = entry["category"]
        if category not in CATEGORIES:
            raise ValueError(f"Unknown category in rules: {category!r}")
        title_kws = tuple(kw.lower() for kw in entry.get("keywords", []))
        tag_kws = tuple(kw.lower() for kw in entry.get("tag_keywords", []))
        rules.append((_keyword_predicate(title_kws, tag_kws), category))
    return rules


def _keyword_predicate(title_kws: tuple, tag_kws: tuple):
    def predicate(title: str, tag: str) -> bool:
        return any(kw in title for kw in title_kws) or any(kw in tag for kw in tag_kws)
    return predicate


def categorize(rules: list[tuple], title: str, tag: str | None = "") -> str:
    title = (title or "").lower()
    tag = (tag or "").lower()
    for predicate, category in rules:
        if predicate(title, tag):
            return category
    return DEFAULT_CATEGORY


def matches_keywords(title: str, keywords: list[str]) -> bool:
    title_lower = (title or "").lower()
    return any(kw.lower() in title_lower for kw in keywords)


def deduplicate_by_id(items: list[NewsItem]) -> list[NewsItem]:
    """Keep one item per id, preferring higher popularity; ties keep the first seen."""
    kept: dict[str, NewsItem] = {}
    for item in items:
        existing = kept.get(item.id)
        if existing is None or item.popularity > existing.popularity:
            kept[item.id] = item
    return list(kept.values())
