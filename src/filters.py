"""Dashboard filtering: source and category toggles plus sort order."""

import logging

from normalize import CATEGORIES, SOURCES, NewsItem

logger = logging.getLogger("ainews.filters")

SORT_OPTIONS = ("time", "popularity")
DEFAULT_SORT = "time"


def filter_items(
    items: list[NewsItem],
    sources: list[str] | None = None,
    categories: list[str] | None = None,
) -> list[NewsItem]:
    """Keep items whose source and category are both enabled.

    None means "all enabled". Unknown names are ignored.
    """
    enabled_sources = set(SOURCES) if sources is None else set(sources) & set(SOURCES)
    enabled_categories = set(CATEGORIES) if categories is None else set(categories) & set(CATEGORIES)

    result = [
        item for item in items
        if item.source in enabled_sources and item.category in enabled_categories
    ]

    filtered_count = len(items) - len(result)
    if filtered_count:
        logger.debug("Filtered out %d items by source/category", filtered_count)
    return result


def sort_items(items: list[NewsItem], sort_by: str = DEFAULT_SORT) -> list[NewsItem]:
    """Sort newest first, or most popular first. Both sorts are stable."""
    if sort_by not in SORT_OPTIONS:
        logger.warning("Unknown sort %r, falling back to %s", sort_by, DEFAULT_SORT)
        sort_by = DEFAULT_SORT
    if sort_by == "popularity":
        return sorted(items, key=lambda x: x.popularity, reverse=True)
    return sorted(items, key=lambda x: x.published_at, reverse=True)


def apply_filters(
    items: list[NewsItem],
    sources: list[str] | None = None,
    categories: list[str] | None = None,
    sort_by: str = DEFAULT_SORT,
) -> list[NewsItem]:
    return sort_items(filter_items(items, sources, categories), sort_by)
