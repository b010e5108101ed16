"""arXiv fetcher via the Atom query API. Returns items in the common format."""

import calendar
import logging
import re
from datetime import datetime, timezone

import feedparser
import requests

import netfetch
from normalize import MALFORMED_ENTRY_ERRORS, NewsItem, SourceError, truncate_summary

logger = logging.getLogger("ainews.fetchers.arxiv")

ARXIV_API = "https://export.arxiv.org/api/query"
DEFAULT_CATEGORIES = ["cs.AI", "cs.CL", "cs.LG"]
FETCH_TIMEOUT = 15
MAX_RESULTS = 5
# arXiv has no engagement signal, so every paper gets the same score
FIXED_POPULARITY = 50
DEFAULT_CATEGORY_MAP = {"cs.CL": "model"}

PAPER_ID_RE = re.compile(r"(\d+\.\d+)")


async def fetch_arxiv(catalog_arxiv: dict) -> list[NewsItem]:
    """Fetch the most recent submissions for each configured arXiv category.

    Args:
        catalog_arxiv: The 'arxiv' section from the source catalog.

    Returns:
        List of items in the common format, in category then feed order.

    Raises:
        SourceError: every category feed failed.
    """
    categories = catalog_arxiv.get("categories", DEFAULT_CATEGORIES)
    max_results = catalog_arxiv.get("max_results", MAX_RESULTS)
    timeout = catalog_arxiv.get("timeout", FETCH_TIMEOUT)
    popularity = catalog_arxiv.get("popularity", FIXED_POPULARITY)
    category_map = catalog_arxiv.get("category_map", DEFAULT_CATEGORY_MAP)

    items = []
    failures = []
    for feed_category in categories:
        params = {
            "search_query": f"cat:{feed_category}",
            "sortBy": "submittedDate",
            "sortOrder": "descending",
            "max_results": max_results,
        }
        try:
            resp = await netfetch.fetch_through_proxy(ARXIV_API, params=params, timeout=timeout)
            feed = feedparser.parse(resp.text)
        except requests.RequestException as e:
            logger.warning("Failed to fetch arXiv %s: %s", feed_category, e)
            failures.append(f"{feed_category}: {e}")
            continue

        if feed.bozo and not feed.entries:
            logger.warning("Malformed arXiv feed for %s: %s", feed_category, feed.bozo_exception)
            failures.append(f"{feed_category}: malformed feed")
            continue

        for entry in feed.entries:
            try:
                items.append(_normalize_entry(entry, feed_category, popularity, category_map))
            except MALFORMED_ENTRY_ERRORS as e:
                logger.warning("Skipping malformed arXiv entry in %s: %s", feed_category, e)

    if categories and len(failures) == len(categories):
        raise SourceError("all arXiv feeds failed (" + "; ".join(failures) + ")")

    logger.info("Fetched %d arXiv papers from %d categories",
                len(items), len(categories) - len(failures))
    return items


def pick_article_url(links: list[dict]) -> str:
    """Prefer the abstract page over the PDF and other link variants."""
    for link in links:
        if "/abs/" in link.get("href", ""):
            return link["href"]
    return links[0].get("href", "") if links else ""


def paper_id(entry_id: str) -> str:
    """Extract "2401.12345" from "http://arxiv.org/abs/2401.12345v1"."""
    match = PAPER_ID_RE.search(entry_id)
    return match.group(1) if match else entry_id


def _normalize_entry(entry, feed_category: str, popularity: float, category_map: dict) -> NewsItem:
    entry_id = entry["id"]
    title = re.sub(r"\s+", " ", entry.get("title", "")).strip()

    primary = entry.get("arxiv_primary_category") or {}
    bucket = category_map.get(primary.get("term") or feed_category, "research")

    authors = entry.get("authors") or []
    author = authors[0].get("name") if authors else None

    return NewsItem(
        id=f"arxiv-{paper_id(entry_id)}",
        title=title,
        summary=truncate_summary(entry.get("summary")),
        url=pick_article_url(entry.get("links") or []) or entry_id,
        source="arxiv",
        source_name=f"arXiv {feed_category}",
        category=bucket,
        published_at=_parse_published(entry),
        popularity=popularity,
        metadata={"author": author or "Unknown"},
    )


def _parse_published(entry) -> datetime:
    for attr in ("published_parsed", "updated_parsed"):
        parsed = entry.get(attr)
        if parsed:
            return datetime.fromtimestamp(calendar.timegm(parsed), tz=timezone.utc)
    raise ValueError("entry has no publication date")
