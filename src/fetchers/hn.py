"""Hacker News fetcher via the Firebase API. Returns items in the common format."""

import asyncio
import html
import logging
import re
from concurrent.futures import ThreadPoolExecutor

import requests

import netfetch
from normalize import (
    MALFORMED_ENTRY_ERRORS,
    NewsItem,
    SourceError,
    absolute_url,
    bounded_popularity,
    build_rules,
    categorize,
    epoch_to_datetime,
    matches_keywords,
    truncate_summary,
)

logger = logging.getLogger("ainews.fetchers.hn")

HN_API = "https://hacker-news.firebaseio.com/v0"
HN_BASE = "https://news.ycombinator.com"
HN_ITEM_URL = "https://news.ycombinator.com/item?id={id}"
FETCH_TIMEOUT = 15
STORY_LIMIT = 50

DEFAULT_KEYWORDS = [
    "ai", "artificial intelligence", "machine learning", "ml", "llm", "gpt",
    "claude", "openai", "anthropic", "neural", "deep learning", "transformer",
    "diffusion", "chatgpt", "gemini", "llama", "mistral", "copilot",
]


async def fetch_hn(catalog_hn: dict) -> list[NewsItem]:
    """Fetch AI-related stories from the current HN top stories.

    Story details are fetched concurrently on a thread pool sized to the
    story limit, so every request is in flight at once. Only stories whose
    title matches an AI keyword are kept, whatever their score.

    Args:
        catalog_hn: The 'hackernews' section from the source catalog.

    Returns:
        List of items in the common format, in top-stories order.

    Raises:
        SourceError: the top stories list could not be fetched.
    """
    limit = catalog_hn.get("story_limit", STORY_LIMIT)
    timeout = catalog_hn.get("timeout", FETCH_TIMEOUT)
    keywords = catalog_hn.get("keywords", DEFAULT_KEYWORDS)
    rules = build_rules(catalog_hn.get("categories"))

    try:
        resp = await netfetch.fetch_through_proxy(f"{HN_API}/topstories.json", timeout=timeout)
        story_ids = resp.json()
    except (requests.RequestException, ValueError) as e:
        raise SourceError(f"Failed to fetch HN top stories: {e}") from e
    if not isinstance(story_ids, list):
        raise SourceError("HN top stories response was not a list")

    story_ids = story_ids[:limit]
    pool = ThreadPoolExecutor(max_workers=max(1, len(story_ids)), thread_name_prefix="hn-fetch")
    try:
        # gather returns results in argument order, not completion order
        stories = await asyncio.gather(
            *(_fetch_story(story_id, timeout, pool) for story_id in story_ids)
        )
    finally:
        pool.shutdown(wait=False)

    items = []
    for story in stories:
        if not story or not isinstance(story.get("title"), str):
            continue
        if not matches_keywords(story["title"], keywords):
            continue
        try:
            items.append(_normalize_story(story, rules))
        except MALFORMED_ENTRY_ERRORS as e:
            logger.warning("Skipping malformed HN story %s: %s", story.get("id"), e)

    logger.info("Fetched %d AI-related HN stories out of %d", len(items), len(stories))
    return items


async def _fetch_story(story_id, timeout: float, pool: ThreadPoolExecutor) -> dict | None:
    try:
        resp = await netfetch.fetch_through_proxy(
            f"{HN_API}/item/{story_id}.json", timeout=timeout, executor=pool,
        )
        story = resp.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning("HN item %s failed: %s", story_id, e)
        return None
    # Deleted or dead items come back as null
    return story if isinstance(story, dict) else None


def _normalize_story(story: dict, rules: list) -> NewsItem:
    story_id = story["id"]
    title = story["title"].strip()
    score = story.get("score", 0) or 0
    descendants = story.get("descendants", 0) or 0
    discussion_url = HN_ITEM_URL.format(id=story_id)

    return NewsItem(
        id=f"hn-{story_id}",
        title=title,
        summary=truncate_summary(_strip_tags(story.get("text"))),
        url=_story_url(story.get("url"), discussion_url),
        source="hackernews",
        source_name="Hacker News",
        category=categorize(rules, title),
        published_at=epoch_to_datetime(story["time"]),
        popularity=bounded_popularity(score, descendants),
        metadata={
            "upvotes": score,
            "comments": descendants,
            "author": story.get("by", ""),
            "hn_url": discussion_url,
        },
    )


def _story_url(url, discussion_url: str) -> str:
    """Absolute link for a story; relative links resolve against HN itself."""
    if not isinstance(url, str) or not url:
        return discussion_url
    if url.startswith("/"):
        return absolute_url(url, HN_BASE)
    if not url.startswith(("http://", "https://")):
        return discussion_url
    return url


def _strip_tags(text: str | None) -> str:
    if not text:
        return ""
    return html.unescape(re.sub(r"<[^>]+>", " ", text))
