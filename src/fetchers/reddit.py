"""Reddit fetcher via public JSON API. Returns items in the common format."""

import asyncio
import logging

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
    truncate_summary,
)

logger = logging.getLogger("ainews.fetchers.reddit")

REDDIT_BASE = "https://www.reddit.com"
DEFAULT_SUBREDDITS = ["MachineLearning", "artificial", "LocalLLaMA"]
USER_AGENT = "AI-News-Dashboard/1.0"
FETCH_TIMEOUT = 10
MAX_ATTEMPTS = 3
BACKOFF_SECONDS = 1.0
REQUEST_DELAY = 0.5


async def fetch_reddit(catalog_reddit: dict) -> list[NewsItem]:
    """Fetch hot posts from each configured subreddit.

    Subreddits are fetched one after another with a fixed delay in between to
    stay under Reddit's rate limit. A subreddit that keeps failing is skipped.

    Args:
        catalog_reddit: The 'reddit' section from the source catalog.

    Returns:
        List of items in the common format, in subreddit then listing order.

    Raises:
        SourceError: every subreddit failed.
    """
    subreddits = catalog_reddit.get("subreddits", DEFAULT_SUBREDDITS)
    limit = catalog_reddit.get("limit", 10)
    delay = catalog_reddit.get("request_delay", REQUEST_DELAY)
    rules = build_rules(catalog_reddit.get("categories"))
    headers = {
        "User-Agent": catalog_reddit.get("user_agent", USER_AGENT),
        "Accept": "application/json",
    }

    items = []
    failures = []
    for i, sub in enumerate(subreddits):
        if i > 0 and delay:
            await asyncio.sleep(delay)
        url = f"{REDDIT_BASE}/r/{sub}/hot.json"
        try:
            resp = await _fetch_with_retry(url, {"limit": limit}, headers, catalog_reddit)
            children = resp.json().get("data", {}).get("children", [])
            if not isinstance(children, list):
                raise ValueError("listing has no children array")
        except (requests.RequestException, ValueError, AttributeError) as e:
            logger.warning("Skipping r/%s: %s", sub, e)
            failures.append(f"r/{sub}: {e}")
            continue

        for child in children:
            post = child.get("data") if isinstance(child, dict) else None
            if not isinstance(post, dict):
                logger.warning("Skipping non-object listing entry in r/%s", sub)
                continue
            try:
                item = _normalize_post(post, rules)
            except MALFORMED_ENTRY_ERRORS as e:
                logger.warning("Skipping malformed post in r/%s: %s", sub, e)
                continue
            if item:
                items.append(item)

    if subreddits and len(failures) == len(subreddits):
        raise SourceError("all subreddits failed (" + "; ".join(failures) + ")")

    logger.info("Fetched %d Reddit posts from %d subreddits",
                len(items), len(subreddits) - len(failures))
    return items


async def _fetch_with_retry(url: str, params: dict, headers: dict, catalog_reddit: dict):
    """GET with linear backoff on 5xx, timeouts and connection errors.

    Other HTTP errors (4xx) are raised immediately.
    """
    attempts = catalog_reddit.get("max_attempts", MAX_ATTEMPTS)
    backoff = catalog_reddit.get("backoff_seconds", BACKOFF_SECONDS)
    timeout = catalog_reddit.get("timeout", FETCH_TIMEOUT)

    for attempt in range(1, attempts + 1):
        try:
            return await netfetch.fetch_through_proxy(
                url, params=params, headers=headers, timeout=timeout,
            )
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else 0
            if status < 500 or attempt == attempts:
                raise
            logger.warning("Reddit returned %d for %s (attempt %d/%d)",
                           status, url, attempt, attempts)
        except requests.RequestException as e:
            if attempt == attempts:
                raise
            logger.warning("Reddit request failed for %s (attempt %d/%d): %s",
                           url, attempt, attempts, e)
        await asyncio.sleep(backoff * attempt)
    raise SourceError(f"Max retries reached for {url}")


def _normalize_post(post: dict, rules: list) -> NewsItem | None:
    permalink = post.get("permalink", "")
    # Stickied announcements and other non-comment listings are skipped
    if "/comments/" not in permalink:
        return None

    title = post.get("title")
    if not isinstance(title, str) or not title.strip():
        return None
    title = title.strip()

    ups = post.get("ups", 0) or 0
    comments = post.get("num_comments", 0) or 0
    subreddit = post.get("subreddit", "")

    # Link posts point at their external URL, self posts at the thread
    url = post.get("url") or ""
    if not url.startswith(("http://", "https://")):
        url = absolute_url(permalink, REDDIT_BASE)

    return NewsItem(
        id=f"reddit-{post['id']}",
        title=title,
        summary=truncate_summary(post.get("selftext")),
        url=url,
        source="reddit",
        source_name=f"r/{subreddit}",
        category=categorize(rules, title, post.get("link_flair_text")),
        published_at=epoch_to_datetime(post["created_utc"]),
        popularity=bounded_popularity(ups, comments),
        metadata={
            "upvotes": ups,
            "comments": comments,
            "author": post.get("author", ""),
            "subreddit": subreddit,
        },
    )
