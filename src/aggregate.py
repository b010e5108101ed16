"""Fan out to every source concurrently, then merge, dedup and sort the results."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from fetchers.arxiv import fetch_arxiv
from fetchers.hn import fetch_hn
from fetchers.reddit import fetch_reddit
from normalize import SOURCE_LABELS, NewsItem, deduplicate_by_id

logger = logging.getLogger("ainews.aggregate")

# (source key, catalog section, fetcher). Adding a source only means adding a row.
ADAPTERS = (
    ("reddit", "reddit", fetch_reddit),
    ("hackernews", "hackernews", fetch_hn),
    ("arxiv", "arxiv", fetch_arxiv),
)


@dataclass(frozen=True)
class SourceResult:
    """Outcome of one fetcher: either items or an error message, never both."""
    source: str
    items: tuple = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class AggregateEnvelope:
    items: tuple
    fetched_at: datetime
    errors: tuple = field(default=())

    def to_dict(self) -> dict:
        data = {
            "items": [item.to_dict() for item in self.items],
            "fetchedAt": self.fetched_at.isoformat(),
        }
        if self.errors:
            data["errors"] = list(self.errors)
        return data


async def _settle(source: str, fetcher, section: dict) -> SourceResult:
    try:
        items = await fetcher(section)
    except Exception as e:
        logger.warning("Source %s failed: %s", source, e)
        return SourceResult(source=source, error=str(e) or type(e).__name__)
    return SourceResult(source=source, items=tuple(items))


def merge_results(results: list[SourceResult]) -> AggregateEnvelope:
    """Combine fetcher outcomes into one envelope.

    Items are deduplicated by id (higher popularity wins) and sorted newest
    first. The sort is stable, so equal timestamps keep their merged order.
    """
    combined: list[NewsItem] = []
    errors = []
    for result in results:
        if result.ok:
            combined.extend(result.items)
        else:
            label = SOURCE_LABELS.get(result.source, result.source)
            errors.append(f"{label}: {result.error}")

    unique = deduplicate_by_id(combined)
    unique.sort(key=lambda item: item.published_at, reverse=True)

    logger.info("Merged %d items (%d before dedup), %d source errors",
                len(unique), len(combined), len(errors))
    return AggregateEnvelope(
        items=tuple(unique),
        fetched_at=datetime.now(timezone.utc),
        errors=tuple(errors),
    )


async def aggregate(catalog: dict, adapters=ADAPTERS) -> AggregateEnvelope:
    """Run every fetcher concurrently and return the merged envelope.

    One fetcher failing never cancels or affects the others; its error is
    reported in the envelope instead of being raised.
    """
    results = await asyncio.gather(*(
        _settle(source, fetcher, catalog.get(section) or {})
        for source, section, fetcher in adapters
    ))
    return merge_results(list(results))
