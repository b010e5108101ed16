"""Render dashboard output: HTML page and JSON snapshot."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from filters import SORT_OPTIONS
from normalize import CATEGORIES, CATEGORY_LABELS, SOURCE_LABELS, SOURCES

logger = logging.getLogger("ainews.render")

PROJECT_ROOT = Path(__file__).resolve().parent.parent
TEMPLATES_DIR = PROJECT_ROOT / "templates"

SOURCE_BADGES = {
    "reddit": "badge-reddit",
    "hackernews": "badge-hn",
    "arxiv": "badge-arxiv",
}


def time_ago(published_dt: datetime | None, now: datetime | None = None) -> str:
    """Convert a datetime to a human-readable relative timestamp."""
    if not published_dt:
        return ""
    now = now or datetime.now(timezone.utc)
    seconds = (now - published_dt).total_seconds()

    if seconds < 3600:
        mins = int(seconds / 60)
        return f"{mins}m ago" if mins > 0 else "just now"
    elif seconds < 86400:
        hours = int(seconds / 3600)
        return f"{hours}h ago"
    else:
        days = int(seconds / 86400)
        return f"{days}d ago"


def build_cards(items) -> list[dict]:
    """Flatten items into the dicts the dashboard template iterates over."""
    cards = []
    for item in items:
        card = item.to_dict()
        card["time_ago"] = time_ago(item.published_at)
        card["source_label"] = SOURCE_LABELS.get(item.source, item.source)
        card["source_badge"] = SOURCE_BADGES.get(item.source, "")
        card["category_label"] = CATEGORY_LABELS.get(item.category, item.category)
        card["popularity_display"] = int(round(item.popularity))
        cards.append(card)
    return cards


def _environment() -> Environment:
    return Environment(loader=FileSystemLoader(str(TEMPLATES_DIR)), autoescape=True)


def render_dashboard(
    items,
    fetched_at: datetime,
    errors=(),
    selected_sources=None,
    selected_categories=None,
    sort_by: str = "time",
) -> str:
    """Render the dashboard page for an already filtered and sorted item list."""
    template = _environment().get_template("dashboard.html.j2")
    return template.render(
        cards=build_cards(items),
        fetched_at=fetched_at.isoformat(),
        fetched_formatted=fetched_at.strftime("%B %d, %Y at %H:%M UTC"),
        errors=list(errors),
        sources=[(s, SOURCE_LABELS[s]) for s in SOURCES],
        categories=[(c, CATEGORY_LABELS[c]) for c in CATEGORIES],
        selected_sources=set(SOURCES if selected_sources is None else selected_sources),
        selected_categories=set(CATEGORIES if selected_categories is None else selected_categories),
        sort_options=SORT_OPTIONS,
        sort_by=sort_by,
    )


def render_html(envelope, output_path: Path) -> None:
    html = render_dashboard(envelope.items, envelope.fetched_at, envelope.errors)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(html, encoding="utf-8")
    logger.info("Wrote HTML: %s", output_path)


def render_json(envelope, output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps(envelope.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8"
    )
    logger.info("Wrote JSON: %s", output_path)
