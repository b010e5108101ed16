"""HTTP surface: the aggregation endpoint and the HTML dashboard."""

import logging

from fastapi import FastAPI, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse

import aggregate as aggregation
from config import load_catalog
from filters import DEFAULT_SORT, apply_filters
from render import render_dashboard

logger = logging.getLogger("ainews.server")

# Every response reflects a live fetch; nothing in front of us may cache it.
NO_STORE = {"Cache-Control": "no-store, max-age=0"}


def create_app(catalog: dict | None = None) -> FastAPI:
    app = FastAPI(title="AI News", docs_url=None, redoc_url=None)
    app.state.catalog = catalog if catalog is not None else load_catalog()

    @app.get("/api/aggregate")
    async def aggregate_news(request: Request):
        envelope = await aggregation.aggregate(request.app.state.catalog)
        return JSONResponse(envelope.to_dict(), headers=NO_STORE)

    @app.get("/", response_class=HTMLResponse)
    async def dashboard(
        request: Request,
        source: list[str] | None = Query(None),
        category: list[str] | None = Query(None),
        sort: str = DEFAULT_SORT,
        filtered: bool = False,
    ):
        # A submitted form with every box unchecked means "show none", not "show all"
        if filtered:
            source = source or []
            category = category or []

        envelope = await aggregation.aggregate(request.app.state.catalog)
        items = apply_filters(list(envelope.items), source, category, sort)
        html = render_dashboard(
            items,
            envelope.fetched_at,
            envelope.errors,
            selected_sources=source,
            selected_categories=category,
            sort_by=sort,
        )
        return HTMLResponse(html, headers=NO_STORE)

    return app
