"""Shared fixtures for the AI news test suite."""

import json
import sys
from datetime import datetime, timezone, timedelta
from pathlib import Path

import pytest
import requests

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

import netfetch
from normalize import NewsItem


@pytest.fixture
def make_item():
    """Factory fixture for creating test items with sensible defaults."""
    def _make(
        id="reddit-abc",
        title="Test Article about LLMs",
        url="https://example.com/article",
        source="reddit",
        source_name="r/MachineLearning",
        category="application",
        hours_ago=2,
        popularity=10.0,
        summary="A test summary about AI and machine learning.",
        metadata=None,
    ):
        return NewsItem(
            id=id,
            title=title,
            url=url,
            source=source,
            source_name=source_name,
            category=category,
            published_at=datetime.now(timezone.utc) - timedelta(hours=hours_ago),
            popularity=popularity,
            summary=summary,
            metadata=metadata or {},
        )
    return _make


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload)

    def json(self):
        if self._payload is None and self.text:
            return json.loads(self.text)
        return self._payload


@pytest.fixture
def fake_upstream(monkeypatch):
    """Replace the network layer with canned responses keyed by URL.

    Register a route with ``routes[url] = value`` where value is a payload
    (returned as JSON), a FakeResponse, an exception instance (raised), or a
    tuple of those consumed one per call, the last one repeating. Every call
    is recorded in ``calls``.
    """
    routes = {}
    queues = {}
    calls = []

    async def fake_fetch(url, params=None, headers=None, timeout=netfetch.DEFAULT_TIMEOUT,
                         executor=None):
        calls.append({"url": url, "params": params, "headers": headers,
                      "timeout": timeout, "executor": executor})
        if url not in routes:
            raise requests.ConnectionError(f"no route for {url}")
        value = routes[url]
        if isinstance(value, tuple):
            queue = queues.setdefault(url, list(value))
            value = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(value, Exception):
            raise value
        resp = value if isinstance(value, FakeResponse) else FakeResponse(payload=value)
        if resp.status_code >= 400:
            raise requests.HTTPError(f"{resp.status_code} Error for url: {url}", response=resp)
        return resp

    monkeypatch.setattr(netfetch, "fetch_through_proxy", fake_fetch)
    fake_fetch.routes = routes
    fake_fetch.calls = calls
    return fake_fetch
