"""Single outbound fetch primitive, optionally routed through an HTTP(S) proxy."""

import asyncio
import functools
import logging
from concurrent.futures import Executor

import requests

from config import proxy_settings

logger = logging.getLogger("ainews.netfetch")

DEFAULT_TIMEOUT = 15
NO_STORE_HEADERS = {
    "Cache-Control": "no-store",
    "Pragma": "no-cache",
}


async def fetch_through_proxy(
    url: str,
    params: dict | None = None,
    headers: dict | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    executor: Executor | None = None,
) -> requests.Response:
    """GET url and return the response, raising on any failure.

    The blocking request runs in a worker thread so other tasks on the event
    loop keep running. Network errors, timeouts and non-2xx statuses all
    raise a requests.RequestException subclass. No retries happen here.

    Without an executor the request runs on the loop's default pool, which
    holds min(32, cpu_count + 4) threads. Callers that fan out wider than
    that pass their own executor.
    """
    merged = dict(NO_STORE_HEADERS)
    if headers:
        merged.update(headers)
    if executor is None:
        return await asyncio.to_thread(_get, url, params, merged, timeout)
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        executor, functools.partial(_get, url, params, merged, timeout),
    )


def _get(url: str, params: dict | None, headers: dict, timeout: float) -> requests.Response:
    resp = requests.get(
        url,
        params=params,
        headers=headers,
        timeout=timeout,
        proxies=proxy_settings(),
        allow_redirects=True,
    )
    resp.raise_for_status()
    return resp


def log_proxy_status() -> None:
    proxies = proxy_settings()
    if proxies:
        logger.info("Outbound proxy enabled: %s", proxies["https"])
    else:
        logger.info("No proxy configured, fetching directly")
