import asyncio
import logging
from typing import Any

import httpx

RETRYABLE_HTTP_STATUSES = frozenset({408, 425, 429, 500, 502, 503, 504})

logger = logging.getLogger(__name__)


async def post_with_retries(
    client: httpx.AsyncClient,
    url: str,
    body: Any,
    max_retries: int,
    retry_backoff_seconds: float,
) -> httpx.Response:
    """POST `body` as JSON, retrying timeouts, network errors and retryable statuses.

    Backoff doubles after every failed attempt. Once attempts run out the last
    error is raised (``httpx.HTTPStatusError`` for a status); any other non-2xx
    status raises straight away.
    """
    attempts = max(0, max_retries) + 1
    for attempt in range(1, attempts + 1):
        try:
            response = await client.post(url, json=body)
        except (httpx.TimeoutException, httpx.NetworkError) as exc:
            if attempt == attempts:
                raise
            reason = repr(exc)
        else:
            if response.status_code not in RETRYABLE_HTTP_STATUSES or attempt == attempts:
                response.raise_for_status()
                return response
            reason = f"status {response.status_code}"

        delay = retry_backoff_seconds * 2 ** (attempt - 1)
        logger.debug("POST %s failed with %s, retry %s/%s in %.2fs", url, reason, attempt, attempts - 1, delay)
        if delay > 0:
            await asyncio.sleep(delay)
    raise AssertionError("retry loop exited without a response")


def status_of(exc: httpx.HTTPError) -> int | None:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    return None
