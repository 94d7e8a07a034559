import asyncio

import httpx

from supportdash.core.config import DEFAULT_RETRIES, MAX_BACKOFF_MS, QA_TIMEOUT_SECONDS


def backoff_seconds(attempt: int) -> float:
    """min(2^attempt * 1000ms, 10s), attempt is 0-based."""
    return min(2 ** attempt * 1000, MAX_BACKOFF_MS) / 1000


async def post_with_retries(
    client: httpx.AsyncClient,
    url: str,
    headers: dict,
    body,
    retries: int = DEFAULT_RETRIES,
    timeout: float = QA_TIMEOUT_SECONDS,
    sleep=asyncio.sleep,
) -> httpx.Response:
    """
    POSTs `body` as JSON, retrying only transport failures (connect errors, timeouts...).
    HTTP error statuses are valid responses and are returned as-is.
    After `retries + 1` failed attempts the last exception is raised.
    """
    last_error = None
    for attempt in range(retries + 1):
        try:
            return await client.post(url, headers=headers, json=body, timeout=timeout)
        except httpx.TransportError as e:
            last_error = e
            if attempt < retries:
                wait = backoff_seconds(attempt)
                print(f"⚠️ Request to {url} failed ({type(e).__name__}), retrying in {wait:.0f}s (attempt {attempt + 1})")
                await sleep(wait)

    raise last_error
