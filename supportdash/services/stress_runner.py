import asyncio
import math
import time

import httpx

from supportdash.core.config import (
    DEFAULT_CONCURRENCY,
    DEFAULT_STRESS_MESSAGE,
    MAX_CONCURRENCY,
    MIN_CONCURRENCY,
    SESSION_ID,
    STRESS_TIMEOUT_SECONDS,
)
from supportdash.schemas.stress import StressRequestResult, StressResponse
from supportdash.services.metrics import compute_stress_stats


def clamp_concurrency(value) -> int:
    """
    Missing, non-numeric or zero -> default. Anything else is clamped to
    [MIN_CONCURRENCY, MAX_CONCURRENCY] and truncated to an int.
    """
    try:
        count = float(value)
    except (TypeError, ValueError):
        count = 0.0
    if not count or math.isnan(count):
        count = DEFAULT_CONCURRENCY
    return int(max(MIN_CONCURRENCY, min(MAX_CONCURRENCY, count)))


def build_stress_payload(message=None):
    return {
        "input_value": (message or "").strip() or DEFAULT_STRESS_MESSAGE,
        "output_type": "chat",
        "input_type": "chat",
        "session_id": SESSION_ID,
    }


def build_stress_headers(api_key=None):
    headers = {"Content-Type": "application/json"}
    if api_key and api_key.strip():
        headers["x-api-key"] = api_key.strip()
    return headers


async def fire_request(client: httpx.AsyncClient, index: int, url: str, headers: dict, payload: dict) -> StressRequestResult:
    # Single shot: no retries, failures are recorded and never raised
    start = time.perf_counter()
    try:
        res = await client.post(url, headers=headers, json=payload, timeout=STRESS_TIMEOUT_SECONDS)
    except Exception as e:
        return StressRequestResult(
            index=index,
            status="error",
            latency_ms=_elapsed_ms(start),
            error=str(e) or type(e).__name__,
        )

    return StressRequestResult(
        index=index,
        status="success" if res.is_success else "error",
        http_status=res.status_code,
        latency_ms=_elapsed_ms(start),
    )


async def run_stress(client: httpx.AsyncClient, webhook_url: str, api_key=None, concurrency=None, message=None) -> StressResponse:
    count = clamp_concurrency(concurrency)
    url = webhook_url.strip()
    headers = build_stress_headers(api_key)
    payload = build_stress_payload(message)

    print(f"🔥 Firing {count} concurrent requests at {url}...")

    # All requests start together; gather keeps launch order in the results
    results = await asyncio.gather(
        *[fire_request(client, i + 1, url, headers, payload) for i in range(count)]
    )
    stats = compute_stress_stats(results)

    print(f"✅ Stress test done: {stats.success}/{stats.total} ok, p95 {stats.p95_latency_ms}ms")
    return StressResponse(results=list(results), stats=stats)


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)
