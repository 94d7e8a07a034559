from pydantic import Field
from typing import Any, List, Literal, Optional

from supportdash.schemas.common import CamelModel

class StressRequest(CamelModel):
    webhook_url: Optional[str] = None
    api_key: Optional[str] = None
    # Loosely typed: non-numeric values fall back to the default
    concurrency: Any = None
    message: Optional[str] = None

class StressRequestResult(CamelModel):
    index: int
    status: Literal["success", "error"]
    latency_ms: int
    http_status: Optional[int] = None
    error: Optional[str] = None

class StressStats(CamelModel):
    total: int = 0
    success: int = 0
    errors: int = 0
    avg_latency_ms: int = 0
    min_latency_ms: int = 0
    max_latency_ms: int = 0
    p95_latency_ms: int = 0

class StressResponse(CamelModel):
    results: List[StressRequestResult] = Field(default_factory=list)
    stats: StressStats
