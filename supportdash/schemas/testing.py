from enum import Enum
from pydantic import ConfigDict, Field
from typing import List, Optional

from supportdash.schemas.common import CamelModel

class TestStatus(str, Enum):
    __test__ = False

    PASS = "PASS"
    FAIL = "FAIL"
    ERROR = "ERROR"
    SKIP = "SKIP"
    NO_VALIDADO = "NO_VALIDADO"

class TestCase(CamelModel):
    __test__ = False

    question: str
    expected: str = ""

class TestConfig(CamelModel):
    __test__ = False

    api_url: Optional[str] = None
    api_key: Optional[str] = None
    bearer_token: Optional[str] = None
    # None falls back to the default threshold
    threshold: Optional[float] = Field(default=None, ge=0, le=100)
    skip_validation: Optional[bool] = None

class TestRunRequest(CamelModel):
    __test__ = False

    # null is treated like a missing list
    test_cases: Optional[List[TestCase]] = None
    config: Optional[TestConfig] = None

class TestResult(CamelModel):
    __test__ = False
    # Inherits the camelCase aliases; results never change once produced
    model_config = ConfigDict(frozen=True)

    index: int  # 1-based position in the input
    question: str
    expected: str
    response: str
    status: TestStatus
    reason: str
    latency_ms: int
    http_status: Optional[int] = None

class TestMetrics(CamelModel):
    __test__ = False

    total: int
    success: int
    failed: int
    errors: int
    skipped: int
    validated: int       # success + failed
    success_rate: float  # 0-100, one decimal
    threshold: float
    passed: bool
    avg_latency_ms: int

class TestRunResponse(CamelModel):
    __test__ = False

    results: List[TestResult]
    metrics: TestMetrics

class TestExportRequest(CamelModel):
    __test__ = False

    results: List[TestResult]

class TestImportResponse(CamelModel):
    __test__ = False

    test_cases: List[TestCase]
    count: int
