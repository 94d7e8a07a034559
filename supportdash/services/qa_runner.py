"""
Sequential QA runner for the support agent.

Each test case is sent to the agent endpoint, the answer is pulled out of the
response JSON, and (when there is an expected answer) the same endpoint is asked
to judge whether both answers are equivalent. Cases run one at a time so the
LLM backend never sees more than one request from us and per-case latency
stays meaningful.
"""
import json
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

import httpx

from supportdash.core.config import (
    AGENT_ORIGIN,
    AGENT_REFERER,
    DEFAULT_THRESHOLD,
    SESSION_ID,
    get_agent_defaults,
)
from supportdash.schemas.testing import (
    TestCase,
    TestConfig,
    TestResult,
    TestRunResponse,
    TestStatus,
)
from supportdash.services.extractor import extract_text
from supportdash.services.http_caller import post_with_retries
from supportdash.services.metrics import compute_test_metrics

# --- JUDGE PROMPT ---
JUDGE_PROMPT = """Sos un evaluador de respuestas de un agente de soporte.
Compará la respuesta esperada con la respuesta del agente y determiná si son EQUIVALENTES en contenido y significado.
No es necesario que sean idénticas, pero deben transmitir la misma información clave.

RESPUESTA ESPERADA:
{expected}

RESPUESTA DEL AGENTE:
{actual}

Respondé ÚNICAMENTE con un JSON en este formato exacto (sin texto adicional):
{{"valida": true/false, "razon": "explicación breve"}}"""

# Fallback when the judge does not answer with parseable JSON
AFFIRMATIVE_TOKENS = ("true", "válida", "valida", "correcta", "equivalente")

# --- REASONS ---
REASON_EMPTY_QUESTION = "Pregunta vacía"
REASON_NO_ANSWER = "Sin respuesta del agente"
REASON_NOT_VALIDATED = "Sin respuesta esperada para validar"


@dataclass(frozen=True)
class AgentSettings:
    api_url: str
    api_key: str
    bearer_token: str
    threshold: float
    skip_validation: bool

    @property
    def is_complete(self) -> bool:
        return bool(self.api_url and self.api_key)


@dataclass(frozen=True)
class Verdict:
    valid: bool
    reason: str


@dataclass
class CaseOutcome:
    """What happened to one case on the wire. classify() turns it into a TestResult."""
    latency_ms: int = 0
    response: str = ""
    http_status: Optional[int] = None
    error: Optional[str] = None
    verdict: Optional[Verdict] = None


def resolve_settings(config: Optional[TestConfig]) -> AgentSettings:
    """Per-request config wins, the environment fills the gaps."""
    config = config or TestConfig()
    defaults = get_agent_defaults()
    return AgentSettings(
        api_url=config.api_url or defaults["api_url"],
        api_key=config.api_key or defaults["api_key"],
        bearer_token=config.bearer_token or defaults["bearer_token"],
        threshold=config.threshold if config.threshold is not None else DEFAULT_THRESHOLD,
        skip_validation=bool(config.skip_validation),
    )


def normalize_bearer(raw: str) -> str:
    if not raw:
        return ""
    if raw.lower().startswith("bearer "):
        return raw
    return f"Bearer {raw}"


def build_agent_headers(api_key: str, bearer_token: str = "") -> dict:
    headers = {
        "Accept": "application/json",
        "Content-Type": "application/json",
        "Origin": AGENT_ORIGIN,
        "Referer": AGENT_REFERER,
        "x-api-key": api_key,
    }
    bearer = normalize_bearer(bearer_token)
    if bearer:
        headers["Authorization"] = bearer
    return headers


def build_payload(question: str) -> dict:
    return {
        "input_value": question,
        "output_type": "chat",
        "input_type": "chat",
        "session_id": SESSION_ID,
    }


def needs_validation(case: TestCase, skip_validation: bool) -> bool:
    return not skip_validation and bool(case.expected.strip())


def classify(index: int, case: TestCase, outcome: CaseOutcome, skip_validation: bool) -> TestResult:
    """
    The only place a TestStatus is decided.
    SKIP -> ERROR (transport / HTTP / empty answer) -> NO_VALIDADO -> PASS | FAIL
    """
    def result(status, reason, response="", http_status=None):
        return TestResult(
            index=index,
            question=case.question,
            expected=case.expected,
            response=response,
            status=status,
            reason=reason,
            latency_ms=outcome.latency_ms,
            http_status=http_status,
        )

    if not case.question.strip():
        return result(TestStatus.SKIP, REASON_EMPTY_QUESTION)
    if outcome.error is not None:
        return result(TestStatus.ERROR, outcome.error)
    if outcome.http_status is not None and outcome.http_status >= 400:
        return result(TestStatus.ERROR, f"HTTP {outcome.http_status}", http_status=outcome.http_status)
    if not outcome.response:
        return result(TestStatus.ERROR, REASON_NO_ANSWER)
    if not needs_validation(case, skip_validation):
        return result(TestStatus.NO_VALIDADO, REASON_NOT_VALIDATED, response=outcome.response)

    verdict = outcome.verdict or Verdict(False, "Sin validación")
    status = TestStatus.PASS if verdict.valid else TestStatus.FAIL
    return result(status, verdict.reason, response=outcome.response)


def parse_verdict(answer: str) -> Verdict:
    """Reads {"valida": ..., "razon": ...} out of the judge's text, with a keyword fallback."""
    start = answer.find("{")
    end = answer.rfind("}") + 1
    if start >= 0 and end > start:
        try:
            parsed = json.loads(answer[start:end])
        except ValueError:
            parsed = None
        if isinstance(parsed, dict):
            return Verdict(bool(parsed.get("valida")), str(parsed.get("razon") or "Sin razón"))

    lower = answer.lower()
    if any(token in lower for token in AFFIRMATIVE_TOKENS):
        return Verdict(True, "Validación positiva detectada")
    return Verdict(False, "Validación negativa o no determinada")


async def validate_response(client: httpx.AsyncClient, api_url: str, headers: dict, expected: str, actual: str) -> Verdict:
    """Asks the agent endpoint itself to judge semantic equivalence. Never raises."""
    if not expected.strip() or not actual.strip():
        return Verdict(False, "Respuesta vacía")

    prompt = JUDGE_PROMPT.format(expected=expected, actual=actual)
    try:
        res = await post_with_retries(client, api_url, headers, build_payload(prompt))
        if res.status_code >= 400:
            return Verdict(False, f"Error HTTP {res.status_code}")
        return parse_verdict(extract_text(res.json()))
    except Exception as e:
        return Verdict(False, f"Error: {type(e).__name__}")


async def call_agent(client: httpx.AsyncClient, api_url: str, headers: dict, question: str) -> CaseOutcome:
    t0 = time.perf_counter()
    try:
        res = await post_with_retries(client, api_url, headers, build_payload(question))
        latency_ms = _elapsed_ms(t0)
        if res.status_code >= 400:
            return CaseOutcome(latency_ms=latency_ms, http_status=res.status_code)
        return CaseOutcome(latency_ms=latency_ms, http_status=res.status_code, response=extract_text(res.json()))
    except Exception as e:
        message = str(e) or type(e).__name__
        return CaseOutcome(latency_ms=_elapsed_ms(t0), error=f"Excepción: {message[:100]}")


async def run_case(client: httpx.AsyncClient, index: int, case: TestCase, settings: AgentSettings, headers: dict) -> TestResult:
    if not case.question.strip():
        return classify(index, case, CaseOutcome(), settings.skip_validation)

    outcome = await call_agent(client, settings.api_url, headers, case.question)

    # Judge only answered cases that carry an expected answer
    answered = outcome.error is None and (outcome.http_status or 0) < 400 and outcome.response
    if answered and needs_validation(case, settings.skip_validation):
        outcome.verdict = await validate_response(
            client, settings.api_url, headers, case.expected, outcome.response
        )

    return classify(index, case, outcome, settings.skip_validation)


async def run_test_cases(client: httpx.AsyncClient, test_cases: Sequence[TestCase], settings: AgentSettings) -> TestRunResponse:
    headers = build_agent_headers(settings.api_key, settings.bearer_token)

    print(f"🚀 Starting QA run on {len(test_cases)} test cases...")

    results: List[TestResult] = []
    for i, case in enumerate(test_cases):
        result = await run_case(client, i + 1, case, settings, headers)
        if result.status == TestStatus.ERROR:
            print(f"⚠️ Case {result.index} failed: {result.reason}")
        results.append(result)

    metrics = compute_test_metrics(results, settings.threshold)
    print(f"✅ QA run done: {metrics.success}/{metrics.validated} passed ({metrics.success_rate}%)")
    return TestRunResponse(results=results, metrics=metrics)


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)
