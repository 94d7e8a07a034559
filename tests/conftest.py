import json

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from supportdash.core.dependencies import get_http_client
from supportdash.db.deps import get_db
from supportdash.db.init_db import init_db
from supportdash.db.session import make_engine, make_session_factory
from supportdash.main import app

AGENT_URL = "https://agent.test/api/v1/run/flow"
JUDGE_MARKER = "Sos un evaluador"


class FakeAgent:
    """
    Stand-in for the Langflow webhook. Records every request and answers
    through `respond(body, request)`, which may return an httpx.Response,
    a dict (sent as JSON 200) or raise.
    """

    def __init__(self, respond):
        self.respond = respond
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append((request, body))
        reply = self.respond(body, request)
        if isinstance(reply, httpx.Response):
            return reply
        return httpx.Response(200, json=reply)

    @property
    def questions(self):
        return [body["input_value"] for _, body in self.requests]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


def echo_agent(answer, verdict='{"valida": true, "razon": "ok"}'):
    """Answers questions with `answer` and judge prompts with `verdict`."""
    def respond(body, request):
        if body["input_value"].startswith(JUDGE_MARKER):
            return {"text": verdict}
        return {"text": answer}
    return FakeAgent(respond)


@pytest.fixture
def no_backoff(monkeypatch):
    monkeypatch.setattr("supportdash.services.http_caller.backoff_seconds", lambda attempt: 0)


@pytest.fixture
def agent_env(monkeypatch):
    monkeypatch.setenv("LANGFLOW_API_URL", AGENT_URL)
    monkeypatch.setenv("LANGFLOW_API_KEY", "env-key")
    monkeypatch.delenv("BEARER_TOKEN", raising=False)


@pytest.fixture
def clear_agent_env(monkeypatch):
    for name in ("LANGFLOW_API_URL", "LANGFLOW_API_KEY", "BEARER_TOKEN"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def db_session():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    init_db(engine)
    session = make_session_factory(engine)()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def api():
    """TestClient plus a hook to plug a FakeAgent in as the shared http client."""
    def use_agent(agent: FakeAgent):
        app.dependency_overrides[get_http_client] = lambda: agent.client()
        return agent

    def use_db(session):
        app.dependency_overrides[get_db] = lambda: session

    with TestClient(app) as client:
        client.use_agent = use_agent
        client.use_db = use_db
        yield client
    app.dependency_overrides.clear()
