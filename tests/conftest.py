"""Pytest configuration for the agent JSON-RPC server tests."""

import httpx
import pytest

from agent_rpc.agents import default_catalog
from agent_rpc.config import Settings
from agent_rpc.models import CompletionOutcome
from agent_rpc.providers import CompletionProvider
from agent_rpc.rpc import Dispatcher


class StubProvider(CompletionProvider):
    """Provider that records calls and returns a canned outcome or raises."""

    name = "stub"

    def __init__(self, outcome=None, error=None):
        super().__init__(client=None, api_key="")
        self.outcome = outcome or CompletionOutcome(reply_text="hi", tokens_used=5)
        self.error = error
        self.calls = []

    def _headers(self):
        return {}

    async def complete(self, agent, user_text, history=None):
        self.calls.append((agent, user_text, history))
        if self.error is not None:
            raise self.error
        return self.outcome


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep real credentials in the environment from leaking into tests."""
    for var in ("GROQ_API_KEY", "GEMINI_API_KEY"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def catalog():
    return default_catalog()


@pytest.fixture
def stub_provider():
    return StubProvider()


@pytest.fixture
def dispatcher(catalog, stub_provider):
    return Dispatcher(catalog, stub_provider)


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))
