"""
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest and provides:
- Test environment setup (the service builds its app at import time)
- A fixed AppConfig, a controllable clock and a recording invoker
- An in-process ASGI client factory
"""

import os
import sys
from pathlib import Path

import httpx
import pytest

# Add parent directory to Python path so tests can import project modules
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Set before chat_service is imported, because it loads config at import time.
os.environ.setdefault("GROQ_API_KEY", "test-key")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("LOG_COLOR", "false")
os.environ.setdefault("FLAVOR_ENABLED", "false")

from config import AppConfig  # noqa: E402


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingInvoker:
    """Stands in for FallbackInvoker; returns a canned answer or raises."""

    def __init__(self, answer: str = "Pranjal builds Spring Boot APIs.", error: Exception | None = None) -> None:
        self.answer = answer
        self.error = error
        self.prompts = []

    async def complete(self, prompt: str, req_id: str = "-") -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.answer


@pytest.fixture
def test_config():
    """Create test configuration."""
    return AppConfig(
        groq_base_url="https://upstream.test/openai/v1",
        groq_api_key="test-key",
        model_override="",
        fallback_models=("model-a", "model-b", "model-c"),
        allowed_origin="https://pranjalmax.github.io",
        assistant_name="Max-AI Assistant",
        rate_capacity=16,
        rate_refill_per_minute=8.0,
        rate_max_clients=10_000,
        rate_idle_ttl_s=3600.0,
        max_message_chars=800,
        history_turns=6,
        persona_path="",
        temperature=0.35,
        max_tokens=450,
        request_timeout_s=10.0,
        flavor_enabled=False,
        flavor_seed=None,
        port=8000,
        log_level="DEBUG",
        log_path="",
        user_agent="test-agent",
    )


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def recording_invoker():
    return RecordingInvoker()


@pytest.fixture
def make_invoker():
    return RecordingInvoker


@pytest.fixture
async def make_client():
    """Factory for an in-process ASGI client around a given app.

    httpx.ASGITransport keeps tests deterministic without the TestClient portal.
    """
    clients = []

    def _make(app, client_addr=("203.0.113.7", 4321)):
        transport = httpx.ASGITransport(app=app, raise_app_exceptions=False, client=client_addr)
        c = httpx.AsyncClient(transport=transport, base_url="http://testserver")
        clients.append(c)
        return c

    yield _make
    for c in clients:
        await c.aclose()
