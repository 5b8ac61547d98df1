import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from medichat.memory.session_store import SessionStore
from medichat.chatbot.query_orchestrator import QueryOrchestrator


def ok_response(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}, "finishReason": "STOP"}]}


class FakeClient:
    """Stand-in for the Gemini client that records every request."""

    def __init__(self, response=None, error=None, configured=True, on_call=None):
        self.response = response if response is not None else ok_response("Drink water.")
        self.error = error
        self.configured = configured
        self.on_call = on_call
        self.calls = []
        self.model = "fake-model"

    @property
    def is_configured(self) -> bool:
        return self.configured

    def generate_content(self, request):
        self.calls.append(request)
        if self.on_call:
            self.on_call(request)
        if self.error:
            raise self.error
        return self.response


FIXED_TIME = datetime(2025, 3, 14, 9, 5, 12, tzinfo=timezone.utc)


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def orchestrator(store, fake_client):
    return QueryOrchestrator(llm_client=fake_client, store=store, clock=lambda: FIXED_TIME)
