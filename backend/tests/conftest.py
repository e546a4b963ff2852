import json
from typing import Any, Dict, List, Sequence

import pytest
from fastapi.testclient import TestClient

from backend.cerebro.completion_client import ChatMessage, Completion, SamplingParams
from backend.cerebro.deps import get_completion_provider, get_speech_client
from backend.cerebro.main import create_app
from backend.cerebro.settings import Settings


VALID_QUESTION: Dict[str, Any] = {
    "question": "¿Cuánto es 7 x 8?",
    "options": ["54", "56", "58", "64"],
    "correctIndex": 1,
    "explanation": "7 x 8 = 56 porque 7 x 4 = 28 y 28 x 2 = 56.",
    "difficulty": "medio",
    "lomloeCompetency": "STEM - Razonamiento matemático aplicado",
    "topic": "Tablas de multiplicar",
}


def fenced(payload: Any, tag: str = "json") -> str:
    return f"```{tag}\n{json.dumps(payload, ensure_ascii=False, indent=2)}\n```"


class ScriptedProvider:
    """Completion provider that replays canned replies and records every call."""

    model = "anthropic/claude-3.5-sonnet"

    def __init__(self, replies: Sequence[Any] = ()) -> None:
        self.replies: List[Any] = list(replies)
        self.calls: List[tuple] = []

    async def complete(self, messages: Sequence[ChatMessage], params: SamplingParams) -> Completion:
        self.calls.append((list(messages), params))
        if not self.replies:
            raise AssertionError("provider called more times than scripted")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return Completion(text=reply, model=self.model, usage={"prompt_tokens": 310, "completion_tokens": 120, "total_tokens": 430})


class FakeSpeechClient:
    def __init__(self, audio: bytes = b"ID3fake-mp3", error: Exception = None) -> None:
        self.audio = audio
        self.error = error
        self.calls: List[tuple] = []

    async def synthesize(self, text: str, voice: str = "nova") -> bytes:
        self.calls.append((text, voice))
        if self.error is not None:
            raise self.error
        return self.audio


@pytest.fixture
def settings() -> Settings:
    return Settings(
        openrouter_api_key="test-key",
        environment="test",
        public_dir="does-not-exist",
    )


@pytest.fixture
def provider() -> ScriptedProvider:
    return ScriptedProvider()


@pytest.fixture
def app(settings, provider):
    application = create_app(settings)
    application.dependency_overrides[get_completion_provider] = lambda: provider
    application.dependency_overrides[get_speech_client] = lambda: None
    return application


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app, raise_server_exceptions=False)
