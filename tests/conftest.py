"""
Shared fixtures: mock-mode settings, a fake OpenAI client, and a recording notifier.

Nothing here talks to Jira, Slack, or OpenAI.
"""

import json
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from sprintbot.agent.graph import QueryAgent
from sprintbot.agent.llm import LLMClient
from sprintbot.core.config import Settings
from sprintbot.main import create_app
from sprintbot.services.notifier import ChatNotifier
from sprintbot.services.tracker import MockTrackerClient

DEFAULT_ANALYSIS_ARGS = {
    "intent": "ready_for_production",
    "parameters": {"status_filter": "Ready for Production", "count_only": True},
    "confidence": 0.9,
}


class FakeCompletions:
    """Stands in for client.chat.completions; records every create() call."""

    def __init__(self, analysis: dict | None = None, content: str | None = "All good.", error: Exception | None = None):
        self.analysis = DEFAULT_ANALYSIS_ARGS if analysis is None else analysis
        self.content = content
        self.error = error
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        if "tools" in kwargs:
            tool_call = SimpleNamespace(
                id="call_1",
                type="function",
                function=SimpleNamespace(name="analyze_sprint_query", arguments=json.dumps(self.analysis)),
            )
            message = SimpleNamespace(content=None, tool_calls=[tool_call])
        else:
            message = SimpleNamespace(content=self.content, tool_calls=None)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    def user_prompts(self) -> list[str]:
        return [m["content"] for call in self.calls for m in call["messages"] if m["role"] == "user"]


class FakeOpenAI:
    def __init__(self, **kwargs):
        self.completions = FakeCompletions(**kwargs)
        self.chat = SimpleNamespace(completions=self.completions)


class RecordingNotifier(ChatNotifier):
    """Keeps sent messages in memory and returns a fixed result."""

    mode = "test"

    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.sent: list[tuple[str, str | None, str | None]] = []

    def send_message(self, text, channel=None, thread_ts=None) -> bool:
        self.sent.append((text, channel, thread_ts))
        return self.result

    @property
    def texts(self) -> list[str]:
        return [text for text, _, _ in self.sent]


@pytest.fixture
def settings() -> Settings:
    return Settings(environment="test")


@pytest.fixture
def fake_openai() -> FakeOpenAI:
    return FakeOpenAI(content="**2 items** are _ready_ for production:\n- PROJ-101\n- PROJ-104")


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def agent(settings: Settings, fake_openai: FakeOpenAI, notifier: RecordingNotifier) -> QueryAgent:
    return QueryAgent(
        tracker=MockTrackerClient(),
        llm=LLMClient(settings, client=fake_openai),
        notifier=notifier,
    )


@pytest.fixture
def client(settings: Settings, agent: QueryAgent) -> TestClient:
    return TestClient(create_app(settings, agent=agent))
