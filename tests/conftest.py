import asyncio
import itertools
from typing import Callable, List, Optional

import pytest

from api.features.auth.repository import InMemoryUserStore
from api.features.conversation.repository import InMemoryConversationStore
from api.features.conversation.service import ConversationManager
from llm.base import LanguageModelGateway, LLMMessage

SYSTEM_PROMPT = "You are a test companion."


class StubGateway(LanguageModelGateway):
    """Records every request and answers with scripted replies."""

    def __init__(self, replies: Optional[List[str]] = None, delay: float = 0.0):
        self.replies = list(replies or [])
        self.delay = delay
        self.calls: List[List[LLMMessage]] = []
        self.error: Optional[Exception] = None
        self.before_reply: Optional[Callable] = None

    async def complete(self, messages: List[LLMMessage]) -> str:
        self.calls.append(list(messages))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.before_reply is not None:
            await self.before_reply()
        if self.error is not None:
            raise self.error
        if self.replies:
            return self.replies.pop(0)
        return f"reply {len(self.calls)}"


class FakeClock:
    def __init__(self, start: int = 1_700_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int = 1) -> None:
        self.now += seconds


@pytest.fixture
def gateway():
    return StubGateway()


@pytest.fixture
def store():
    return InMemoryConversationStore()


@pytest.fixture
def user_store():
    return InMemoryUserStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_manager(store, gateway, clock):
    counter = itertools.count(1)

    def _make(**kwargs) -> ConversationManager:
        kwargs.setdefault("system_prompt", SYSTEM_PROMPT)
        kwargs.setdefault("clock", clock)
        kwargs.setdefault(
            "id_factory", lambda: f"00000000-0000-4000-8000-{next(counter):012d}"
        )
        return ConversationManager(store, gateway, **kwargs)

    return _make


@pytest.fixture
def manager(make_manager):
    return make_manager()
