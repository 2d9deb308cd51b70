import asyncio
from types import SimpleNamespace

import httpx
import pytest
from openai import APIConnectionError, RateLimitError

from llm.base import LLMMessage, Roles
from llm.exceptions import (
    GatewayError,
    GatewayRateLimitError,
    GatewayResponseError,
    GatewayTimeoutError,
)
from llm.openai_gateway import OpenAIChatGateway
from llm.prompts import build_chat_messages

_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def _completion(content, finish_reason="stop"):
    return SimpleNamespace(
        choices=[
            SimpleNamespace(
                message=SimpleNamespace(role="assistant", content=content),
                finish_reason=finish_reason,
            )
        ],
        usage=SimpleNamespace(total_tokens=42),
    )


class FakeCompletions:
    def __init__(self, result=None, error=None, delay=0.0):
        self.result = result
        self.error = error
        self.delay = delay
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result


def _gateway(completions, timeout_seconds=5.0):
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return OpenAIChatGateway(
        client,
        model="gpt-test",
        temperature=0.05,
        max_tokens=200,
        timeout_seconds=timeout_seconds,
    )


MESSAGES = build_chat_messages(
    system_prompt="be kind",
    history=[LLMMessage(role=Roles.USER, content="hi"), LLMMessage(role=Roles.ASSISTANT, content="hello")],
    user_message="how are you?",
)


async def test_complete_returns_reply_and_sends_parameters():
    completions = FakeCompletions(result=_completion("I'm well."))

    reply = await _gateway(completions).complete(MESSAGES)

    assert reply == "I'm well."
    assert completions.kwargs == {
        "model": "gpt-test",
        "messages": [
            {"role": "system", "content": "be kind"},
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
            {"role": "user", "content": "how are you?"},
        ],
        "temperature": 0.05,
        "max_tokens": 200,
    }


async def test_complete_times_out():
    completions = FakeCompletions(result=_completion("late"), delay=1.0)

    with pytest.raises(GatewayTimeoutError) as exc_info:
        await _gateway(completions, timeout_seconds=0.01).complete(MESSAGES)

    assert exc_info.value.error_code == "GATEWAY_TIMEOUT"


async def test_complete_maps_rate_limit():
    error = RateLimitError(
        "slow down", response=httpx.Response(429, request=_REQUEST), body=None
    )

    with pytest.raises(GatewayRateLimitError) as exc_info:
        await _gateway(FakeCompletions(error=error)).complete(MESSAGES)

    assert exc_info.value.error_code == "GATEWAY_RATE_LIMITED"


async def test_complete_maps_other_provider_errors():
    error = APIConnectionError(request=_REQUEST)

    with pytest.raises(GatewayError) as exc_info:
        await _gateway(FakeCompletions(error=error)).complete(MESSAGES)

    assert type(exc_info.value) is GatewayError
    assert exc_info.value.status_code == 400


@pytest.mark.parametrize(
    "response",
    [
        SimpleNamespace(choices=[], usage=None),
        _completion(None, finish_reason="length"),
        _completion(""),
    ],
)
async def test_complete_rejects_unusable_responses(response):
    with pytest.raises(GatewayResponseError) as exc_info:
        await _gateway(FakeCompletions(result=response)).complete(MESSAGES)

    assert exc_info.value.error_code == "GATEWAY_MALFORMED_RESPONSE"


def test_build_chat_messages_orders_system_history_user():
    assert [m.role for m in MESSAGES] == [
        Roles.SYSTEM,
        Roles.USER,
        Roles.ASSISTANT,
        Roles.USER,
    ]
