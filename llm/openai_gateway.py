"""OpenAI chat completions gateway.

Sends an ordered message list to the chat completions endpoint and returns the
single assistant reply. Each call is bounded by an explicit timeout; provider
failures are translated into the gateway error family so callers can tell a
timeout from a rate limit from a malformed reply.
"""
from __future__ import annotations

import asyncio
import time
from typing import List

import structlog
from openai import (
    APITimeoutError,
    AsyncOpenAI,
    OpenAIError,
    RateLimitError,
)

from llm.base import LanguageModelGateway, LLMMessage
from llm.exceptions import (
    GatewayError,
    GatewayRateLimitError,
    GatewayResponseError,
    GatewayTimeoutError,
)

logger = structlog.get_logger("companion.llm.openai")


class OpenAIChatGateway(LanguageModelGateway):
    """Language-model gateway backed by 'AsyncOpenAI'."""

    def __init__(
        self,
        client: AsyncOpenAI,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        timeout_seconds: float,
    ):
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout_seconds = timeout_seconds

    async def complete(self, messages: List[LLMMessage]) -> str:
        start = time.time()
        try:
            response = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=self.model,
                    messages=[m.to_payload() for m in messages],
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                ),
                timeout=self.timeout_seconds,
            )
        except (asyncio.TimeoutError, APITimeoutError):
            logger.warning(
                "completion_timeout",
                model=self.model,
                timeout_seconds=self.timeout_seconds,
            )
            raise GatewayTimeoutError(self.timeout_seconds)
        except RateLimitError as e:
            logger.warning("completion_rate_limited", model=self.model, error=str(e))
            raise GatewayRateLimitError(str(e)) from e
        except OpenAIError as e:
            logger.error("completion_failed", model=self.model, error=str(e))
            raise GatewayError(str(e)) from e

        content = _extract_reply(response)
        logger.info(
            "completion_ok",
            model=self.model,
            message_count=len(messages),
            latency_ms=int((time.time() - start) * 1000),
            total_tokens=getattr(getattr(response, "usage", None), "total_tokens", None),
        )
        return content


def _extract_reply(response) -> str:
    choices = getattr(response, "choices", None)
    if not choices:
        raise GatewayResponseError("completion returned no choices")
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None) if message else None
    if not content:
        raise GatewayResponseError(
            "completion returned an empty message",
            {"finish_reason": getattr(choices[0], "finish_reason", None)},
        )
    return content
