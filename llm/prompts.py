"""System prompt for the companion chat model.

The prompt is prepended to every completion request and is never stored with
the conversation history.
"""
from __future__ import annotations

from typing import List, Sequence

from llm.base import LLMMessage, Roles

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful friend who is dealing with the user for a mental health "
    "application. You are giving them advice on how to feel better and seek "
    "treatment. Speak as if you can relate to the user. Offer advice to their "
    "situation and give them calls for action. Respond with 10-30 words. "
)


def build_chat_messages(
    *,
    system_prompt: str,
    history: Sequence[LLMMessage],
    user_message: str,
) -> List[LLMMessage]:
    """Assemble the completion payload: system prompt, history, new user turn."""
    return [
        LLMMessage(role=Roles.SYSTEM, content=system_prompt),
        *history,
        LLMMessage(role=Roles.USER, content=user_message),
    ]
