import asyncio

import pytest

from api.features.conversation.exceptions import (
    ConversationNotFoundError,
    ConversationVersionConflictError,
)
from api.shared.exceptions import ErrorKind, ValidationError
from api.shared.utils import canonical_uuid, is_valid_uuid
from llm.base import Roles
from llm.exceptions import GatewayError, GatewayTimeoutError

from tests.conftest import SYSTEM_PROMPT


def _pairs(conversation):
    return [(m.role, m.content) for m in conversation.messages]


async def test_create_persists_first_turn(manager, gateway, store, clock):
    gateway.replies = ["Try deep breathing."]

    conversation = await manager.create("user1", "I feel anxious")

    assert conversation.user_id == "user1"
    assert _pairs(conversation) == [
        (Roles.USER, "I feel anxious"),
        (Roles.ASSISTANT, "Try deep breathing."),
    ]
    assert conversation.last_timestamp == clock.now
    assert conversation.version == 1
    assert await store.get(conversation.id) == conversation


async def test_create_sends_system_prompt_and_message_only(manager, gateway):
    await manager.create("user1", "hello")

    [request] = gateway.calls
    assert [(m.role, m.content) for m in request] == [
        (Roles.SYSTEM, SYSTEM_PROMPT),
        (Roles.USER, "hello"),
    ]


async def test_append_turn_extends_history(manager, gateway, clock):
    gateway.replies = ["Try deep breathing.", "Let's try grounding."]
    created = await manager.create("user1", "I feel anxious")
    clock.advance(30)

    updated = await manager.append_turn(created.id, "It's not working")

    assert len(updated.messages) == 4
    assert updated.messages[:2] == created.messages
    assert _pairs(updated)[-2:] == [
        (Roles.USER, "It's not working"),
        (Roles.ASSISTANT, "Let's try grounding."),
    ]
    assert updated.last_timestamp == clock.now
    assert updated.version == created.version + 1


async def test_append_turn_sends_full_history(manager, gateway):
    created = await manager.create("user1", "first")
    await manager.append_turn(created.id, "second")
    await manager.append_turn(created.id, "third")

    request = gateway.calls[-1]
    assert [m.role for m in request] == [
        Roles.SYSTEM,
        Roles.USER,
        Roles.ASSISTANT,
        Roles.USER,
        Roles.ASSISTANT,
        Roles.USER,
    ]
    assert request[0].content == SYSTEM_PROMPT
    assert request[-1].content == "third"
    # The system prompt is sent every time but never stored
    stored = await manager.get(created.id)
    assert all(m.role != Roles.SYSTEM for m in stored.messages)


async def test_append_turn_never_rewrites_prior_history(manager):
    conversation = await manager.create("user1", "m0")
    for i in range(1, 4):
        before = conversation.messages
        conversation = await manager.append_turn(conversation.id, f"m{i}")
        assert len(conversation.messages) == len(before) + 2
        assert conversation.messages[: len(before)] == before


async def test_append_turn_unknown_conversation(manager, gateway, store):
    with pytest.raises(ConversationNotFoundError) as exc_info:
        await manager.append_turn("nonexistent-id", "hi")

    assert exc_info.value.kind is ErrorKind.NOT_FOUND
    assert gateway.calls == []
    assert await store.get("nonexistent-id") is None


async def test_gateway_failure_on_create_persists_nothing(manager, gateway, store):
    gateway.error = GatewayError("upstream unavailable")

    with pytest.raises(GatewayError) as exc_info:
        await manager.create("user1", "hello")

    assert exc_info.value.kind is ErrorKind.DEPENDENCY_FAILURE
    assert await store.list_by_user("user1") == []


async def test_gateway_failure_on_append_leaves_record_untouched(manager, gateway):
    created = await manager.create("user1", "hello")
    gateway.error = GatewayTimeoutError(30)

    with pytest.raises(GatewayTimeoutError):
        await manager.append_turn(created.id, "are you there?")

    assert await manager.get(created.id) == created


@pytest.mark.parametrize(
    "user_id, message, parameter",
    [
        ("user1", None, "message"),
        ("user1", "", "message"),
        (None, "hello", "sub"),
        ("", "hello", "sub"),
        (None, None, "message"),
    ],
)
async def test_create_requires_parameters(manager, gateway, user_id, message, parameter):
    with pytest.raises(ValidationError) as exc_info:
        await manager.create(user_id, message)

    assert exc_info.value.details == {"parameter": parameter}
    assert gateway.calls == []


async def test_append_turn_requires_parameters(manager, gateway):
    with pytest.raises(ValidationError, match='"conversation"'):
        await manager.append_turn(None, "hello")
    with pytest.raises(ValidationError, match='"message"'):
        await manager.append_turn("some-id", "")
    assert gateway.calls == []


async def test_whitespace_message_is_accepted(manager):
    conversation = await manager.create("user1", "   ")
    assert conversation.messages[0].content == "   "


async def test_list_by_user_filters_by_owner(manager):
    a1 = await manager.create("alice", "one")
    await manager.create("bob", "two")
    a2 = await manager.create("alice", "three")

    listed = await manager.list_by_user("alice")

    assert {c.id for c in listed} == {a1.id, a2.id}
    assert await manager.list_by_user("alice") == listed
    assert await manager.list_by_user("nobody") == []


async def test_list_by_user_requires_sub(manager):
    with pytest.raises(ValidationError, match='"sub"'):
        await manager.list_by_user("")


async def test_generated_ids_are_unique_uuids(store, gateway):
    from api.features.conversation.service import ConversationManager

    manager = ConversationManager(store, gateway, system_prompt=SYSTEM_PROMPT)
    first = await manager.create("user1", "a")
    second = await manager.create("user1", "b")

    assert first.id != second.id
    assert is_valid_uuid(first.id) and is_valid_uuid(second.id)


async def test_concurrent_appends_are_serialized(manager, gateway):
    created = await manager.create("user1", "start")
    gateway.delay = 0.01

    await asyncio.gather(
        manager.append_turn(created.id, "left"),
        manager.append_turn(created.id, "right"),
    )

    final = await manager.get(created.id)
    assert len(final.messages) == 6
    assert final.version == 3
    assert {m.content for m in final.messages if m.role == Roles.USER} == {
        "start",
        "left",
        "right",
    }
    assert len(manager.locks) == 0


async def test_write_from_another_writer_is_rejected(manager, gateway, store):
    created = await manager.create("user1", "start")

    async def concurrent_writer():
        gateway.before_reply = None
        await store.replace(
            created.with_turn(user_message="elsewhere", reply="ok", timestamp=1),
            expected_version=created.version,
        )

    gateway.before_reply = concurrent_writer

    with pytest.raises(ConversationVersionConflictError) as exc_info:
        await manager.append_turn(created.id, "here")

    assert exc_info.value.kind is ErrorKind.CONFLICT
    stored = await store.get(created.id)
    assert stored.messages[-2].content == "elsewhere"
    assert stored.version == 2


async def test_history_window_limits_what_is_sent_not_what_is_stored(make_manager, gateway):
    manager = make_manager(max_history_messages=3)
    conversation = await manager.create("user1", "m0")
    for i in range(1, 4):
        conversation = await manager.append_turn(conversation.id, f"m{i}")

    request = gateway.calls[-1]
    # System prompt, the last full pair, then the new message
    assert [m.content for m in request[1:]] == ["m2", "reply 3", "m3"]
    assert len(conversation.messages) == 8


async def test_appends_to_differently_spelled_ids_share_a_lock(make_manager, gateway):
    manager = make_manager(id_factory=lambda: "3f2b8c1e-4d5a-4e6f-8a7b-9c0d1e2f3a4b")
    created = await manager.create("user1", "start")
    gateway.delay = 0.01

    await asyncio.gather(
        manager.append_turn(created.id, "left"),
        manager.append_turn(created.id.upper(), "right"),
    )

    final = await manager.get(created.id)
    assert len(final.messages) == 6
    assert final.version == 3


@pytest.mark.parametrize(
    "value, expected",
    [
        ("3f2b8c1e-4d5a-4e6f-8a7b-9c0d1e2f3a4b", True),
        ("3F2B8C1E-4D5A-4E6F-8A7B-9C0D1E2F3A4B", True),
        ("3f2b8c1e4d5a4e6f8a7b9c0d1e2f3a4b", True),
        ("urn:uuid:3f2b8c1e-4d5a-4e6f-8a7b-9c0d1e2f3a4b", False),
        ("{3f2b8c1e-4d5a-4e6f-8a7b-9c0d1e2f3a4b}", False),
        ("nonexistent-id", False),
        (None, False),
    ],
)
def test_is_valid_uuid_accepts_only_bindable_forms(value, expected):
    assert is_valid_uuid(value) is expected


def test_canonical_uuid():
    assert canonical_uuid("3F2B8C1E4D5A4E6F8A7B9C0D1E2F3A4B") == (
        "3f2b8c1e-4d5a-4e6f-8a7b-9c0d1e2f3a4b"
    )
    assert canonical_uuid("nonexistent-id") == "nonexistent-id"
