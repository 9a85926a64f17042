from __future__ import annotations

import pytest

from flora.domain.conversation import (
    WELCOME_MESSAGE_ID,
    ConversationLog,
    Message,
    MessageRole,
    welcome_text,
)


def test_welcome_text_names_the_plant():
    assert welcome_text("Monstera") == (
        "I've identified your plant as a Monstera! You can see the full care guide above. "
        "Do you have any specific questions about it?"
    )


def test_reset_seeds_single_welcome_message():
    log = ConversationLog()
    log.append(Message.create(MessageRole.USER, "old question"))

    welcome = log.reset("Snake Plant")

    messages = log.snapshot()
    assert messages == (welcome,)
    assert welcome.id == WELCOME_MESSAGE_ID
    assert welcome.role is MessageRole.ASSISTANT
    assert "Snake Plant" in welcome.text


def test_append_keeps_insertion_order():
    log = ConversationLog()
    log.reset("Fern")
    first = log.append(Message.create(MessageRole.USER, "How much light?"))
    second = log.append(Message.create(MessageRole.ASSISTANT, "Low to medium."))

    assert [m.id for m in log.snapshot()] == [WELCOME_MESSAGE_ID, first.id, second.id]
    assert len(log) == 3


def test_append_rejects_duplicate_ids():
    log = ConversationLog()
    log.reset("Fern")

    with pytest.raises(ValueError):
        log.append(Message.create(MessageRole.USER, "hi", message_id=WELCOME_MESSAGE_ID))


def test_message_ids_are_unique():
    ids = {Message.create(MessageRole.USER, "q").id for _ in range(50)}
    assert len(ids) == 50


def test_message_to_dict_uses_role_value():
    message = Message.create(MessageRole.USER, "hello")
    payload = message.to_dict()

    assert payload["role"] == "user"
    assert payload["text"] == "hello"
    assert payload["timestamp"].endswith("+00:00")


def test_snapshot_is_not_affected_by_later_appends():
    log = ConversationLog()
    log.reset("Fern")
    snapshot = log.snapshot()

    log.append(Message.create(MessageRole.USER, "later"))

    assert len(snapshot) == 1
    assert len(log) == 2
