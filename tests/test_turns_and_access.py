from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import uuid4

import pytest

from app.core.exceptions import NotFoundError
from app.core.permissions import AccessDecision, authorize_access, require_access
from app.models.message import MessageRole
from app.services.turns import assemble_turns
from app.services.usage import add_usage, turn_cost


def test_assemble_turns_appends_new_user_turn_last():
    history = [
        SimpleNamespace(role=MessageRole.SYSTEM, content="Be brief."),
        SimpleNamespace(role=MessageRole.USER, content="Hi"),
        SimpleNamespace(role=MessageRole.ASSISTANT, content="Hello!"),
    ]

    turns = assemble_turns(history, "How are you?")

    assert [t.as_upstream() for t in turns] == [
        {"role": "system", "content": "Be brief."},
        {"role": "user", "content": "Hi"},
        {"role": "assistant", "content": "Hello!"},
        {"role": "user", "content": "How are you?"},
    ]


def test_assemble_turns_without_history():
    turns = assemble_turns([], "first")
    assert [t.as_upstream() for t in turns] == [{"role": "user", "content": "first"}]


def test_assemble_turns_accepts_plain_role_strings():
    history = [SimpleNamespace(role="assistant", content="ok")]
    turns = assemble_turns(history, "next")
    assert turns[0].role is MessageRole.ASSISTANT


def conversation(owner, deleted=False):
    return SimpleNamespace(
        user_id=owner,
        deleted_at=datetime.now(timezone.utc) if deleted else None,
    )


def test_owner_is_authorized():
    owner = uuid4()
    assert authorize_access(conversation(owner), owner) is AccessDecision.AUTHORIZED


def test_owner_compared_across_string_and_uuid():
    owner = uuid4()
    assert authorize_access(conversation(str(owner)), owner) is AccessDecision.AUTHORIZED


@pytest.mark.parametrize(
    "record_factory",
    [
        lambda owner: None,
        lambda owner: conversation(uuid4()),
        lambda owner: conversation(owner, deleted=True),
    ],
    ids=["missing", "foreign", "deleted"],
)
def test_denied_cases_raise_identical_not_found(record_factory):
    owner = uuid4()
    record = record_factory(owner)

    assert authorize_access(record, owner) is AccessDecision.DENIED
    with pytest.raises(NotFoundError) as exc_info:
        require_access(record, owner)
    assert exc_info.value.status_code == 404
    assert exc_info.value.detail == "Conversation not found"


def test_no_caller_is_denied():
    assert authorize_access(conversation(uuid4()), None) is AccessDecision.DENIED


def test_add_usage_accumulates_tokens_and_zero_cost():
    conv = SimpleNamespace(total_tokens=None, total_cost=None)

    add_usage(conv, tokens=15)
    add_usage(conv, tokens=25, cost=turn_cost("gpt-4", 20, 5))

    assert conv.total_tokens == 40
    assert conv.total_cost == 0
