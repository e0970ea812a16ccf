import pytest
from sqlalchemy import func, select

from app.models import Conversation, Message, User, UserActivityLog


async def count_rows(session, model):
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar()


async def send(client, headers, message, **extra):
    return await client.post("/api/ai/chat", json={"message": message, **extra}, headers=headers)


async def test_first_message_creates_conversation_with_two_messages(client, alice, completions):
    res = await send(client, alice, "What is 2+2?")

    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    data = body["data"]
    assert data["message"] == "Reply 1"
    assert data["model"] == "gpt-3.5-turbo"
    assert data["usage"] == {"promptTokens": 10, "completionTokens": 5, "totalTokens": 15}
    conversation_id = data["conversationId"]

    # upstream saw only the new user turn, with default parameters
    assert completions.calls[0]["turns"] == [("user", "What is 2+2?")]
    assert completions.calls[0]["temperature"] == 0.7
    assert completions.calls[0]["max_tokens"] == 1000

    res = await client.get("/api/ai/chat", params={"conversationId": conversation_id}, headers=alice)
    assert res.status_code == 200
    conversation = res.json()["data"]
    assert conversation["id"] == conversation_id
    assert conversation["title"] == "What is 2+2?"
    assert conversation["provider"] == "openai"
    assert conversation["totalTokens"] == 15
    assert conversation["totalCost"] == 0
    assert [m["role"] for m in conversation["messages"]] == ["user", "assistant"]
    assert conversation["messages"][0]["content"] == "What is 2+2?"
    assert conversation["messages"][0]["tokens"] == 0
    assert conversation["messages"][1]["content"] == "Reply 1"
    assert conversation["messages"][1]["tokens"] == 15
    assert conversation["messages"][1]["metadata"] == {
        "model": "gpt-3.5-turbo",
        "temperature": 0.7,
        "maxTokens": 1000,
        "finishReason": "stop",
    }


async def test_turns_accumulate_history_and_totals(client, alice, completions):
    res = await send(client, alice, "first")
    conversation_id = res.json()["data"]["conversationId"]

    for text in ("second", "third"):
        res = await send(client, alice, text, conversationId=conversation_id)
        assert res.status_code == 200
        assert res.json()["data"]["conversationId"] == conversation_id

    # the third call resent the whole history plus the new turn
    assert completions.calls[2]["turns"] == [
        ("user", "first"),
        ("assistant", "Reply 1"),
        ("user", "second"),
        ("assistant", "Reply 2"),
        ("user", "third"),
    ]

    res = await client.get("/api/ai/chat", params={"conversationId": conversation_id}, headers=alice)
    conversation = res.json()["data"]
    messages = conversation["messages"]
    assert len(messages) == 6
    assert [m["role"] for m in messages] == ["user", "assistant"] * 3
    assistant_tokens = sum(m["tokens"] for m in messages if m["role"] == "assistant")
    assert conversation["totalTokens"] == assistant_tokens == 15 + 25 + 35


async def test_request_overrides_model_parameters(client, alice, completions):
    res = await send(client, alice, "hi", model="gpt-4", temperature=0.2, maxTokens=50)

    assert res.status_code == 200
    assert res.json()["data"]["model"] == "gpt-4"
    assert completions.calls[0]["model"] == "gpt-4"
    assert completions.calls[0]["temperature"] == 0.2
    assert completions.calls[0]["max_tokens"] == 50


async def test_long_first_message_is_truncated_for_title(client, alice):
    text = "x" * 80
    res = await send(client, alice, text)
    conversation_id = res.json()["data"]["conversationId"]

    res = await client.get("/api/ai/chat", params={"conversationId": conversation_id}, headers=alice)
    assert res.json()["data"]["title"] == "x" * 50 + "..."


async def test_other_user_cannot_read_or_append(client, alice, bob, completions, db_session):
    res = await send(client, alice, "private")
    conversation_id = res.json()["data"]["conversationId"]

    res = await client.get("/api/ai/chat", params={"conversationId": conversation_id}, headers=bob)
    assert res.status_code == 404
    assert res.json() == {"success": False, "error": "Conversation not found"}

    res = await send(client, bob, "let me in", conversationId=conversation_id)
    assert res.status_code == 404
    assert res.json()["error"] == "Conversation not found"
    assert len(completions.calls) == 1

    assert await count_rows(db_session, Message) == 2


async def test_unknown_and_malformed_ids_look_the_same(client, alice):
    for bad_id in ("00000000-0000-0000-0000-000000000000", "not-a-uuid"):
        res = await send(client, alice, "hello", conversationId=bad_id)
        assert res.status_code == 404
        assert res.json() == {"success": False, "error": "Conversation not found"}


@pytest.mark.parametrize("message", ["", "   ", "\n\t"])
async def test_blank_message_rejected_before_any_write(client, alice, completions, db_session, message):
    res = await send(client, alice, message)

    assert res.status_code == 400
    assert res.json() == {"success": False, "error": "Message is required"}
    assert completions.calls == []
    assert await count_rows(db_session, Conversation) == 0
    assert await count_rows(db_session, Message) == 0
    # a first-time caller is not provisioned either
    assert await count_rows(db_session, User) == 0


async def test_blank_message_from_returning_user_leaves_login_untouched(client, alice, db_session):
    assert (await send(client, alice, "hello")).status_code == 200
    last_login = select(User.last_login_at).where(User.auth_user_id == "alice-subject")
    before = (await db_session.execute(last_login)).scalar_one()

    res = await send(client, alice, "   ")

    assert res.status_code == 400
    assert (await db_session.execute(last_login)).scalar_one() == before
    assert await count_rows(db_session, User) == 1
    assert await count_rows(db_session, Message) == 2


async def test_missing_message_field_is_rejected(client, alice, db_session):
    res = await client.post("/api/ai/chat", json={}, headers=alice)
    assert res.status_code == 400
    assert res.json()["success"] is False
    assert await count_rows(db_session, User) == 0


async def test_out_of_range_temperature_is_a_validation_error(client, alice, completions):
    res = await send(client, alice, "hi", temperature=5)
    assert res.status_code == 400
    assert res.json()["success"] is False
    assert "temperature" in res.json()["error"]
    assert completions.calls == []


async def test_upstream_failure_on_new_conversation_persists_nothing(client, alice, completions, db_session):
    completions.fail()

    res = await send(client, alice, "hello")

    assert res.status_code == 500
    assert res.json() == {"success": False, "error": "OpenAI API error: boom"}
    assert await count_rows(db_session, Conversation) == 0
    assert await count_rows(db_session, Message) == 0
    assert await count_rows(db_session, UserActivityLog) == 0


async def test_upstream_failure_leaves_existing_conversation_untouched(client, alice, completions):
    res = await send(client, alice, "hello")
    conversation_id = res.json()["data"]["conversationId"]

    completions.fail()
    res = await send(client, alice, "again", conversationId=conversation_id)
    assert res.status_code == 500

    res = await client.get("/api/ai/chat", params={"conversationId": conversation_id}, headers=alice)
    conversation = res.json()["data"]
    assert len(conversation["messages"]) == 2
    assert conversation["totalTokens"] == 15


async def test_unexpected_error_is_reported_generically(client, alice, completions):
    completions.fail_with = RuntimeError("connection reset")

    res = await send(client, alice, "hello")

    assert res.status_code == 500
    assert res.json() == {"success": False, "error": "Internal server error"}


async def test_successful_turn_is_recorded_in_activity_log(client, alice, db_session):
    res = await client.post(
        "/api/ai/chat",
        json={"message": "hello"},
        headers={**alice, "User-Agent": "pytest-agent", "X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
    )
    conversation_id = res.json()["data"]["conversationId"]

    result = await db_session.execute(select(UserActivityLog))
    entries = result.scalars().all()
    assert len(entries) == 1
    entry = entries[0]
    assert entry.action == "ai.chat"
    assert entry.resource == "conversation"
    assert str(entry.resource_id) == conversation_id
    assert entry.ip_address == "203.0.113.7"
    assert entry.user_agent == "pytest-agent"
    assert entry.meta_data == {"model": "gpt-3.5-turbo", "totalTokens": 15}


async def test_pagination_orders_by_most_recent_update(client, alice, bob):
    for i in range(15):
        res = await send(client, alice, f"Message {i}")
        assert res.status_code == 200
    await send(client, bob, "someone else's")

    res = await client.get("/api/ai/chat", params={"page": 2, "limit": 10}, headers=alice)

    assert res.status_code == 200
    body = res.json()
    assert body["metadata"] == {"total": 15, "page": 2, "limit": 10}
    assert [c["title"] for c in body["data"]] == [f"Message {i}" for i in range(4, -1, -1)]


async def test_listing_defaults_and_recency_after_new_turn(client, alice):
    ids = []
    for i in range(3):
        res = await send(client, alice, f"Message {i}")
        ids.append(res.json()["data"]["conversationId"])

    # a new turn moves the oldest conversation to the top
    await send(client, alice, "bump", conversationId=ids[0])

    res = await client.get("/api/ai/chat", headers=alice)
    body = res.json()
    assert body["metadata"] == {"total": 3, "page": 1, "limit": 10}
    assert [c["id"] for c in body["data"]] == [ids[0], ids[2], ids[1]]
    assert "messages" not in body["data"][0]


async def test_listing_rejects_bad_paging(client, alice):
    res = await client.get("/api/ai/chat", params={"page": 0}, headers=alice)
    assert res.status_code == 400
    res = await client.get("/api/ai/chat", params={"limit": 1000}, headers=alice)
    assert res.status_code == 400
