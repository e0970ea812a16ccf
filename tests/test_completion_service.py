from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from app.core.exceptions import UpstreamError
from app.models.message import MessageRole
from app.schemas.chat import Turn
from app.services.completion_service import CompletionService


def fake_completion(content="4", finish_reason="stop", usage=True, model="gpt-3.5-turbo-0125"):
    return SimpleNamespace(
        model=model,
        choices=[SimpleNamespace(message=SimpleNamespace(content=content), finish_reason=finish_reason)],
        usage=SimpleNamespace(prompt_tokens=12, completion_tokens=3, total_tokens=15) if usage else None,
    )


@pytest.fixture
def service():
    svc = CompletionService("sk-test")
    svc.client.chat.completions.create = AsyncMock(return_value=fake_completion())
    return svc


TURNS = [
    Turn(role=MessageRole.USER, content="What is 2+2?"),
]


async def test_maps_first_choice_and_usage(service):
    result = await service.request_completion(TURNS, model="gpt-3.5-turbo", temperature=0.7, max_tokens=1000)

    assert result.content == "4"
    assert result.model == "gpt-3.5-turbo-0125"
    assert result.finish_reason == "stop"
    assert result.usage.prompt_tokens == 12
    assert result.usage.completion_tokens == 3
    assert result.usage.total_tokens == 15

    service.client.chat.completions.create.assert_awaited_once_with(
        model="gpt-3.5-turbo",
        messages=[{"role": "user", "content": "What is 2+2?"}],
        temperature=0.7,
        max_tokens=1000,
    )


async def test_missing_usage_and_finish_reason_default(service):
    service.client.chat.completions.create.return_value = fake_completion(usage=False, finish_reason=None)

    result = await service.request_completion(TURNS, model="gpt-4", temperature=0.1, max_tokens=10)

    assert result.usage.total_tokens == 0
    assert result.usage.prompt_tokens == 0
    assert result.finish_reason == "unknown"


async def test_empty_content_is_upstream_error(service):
    service.client.chat.completions.create.return_value = fake_completion(content="")

    with pytest.raises(UpstreamError) as exc_info:
        await service.request_completion(TURNS, model="gpt-4", temperature=0.1, max_tokens=10)
    assert "No content" in exc_info.value.detail


async def test_client_failure_is_upstream_error(service):
    service.client.chat.completions.create.side_effect = RuntimeError("rate limited")

    with pytest.raises(UpstreamError) as exc_info:
        await service.request_completion(TURNS, model="gpt-4", temperature=0.1, max_tokens=10)
    assert exc_info.value.detail == "OpenAI API error: rate limited"


async def test_unconfigured_service_refuses():
    svc = CompletionService("")
    assert svc.is_configured is False

    with pytest.raises(UpstreamError):
        await svc.request_completion(TURNS, model="gpt-4", temperature=0.1, max_tokens=10)
