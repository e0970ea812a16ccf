from openai import AsyncOpenAI
from typing import List, Optional
import logging

from app.core.config import Settings
from app.core.exceptions import UpstreamError
from app.schemas.chat import CompletionResult, CompletionUsage, ModelInfo, Turn

logger = logging.getLogger(__name__)

OPENAI_MODELS: List[ModelInfo] = [
    ModelInfo(
        id="gpt-4-turbo-preview",
        name="GPT-4 Turbo",
        provider="openai",
        description="Most capable GPT-4 model with improved instruction following and code generation",
        max_tokens=128000,
        cost_per_token=0.00001,  # $0.01 per 1K tokens
    ),
    ModelInfo(
        id="gpt-4",
        name="GPT-4",
        provider="openai",
        description="Most capable GPT-4 model for complex reasoning tasks",
        max_tokens=8192,
        cost_per_token=0.00003,  # $0.03 per 1K tokens
    ),
    ModelInfo(
        id="gpt-3.5-turbo",
        name="GPT-3.5 Turbo",
        provider="openai",
        description="Fast and efficient model for most tasks",
        max_tokens=4096,
        cost_per_token=0.000002,  # $0.002 per 1K tokens
    ),
]


class CompletionService:
    """Chat completions against the OpenAI API"""

    def __init__(self, api_key: str, *, base_url: Optional[str] = None, timeout: float = 60.0):
        self.client: Optional[AsyncOpenAI] = None
        if api_key:
            self.client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)
        else:
            logger.warning("OPENAI_API_KEY not provided, chat completions are disabled")

    @classmethod
    def from_settings(cls, settings: Settings) -> "CompletionService":
        return cls(settings.openai_api_key, base_url=settings.openai_base_url, timeout=settings.openai_timeout)

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    async def request_completion(
        self,
        turns: List[Turn],
        *,
        model: str,
        temperature: float,
        max_tokens: int
    ) -> CompletionResult:
        """Send the ordered turns upstream and map the first choice back"""
        if self.client is None:
            raise UpstreamError("OpenAI API not configured")

        try:
            completion = await self.client.chat.completions.create(
                model=model,
                messages=[turn.as_upstream() for turn in turns],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except Exception as e:
            logger.error(f"OpenAI API error: {e}")
            raise UpstreamError(f"OpenAI API error: {e}") from e

        choice = completion.choices[0] if completion.choices else None
        if choice is None or not choice.message or not choice.message.content:
            raise UpstreamError("OpenAI API error: No content in completion response")

        usage = completion.usage
        return CompletionResult(
            content=choice.message.content,
            usage=CompletionUsage(
                prompt_tokens=(usage.prompt_tokens if usage else 0) or 0,
                completion_tokens=(usage.completion_tokens if usage else 0) or 0,
                total_tokens=(usage.total_tokens if usage else 0) or 0,
            ),
            model=completion.model or model,
            finish_reason=choice.finish_reason or "unknown",
        )

    async def aclose(self) -> None:
        if self.client is not None:
            await self.client.close()
