from pydantic import Field
from typing import Optional, List
from uuid import UUID
from app.models.message import MessageRole
from .common import CamelModel


class ChatRequest(CamelModel):
    message: str = ""
    conversation_id: Optional[str] = None
    model: Optional[str] = Field(None, max_length=100)
    temperature: Optional[float] = Field(None, ge=0, le=2)
    max_tokens: Optional[int] = Field(None, gt=0)


class Turn(CamelModel):
    """One role/content pair as sent upstream"""
    role: MessageRole
    content: str

    def as_upstream(self) -> dict:
        return {"role": self.role.value, "content": self.content}


class CompletionUsage(CamelModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class CompletionResult(CamelModel):
    content: str
    usage: CompletionUsage
    model: str
    finish_reason: str = "unknown"


class ChatTurnResponse(CamelModel):
    conversation_id: UUID
    message: str
    usage: CompletionUsage
    model: str


class ModelInfo(CamelModel):
    id: str
    name: str
    provider: str
    description: str
    max_tokens: int
    cost_per_token: float
    is_available: bool = True


class ModelCatalogResponse(CamelModel):
    models: List[ModelInfo]
    default_model: str
