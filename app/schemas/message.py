from pydantic import AliasChoices, Field
from typing import Optional
from datetime import datetime
from uuid import UUID
from app.models.message import MessageRole
from .common import CamelModel

class MessageMetadata(CamelModel):
    model: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    finish_reason: Optional[str] = None

class MessageResponse(CamelModel):
    id: UUID
    conversation_id: UUID
    role: MessageRole
    content: str
    tokens: int = 0
    cost: int = 0
    # ORM attribute is meta_data, the column and the wire name are "metadata"
    meta_data: Optional[MessageMetadata] = Field(
        default=None,
        validation_alias=AliasChoices("meta_data", "metaData", "metadata"),
        serialization_alias="metadata",
    )
    created_at: datetime
    updated_at: datetime
