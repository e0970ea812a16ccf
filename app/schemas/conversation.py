from pydantic import Field
from typing import Optional, List
from datetime import datetime
from uuid import UUID
from .common import CamelModel
from .message import MessageResponse

class ConversationUpdate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)

class ConversationResponse(CamelModel):
    id: UUID
    user_id: UUID
    title: str
    provider: str
    model: str
    system_prompt: Optional[str] = None
    total_tokens: int = 0
    total_cost: int = 0
    is_active: bool = True
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None

class ConversationWithMessages(ConversationResponse):
    messages: List[MessageResponse] = []
