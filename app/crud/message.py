from typing import Any, Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from .base import CRUDBase
from app.models.message import Message, MessageRole
from uuid import UUID

class CRUDMessage(CRUDBase[Message]):
    async def append(
        self,
        db: AsyncSession,
        *,
        conversation_id: UUID,
        role: MessageRole,
        content: str,
        tokens: int = 0,
        cost: int = 0,
        metadata: Optional[Dict[str, Any]] = None,
        commit: bool = True
    ) -> Message:
        """Add a message at the end of a conversation"""
        return await self.create(
            db,
            obj_in={
                "conversation_id": conversation_id,
                "role": role,
                "content": content,
                "tokens": tokens,
                "cost": cost,
                "meta_data": metadata,
            },
            commit=commit,
        )

message_crud = CRUDMessage(Message)
