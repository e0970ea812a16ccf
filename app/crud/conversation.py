from typing import List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from .base import CRUDBase
from app.models.conversation import Conversation
from app.models.base import utcnow
from app.services.usage import add_usage
from uuid import UUID

TITLE_LENGTH = 50


def title_from_message(message: str) -> str:
    """First 50 characters of the opening message, with an ellipsis when cut"""
    return message[:TITLE_LENGTH] + ("..." if len(message) > TITLE_LENGTH else "")


class CRUDConversation(CRUDBase[Conversation]):
    async def get_with_messages(self, db: AsyncSession, *, conversation_id: UUID) -> Optional[Conversation]:
        """Load a conversation and its messages, oldest first.

        Soft deleted rows are returned too; ownership and deletion are decided by
        ``authorize_access`` so every caller rejects them the same way.
        """
        return await self.get_with_relations(
            db, id=conversation_id, relations=["messages"], include_deleted=True
        )

    async def get_page_for_user(
        self, db: AsyncSession, *, user_id: UUID, page: int, limit: int
    ) -> Tuple[List[Conversation], int]:
        """Live conversations of a user, most recently updated first"""
        return await self.get_multi(
            db,
            skip=(page - 1) * limit,
            limit=limit,
            filters={"user_id": user_id},
            order_by="updated_at",
            order_desc=True,
        )

    async def create_for_user(
        self,
        db: AsyncSession,
        *,
        owner_id: UUID,
        title: str,
        provider: str,
        model: str,
        system_prompt: Optional[str] = None,
        commit: bool = True
    ) -> Conversation:
        return await self.create(
            db,
            obj_in={
                "user_id": owner_id,
                "title": title,
                "provider": provider,
                "model": model,
                "system_prompt": system_prompt,
                "total_tokens": 0,
                "total_cost": 0,
            },
            commit=commit,
        )

    async def update_totals(
        self,
        db: AsyncSession,
        *,
        conversation: Conversation,
        token_delta: int,
        cost_delta: int = 0,
        commit: bool = True
    ) -> Conversation:
        """Add one turn's usage to the running totals.

        Read-modify-write on the instance loaded by the caller: two concurrent
        turns on the same conversation race and the last write wins.
        """
        add_usage(conversation, tokens=token_delta, cost=cost_delta)
        conversation.updated_at = utcnow()
        return await self._save(db, conversation, commit)

conversation_crud = CRUDConversation(Conversation)
