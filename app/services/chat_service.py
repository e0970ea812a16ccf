"""One chat turn: resolve the conversation, relay upstream, persist the result.

The whole turn shares one database transaction. A conversation created for the
turn is only flushed, so an upstream failure or any later error rolls it back
together with everything else and leaves the store as it was.
"""
from dataclasses import dataclass
from typing import List, Optional, Tuple
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
import logging
import time

from app.core.config import Settings
from app.core.exceptions import ValidationError, NotFoundError
from app.core.permissions import require_access
from app.crud.activity_log import activity_log_crud
from app.crud.conversation import conversation_crud, title_from_message
from app.crud.message import message_crud
from app.models.conversation import Conversation
from app.models.message import Message, MessageRole
from app.models.user import User
from app.schemas.chat import ChatRequest, ChatTurnResponse
from app.services.completion_service import CompletionService
from app.services.turns import assemble_turns
from app.services.usage import turn_cost

logger = logging.getLogger(__name__)


@dataclass
class RequestInfo:
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


def parse_conversation_id(raw: str) -> UUID:
    """Malformed ids can't name any conversation, so they are simply not found"""
    try:
        return UUID(str(raw))
    except ValueError:
        raise NotFoundError("Conversation")


class ChatService:
    def __init__(self, completions: CompletionService, settings: Settings):
        self.completions = completions
        self.settings = settings

    async def get_conversation(self, db: AsyncSession, conversation_id: str, caller: User) -> Conversation:
        """A conversation with its messages, if the caller owns it and it is live"""
        conversation = await conversation_crud.get_with_messages(
            db, conversation_id=parse_conversation_id(conversation_id)
        )
        return require_access(conversation, caller.id)

    async def _resolve_conversation(
        self, db: AsyncSession, request: ChatRequest, caller: User, model: str
    ) -> Tuple[Conversation, List[Message]]:
        if request.conversation_id:
            conversation = await self.get_conversation(db, request.conversation_id, caller)
            return conversation, list(conversation.messages)

        conversation = await conversation_crud.create_for_user(
            db,
            owner_id=caller.id,
            title=title_from_message(request.message),
            provider=self.settings.default_provider,
            model=model,
            commit=False,
        )
        return conversation, []

    async def run_turn(
        self,
        db: AsyncSession,
        request: ChatRequest,
        caller: User,
        info: Optional[RequestInfo] = None
    ) -> ChatTurnResponse:
        if not request.message or not request.message.strip():
            raise ValidationError("Message is required")

        model = request.model or self.settings.default_model
        temperature = self.settings.default_temperature if request.temperature is None else request.temperature
        max_tokens = request.max_tokens or self.settings.default_max_tokens
        info = info or RequestInfo()

        started = time.monotonic()
        try:
            conversation, history = await self._resolve_conversation(db, request, caller, model)
            turns = assemble_turns(history, request.message)

            completion = await self.completions.request_completion(
                turns, model=model, temperature=temperature, max_tokens=max_tokens
            )

            await message_crud.append(
                db,
                conversation_id=conversation.id,
                role=MessageRole.USER,
                content=request.message,
                tokens=0,
                cost=0,
                commit=False,
            )
            cost = turn_cost(
                completion.model, completion.usage.prompt_tokens, completion.usage.completion_tokens
            )
            await message_crud.append(
                db,
                conversation_id=conversation.id,
                role=MessageRole.ASSISTANT,
                content=completion.content,
                tokens=completion.usage.total_tokens,
                cost=cost,
                metadata={
                    "model": completion.model,
                    "temperature": temperature,
                    "maxTokens": max_tokens,
                    "finishReason": completion.finish_reason,
                },
                commit=False,
            )
            await conversation_crud.update_totals(
                db,
                conversation=conversation,
                token_delta=completion.usage.total_tokens,
                cost_delta=cost,
                commit=False,
            )
            await activity_log_crud.record(
                db,
                user_id=caller.id,
                action="ai.chat",
                resource="conversation",
                resource_id=conversation.id,
                metadata={"model": completion.model, "totalTokens": completion.usage.total_tokens},
                ip_address=info.ip_address,
                user_agent=info.user_agent,
                commit=False,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        latency_ms = int((time.monotonic() - started) * 1000)
        logger.info(
            f"Chat turn on conversation {conversation.id}: model={completion.model} "
            f"tokens={completion.usage.total_tokens} latency_ms={latency_ms}"
        )
        return ChatTurnResponse(
            conversation_id=conversation.id,
            message=completion.content,
            usage=completion.usage,
            model=completion.model,
        )

    async def list_conversations(
        self, db: AsyncSession, caller: User, *, page: int, limit: int
    ) -> Tuple[List[Conversation], int]:
        return await conversation_crud.get_page_for_user(db, user_id=caller.id, page=page, limit=limit)

    async def rename_conversation(
        self, db: AsyncSession, conversation_id: str, caller: User, title: str
    ) -> Conversation:
        conversation = await conversation_crud.get(
            db, parse_conversation_id(conversation_id), raise_if_not_found=False
        )
        require_access(conversation, caller.id)
        return await conversation_crud.update(db, db_obj=conversation, obj_in={"title": title})

    async def delete_conversation(
        self,
        db: AsyncSession,
        conversation_id: str,
        caller: User,
        info: Optional[RequestInfo] = None
    ) -> Conversation:
        """Soft delete: the row and its messages stay, further reads and appends are refused"""
        info = info or RequestInfo()
        conversation = await conversation_crud.get(
            db, parse_conversation_id(conversation_id), raise_if_not_found=False
        )
        require_access(conversation, caller.id)
        try:
            await conversation_crud.soft_delete(db, db_obj=conversation, commit=False)
            await activity_log_crud.record(
                db,
                user_id=caller.id,
                action="conversation.delete",
                resource="conversation",
                resource_id=conversation.id,
                ip_address=info.ip_address,
                user_agent=info.user_agent,
                commit=False,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return conversation
