from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional, Union

from app.core.auth import get_current_account
from app.core.database import get_db
from app.core.dependencies import get_chat_service, get_request_info
from app.models.user import User
from app.schemas.chat import ChatRequest, ChatTurnResponse
from app.schemas.common import ApiResponse, PageMetadata
from app.schemas.conversation import ConversationResponse, ConversationWithMessages
from app.services.chat_service import ChatService, RequestInfo

router = APIRouter()

MAX_PAGE_SIZE = 100


@router.post("", response_model=ApiResponse[ChatTurnResponse])
async def send_chat_message(
    chat_request: ChatRequest,
    info: RequestInfo = Depends(get_request_info),
    current_account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
    chat_service: ChatService = Depends(get_chat_service),
):
    """Run one chat turn, creating the conversation when no id is given"""
    result = await chat_service.run_turn(db, chat_request, current_account, info)
    return ApiResponse[ChatTurnResponse](success=True, data=result)


@router.get(
    "",
    response_model=Union[ApiResponse[ConversationWithMessages], ApiResponse[List[ConversationResponse]]],
)
async def get_conversations(
    conversation_id: Optional[str] = Query(None, alias="conversationId"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    current_account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
    chat_service: ChatService = Depends(get_chat_service),
):
    """One conversation with its messages, or a page of the caller's conversations"""
    if conversation_id:
        conversation = await chat_service.get_conversation(db, conversation_id, current_account)
        return ApiResponse[ConversationWithMessages](
            success=True,
            data=ConversationWithMessages.model_validate(conversation),
        )

    conversations, total = await chat_service.list_conversations(
        db, current_account, page=page, limit=limit
    )
    return ApiResponse[List[ConversationResponse]](
        success=True,
        data=[ConversationResponse.model_validate(c) for c in conversations],
        metadata=PageMetadata(total=total, page=page, limit=limit),
    )
