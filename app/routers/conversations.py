from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_account
from app.core.database import get_db
from app.core.dependencies import get_chat_service, get_request_info
from app.models.user import User
from app.schemas.common import ApiResponse
from app.schemas.conversation import ConversationResponse, ConversationUpdate
from app.services.chat_service import ChatService, RequestInfo

router = APIRouter()


@router.patch("/{conversation_id}", response_model=ApiResponse[ConversationResponse])
async def update_conversation(
    conversation_id: str,
    conversation_update: ConversationUpdate,
    current_account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
    chat_service: ChatService = Depends(get_chat_service),
):
    """Rename a conversation"""
    conversation = await chat_service.rename_conversation(
        db, conversation_id, current_account, conversation_update.title
    )
    return ApiResponse[ConversationResponse](
        success=True, data=ConversationResponse.model_validate(conversation)
    )


@router.delete("/{conversation_id}", response_model=ApiResponse[ConversationResponse])
async def delete_conversation(
    conversation_id: str,
    info: RequestInfo = Depends(get_request_info),
    current_account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
    chat_service: ChatService = Depends(get_chat_service),
):
    """Soft delete a conversation"""
    conversation = await chat_service.delete_conversation(
        db, conversation_id, current_account, info
    )
    return ApiResponse[ConversationResponse](
        success=True, data=ConversationResponse.model_validate(conversation)
    )
