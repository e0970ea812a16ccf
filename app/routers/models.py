from fastapi import APIRouter, Depends

from app.core.context import AppContext, get_context
from app.schemas.chat import ModelCatalogResponse
from app.schemas.common import ApiResponse
from app.services.completion_service import OPENAI_MODELS

router = APIRouter()


@router.get("", response_model=ApiResponse[ModelCatalogResponse])
async def list_models(context: AppContext = Depends(get_context)):
    """Models the chat endpoint can relay to"""
    available = context.completions.is_configured
    models = [m.model_copy(update={"is_available": m.is_available and available}) for m in OPENAI_MODELS]
    return ApiResponse[ModelCatalogResponse](
        success=True,
        data=ModelCatalogResponse(models=models, default_model=context.settings.default_model),
    )
