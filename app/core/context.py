from dataclasses import dataclass
from typing import Optional
from fastapi import Request
import logging

from app.core.config import Settings
from app.core.database import Database
from app.services.completion_service import CompletionService
from app.services.supabase_service import SupabaseService

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Clients shared by every request, created at startup and closed at shutdown"""
    settings: Settings
    database: Optional[Database]
    supabase: SupabaseService
    completions: CompletionService

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppContext":
        return cls(
            settings=settings,
            database=Database.from_settings(settings),
            supabase=SupabaseService.from_settings(settings),
            completions=CompletionService.from_settings(settings),
        )

    async def startup(self) -> None:
        if self.database is not None and self.settings.auto_create_tables:
            await self.database.init_db()
            logger.info("Database tables ensured")
        logger.info(f"🚀 Application context started ({self.settings.environment})")

    async def shutdown(self) -> None:
        await self.completions.aclose()
        if self.database is not None:
            await self.database.dispose()
        logger.info("Application context stopped")


def get_context(request: Request) -> AppContext:
    return request.app.state.context
