from supabase import create_client, Client
from typing import Optional, Dict, Any
import asyncio
import logging

from app.core.config import Settings

logger = logging.getLogger(__name__)


class SupabaseService:
    def __init__(self, supabase_url: str, supabase_key: str):
        self.supabase: Optional[Client] = None
        if supabase_url and supabase_key:
            try:
                self.supabase = create_client(
                    supabase_url=supabase_url,
                    supabase_key=supabase_key
                )
                logger.info("✅ Supabase client initialized successfully")
            except Exception as e:
                logger.warning(f"❌ Failed to initialize Supabase client: {e}")
                self.supabase = None
        else:
            logger.warning("Supabase URL or KEY not provided")

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseService":
        return cls(settings.supabase_url, settings.supabase_key)

    def _check_client(self):
        if not self.supabase:
            raise RuntimeError("Supabase client not initialized. Check your SUPABASE_URL and SUPABASE_KEY.")

    async def get_user(self, access_token: str) -> Dict[str, Any]:
        """Get user details from access token"""
        self._check_client()
        try:
            # The supabase client is synchronous, keep it off the event loop
            response = await asyncio.to_thread(self.supabase.auth.get_user, access_token)
            return {
                "success": True,
                "user": response.user if response else None
            }
        except Exception as e:
            return {
                "success": False,
                "error": str(e)
            }
