from typing import Any, Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from .base import CRUDBase
from app.models.activity_log import UserActivityLog


class CRUDActivityLog(CRUDBase[UserActivityLog]):
    async def record(
        self,
        db: AsyncSession,
        *,
        user_id: UUID,
        action: str,
        resource: Optional[str] = None,
        resource_id: Optional[UUID] = None,
        metadata: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        commit: bool = True
    ) -> UserActivityLog:
        """Append an audit entry"""
        return await self.create(
            db,
            obj_in={
                "user_id": user_id,
                "action": action,
                "resource": resource,
                "resource_id": resource_id,
                "meta_data": metadata,
                "ip_address": ip_address,
                "user_agent": user_agent,
            },
            commit=commit,
        )


activity_log_crud = CRUDActivityLog(UserActivityLog)
