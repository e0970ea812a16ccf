from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select
import logging

from .base import CRUDBase
from app.models.user import User
from app.models.base import utcnow

logger = logging.getLogger(__name__)


class CRUDUser(CRUDBase[User]):
    async def get_by_auth_id(self, db: AsyncSession, *, auth_user_id: str) -> Optional[User]:
        """The row for a subject, deleted or not; a subject maps to at most one row"""
        result = await db.execute(select(self.model).where(self.model.auth_user_id == auth_user_id))
        return result.scalar_one_or_none()

    async def get_or_create_by_auth_id(
        self,
        db: AsyncSession,
        *,
        auth_user_id: str,
        email: Optional[str] = None,
        commit: bool = True
    ) -> User:
        """Resolve the identity provider's subject to a local user, creating it on first sight.

        Deleted and disabled accounts are returned untouched so the caller can
        refuse them. With commit=False the new row or login timestamp is only
        flushed and persists with the caller's next commit.
        """
        user = await self.get_by_auth_id(db, auth_user_id=auth_user_id)
        if user is not None:
            if user.is_deleted or not user.is_active:
                return user
            return await self.update(db, db_obj=user, obj_in={"last_login_at": utcnow()}, commit=commit)

        try:
            user = await self.create(
                db,
                obj_in={
                    "auth_user_id": auth_user_id,
                    "email": email or None,
                    "last_login_at": utcnow(),
                },
                commit=commit,
            )
            logger.info(f"Provisioned user {user.id} for auth subject {auth_user_id}")
            return user
        except IntegrityError:
            # A concurrent request created the same subject first
            await db.rollback()
            user = await self.get_by_auth_id(db, auth_user_id=auth_user_id)
            if user is None:
                raise
            return user


user_crud = CRUDUser(User)
