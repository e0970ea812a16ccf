from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import asyncio
import logging

from app.core.context import AppContext, get_context
from app.core.database import get_db
from app.core.exceptions import UnauthorizedError
from app.crud.user import user_crud
from app.models.user import User
from app.schemas.auth import TokenData

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is a 401 from us rather than FastAPI's default
security = HTTPBearer(auto_error=False)

SUPABASE_AUTH_TIMEOUT = 3.0


def decode_access_token(token: str, secret: str, algorithm: str, audience: Optional[str]) -> TokenData:
    """Verify a Supabase-issued JWT locally and pull out the subject"""
    options = {"verify_aud": bool(audience)}
    payload = jwt.decode(token, secret, algorithms=[algorithm], audience=audience or None, options=options)
    user_id = payload.get("sub")
    if not user_id:
        raise JWTError("Token has no subject")
    return TokenData(user_id=user_id, email=payload.get("email") or "")


async def verify_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    context: AppContext = Depends(get_context),
) -> TokenData:
    """Verify JWT token and return user data"""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError()

    token = credentials.credentials
    settings = context.settings

    # Local verification first (no network call)
    if settings.jwt_secret_key:
        try:
            return decode_access_token(
                token, settings.jwt_secret_key, settings.jwt_algorithm, settings.jwt_audience
            )
        except JWTError as decode_error:
            logger.warning(f"⚠️ JWT verification failed, trying Supabase: {decode_error}")

    # Fallback: ask Supabase who the token belongs to
    if context.supabase.supabase is None:
        raise UnauthorizedError("Could not validate credentials")

    try:
        user_result = await asyncio.wait_for(
            context.supabase.get_user(token),
            timeout=SUPABASE_AUTH_TIMEOUT
        )
    except asyncio.TimeoutError:
        logger.warning("⚠️ Supabase auth timeout")
        raise UnauthorizedError("Authentication service timeout")

    user = user_result.get("user") if user_result["success"] else None
    if user is None:
        raise UnauthorizedError("Could not validate credentials")
    return TokenData(user_id=str(user.id), email=user.email or "")


async def get_current_user(token_data: TokenData = Depends(verify_token)) -> TokenData:
    """Get current authenticated user"""
    return token_data


async def get_current_account(
    current_user: TokenData = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Local user row for the authenticated subject, provisioned on first request.

    Nothing is committed here: a new row or login timestamp is written together
    with the request's own changes, so a rejected request leaves the store alone.
    """
    account = await user_crud.get_or_create_by_auth_id(
        db, auth_user_id=current_user.user_id, email=current_user.email, commit=False
    )
    if account.is_deleted or not account.is_active:
        raise UnauthorizedError("Account is disabled")
    return account
