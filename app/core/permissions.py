"""Ownership checks for conversation-scoped records.

Every entry point that reads or writes a conversation goes through
``authorize_access``. A missing record, a record owned by another user and a
soft deleted record are all denied the same way, so callers can't test for
the existence of someone else's conversation.
"""
import enum
from typing import Any, Optional, TypeVar
from uuid import UUID

from app.core.exceptions import NotFoundError

RecordType = TypeVar("RecordType")


class AccessDecision(str, enum.Enum):
    AUTHORIZED = "authorized"
    DENIED = "denied"


def authorize_access(record: Optional[Any], caller_id: Optional[UUID]) -> AccessDecision:
    if record is None or caller_id is None:
        return AccessDecision.DENIED
    if getattr(record, "deleted_at", None) is not None:
        return AccessDecision.DENIED
    if str(record.user_id) != str(caller_id):
        return AccessDecision.DENIED
    return AccessDecision.AUTHORIZED


def require_access(record: Optional[RecordType], caller_id: Optional[UUID], resource: str = "Conversation") -> RecordType:
    """Return the record if the caller may use it, otherwise raise NotFoundError"""
    if authorize_access(record, caller_id) is AccessDecision.DENIED:
        raise NotFoundError(resource)
    return record
