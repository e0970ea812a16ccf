# CRUD operations package

from .user import user_crud
from .conversation import conversation_crud
from .message import message_crud
from .activity_log import activity_log_crud

__all__ = [
    'user_crud',
    'conversation_crud',
    'message_crud',
    'activity_log_crud',
]
