# Database models package

from .base import Base
from .user import User
from .conversation import Conversation
from .message import Message, MessageRole
from .api_key import ApiKey
from .activity_log import UserActivityLog
from .system_setting import SystemSetting

__all__ = [
    'Base',
    'User',
    'Conversation',
    'Message',
    'MessageRole',
    'ApiKey',
    'UserActivityLog',
    'SystemSetting',
]
