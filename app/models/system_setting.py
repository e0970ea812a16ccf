from sqlalchemy import Column, String, Text, Boolean, Uuid
import uuid
from .base import Base, TimestampMixin, JSONType


class SystemSetting(Base, TimestampMixin):
    """Global settings and feature flags"""
    __tablename__ = "system_settings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    key = Column(String(100), nullable=False, unique=True)
    value = Column(JSONType, nullable=False)
    description = Column(Text, nullable=True)
    is_public = Column(Boolean, nullable=False, default=False)
