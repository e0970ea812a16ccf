from sqlalchemy import Column, String, Text, Boolean, DateTime, Uuid
from sqlalchemy.orm import relationship
import uuid
from .base import Base, TimestampMixin, SoftDeleteMixin, JSONType

DEFAULT_PREFERENCES = {
    "theme": "system",
    "language": "en",
    "timezone": "UTC",
    "emailNotifications": True,
    "pushNotifications": True,
}


class User(Base, TimestampMixin, SoftDeleteMixin):
    """Profile data on top of the identity provider's account"""
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    # Subject claim issued by Supabase Auth
    auth_user_id = Column(String(255), nullable=False, unique=True, index=True)
    # Several subjects may share an address, e.g. an account deleted and signed up again
    email = Column(String(255), nullable=True, index=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    display_name = Column(String(255), nullable=True)
    bio = Column(Text, nullable=True)
    profile_image_url = Column(Text, nullable=True)
    role = Column(String(50), nullable=False, default="user")
    subscription_tier = Column(String(50), nullable=False, default="free")
    preferences = Column(JSONType, nullable=True, default=lambda: dict(DEFAULT_PREFERENCES))
    is_active = Column(Boolean, nullable=False, default=True)
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    conversations = relationship("Conversation", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    api_keys = relationship("ApiKey", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    activity_logs = relationship("UserActivityLog", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
