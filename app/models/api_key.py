from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
import uuid
from .base import Base, TimestampMixin, SoftDeleteMixin


class ApiKey(Base, TimestampMixin, SoftDeleteMixin):
    """User-supplied keys for third-party model providers, stored encrypted"""
    __tablename__ = "api_keys"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    service = Column(String(50), nullable=False)  # openai, anthropic, google
    key_name = Column(String(255), nullable=False)
    encrypted_key = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    last_used_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="api_keys")
