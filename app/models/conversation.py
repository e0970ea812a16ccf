from sqlalchemy import Column, String, Text, Boolean, Integer, ForeignKey, Uuid
from sqlalchemy.orm import relationship
import uuid
from .base import Base, TimestampMixin, SoftDeleteMixin

class Conversation(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "ai_conversations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    provider = Column(String(50), nullable=False)  # openai, anthropic, google
    model = Column(String(100), nullable=False)
    system_prompt = Column(Text, nullable=True)
    total_tokens = Column(Integer, nullable=False, default=0)
    total_cost = Column(Integer, nullable=False, default=0)  # in cents
    is_active = Column(Boolean, nullable=False, default=True)

    # Relationships
    user = relationship("User", back_populates="conversations")
    messages = relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Message.created_at",
    )
