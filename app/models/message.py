from sqlalchemy import Column, Text, ForeignKey, Integer, Enum, Uuid
from sqlalchemy.orm import relationship
import uuid
import enum
from .base import Base, TimestampMixin, JSONType

class MessageRole(str, enum.Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"

class Message(Base, TimestampMixin):
    __tablename__ = "ai_messages"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    conversation_id = Column(Uuid, ForeignKey("ai_conversations.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(
        Enum(MessageRole, native_enum=False, length=20, values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
    )
    content = Column(Text, nullable=False)
    tokens = Column(Integer, nullable=False, default=0)
    cost = Column(Integer, nullable=False, default=0)  # in cents
    # model, temperature, maxTokens, finishReason
    meta_data = Column("metadata", JSONType, nullable=True)

    # Relationships
    conversation = relationship("Conversation", back_populates="messages")
