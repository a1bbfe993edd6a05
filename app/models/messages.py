import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base


class MessageType(str, enum.Enum):
    TEXT = "TEXT"
    IMAGE = "IMAGE"
    DOCUMENT = "DOCUMENT"
    AUDIO = "AUDIO"
    VIDEO = "VIDEO"
    LOCATION = "LOCATION"
    TEMPLATE = "TEMPLATE"


class MessageDirection(str, enum.Enum):
    INBOUND = "INBOUND"    # customer -> bot
    OUTBOUND = "OUTBOUND"  # bot -> customer


class MessageStatus(str, enum.Enum):
    SENT = "SENT"
    DELIVERED = "DELIVERED"
    READ = "READ"
    FAILED = "FAILED"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Message(Base):
    __tablename__ = "messages"

    message_id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    conversation_id = Column(String, ForeignKey("conversations.conversation_id"), nullable=False, index=True)

    # id assigned by WhatsApp (wamid...)
    whatsapp_message_id = Column(String(100), nullable=True, unique=True)

    type = Column(Enum(MessageType, name="message_type", native_enum=False, length=20), nullable=False)
    direction = Column(Enum(MessageDirection, name="message_direction", native_enum=False, length=20), nullable=False)
    content = Column(Text, nullable=False)

    sender_phone = Column(String(20), nullable=True)
    recipient_phone = Column(String(20), nullable=True)

    status = Column(
        Enum(MessageStatus, name="message_status", native_enum=False, length=20),
        nullable=False,
        default=MessageStatus.SENT,
    )
    error_message = Column(Text, nullable=True)

    sent_at = Column(DateTime(timezone=True), default=_utcnow)
    delivered_at = Column(DateTime(timezone=True), nullable=True)
    read_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    conversation = relationship("Conversation", back_populates="messages")
