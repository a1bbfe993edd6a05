from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.messages import MessageDirection, MessageStatus, MessageType


class MessageRead(BaseModel):
    message_id: str
    conversation_id: str
    whatsapp_message_id: Optional[str] = None
    type: MessageType
    direction: MessageDirection
    content: str
    sender_phone: Optional[str] = None
    recipient_phone: Optional[str] = None
    status: MessageStatus
    error_message: Optional[str] = None
    sent_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    read_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ===========================================
# Manual send (POST /api/webhook/send)
# ===========================================

class MessageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    phone_number: str = Field(..., alias="phoneNumber")
    content: str
    message_type: Optional[str] = Field("text", alias="messageType")  # text, image, document...

    @field_validator("phone_number", "content")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be blank")
        return value
