from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from app.models.conversations import Conversation, ConversationStatus


class ConversationRead(BaseModel):
    conversation_id: str
    customer_id: str
    customer_phone_number: Optional[str] = None
    customer_name: Optional[str] = None
    started_at: datetime
    ended_at: Optional[datetime] = None
    status: ConversationStatus
    topic: Optional[str] = None
    message_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, conv: Conversation) -> "ConversationRead":
        customer = conv.customer
        return cls(
            conversation_id=conv.conversation_id,
            customer_id=conv.customer_id,
            customer_phone_number=customer.phone_number if customer else None,
            customer_name=(customer.name or customer.profile_name) if customer else None,
            started_at=conv.started_at,
            ended_at=conv.ended_at,
            status=conv.status,
            topic=conv.topic,
            message_count=len(conv.messages or []),
            created_at=conv.created_at,
            updated_at=conv.updated_at,
        )
