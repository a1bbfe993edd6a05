# file: app/services/messages_service.py

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.models.conversations import Conversation
from app.models.messages import Message, MessageDirection, MessageStatus, MessageType
from app.services.conversations_service import get_conversation

logger = logging.getLogger("messages_service")


def _save(db: Session, msg: Message) -> Message:
    db.add(msg)
    db.commit()
    db.refresh(msg)
    return msg


def create_inbound_message(
    db: Session,
    conversation: Conversation,
    whatsapp_message_id: str | None,
    content: str,
    sender_phone: str,
    message_type: MessageType = MessageType.TEXT,
) -> Message:
    msg = _save(db, Message(
        conversation_id=conversation.conversation_id,
        whatsapp_message_id=whatsapp_message_id,
        type=message_type,
        direction=MessageDirection.INBOUND,
        content=content,
        sender_phone=sender_phone,
        status=MessageStatus.DELIVERED,
    ))

    logger.info(
        f"[Messages] Inbound message_id={msg.message_id} from={sender_phone} "
        f"conversation_id={conversation.conversation_id}"
    )
    return msg


def create_outbound_message(
    db: Session,
    conversation: Conversation,
    content: str,
    recipient_phone: str,
    error_message: str | None = None,
) -> Message:
    msg = _save(db, Message(
        conversation_id=conversation.conversation_id,
        type=MessageType.TEXT,
        direction=MessageDirection.OUTBOUND,
        content=content,
        recipient_phone=recipient_phone,
        status=MessageStatus.SENT,
        error_message=error_message,
    ))

    logger.info(
        f"[Messages] Outbound message_id={msg.message_id} to={recipient_phone} "
        f"conversation_id={conversation.conversation_id}"
    )
    return msg


def list_messages(db: Session, conversation_id: str) -> list[Message]:
    get_conversation(db, conversation_id)

    return (
        db.query(Message)
        .filter(Message.conversation_id == conversation_id)
        .order_by(Message.sent_at.asc())
        .all()
    )


def get_message(db: Session, message_id: str) -> Message:
    msg = db.get(Message, message_id)
    if msg is None:
        raise NotFoundError("Message", message_id)
    return msg


def get_message_by_whatsapp_id(db: Session, whatsapp_message_id: str) -> Message | None:
    return db.query(Message).filter(Message.whatsapp_message_id == whatsapp_message_id).first()


def update_message_status(db: Session, message_id: str, status: MessageStatus) -> Message:
    msg = get_message(db, message_id)

    msg.status = status
    now = datetime.now(timezone.utc)
    if status == MessageStatus.DELIVERED and msg.delivered_at is None:
        msg.delivered_at = now
    elif status == MessageStatus.READ:
        msg.read_at = now
        if msg.delivered_at is None:
            msg.delivered_at = now

    db.commit()
    db.refresh(msg)

    logger.info(f"[Messages] message_id={message_id} status -> {status.value}")
    return msg


def update_whatsapp_message_id(db: Session, message_id: str, whatsapp_message_id: str) -> Message:
    msg = get_message(db, message_id)

    msg.whatsapp_message_id = whatsapp_message_id
    db.commit()
    db.refresh(msg)

    logger.info(f"[Messages] message_id={message_id} whatsapp_message_id={whatsapp_message_id}")
    return msg
