# file: app/services/conversations_service.py

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.models.conversations import Conversation, ConversationStatus
from app.models.customers import Customer

logger = logging.getLogger("conversations_service")


def create_conversation(db: Session, customer: Customer) -> Conversation:
    conv = Conversation(
        customer_id=customer.customer_id,
        status=ConversationStatus.ACTIVE,
        started_at=datetime.now(timezone.utc),
    )
    db.add(conv)
    db.commit()
    db.refresh(conv)

    logger.info(
        f"[Conversations] Created conversation_id={conv.conversation_id} "
        f"customer_id={customer.customer_id}"
    )
    return conv


def get_active_conversation(db: Session, customer_id: str) -> Conversation | None:
    return (
        db.query(Conversation)
        .filter(
            Conversation.customer_id == customer_id,
            Conversation.status == ConversationStatus.ACTIVE,
        )
        .order_by(Conversation.started_at.desc())
        .first()
    )


def get_or_create_active_conversation(db: Session, customer: Customer) -> Conversation:
    """
    Reuses the customer's ACTIVE conversation or opens a new one.

    Not atomic: there is no unique constraint on (customer, ACTIVE), so two
    concurrent deliveries for a new customer may both create one. Reads
    always pick the most recently started.
    """
    conv = get_active_conversation(db, customer.customer_id)

    if conv:
        logger.info(f"[Conversations] Reusing active conversation_id={conv.conversation_id}")
        return conv

    logger.info(f"[Conversations] No active conversation for customer_id={customer.customer_id}")
    return create_conversation(db, customer)


def get_conversation(db: Session, conversation_id: str) -> Conversation:
    conv = db.get(Conversation, conversation_id)
    if conv is None:
        raise NotFoundError("Conversation", conversation_id)
    return conv


def list_conversations_by_customer(db: Session, customer_id: str) -> list[Conversation]:
    return db.query(Conversation).filter(Conversation.customer_id == customer_id).all()


def list_conversations_by_phone(db: Session, phone: str) -> list[Conversation]:
    return (
        db.query(Conversation)
        .join(Customer, Conversation.customer_id == Customer.customer_id)
        .filter(Customer.phone_number == phone)
        .all()
    )


def close_conversation(db: Session, conversation_id: str) -> Conversation:
    conv = get_conversation(db, conversation_id)

    conv.status = ConversationStatus.CLOSED
    conv.ended_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(conv)

    logger.info(f"[Conversations] Closed conversation_id={conversation_id}")
    return conv


def update_conversation_topic(db: Session, conversation_id: str, topic: str | None) -> Conversation:
    conv = get_conversation(db, conversation_id)

    conv.topic = topic
    db.commit()
    db.refresh(conv)

    logger.info(f"[Conversations] Topic of conversation_id={conversation_id} set to {topic!r}")
    return conv
