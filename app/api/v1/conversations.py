# file: app/api/v1/conversations.py

import logging
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.conversations import ConversationRead
from app.schemas.messages import MessageRead
from app.services import conversations_service
from app.services.messages_service import list_messages

router = APIRouter()
logger = logging.getLogger("conversations_api")


@router.get("/customer/{customer_id}", response_model=list[ConversationRead])
def list_by_customer(customer_id: str, db: Session = Depends(get_db)):
    convs = conversations_service.list_conversations_by_customer(db, customer_id)
    return [ConversationRead.from_model(c) for c in convs]


@router.get("/phone/{phone_number}", response_model=list[ConversationRead])
def list_by_phone(phone_number: str, db: Session = Depends(get_db)):
    convs = conversations_service.list_conversations_by_phone(db, phone_number)
    return [ConversationRead.from_model(c) for c in convs]


@router.get("/{conversation_id}", response_model=ConversationRead)
def get_conversation(conversation_id: str, db: Session = Depends(get_db)):
    return ConversationRead.from_model(conversations_service.get_conversation(db, conversation_id))


@router.get("/{conversation_id}/messages", response_model=list[MessageRead])
def get_conversation_messages(conversation_id: str, db: Session = Depends(get_db)):
    return list_messages(db, conversation_id)


@router.put("/{conversation_id}/close", status_code=status.HTTP_204_NO_CONTENT)
def close_conversation(conversation_id: str, db: Session = Depends(get_db)):
    logger.info(f"[ConversationsAPI] Close conversation_id={conversation_id}")
    conversations_service.close_conversation(db, conversation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{conversation_id}/topic", status_code=status.HTTP_204_NO_CONTENT)
def update_topic(
    conversation_id: str,
    topic: str = Query(..., max_length=100),
    db: Session = Depends(get_db),
):
    logger.info(f"[ConversationsAPI] Topic conversation_id={conversation_id} topic={topic!r}")
    conversations_service.update_conversation_topic(db, conversation_id, topic)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
