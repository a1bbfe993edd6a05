# file: app/services/webhook_service.py

import logging

from sqlalchemy.orm import Session

from app.core.exceptions import ResponderError, WhatsAppError
from app.models.messages import MessageStatus
from app.schemas.messages import MessageRequest
from app.schemas.whatsapp import (
    MEDIA_PLACEHOLDERS,
    STORED_TYPES,
    IncomingMessage,
    InboundKind,
    StatusUpdate,
    Value,
    WebhookPayload,
    WhatsAppSendResponse,
)
from app.services.conversations_service import get_or_create_active_conversation
from app.services.customers_service import get_or_create_customer
from app.services.messages_service import (
    create_inbound_message,
    create_outbound_message,
    get_message_by_whatsapp_id,
    update_message_status,
    update_whatsapp_message_id,
)
from app.services.products_service import list_active_products
from app.services.responder_service import ClaudeResponder
from app.services.whatsapp_service import WhatsAppClient
from app.utils.prompt_builder import build_products_context
from app.utils.whatsapp_util import truncate_message

logger = logging.getLogger("webhook")

FALLBACK_REPLY = (
    "Disculpa, estoy teniendo problemas para procesar tu mensaje. "
    "¿Podrías intentarlo de nuevo?"
)

_DELIVERY_STATUSES = {
    "sent": MessageStatus.SENT,
    "delivered": MessageStatus.DELIVERED,
    "read": MessageStatus.READ,
    "failed": MessageStatus.FAILED,
}

# receipts arrive in any order; only forward moves apply (FAILED always does)
_STATUS_RANK = {
    MessageStatus.SENT: 0,
    MessageStatus.DELIVERED: 1,
    MessageStatus.READ: 2,
}


# ============================================================
# Utils
# ============================================================

def extract_message_content(message: IncomingMessage) -> str | None:
    kind = message.kind

    if kind == InboundKind.TEXT:
        return message.text.body if message.text else None

    if kind in MEDIA_PLACEHOLDERS:
        return MEDIA_PLACEHOLDERS[kind]

    # InboundKind.UNRECOGNIZED (location, sticker, reaction, ...)
    return None


def _profile_name(value: Value, phone: str) -> str | None:
    contacts = value.contacts or []

    for contact in contacts:
        if contact.wa_id == phone and contact.profile:
            return contact.profile.name

    if contacts and contacts[0].profile:
        return contacts[0].profile.name
    return None


# ============================================================
# Reply
# ============================================================

def generate_reply(db: Session, responder: ClaudeResponder, user_message: str) -> str:
    """
    Never raises: the customer always gets an answer.
    """
    try:
        products_context = build_products_context(list_active_products(db))
        return responder.generate_with_products(user_message, products_context).content
    except ResponderError:
        logger.exception("[Webhook] Responder failed, using fallback reply")
    except Exception:
        logger.exception("[Webhook] Unexpected error building reply, using fallback reply")
        db.rollback()

    return FALLBACK_REPLY


# ============================================================
# Pipeline
# ============================================================

def process_incoming_message(
    db: Session,
    message: IncomingMessage,
    value: Value,
    whatsapp: WhatsAppClient,
    responder: ClaudeResponder,
) -> bool:
    """
    inbound message -> customer -> conversation -> persist -> AI -> send -> persist.
    Returns False when the message was skipped.
    """
    phone = message.from_
    kind = message.kind

    logger.info(f"[Webhook] Incoming message from={phone} type={message.type} id={message.id}")

    content = extract_message_content(message)
    if content is None or not content.strip():
        logger.warning(f"[Webhook] Message id={message.id} type={message.type} has no content, skipping")
        return False

    customer = get_or_create_customer(db, phone, _profile_name(value, phone))
    conversation = get_or_create_active_conversation(db, customer)

    create_inbound_message(
        db,
        conversation,
        whatsapp_message_id=message.id,
        content=content,
        sender_phone=phone,
        message_type=STORED_TYPES[kind],
    )

    reply = generate_reply(db, responder, content)

    ack: WhatsAppSendResponse | None = None
    send_error = None
    try:
        ack = whatsapp.send_text(phone, reply)
    except WhatsAppError as e:
        logger.exception(f"[Webhook] Reply to {phone} could not be sent")
        send_error = str(e)

    # store what the customer actually received
    outbound = create_outbound_message(db, conversation, truncate_message(reply), phone, error_message=send_error)

    if ack is not None and ack.message_id:
        update_whatsapp_message_id(db, outbound.message_id, ack.message_id)

    logger.info(f"[Webhook] Message id={message.id} processed conversation_id={conversation.conversation_id}")
    return True


def apply_status_update(db: Session, update: StatusUpdate) -> bool:
    status = _DELIVERY_STATUSES.get((update.status or "").lower())
    if not update.id or status is None:
        return False

    msg = get_message_by_whatsapp_id(db, update.id)
    if msg is None:
        logger.debug(f"[Webhook] Status {update.status} for unknown wa_message_id={update.id}")
        return False

    if status != MessageStatus.FAILED and msg.status in _STATUS_RANK:
        if _STATUS_RANK[status] <= _STATUS_RANK[msg.status]:
            logger.info(
                f"[Webhook] Ignoring stale status {status.value} for message_id={msg.message_id} "
                f"(current {msg.status.value})"
            )
            return False

    update_message_status(db, msg.message_id, status)
    return True


def process_webhook(
    db: Session,
    payload: dict,
    whatsapp: WhatsAppClient,
    responder: ClaudeResponder,
) -> int:
    """
    Walks entry -> changes -> value. Every message and status is handled
    on its own: one failure is logged and rolled back, the rest continue.
    Returns how many inbound messages were processed.
    """
    envelope = WebhookPayload.model_validate(payload)

    if not envelope.entry:
        logger.warning("[Webhook] Payload without entries, ignoring")
        return 0

    processed = 0
    for entry in envelope.entry:
        for change in entry.changes:
            value = change.value
            if value is None:
                continue

            for message in value.messages:
                try:
                    if process_incoming_message(db, message, value, whatsapp, responder):
                        processed += 1
                except Exception:
                    db.rollback()
                    logger.exception(
                        "[Webhook] Failed processing incoming message",
                        extra={
                            "event": "webhook_message_failed",
                            "wa_message_id": message.id,
                            "phone": message.from_,
                        },
                    )

            for update in value.statuses:
                try:
                    apply_status_update(db, update)
                except Exception:
                    db.rollback()
                    logger.exception(
                        "[Webhook] Failed applying status update",
                        extra={"event": "webhook_status_failed", "wa_message_id": update.id},
                    )

    return processed


# ============================================================
# Manual send
# ============================================================

def send_manual_message(whatsapp: WhatsAppClient, request: MessageRequest) -> WhatsAppSendResponse:
    logger.info(f"[Webhook] Manual send to {request.phone_number} type={request.message_type}")
    return whatsapp.send_text(request.phone_number, request.content)
