# file: app/api/v1/webhook.py

import logging
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.messages import MessageRequest
from app.schemas.whatsapp import WhatsAppSendResponse
from app.services.responder_service import ClaudeResponder, get_responder
from app.services.webhook_service import process_webhook, send_manual_message
from app.services.whatsapp_service import WhatsAppClient, get_whatsapp_client

router = APIRouter()
logger = logging.getLogger("webhook_api")

EVENT_RECEIVED = "EVENT_RECEIVED"


@router.get("", response_class=PlainTextResponse)
def verify_webhook(
    mode: str | None = Query(None, alias="hub.mode"),
    token: str | None = Query(None, alias="hub.verify_token"),
    challenge: str | None = Query(None, alias="hub.challenge"),
    whatsapp: WhatsAppClient = Depends(get_whatsapp_client),
):
    logger.info(f"[WebhookAPI] Verification request mode={mode}")

    result = whatsapp.verify_webhook(mode, token, challenge)
    if result is not None:
        return PlainTextResponse(result)

    return PlainTextResponse("Forbidden", status_code=status.HTTP_403_FORBIDDEN)


@router.post("", response_class=PlainTextResponse)
async def receive_webhook(
    request: Request,
    db: Session = Depends(get_db),
    whatsapp: WhatsAppClient = Depends(get_whatsapp_client),
    responder: ClaudeResponder = Depends(get_responder),
):
    """
    Always 200 EVENT_RECEIVED: any other answer makes WhatsApp redeliver
    the same notification. Failures only show up in the logs.
    """
    try:
        payload = await request.json()
    except ValueError:
        logger.warning("[WebhookAPI] Body is not JSON, acknowledging anyway")
        return PlainTextResponse(EVENT_RECEIVED)

    try:
        # blocking DB + HTTP work, keep it off the event loop
        processed = await run_in_threadpool(process_webhook, db, payload, whatsapp, responder)
        logger.info(f"[WebhookAPI] Webhook handled, {processed} message(s) answered")
    except Exception:
        logger.exception(
            "[WebhookAPI] Error processing webhook",
            extra={"event": "webhook_failed"},
        )

    return PlainTextResponse(EVENT_RECEIVED)


@router.post("/send", response_model=WhatsAppSendResponse)
def send_message(
    payload: MessageRequest,
    whatsapp: WhatsAppClient = Depends(get_whatsapp_client),
):
    logger.info(f"[WebhookAPI] Manual send request to {payload.phone_number}")
    return send_manual_message(whatsapp, payload)
