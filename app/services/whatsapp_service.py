# file: app/services/whatsapp_service.py

import logging

import requests

from app.core.exceptions import WhatsAppError
from app.core.settings import settings
from app.schemas.whatsapp import WhatsAppSendResponse
from app.utils.whatsapp_util import format_phone_number, truncate_message

logger = logging.getLogger("whatsapp_service")

SUBSCRIBE_MODE = "subscribe"


class WhatsAppClient:
    def __init__(self, session: requests.Session | None = None):
        self.base_url = settings.WHATSAPP_API_BASE_URL.rstrip("/")
        self.phone_number_id = settings.WHATSAPP_PHONE_NUMBER_ID
        self.access_token = settings.WHATSAPP_ACCESS_TOKEN
        self.verify_token = settings.WHATSAPP_VERIFY_TOKEN
        self.timeout = settings.WHATSAPP_TIMEOUT_SECONDS
        self.session = session or requests.Session()

        if not self.phone_number_id:
            logger.warning("WHATSAPP_PHONE_NUMBER_ID not set")
        if not self.access_token:
            logger.warning("WHATSAPP_ACCESS_TOKEN not set")

    @property
    def messages_url(self) -> str:
        return f"{self.base_url}/{self.phone_number_id}/messages"

    # =========================================================================
    # Generic JSON POST
    # =========================================================================
    def _post_json(self, payload: dict) -> dict:
        logger.debug(f"[WA] POST {self.messages_url} payload={payload}")

        try:
            r = self.session.post(
                self.messages_url,
                json=payload,
                headers={
                    "Authorization": f"Bearer {self.access_token}",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.exception("[WA] Transport error calling WhatsApp API")
            raise WhatsAppError(f"Error sending message to WhatsApp: {e}") from e

        logger.debug(f"[WA] Status: {r.status_code} Response: {r.text}")

        if r.status_code >= 400:
            logger.error(f"[WA] WhatsApp API rejected the message status={r.status_code} body={r.text}")
            raise WhatsAppError(f"WhatsApp API error {r.status_code}: {r.text}")

        try:
            return r.json()
        except ValueError as e:
            raise WhatsAppError("WhatsApp API returned a non-JSON body") from e

    # =========================================================================
    # Text
    # =========================================================================
    def send_text(self, phone: str, body: str) -> WhatsAppSendResponse:
        to = format_phone_number(phone)
        logger.info(f"[WA] Sending text message to {to}")

        data = self._post_json({
            "messaging_product": "whatsapp",
            "to": to,
            "type": "text",
            "text": {"body": truncate_message(body)},
        })

        response = WhatsAppSendResponse.model_validate(data)
        logger.info(f"[WA] Message accepted to={to} wa_message_id={response.message_id}")
        return response

    # =========================================================================
    # Subscription handshake
    # =========================================================================
    def verify_webhook(self, mode: str | None, token: str | None, challenge: str | None) -> str | None:
        """
        Returns the challenge unchanged when mode is "subscribe" and the
        token matches WHATSAPP_VERIFY_TOKEN, otherwise None.
        """
        if mode == SUBSCRIBE_MODE and self.verify_token and token == self.verify_token:
            logger.info("[WA] Webhook verified")
            return challenge

        logger.warning(f"[WA] Webhook verification failed mode={mode}")
        return None


_whatsapp_client: WhatsAppClient | None = None


def get_whatsapp_client() -> WhatsAppClient:
    global _whatsapp_client
    if _whatsapp_client is None:
        _whatsapp_client = WhatsAppClient()
    return _whatsapp_client
