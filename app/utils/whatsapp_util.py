# file: app/utils/whatsapp_util.py

import logging
import re

logger = logging.getLogger("whatsapp_util")

MAX_MESSAGE_LENGTH = 4096


def format_phone_number(phone: str | None) -> str | None:
    """Strips spaces, dashes, parentheses and '+'."""
    if not phone:
        return phone
    return re.sub(r"[\s\-()+]", "", phone)


def truncate_message(text: str | None) -> str:
    if text is None:
        return ""
    if len(text) <= MAX_MESSAGE_LENGTH:
        return text

    logger.warning(f"[WhatsApp] Message truncated from {len(text)} to {MAX_MESSAGE_LENGTH} chars")
    return text[: MAX_MESSAGE_LENGTH - 3] + "..."
