# file: app/schemas/whatsapp.py
#
# WhatsApp Business webhook envelope and send acknowledgment.
# Unknown fields are ignored: Meta adds fields without notice.

import enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.messages import MessageType


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# ===========================================
# Inbound kinds
# ===========================================

class InboundKind(str, enum.Enum):
    TEXT = "text"
    IMAGE = "image"
    DOCUMENT = "document"
    AUDIO = "audio"
    VIDEO = "video"
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def from_type(cls, raw: Optional[str]) -> "InboundKind":
        try:
            kind = cls((raw or "").lower())
        except ValueError:
            return cls.UNRECOGNIZED
        return kind


MEDIA_PLACEHOLDERS = {
    InboundKind.IMAGE: "[Imagen recibida]",
    InboundKind.DOCUMENT: "[Documento recibido]",
    InboundKind.AUDIO: "[Audio recibido]",
    InboundKind.VIDEO: "[Video recibido]",
}

STORED_TYPES = {
    InboundKind.TEXT: MessageType.TEXT,
    InboundKind.IMAGE: MessageType.IMAGE,
    InboundKind.DOCUMENT: MessageType.DOCUMENT,
    InboundKind.AUDIO: MessageType.AUDIO,
    InboundKind.VIDEO: MessageType.VIDEO,
}


# ===========================================
# Webhook envelope
# ===========================================

class Profile(_Lenient):
    name: Optional[str] = None


class Contact(_Lenient):
    profile: Optional[Profile] = None
    wa_id: Optional[str] = None


class Metadata(_Lenient):
    display_phone_number: Optional[str] = None
    phone_number_id: Optional[str] = None


class TextBody(_Lenient):
    body: Optional[str] = None


class MediaBody(_Lenient):
    id: Optional[str] = None
    mime_type: Optional[str] = None
    sha256: Optional[str] = None
    caption: Optional[str] = None


class IncomingMessage(_Lenient):
    from_: Optional[str] = Field(None, alias="from")
    id: Optional[str] = None
    timestamp: Optional[str] = None
    type: Optional[str] = None
    text: Optional[TextBody] = None
    image: Optional[MediaBody] = None
    document: Optional[MediaBody] = None
    audio: Optional[MediaBody] = None
    video: Optional[MediaBody] = None

    @property
    def kind(self) -> InboundKind:
        return InboundKind.from_type(self.type)


class StatusUpdate(_Lenient):
    id: Optional[str] = None
    status: Optional[str] = None
    timestamp: Optional[str] = None
    recipient_id: Optional[str] = None


class Value(_Lenient):
    messaging_product: Optional[str] = None
    metadata: Optional[Metadata] = None
    contacts: List[Contact] = []
    messages: List[IncomingMessage] = []
    statuses: List[StatusUpdate] = []


class Change(_Lenient):
    value: Optional[Value] = None
    field: Optional[str] = None


class Entry(_Lenient):
    id: Optional[str] = None
    changes: List[Change] = []


class WebhookPayload(_Lenient):
    object: Optional[str] = None
    entry: List[Entry] = []


# ===========================================
# Send acknowledgment
# ===========================================

class SentContact(_Lenient):
    input: Optional[str] = None
    wa_id: Optional[str] = None


class SentMessage(_Lenient):
    id: Optional[str] = None


class WhatsAppSendResponse(_Lenient):
    messaging_product: Optional[str] = None
    contacts: List[SentContact] = []
    messages: List[SentMessage] = []

    @property
    def message_id(self) -> Optional[str]:
        if self.messages:
            return self.messages[0].id
        return None
