"""
Webhook pipeline: inbound message -> customer -> conversation -> persist
-> reply -> send -> persist.
"""

from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from app.core.exceptions import ResponderError, WhatsAppError
from app.models.conversations import Conversation, ConversationStatus
from app.models.customers import Customer
from app.models.messages import Message, MessageDirection, MessageStatus, MessageType
from app.services.conversations_service import close_conversation
from app.services.products_service import create_product
from app.schemas.products import ProductCreate
from app.services.webhook_service import FALLBACK_REPLY, process_webhook
from app.utils.whatsapp_util import MAX_MESSAGE_LENGTH

from tests.payloads import AI_REPLY, OUTBOUND_WA_ID, message_payload, text_payload

PHONE = "51987654321"


class TestFirstContact:
    """A phone number never seen before."""

    def test_creates_one_customer_and_one_active_conversation(self, db, whatsapp, responder):
        processed = process_webhook(db, text_payload(PHONE), whatsapp, responder)

        assert processed == 1
        customers = db.query(Customer).all()
        assert len(customers) == 1
        assert customers[0].phone_number == PHONE
        assert customers[0].profile_name == "Ana"
        assert customers[0].last_interaction is not None

        conversations = db.query(Conversation).all()
        assert len(conversations) == 1
        assert conversations[0].status == ConversationStatus.ACTIVE
        assert conversations[0].started_at is not None

    def test_persists_inbound_and_outbound_messages(self, db, whatsapp, responder):
        process_webhook(db, text_payload(PHONE, body="¿Tienen audífonos?"), whatsapp, responder)

        inbound = db.query(Message).filter(Message.direction == MessageDirection.INBOUND).one()
        assert inbound.content == "¿Tienen audífonos?"
        assert inbound.status == MessageStatus.DELIVERED
        assert inbound.type == MessageType.TEXT
        assert inbound.whatsapp_message_id == "wamid.inbound-1"
        assert inbound.sender_phone == PHONE

        outbound = db.query(Message).filter(Message.direction == MessageDirection.OUTBOUND).one()
        assert outbound.content == AI_REPLY
        assert outbound.status == MessageStatus.SENT
        assert outbound.recipient_phone == PHONE
        assert outbound.whatsapp_message_id == OUTBOUND_WA_ID
        assert outbound.error_message is None

        whatsapp.send_text.assert_called_once_with(PHONE, AI_REPLY)


class TestConversationReuse:

    def test_messages_from_same_phone_share_the_active_conversation(self, db, whatsapp, responder):
        whatsapp.send_text.return_value.messages = []

        for i in range(3):
            process_webhook(db, text_payload(PHONE, body=f"mensaje {i}", wa_id=f"wamid.in-{i}"), whatsapp, responder)

        assert db.query(Customer).count() == 1
        assert db.query(Conversation).count() == 1
        assert db.query(Message).count() == 6

    def test_closed_conversation_is_not_reused(self, db, whatsapp, responder):
        whatsapp.send_text.return_value.messages = []

        process_webhook(db, text_payload(PHONE, wa_id="wamid.a"), whatsapp, responder)
        first = db.query(Conversation).one()

        closed = close_conversation(db, first.conversation_id)
        assert closed.status == ConversationStatus.CLOSED
        assert closed.ended_at is not None

        process_webhook(db, text_payload(PHONE, wa_id="wamid.b"), whatsapp, responder)

        conversations = db.query(Conversation).all()
        assert len(conversations) == 2
        active = [c for c in conversations if c.status == ConversationStatus.ACTIVE]
        assert len(active) == 1
        assert active[0].conversation_id != first.conversation_id


class TestMessageKinds:

    def test_image_stores_placeholder_and_replies(self, db, whatsapp, responder):
        payload = message_payload(PHONE, {"type": "image", "image": {"id": "media-1", "mime_type": "image/jpeg"}})

        process_webhook(db, payload, whatsapp, responder)

        inbound = db.query(Message).filter(Message.direction == MessageDirection.INBOUND).one()
        assert inbound.content == "[Imagen recibida]"
        assert inbound.type == MessageType.IMAGE
        assert whatsapp.send_text.call_count == 1
        responder.generate_with_products.assert_called_once()
        assert responder.generate_with_products.call_args[0][0] == "[Imagen recibida]"

    def test_other_media_placeholders(self, db, whatsapp, responder):
        whatsapp.send_text.return_value.messages = []

        for i, kind in enumerate(["document", "audio", "video"]):
            process_webhook(db, message_payload(PHONE, {"type": kind, kind: {"id": "m"}}, wa_id=f"wamid.{i}"), whatsapp, responder)

        contents = {
            m.content
            for m in db.query(Message).filter(Message.direction == MessageDirection.INBOUND)
        }
        assert contents == {"[Documento recibido]", "[Audio recibido]", "[Video recibido]"}

    def test_blank_text_is_skipped(self, db, whatsapp, responder):
        processed = process_webhook(db, text_payload(PHONE, body="   "), whatsapp, responder)

        assert processed == 0
        assert db.query(Message).count() == 0
        assert db.query(Customer).count() == 0
        whatsapp.send_text.assert_not_called()

    def test_unrecognized_kind_is_skipped(self, db, whatsapp, responder):
        payload = message_payload(PHONE, {"type": "location", "location": {"latitude": -12.0, "longitude": -77.0}})

        processed = process_webhook(db, payload, whatsapp, responder)

        assert processed == 0
        assert db.query(Message).count() == 0
        whatsapp.send_text.assert_not_called()


class TestReplyGeneration:

    def test_catalog_context_is_passed_to_responder(self, db, whatsapp, responder):
        create_product(db, ProductCreate(name="Smartwatch Fit Pro", price="299.00", stock=3, category="Wearables"))
        create_product(db, ProductCreate(name="Producto oculto", price="1.00", stock=1, active=False))

        process_webhook(db, text_payload(PHONE), whatsapp, responder)

        _, context = responder.generate_with_products.call_args[0]
        assert "Smartwatch Fit Pro" in context
        assert "Precio: S/ 299.00" in context
        assert "Producto oculto" not in context

    def test_empty_catalog_uses_no_products_sentence(self, db, whatsapp, responder):
        process_webhook(db, text_payload(PHONE), whatsapp, responder)

        _, context = responder.generate_with_products.call_args[0]
        assert context == "No hay productos disponibles en este momento."

    def test_responder_failure_sends_fallback(self, db, whatsapp, responder):
        responder.generate_with_products.side_effect = ResponderError("Claude down")

        processed = process_webhook(db, text_payload(PHONE), whatsapp, responder)

        assert processed == 1
        whatsapp.send_text.assert_called_once_with(PHONE, FALLBACK_REPLY)
        outbound = db.query(Message).filter(Message.direction == MessageDirection.OUTBOUND).one()
        assert outbound.content == FALLBACK_REPLY


class TestSendFailures:

    def test_failed_send_still_persists_outbound(self, db, whatsapp, responder):
        whatsapp.send_text.side_effect = WhatsAppError("WhatsApp API error 401")

        process_webhook(db, text_payload(PHONE), whatsapp, responder)

        outbound = db.query(Message).filter(Message.direction == MessageDirection.OUTBOUND).one()
        assert outbound.status == MessageStatus.SENT
        assert outbound.whatsapp_message_id is None
        assert "401" in outbound.error_message

    def test_ack_without_message_id_leaves_external_id_empty(self, db, whatsapp, responder):
        whatsapp.send_text.return_value.messages = []

        process_webhook(db, text_payload(PHONE), whatsapp, responder)

        outbound = db.query(Message).filter(Message.direction == MessageDirection.OUTBOUND).one()
        assert outbound.whatsapp_message_id is None


class TestBatchIsolation:

    def test_one_failing_message_does_not_stop_the_rest(self, db, whatsapp, responder):
        whatsapp.send_text.return_value.messages = []
        payload = text_payload(PHONE, wa_id="wamid.dup")
        process_webhook(db, payload, whatsapp, responder)

        # redelivery of wamid.dup hits the unique constraint, wamid.new goes through
        value = payload["entry"][0]["changes"][0]["value"]
        value["messages"].append({
            "from": PHONE, "id": "wamid.new", "type": "text", "text": {"body": "otra"},
        })

        processed = process_webhook(db, payload, whatsapp, responder)

        assert processed == 1
        inbound_ids = {
            m.whatsapp_message_id
            for m in db.query(Message).filter(Message.direction == MessageDirection.INBOUND)
        }
        assert inbound_ids == {"wamid.dup", "wamid.new"}

    def test_empty_payload(self, db, whatsapp, responder):
        assert process_webhook(db, {}, whatsapp, responder) == 0
        assert process_webhook(db, {"object": "whatsapp_business_account", "entry": []}, whatsapp, responder) == 0


class TestStatusReceipts:

    def test_read_receipt_updates_outbound_message(self, db, whatsapp, responder):
        process_webhook(db, text_payload(PHONE), whatsapp, responder)

        receipt = {
            "object": "whatsapp_business_account",
            "entry": [{"changes": [{"value": {"statuses": [
                {"id": OUTBOUND_WA_ID, "status": "read", "timestamp": "1707500100", "recipient_id": PHONE},
            ]}}]}],
        }
        assert process_webhook(db, receipt, whatsapp, responder) == 0

        outbound = db.query(Message).filter(Message.whatsapp_message_id == OUTBOUND_WA_ID).one()
        assert outbound.status == MessageStatus.READ
        assert outbound.read_at is not None
        assert outbound.delivered_at is not None

    def test_receipt_for_unknown_message_is_ignored(self, db, whatsapp, responder):
        receipt = {"entry": [{"changes": [{"value": {"statuses": [{"id": "wamid.unknown", "status": "delivered"}]}}]}]}

        assert process_webhook(db, receipt, whatsapp, responder) == 0
        assert db.query(Message).count() == 0

    def test_out_of_order_receipts_never_move_status_back(self, db, whatsapp, responder):
        process_webhook(db, text_payload(PHONE), whatsapp, responder)

        for status in ("read", "delivered", "sent"):
            process_webhook(db, _receipt(OUTBOUND_WA_ID, status), whatsapp, responder)

        outbound = db.query(Message).filter(Message.whatsapp_message_id == OUTBOUND_WA_ID).one()
        assert outbound.status == MessageStatus.READ
        assert outbound.read_at is not None

    def test_failed_receipt_always_applies(self, db, whatsapp, responder):
        process_webhook(db, text_payload(PHONE), whatsapp, responder)

        process_webhook(db, _receipt(OUTBOUND_WA_ID, "delivered"), whatsapp, responder)
        process_webhook(db, _receipt(OUTBOUND_WA_ID, "failed"), whatsapp, responder)

        outbound = db.query(Message).filter(Message.whatsapp_message_id == OUTBOUND_WA_ID).one()
        assert outbound.status == MessageStatus.FAILED


def _receipt(wa_id, status):
    return {
        "object": "whatsapp_business_account",
        "entry": [{"changes": [{"value": {"statuses": [
            {"id": wa_id, "status": status, "timestamp": "1707500100", "recipient_id": PHONE},
        ]}}]}],
    }


class TestReplyEdgeCases:

    def test_catalog_query_failure_still_persists_outbound(self, db, whatsapp, responder):
        with patch(
            "app.services.webhook_service.list_active_products",
            side_effect=OperationalError("SELECT products", {}, Exception("connection lost")),
        ):
            processed = process_webhook(db, text_payload(PHONE), whatsapp, responder)

        assert processed == 1
        whatsapp.send_text.assert_called_once_with(PHONE, FALLBACK_REPLY)
        outbound = db.query(Message).filter(Message.direction == MessageDirection.OUTBOUND).one()
        assert outbound.content == FALLBACK_REPLY
        responder.generate_with_products.assert_not_called()

    def test_long_reply_is_stored_as_sent(self, db, whatsapp, responder):
        responder.generate_with_products.return_value.content = "a" * 5000

        process_webhook(db, text_payload(PHONE), whatsapp, responder)

        outbound = db.query(Message).filter(Message.direction == MessageDirection.OUTBOUND).one()
        assert len(outbound.content) == MAX_MESSAGE_LENGTH
        assert outbound.content.endswith("...")
