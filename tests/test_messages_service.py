"""Message and customer persistence helpers."""

import pytest

from app.core.exceptions import NotFoundError
from app.models.messages import MessageDirection, MessageStatus, MessageType
from app.services.conversations_service import (
    get_active_conversation,
    get_or_create_active_conversation,
    update_conversation_topic,
)
from app.services.customers_service import get_or_create_customer
from app.services.messages_service import (
    create_inbound_message,
    create_outbound_message,
    list_messages,
    update_message_status,
    update_whatsapp_message_id,
)


@pytest.fixture
def conversation(db):
    customer = get_or_create_customer(db, "51900000001", "Luis")
    return get_or_create_active_conversation(db, customer)


class TestCustomers:

    def test_existing_customer_is_reused_and_profile_refreshed(self, db):
        first = get_or_create_customer(db, "51900000002", "Old name")
        before = first.last_interaction

        again = get_or_create_customer(db, "51900000002", "New name")

        assert again.customer_id == first.customer_id
        assert again.profile_name == "New name"
        assert again.last_interaction >= before

    def test_missing_profile_name_keeps_previous(self, db):
        get_or_create_customer(db, "51900000003", "Rosa")
        again = get_or_create_customer(db, "51900000003", None)
        assert again.profile_name == "Rosa"


class TestConversations:

    def test_get_or_create_reuses_active(self, db, conversation):
        again = get_or_create_active_conversation(db, conversation.customer)
        assert again.conversation_id == conversation.conversation_id

    def test_no_active_conversation(self, db):
        assert get_active_conversation(db, "no-such-customer") is None

    def test_topic_on_missing_conversation(self, db):
        with pytest.raises(NotFoundError):
            update_conversation_topic(db, "missing", "x")


class TestMessages:

    def test_inbound_defaults(self, db, conversation):
        msg = create_inbound_message(db, conversation, "wamid.1", "Hola", "51900000001")

        assert msg.direction == MessageDirection.INBOUND
        assert msg.status == MessageStatus.DELIVERED
        assert msg.type == MessageType.TEXT
        assert msg.sent_at is not None

    def test_outbound_defaults(self, db, conversation):
        msg = create_outbound_message(db, conversation, "Respuesta", "51900000001")

        assert msg.direction == MessageDirection.OUTBOUND
        assert msg.status == MessageStatus.SENT
        assert msg.whatsapp_message_id is None
        assert msg.error_message is None

    def test_list_is_ordered_by_sent_at(self, db, conversation):
        a = create_inbound_message(db, conversation, "wamid.a", "uno", "51900000001")
        b = create_outbound_message(db, conversation, "dos", "51900000001")
        c = create_inbound_message(db, conversation, "wamid.c", "tres", "51900000001")

        ids = [m.message_id for m in list_messages(db, conversation.conversation_id)]
        assert ids == [a.message_id, b.message_id, c.message_id]

    def test_list_unknown_conversation(self, db):
        with pytest.raises(NotFoundError):
            list_messages(db, "missing")

    def test_status_transitions_stamp_timestamps(self, db, conversation):
        msg = create_outbound_message(db, conversation, "Respuesta", "51900000001")

        delivered = update_message_status(db, msg.message_id, MessageStatus.DELIVERED)
        assert delivered.delivered_at is not None
        assert delivered.read_at is None

        read = update_message_status(db, msg.message_id, MessageStatus.READ)
        assert read.status == MessageStatus.READ
        assert read.read_at is not None

    def test_update_status_unknown_message(self, db):
        with pytest.raises(NotFoundError):
            update_message_status(db, "missing", MessageStatus.FAILED)

    def test_attach_external_id(self, db, conversation):
        msg = create_outbound_message(db, conversation, "Respuesta", "51900000001")

        updated = update_whatsapp_message_id(db, msg.message_id, "wamid.out")
        assert updated.whatsapp_message_id == "wamid.out"

        with pytest.raises(NotFoundError):
            update_whatsapp_message_id(db, "missing", "wamid.x")
