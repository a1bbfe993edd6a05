# Imports every model so Base.metadata knows all tables (alembic, create_all).

from app.models.customers import Customer  # noqa: F401
from app.models.conversations import Conversation  # noqa: F401
from app.models.messages import Message  # noqa: F401
from app.models.products import Product  # noqa: F401
