from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
from app.db.base import Base


class Customer(Base):
    __tablename__ = "customers"

    customer_id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    phone_number = Column(String(20), nullable=False, unique=True)
    name = Column(String(100), nullable=True)
    email = Column(String(100), nullable=True)
    profile_name = Column(String(100), nullable=True)  # WhatsApp profile

    last_interaction = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    conversations = relationship("Conversation", back_populates="customer", cascade="all, delete-orphan")
