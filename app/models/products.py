from sqlalchemy import Column, String, Text, Boolean, DateTime, Integer, Numeric
from sqlalchemy.sql import func
import uuid
from app.db.base import Base


class Product(Base):
    __tablename__ = "products"

    product_id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String(100), nullable=True, index=True)
    stock = Column(Integer, nullable=False, default=0)
    sku = Column(String(50), nullable=True)
    image_url = Column(String(500), nullable=True)

    # Filter only: deleting a product is a hard delete
    active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
