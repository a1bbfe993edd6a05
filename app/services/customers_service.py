# file: app/services/customers_service.py

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.models.customers import Customer

logger = logging.getLogger("customers_service")


def get_customer_by_phone(db: Session, phone: str) -> Customer | None:
    return db.query(Customer).filter(Customer.phone_number == phone).first()


def create_customer(db: Session, phone: str, profile_name: str | None = None) -> Customer:
    customer = Customer(
        phone_number=phone,
        profile_name=profile_name,
        last_interaction=datetime.now(timezone.utc),
    )
    db.add(customer)
    db.commit()
    db.refresh(customer)

    logger.info(f"[Customers] Created customer_id={customer.customer_id} phone={phone}")
    return customer


def touch_customer(db: Session, customer: Customer, profile_name: str | None = None) -> Customer:
    """
    Refreshes last_interaction and, when WhatsApp sends a new profile
    name, keeps it.
    """
    customer.last_interaction = datetime.now(timezone.utc)
    if profile_name and profile_name != customer.profile_name:
        customer.profile_name = profile_name

    db.commit()
    db.refresh(customer)
    return customer


def get_or_create_customer(db: Session, phone: str, profile_name: str | None = None) -> Customer:
    """
    Look up by phone, else create.

    Check-then-act: two concurrent first messages from the same phone can
    race; the unique constraint on phone_number makes the loser fail.
    """
    customer = get_customer_by_phone(db, phone)

    if customer is None:
        logger.info(f"[Customers] Unknown phone={phone}, creating customer")
        return create_customer(db, phone, profile_name)

    return touch_customer(db, customer, profile_name)
