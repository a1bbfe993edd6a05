# file: app/db/seed/seed.py

from decimal import Decimal

from sqlalchemy.orm import Session
from sqlalchemy import select

from app.db.base import Base
from app.db.session import engine
from app.db import models_registry  # noqa: F401
from app.models.products import Product


PRODUCTS = [
    {
        "name": "Audífonos Bluetooth X200",
        "description": "Audífonos inalámbricos con cancelación de ruido y 30 horas de batería.",
        "price": Decimal("149.90"),
        "category": "Audio",
        "stock": 25,
        "sku": "AUD-X200",
    },
    {
        "name": "Parlante Portátil Boom Mini",
        "description": "Parlante resistente al agua, ideal para exteriores.",
        "price": Decimal("89.50"),
        "category": "Audio",
        "stock": 40,
        "sku": "PAR-BOOM-MINI",
    },
    {
        "name": "Smartwatch Fit Pro",
        "description": "Reloj inteligente con monitor de ritmo cardíaco y GPS.",
        "price": Decimal("299.00"),
        "category": "Wearables",
        "stock": 12,
        "sku": "SW-FITPRO",
    },
    {
        "name": "Cargador Rápido 65W USB-C",
        "description": "Cargador GaN compatible con laptops y celulares.",
        "price": Decimal("79.90"),
        "category": "Accesorios",
        "stock": 60,
        "sku": "CAR-65W",
    },
    {
        "name": "Funda Antigolpes iPhone 15",
        "price": Decimal("35.00"),
        "category": "Accesorios",
        "stock": 0,
        "sku": "FUN-IP15",
        "active": False,
    },
]


def run_seed():
    print("🔧 Starting seed...")

    Base.metadata.create_all(bind=engine)

    with Session(engine) as db:
        for p in PRODUCTS:
            exists = db.scalars(
                select(Product).where(Product.sku == p["sku"])
            ).first()

            if exists:
                print(f"⚠️ Product {p['sku']} already exists, skipping...")
                continue

            product = Product(**p)
            db.add(product)

        db.commit()

    print("🎉 Seed finished!")


if __name__ == "__main__":
    run_seed()
