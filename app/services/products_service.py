# file: app/services/products_service.py

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.models.products import Product
from app.schemas.products import ProductCreate, ProductUpdate

logger = logging.getLogger("products_service")


def create_product(db: Session, data: ProductCreate) -> Product:
    fields = data.model_dump()
    if fields.get("active") is None:
        fields["active"] = True

    product = Product(**fields)
    db.add(product)
    db.commit()
    db.refresh(product)

    logger.info(f"[Products] Created product_id={product.product_id} name={product.name!r}")
    return product


def get_product(db: Session, product_id: str) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product", product_id)
    return product


def list_products(db: Session) -> list[Product]:
    return db.query(Product).all()


def list_active_products(db: Session) -> list[Product]:
    return db.query(Product).filter(Product.active.is_(True)).all()


def update_product(db: Session, product_id: str, data: ProductUpdate) -> Product:
    product = get_product(db, product_id)

    for field, value in data.model_dump(exclude={"active"}).items():
        setattr(product, field, value)
    if data.active is not None:
        product.active = data.active

    db.commit()
    db.refresh(product)

    logger.info(f"[Products] Updated product_id={product_id}")
    return product


def delete_product(db: Session, product_id: str) -> None:
    product = get_product(db, product_id)

    db.delete(product)
    db.commit()

    logger.info(f"[Products] Deleted product_id={product_id}")


def search_products(db: Session, name: str) -> list[Product]:
    pattern = f"%{name.lower()}%"
    return (
        db.query(Product)
        .filter(func.lower(Product.name).like(pattern), Product.active.is_(True))
        .all()
    )


def list_products_by_category(db: Session, category: str) -> list[Product]:
    return (
        db.query(Product)
        .filter(Product.category == category, Product.active.is_(True))
        .all()
    )


def list_categories(db: Session) -> list[str]:
    rows = (
        db.query(Product.category)
        .filter(Product.active.is_(True), Product.category.isnot(None))
        .distinct()
        .order_by(Product.category)
        .all()
    )
    return [row[0] for row in rows]
