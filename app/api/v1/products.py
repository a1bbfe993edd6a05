# file: app/api/v1/products.py

import logging
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.products import ProductCreate, ProductRead, ProductUpdate
from app.services import products_service

router = APIRouter()
logger = logging.getLogger("products_api")


@router.post("", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    logger.info(f"[ProductsAPI] Create product name={payload.name!r}")
    return products_service.create_product(db, payload)


@router.get("", response_model=list[ProductRead])
def list_products(db: Session = Depends(get_db)):
    return products_service.list_products(db)


@router.get("/active", response_model=list[ProductRead])
def list_active_products(db: Session = Depends(get_db)):
    return products_service.list_active_products(db)


@router.get("/search", response_model=list[ProductRead])
def search_products(
    name: str = Query(..., description="Part of the product name, case-insensitive"),
    db: Session = Depends(get_db),
):
    logger.info(f"[ProductsAPI] Search name={name!r}")
    return products_service.search_products(db, name)


@router.get("/categories", response_model=list[str])
def list_categories(db: Session = Depends(get_db)):
    return products_service.list_categories(db)


@router.get("/category/{category}", response_model=list[ProductRead])
def list_products_by_category(category: str, db: Session = Depends(get_db)):
    return products_service.list_products_by_category(db, category)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(product_id: str, db: Session = Depends(get_db)):
    return products_service.get_product(db, product_id)


@router.put("/{product_id}", response_model=ProductRead)
def update_product(product_id: str, payload: ProductUpdate, db: Session = Depends(get_db)):
    logger.info(f"[ProductsAPI] Update product_id={product_id}")
    return products_service.update_product(db, product_id, payload)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(product_id: str, db: Session = Depends(get_db)):
    logger.info(f"[ProductsAPI] Delete product_id={product_id}")
    products_service.delete_product(db, product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
