from fastapi import APIRouter

# Webhooks
from .webhook import router as webhook_router

# CRUDs
from .products import router as products_router
from .conversations import router as conversations_router

api_router = APIRouter()

# ========== WhatsApp webhook ==========
api_router.include_router(webhook_router, prefix="/webhook", tags=["webhook"])

# ========== Catalog / conversations ===
api_router.include_router(products_router, prefix="/products", tags=["products"])
api_router.include_router(conversations_router, prefix="/conversations", tags=["conversations"])
