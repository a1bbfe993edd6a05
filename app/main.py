import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1 import api_router
from app.core.exceptions import register_exception_handlers
from app.core.logging import setup_logging
from app.core.settings import settings
from app.db.base import Base
from app.db.session import engine
from app.db import models_registry  # noqa: F401  registers every model on Base.metadata

logger = logging.getLogger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()

    if settings.DB_CREATE_TABLES:
        Base.metadata.create_all(bind=engine)
        logger.info("[Startup] Database tables ensured")

    logger.info(f"[Startup] {settings.BUSINESS_NAME} WhatsApp bot ready")
    yield


app = FastAPI(title="WhatsApp Bot API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.split_csv(settings.CORS_ALLOWED_ORIGINS),
    allow_methods=settings.split_csv(settings.CORS_ALLOWED_METHODS),
    allow_headers=settings.split_csv(settings.CORS_ALLOWED_HEADERS),
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
)

register_exception_handlers(app)

app.include_router(api_router, prefix="/api")


@app.get("/health")
def health():
    return {"status": "ok"}
