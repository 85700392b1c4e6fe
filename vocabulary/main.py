"""FastAPI application for the vocabulary spaced-repetition service."""

import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from vocabulary.config import get_scheduler_settings
from vocabulary.db import close_client, ensure_containers, get_settings, verify_connection
from vocabulary.routers import entries_router, review_router, sessions_router

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

API_TITLE = "Vocabulary SRS API"
API_VERSION = "1.0.0"


def _connect_cosmos() -> None:
    settings = get_settings()
    if not settings.is_configured():
        logger.warning("Cosmos DB not configured (set COSMOS_ENDPOINT or COSMOS_EMULATOR=true)")
        return

    if settings.create_containers:
        ensure_containers()

    if verify_connection():
        logger.info("Connected to Cosmos DB database %s", settings.database_name)
    else:
        logger.error("Cosmos DB connection failed, check endpoint and credentials")


@asynccontextmanager
async def lifespan(app: FastAPI):
    scheduler_settings = get_scheduler_settings()
    logger.info(
        "SM-2 scheduler: default ease factor %.2f, minimum %.2f, due limit %s",
        scheduler_settings.default_ease_factor,
        scheduler_settings.min_ease_factor,
        scheduler_settings.due_review_limit or "none",
    )
    _connect_cosmos()

    yield

    close_client()
    logger.info("Cosmos DB client released")


app = FastAPI(
    title=API_TITLE,
    description="Schedules vocabulary reviews with the SM-2 algorithm",
    version=API_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(entries_router)
app.include_router(review_router)
app.include_router(sessions_router)


@app.get("/")
async def root():
    """Service name, version and the main routes."""
    return {
        "name": API_TITLE,
        "version": API_VERSION,
        "endpoints": {
            "health": "/healthz",
            "entries": "/entries",
            "due": "/review/due",
            "review": "/review/{entry_id}",
            "history": "/review/{entry_id}/history",
            "sessions": "/sessions",
        },
    }


@app.get("/healthz")
async def healthz():
    return {"status": "healthy"}
