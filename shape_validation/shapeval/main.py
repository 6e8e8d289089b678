"""FastAPI application -- shapeval entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

import shapeval.deps as deps
from shapeval.api.validate import router as validate_router
from shapeval.config import configure_logging, load_settings
from shapeval.validator.cache import ValidatorCache

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: load settings and set up the validator cache."""
    settings = load_settings()
    configure_logging(settings)

    logger.info(
        "shapeval starting with document %s (cache: %s)",
        settings.document_path,
        settings.cache_validators,
    )

    deps._settings = settings
    deps._validator_cache = ValidatorCache() if settings.cache_validators else None

    yield

    if deps._validator_cache is not None:
        deps._validator_cache.clear()
    deps._settings = None
    deps._validator_cache = None


app = FastAPI(
    title="shapeval",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(validate_router)
