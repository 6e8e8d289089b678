"""Validation API: POST /api/validate plus shape discovery endpoints."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from shapeval.config import EngineSettings
from shapeval.deps import get_settings, get_validator_cache
from shapeval.errors import ParseError, ResourceError
from shapeval.resolver.extractor import build_fragment_names
from shapeval.resolver.loader import load_document
from shapeval.resolver.models import SpecificationDocument
from shapeval.validator import ValidationOutcome, validate_for_type, validate_payload
from shapeval.validator.cache import ValidatorCache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["validate"])


class ValidateRequest(BaseModel):
    """Request body for POST /api/validate."""

    shape: str = Field(..., min_length=1, description="Shape name, or option type when action is set")
    payload: Any = Field(..., description="JSON text or a JSON value to validate")
    action: str | None = Field(None, description="INSERT, UPDATE or DELETE")


class ShapeSummary(BaseModel):
    name: str
    composite: bool = False
    fragments: dict[str, str] = Field(default_factory=dict)


def _load(settings: EngineSettings) -> SpecificationDocument:
    try:
        return load_document(settings.document_path, search_paths=settings.search_paths or None)
    except (ResourceError, ParseError) as e:
        logger.error("Failed to load specification document: %s", e)
        raise HTTPException(status_code=500, detail=str(e)) from e


@router.post("/validate", response_model=ValidationOutcome)
async def validate(
    body: ValidateRequest,
    settings: EngineSettings = Depends(get_settings),
    cache: ValidatorCache | None = Depends(get_validator_cache),
) -> ValidationOutcome:
    """Validate a payload. With an action, the shape is routed like a business-object option type."""
    if body.action is not None:
        return validate_for_type(
            body.action, body.shape, body.payload, settings=settings, cache=cache
        )
    return validate_payload(body.shape, body.payload, settings=settings, cache=cache)


@router.get("/shapes", response_model=list[str])
async def list_shapes(settings: EngineSettings = Depends(get_settings)) -> list[str]:
    """Names of every shape declared by the configured document."""
    return _load(settings).shape_names()


@router.get("/shapes/{name}", response_model=ShapeSummary)
async def get_shape(
    name: str,
    settings: EngineSettings = Depends(get_settings),
) -> ShapeSummary:
    """Composition summary of one shape, with its fragment names."""
    document = _load(settings)
    shape = document.shapes.get(name)
    if shape is None:
        raise HTTPException(status_code=404, detail=f"Shape '{name}' not found")

    return ShapeSummary(
        name=name,
        composite=shape.is_composite,
        fragments=dict(build_fragment_names(shape, settings.components_prefix)),
    )
