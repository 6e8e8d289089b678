"""Shared FastAPI dependencies."""

from __future__ import annotations

from shapeval.config import EngineSettings
from shapeval.validator.cache import ValidatorCache

_settings: EngineSettings | None = None
_validator_cache: ValidatorCache | None = None


def get_settings() -> EngineSettings:
    """FastAPI dependency: return the shared EngineSettings."""
    assert _settings is not None, "EngineSettings not initialised"
    return _settings


def get_validator_cache() -> ValidatorCache | None:
    """FastAPI dependency: return the shared cache, or None when caching is off."""
    return _validator_cache
