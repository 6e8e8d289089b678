"""Engine settings and logging setup."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_DOCUMENT_PATH = "schemas/openapi.yaml"
COMPONENTS_PREFIX = "#/components/schemas/"
DELETE_BASE_SCHEMA = "ObjectInputBaseSchema"

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Directory holding the bundled schemas/ folder
PACKAGE_DIR = Path(__file__).resolve().parent


class EngineSettings(BaseModel):
    """Runtime options for the validation engine."""

    document_path: str = DEFAULT_DOCUMENT_PATH
    search_paths: list[str] = Field(default_factory=list)
    components_prefix: str = COMPONENTS_PREFIX
    delete_base_schema: str = DELETE_BASE_SCHEMA
    cache_validators: bool = False
    elaborate_nested: bool = False
    dev_mode: bool = False


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").lower() in ("1", "true", "yes")


def load_settings() -> EngineSettings:
    """Load settings from the options file or fall back to the environment."""
    opts_path = os.environ.get("SHAPEVAL_OPTIONS_PATH", "/data/options.json")
    if Path(opts_path).exists():
        return EngineSettings.model_validate(json.loads(Path(opts_path).read_text()))

    search_paths = os.environ.get("SHAPEVAL_SEARCH_PATHS", "")
    return EngineSettings(
        document_path=os.environ.get("SHAPEVAL_DOCUMENT_PATH", DEFAULT_DOCUMENT_PATH),
        search_paths=[p for p in search_paths.split(os.pathsep) if p],
        components_prefix=os.environ.get("SHAPEVAL_COMPONENTS_PREFIX", COMPONENTS_PREFIX),
        delete_base_schema=os.environ.get("SHAPEVAL_DELETE_BASE_SCHEMA", DELETE_BASE_SCHEMA),
        cache_validators=_env_flag("SHAPEVAL_CACHE_VALIDATORS"),
        elaborate_nested=_env_flag("SHAPEVAL_ELABORATE_NESTED"),
        dev_mode=_env_flag("SHAPEVAL_DEV_MODE"),
    )


def configure_logging(settings: EngineSettings) -> None:
    """Configure root logging: DEBUG in dev mode, INFO otherwise."""
    log_level = logging.DEBUG if settings.dev_mode else logging.INFO
    logging.basicConfig(level=log_level, format=LOG_FORMAT)
