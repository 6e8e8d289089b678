"""Shared test fixtures and configuration."""

import sys
from pathlib import Path

# Add shape_validation/ to Python path so `from shapeval.xxx` imports work
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "shape_validation"))

import pytest

from shapeval.config import EngineSettings

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def category_doc_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "category.yaml"


@pytest.fixture
def category_settings(category_doc_path: Path) -> EngineSettings:
    """Settings pointing the pipeline at the Category fixture document."""
    return EngineSettings(document_path=str(category_doc_path))
