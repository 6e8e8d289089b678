"""In-memory model of a resolved specification document."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ShapeDefinition(BaseModel):
    """One named (or inline) shape with its references already resolved.

    ``body`` is the fully resolved JSON Schema mapping. ``ref`` keeps the
    original ``$ref`` string when this shape was declared as a reference,
    since the resolved body no longer carries it.
    """

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    ref: str | None = None
    body: dict[str, Any] = Field(default_factory=dict)
    composition: list[ShapeDefinition] = Field(default_factory=list)

    @property
    def title(self) -> str | None:
        title = self.body.get("title")
        return title if isinstance(title, str) else None

    @property
    def properties(self) -> dict[str, Any] | None:
        return self.body.get("properties")

    @property
    def is_composite(self) -> bool:
        return bool(self.composition)

    def to_schema(self) -> dict[str, Any]:
        """Return a detached copy of the structural definition."""
        return copy.deepcopy(self.body)


class SpecificationDocument(BaseModel):
    """A loaded document: shape name -> ShapeDefinition."""

    model_config = ConfigDict(frozen=True)

    source: Path
    shapes: dict[str, ShapeDefinition] = Field(default_factory=dict)

    def shape_names(self) -> list[str]:
        return sorted(self.shapes)
