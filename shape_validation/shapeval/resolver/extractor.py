"""Shape extraction and composition-slot naming."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Mapping

from shapeval.config import COMPONENTS_PREFIX
from shapeval.errors import ShapeNotFoundError
from shapeval.resolver.models import ShapeDefinition, SpecificationDocument

logger = logging.getLogger(__name__)

INLINE_COMPONENT_NAME = "Inline Schema Component"

FragmentNameMap = Mapping[str, str]


def composition_pointer(index: int) -> str:
    """Schema pointer of composition slot ``index``.

    The executor keys nested failure reports with this same helper, so the
    two stay byte-identical.
    """
    return f"/allOf/{index}"


def fragment_name(member: ShapeDefinition, components_prefix: str = COMPONENTS_PREFIX) -> str:
    """Friendly name of one composition member: title, then reference name, then the inline literal."""
    if member.title:
        return member.title
    if member.ref and member.ref.startswith(components_prefix):
        return member.ref[len(components_prefix):]
    return INLINE_COMPONENT_NAME


def build_fragment_names(
    shape: ShapeDefinition,
    components_prefix: str = COMPONENTS_PREFIX,
) -> FragmentNameMap:
    """Map each composition slot pointer of ``shape`` to its friendly name."""
    names = {
        composition_pointer(index): fragment_name(member, components_prefix)
        for index, member in enumerate(shape.composition)
    }
    return MappingProxyType(names)


def extract_shape(
    document: SpecificationDocument,
    shape_name: str,
    *,
    components_prefix: str = COMPONENTS_PREFIX,
) -> tuple[ShapeDefinition, FragmentNameMap]:
    """Look up ``shape_name`` and build its fragment name map."""
    shape = document.shapes.get(shape_name)
    if shape is None:
        raise ShapeNotFoundError(shape_name)

    names = build_fragment_names(shape, components_prefix)
    logger.debug("Extracted shape %s with %d composition slots", shape_name, len(names))
    return shape, names
