"""Specification loader: read an OpenAPI-style document and resolve every $ref eagerly."""

from __future__ import annotations

import datetime
import logging
from pathlib import Path
from typing import Any, Sequence
from urllib.parse import unquote

from ruamel.yaml import YAML, YAMLError

from shapeval.config import PACKAGE_DIR
from shapeval.errors import ParseError, ResourceError
from shapeval.resolver.models import ShapeDefinition, SpecificationDocument

logger = logging.getLogger(__name__)


def locate_resource(
    path: str | Path,
    search_paths: Sequence[str | Path] | None = None,
) -> Path:
    """Find a logical resource path on disk.

    Absolute paths are used as-is. Relative paths are tried against each
    search root in order; the default roots are the package directory (which
    holds the bundled ``schemas/``) and the current working directory.
    """
    candidate = Path(path)
    if candidate.is_absolute():
        if candidate.is_file():
            return candidate.resolve()
        raise ResourceError(f"Specification resource not found: {candidate}")

    roots = [Path(p) for p in search_paths] if search_paths else [PACKAGE_DIR, Path.cwd()]
    for root in roots:
        resolved = root / candidate
        if resolved.is_file():
            return resolved.resolve()

    searched = ", ".join(str(r) for r in roots)
    raise ResourceError(f"Specification resource '{path}' not found (searched: {searched})")


def read_document(source: Path) -> Any:
    """Read and parse a YAML or JSON document."""
    try:
        text = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ResourceError(f"Failed to read specification resource {source}: {e}") from e

    yaml = YAML(typ="safe", pure=True)
    try:
        return yaml.load(text)
    except YAMLError as e:
        raise ParseError(f"Specification document {source} failed to parse: {e}") from e


def resolve_pointer(document: Any, pointer: str) -> Any:
    """Walk a JSON pointer (RFC 6901) through a parsed document.

    Raises LookupError when any segment is missing.
    """
    if pointer == "":
        return document
    if not pointer.startswith("/"):
        raise LookupError(f"Not a JSON pointer: {pointer!r}")

    node = document
    for raw_token in pointer[1:].split("/"):
        token = unquote(raw_token).replace("~1", "/").replace("~0", "~")
        if isinstance(node, dict):
            if token not in node:
                raise LookupError(token)
            node = node[token]
        elif isinstance(node, list):
            try:
                node = node[int(token)]
            except (ValueError, IndexError) as e:
                raise LookupError(token) from e
        else:
            raise LookupError(token)
    return node


class ReferenceResolver:
    """Replaces ``$ref`` nodes with their targets, across one or more files.

    Relative-file references (``common.yaml#/components/schemas/Base``) are
    resolved against the directory of the referring document. Sibling keys
    next to a ``$ref`` are laid over the resolved target.
    """

    def __init__(self, source: Path, root: Any) -> None:
        self._documents: dict[Path, Any] = {source: root}
        self._resolved: dict[tuple[Path, str], Any] = {}

    def _document(self, path: Path, ref: str) -> Any:
        if path not in self._documents:
            try:
                self._documents[path] = read_document(path)
            except ResourceError as e:
                raise ParseError(f"Unresolvable reference '{ref}': {e}") from e
        return self._documents[path]

    def _split(self, ref: str, base: Path) -> tuple[Path, str]:
        location, _, fragment = ref.partition("#")
        if not location:
            return base, fragment
        return (base.parent / unquote(location)).resolve(), fragment

    def target(self, ref: str, base: Path) -> tuple[Any, Path]:
        """Return the raw (unresolved) node a reference points at and its document."""
        path, pointer = self._split(ref, base)
        try:
            return resolve_pointer(self._document(path, ref), pointer), path
        except LookupError as e:
            raise ParseError(f"Unresolvable reference '{ref}' (missing segment {e})") from e

    def resolve(
        self,
        node: Any,
        base: Path,
        stack: tuple[tuple[Path, str], ...] = (),
        active: frozenset[int] = frozenset(),
    ) -> Any:
        if isinstance(node, (dict, list)):
            # YAML aliases can make a node contain itself
            if id(node) in active:
                raise ParseError(f"Circular alias detected in {base}")
            active = active | {id(node)}

        if isinstance(node, dict):
            ref = node.get("$ref")
            if isinstance(ref, str):
                key = self._split(ref, base)
                if key in stack:
                    raise ParseError(f"Circular reference detected: {ref}")
                if key not in self._resolved:
                    raw, target_base = self.target(ref, base)
                    if id(raw) in active:
                        raise ParseError(f"Circular reference detected: {ref}")
                    self._resolved[key] = self.resolve(raw, target_base, stack + (key,), active)
                resolved = self._resolved[key]

                siblings = {
                    str(k): self.resolve(v, base, stack, active)
                    for k, v in node.items()
                    if k != "$ref"
                }
                if siblings and isinstance(resolved, dict):
                    return {**resolved, **siblings}
                return resolved
            return {str(k): self.resolve(v, base, stack, active) for k, v in node.items()}

        if isinstance(node, list):
            return [self.resolve(item, base, stack, active) for item in node]

        if isinstance(node, (datetime.date, datetime.datetime)):
            return node.isoformat()

        return node

    def build_shape(self, name: str | None, node: Any, base: Path) -> ShapeDefinition:
        """Build a ShapeDefinition, keeping each composition member's original $ref."""
        body = self.resolve(node, base)
        if not isinstance(body, dict):
            label = name or "inline component"
            raise ParseError(f"Schema '{label}' is not a mapping")

        ref = node.get("$ref") if isinstance(node, dict) else None
        if not isinstance(ref, str):
            ref = None

        # Composition members are read from the raw node, where $ref strings survive
        raw, raw_base = node, base
        while isinstance(raw, dict) and isinstance(raw.get("$ref"), str):
            raw, raw_base = self.target(raw["$ref"], raw_base)

        composition: list[ShapeDefinition] = []
        members = raw.get("allOf") if isinstance(raw, dict) else None
        if isinstance(members, list):
            composition = [self.build_shape(None, member, raw_base) for member in members]

        return ShapeDefinition(name=name, ref=ref, body=body, composition=composition)


def load_document(
    path: str | Path,
    *,
    search_paths: Sequence[str | Path] | None = None,
) -> SpecificationDocument:
    """Load a specification document and resolve every shape it declares.

    Raises ResourceError when the document cannot be found or read, and
    ParseError when it is malformed or a reference cannot be resolved.
    """
    source = locate_resource(path, search_paths)
    root = read_document(source)

    if not isinstance(root, dict):
        raise ParseError(f"Specification document {source} must be a mapping at the top level")

    components = root.get("components")
    schemas = components.get("schemas") if isinstance(components, dict) else None
    if not isinstance(schemas, dict):
        raise ParseError(f"Specification document {source} loaded, but schema components are missing")

    resolver = ReferenceResolver(source, root)
    try:
        shapes = {
            str(name): resolver.build_shape(str(name), node, source)
            for name, node in schemas.items()
        }
    except RecursionError as e:
        raise ParseError(f"Specification document {source} is nested too deeply to resolve") from e

    logger.debug("Loaded %d shapes from %s", len(shapes), source)
    return SpecificationDocument(source=source, shapes=shapes)
