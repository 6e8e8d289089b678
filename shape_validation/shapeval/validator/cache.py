"""Opt-in cache of compiled validators keyed by document, shape and component prefix."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, Mapping

from shapeval.config import COMPONENTS_PREFIX
from shapeval.validator.compiler import ValidatorHandle

logger = logging.getLogger(__name__)

CacheEntry = tuple[ValidatorHandle, Mapping[str, str]]


class ValidatorCache:
    """Thread-safe store of (validator handle, fragment names) per (document, shape, prefix).

    The component prefix is part of the key because it decides the fragment
    names stored alongside the handle.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str, str], CacheEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(
        self,
        document: Path,
        shape_name: str,
        components_prefix: str = COMPONENTS_PREFIX,
    ) -> CacheEntry | None:
        with self._lock:
            return self._entries.get((str(document), shape_name, components_prefix))

    def get_or_compile(
        self,
        document: Path,
        shape_name: str,
        build: Callable[[], CacheEntry],
        components_prefix: str = COMPONENTS_PREFIX,
    ) -> CacheEntry:
        """Return the cached entry, building and storing it on a miss.

        ``build`` runs outside the lock; errors it raises are not cached.
        """
        key = (str(document), shape_name, components_prefix)
        with self._lock:
            cached = self._entries.get(key)
        if cached is not None:
            return cached

        entry = build()
        with self._lock:
            stored = self._entries.setdefault(key, entry)
        logger.debug("Cached validator for %s in %s", shape_name, document)
        return stored

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
