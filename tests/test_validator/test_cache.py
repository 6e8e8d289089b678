"""Tests for the compiled-validator cache."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from shapeval.errors import CompileError
from shapeval.resolver.loader import load_document
from shapeval.validator.cache import CacheEntry, ValidatorCache
from shapeval.validator.compiler import compile_shape


def _entry(doc: Path, name: str) -> CacheEntry:
    shape = load_document(doc).shapes[name]
    return compile_shape(shape), {}


def test_builds_once_per_key(category_doc_path: Path) -> None:
    cache = ValidatorCache()
    calls: list[str] = []

    def build() -> CacheEntry:
        calls.append("built")
        return _entry(category_doc_path, "Plain")

    first = cache.get_or_compile(category_doc_path, "Plain", build)
    second = cache.get_or_compile(category_doc_path, "Plain", build)
    assert first is second
    assert calls == ["built"]
    assert cache.get(category_doc_path, "Plain") is first


def test_keys_include_shape_name(category_doc_path: Path) -> None:
    cache = ValidatorCache()
    cache.get_or_compile(category_doc_path, "Plain", lambda: _entry(category_doc_path, "Plain"))
    cache.get_or_compile(category_doc_path, "Category", lambda: _entry(category_doc_path, "Category"))
    assert len(cache) == 2
    assert cache.get(category_doc_path, "Missing") is None


def test_build_errors_propagate_and_are_not_stored(category_doc_path: Path) -> None:
    cache = ValidatorCache()
    with pytest.raises(CompileError):
        cache.get_or_compile(category_doc_path, "Broken", lambda: _entry(category_doc_path, "Broken"))
    assert len(cache) == 0


def test_clear(category_doc_path: Path) -> None:
    cache = ValidatorCache()
    cache.get_or_compile(category_doc_path, "Plain", lambda: _entry(category_doc_path, "Plain"))
    cache.clear()
    assert len(cache) == 0


def test_concurrent_callers_share_one_entry(category_doc_path: Path) -> None:
    cache = ValidatorCache()
    results: list[CacheEntry] = []

    def worker() -> None:
        results.append(
            cache.get_or_compile(category_doc_path, "Plain", lambda: _entry(category_doc_path, "Plain"))
        )

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(cache) == 1
    assert all(r is results[0] for r in results)


def test_keys_include_components_prefix(category_doc_path: Path) -> None:
    cache = ValidatorCache()
    handle = compile_shape(load_document(category_doc_path).shapes["Category"])
    default = cache.get_or_compile(
        category_doc_path, "Category", lambda: (handle, {"/allOf/0": "ObjectInputBaseSchema"})
    )
    custom = cache.get_or_compile(
        category_doc_path,
        "Category",
        lambda: (handle, {"/allOf/0": "#/components/schemas/ObjectInputBaseSchema"}),
        components_prefix="#/definitions/",
    )
    assert default is not custom
    assert len(cache) == 2
    assert cache.get(category_doc_path, "Category", "#/definitions/") is custom
