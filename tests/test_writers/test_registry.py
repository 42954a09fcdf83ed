"""Tests for the writer registry."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

import pytest

from abiheader.cdecl import CHeader
from abiheader.writers import (
    WriterBackend,
    get_default_writer,
    get_writer,
    get_writer_info,
    is_writer_available,
    list_writers,
    register_writer,
)


class MockWriter:
    """A mock writer for testing the registry."""

    def __init__(self, **kwargs: Any) -> None:
        self.kwargs = kwargs

    def write(self, header: CHeader) -> str:
        return ""

    @property
    def name(self) -> str:
        return "mock"

    @property
    def format_description(self) -> str:
        return "Mock writer for testing"


@pytest.fixture()
def reset_writer_registry() -> Generator[None, None, None]:
    """Save and restore global writer registry state around each test."""
    import abiheader.writers as w

    saved_registry = dict(w._WRITER_REGISTRY)
    saved_descriptions = dict(w._WRITER_DESCRIPTIONS)
    saved_default = w._DEFAULT_WRITER
    saved_loaded = w._WRITERS_LOADED

    w._WRITER_REGISTRY.clear()
    w._WRITER_DESCRIPTIONS.clear()
    w._DEFAULT_WRITER = None
    w._WRITERS_LOADED = True

    yield

    w._WRITER_REGISTRY.clear()
    w._WRITER_REGISTRY.update(saved_registry)
    w._WRITER_DESCRIPTIONS.clear()
    w._WRITER_DESCRIPTIONS.update(saved_descriptions)
    w._DEFAULT_WRITER = saved_default
    w._WRITERS_LOADED = saved_loaded


class TestWriterRegistry:
    """Registry mechanics with mock writers."""

    @pytest.fixture(autouse=True)
    def _isolate_registry(self, reset_writer_registry: None) -> None:
        """Use the reset fixture for every mock-based test."""

    def test_register_and_get_writer(self) -> None:
        register_writer("mock", MockWriter)
        assert isinstance(get_writer("mock"), MockWriter)

    def test_first_registered_is_default(self) -> None:
        register_writer("first", MockWriter)
        register_writer("second", MockWriter)
        assert get_default_writer() == "first"

    def test_explicit_default(self) -> None:
        register_writer("first", MockWriter)
        register_writer("second", MockWriter, is_default=True)
        assert get_default_writer() == "second"

    def test_duplicate_registration_raises(self) -> None:
        register_writer("mock", MockWriter)
        with pytest.raises(ValueError, match="Writer already registered"):
            register_writer("mock", MockWriter)

    def test_unknown_writer(self) -> None:
        register_writer("mock", MockWriter)
        with pytest.raises(ValueError, match="Unknown writer: 'nope'. Available: mock"):
            get_writer("nope")

    def test_no_writers(self) -> None:
        with pytest.raises(ValueError, match="No writers available"):
            get_writer()

    def test_kwargs_forwarded(self) -> None:
        register_writer("mock", MockWriter)
        writer = get_writer("mock", foo=1)
        assert isinstance(writer, MockWriter)
        assert writer.kwargs == {"foo": 1}

    def test_description_from_docstring(self) -> None:
        register_writer("mock", MockWriter)
        info = get_writer_info()
        assert info == [{"name": "mock", "description": "A mock writer for testing the registry.", "is_default": True}]


class TestBuiltinWriters:
    def test_c_and_json_registered(self) -> None:
        names = list_writers()
        assert "c" in names
        assert "json" in names

    def test_c_is_default(self) -> None:
        assert get_default_writer() == "c"

    def test_is_writer_available(self) -> None:
        assert is_writer_available("c")
        assert not is_writer_available("cobol")

    def test_instances_satisfy_protocol(self) -> None:
        for name in list_writers():
            assert isinstance(get_writer(name), WriterBackend)
