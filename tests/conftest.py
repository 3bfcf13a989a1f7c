"""Shared pytest fixtures for rhai-autodocs tests."""

from pathlib import Path

import pytest
from rhai_autodocs import InMemoryMetadataSource

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def metadata_path() -> Path:
    """Metadata dump in the format of `Engine::gen_fn_metadata_to_json`."""
    return FIXTURES / "metadata.json"


@pytest.fixture
def source():
    """
    In-memory registry with one module, `global.my_module`.

    Contains two `hello_world` overloads (only the first documented), an
    indexed `add` and an unindexed `dont_care`.

    Example:
        def test_names(source):
            docs = export(source)
            assert docs["global.my_module"].function("add")
    """
    registry = InMemoryMetadataSource()
    registry.module("global")
    registry.module("global.my_module", doc="My own module.")
    registry.register_function(
        "global.my_module",
        "hello_world",
        doc="A function that prints to stdout.\n\n# rhai-autodocs:index:1",
    )
    registry.register_function(
        "global.my_module", "hello_world", [("name", "String")]
    )
    registry.register_function(
        "global.my_module",
        "add",
        [("a", "int"), ("b", "int")],
        "int",
        doc="A function that adds two integers together.\n\n# rhai-autodocs:index:2",
    )
    registry.register_function(
        "global.my_module",
        "dont_care",
        doc="Documented, but without an index.",
    )
    return registry
