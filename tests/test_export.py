"""Tests for building the documentation model."""

import json
from types import MappingProxyType

import pytest
from rhai_autodocs import (
    ConflictingDirectiveError,
    DuplicateIndexError,
    ExportConfig,
    InMemoryMetadataSource,
    RegistryError,
    export,
)
from rhai_autodocs.builder import slugify
from rhai_autodocs.sources import JsonMetadataSource


def _indexed(index: int, text: str = "Documented.") -> str:
    return f"{text}\n# rhai-autodocs:index:{index}"


class TestScenario:
    def test_overloads_merge_into_one_entry(self, source):
        module = export(source)["global.my_module"]
        hello = module.function("hello_world")

        assert hello is not None
        assert hello.index == 1
        assert [s.definition() for s in hello.signatures] == [
            "fn hello_world()",
            "fn hello_world(name: String)",
        ]
        assert hello.text.join() == "A function that prints to stdout.\n"

    def test_order_and_exclusion(self, source):
        module = export(source)["global.my_module"]
        assert [f.name for f in module.functions] == ["hello_world", "add"]
        assert module.function("dont_care") is None

    def test_undocumented_signatures_remain_queryable(self, source):
        module = export(source)["global.my_module"]
        assert [m.name for m in module.undocumented] == ["dont_care"]
        assert [s.definition() for s in module.signatures("dont_care")] == [
            "fn dont_care()"
        ]
        assert len(module.signatures("hello_world")) == 2
        assert module.signatures("missing") == ()

    def test_empty_modules_are_kept(self, source):
        docs = export(source)
        assert "global" in docs
        assert docs["global"].functions == ()

    def test_module_doc(self, source):
        assert export(source)["global.my_module"].doc == "My own module."


class TestOrdering:
    def test_sorted_by_index(self):
        source = InMemoryMetadataSource()
        source.register_function("global", "c", doc=_indexed(3))
        source.register_function("global", "a", doc=_indexed(1))
        source.register_function("global", "b", doc=_indexed(2))
        assert [f.name for f in export(source)["global"].functions] == ["a", "b", "c"]

    def test_ties_keep_registration_order(self):
        source = InMemoryMetadataSource()
        for name in ["zeta", "alpha", "mid"]:
            source.register_function("global", name, doc=_indexed(5))
        source.register_function("global", "first", doc=_indexed(0))
        names = [f.name for f in export(source)["global"].functions]
        assert names == ["first", "zeta", "alpha", "mid"]

    def test_tie_order_uses_first_overload(self):
        source = InMemoryMetadataSource()
        source.register_function("global", "b")
        source.register_function("global", "a", doc=_indexed(1))
        source.register_function("global", "b", [("x", "int")], doc=_indexed(1))
        names = [f.name for f in export(source)["global"].functions]
        assert names == ["b", "a"]

    def test_strict_indices(self):
        source = InMemoryMetadataSource()
        source.register_function("global", "a", doc=_indexed(1))
        source.register_function("global", "b", doc=_indexed(1))

        assert len(export(source)["global"].functions) == 2
        with pytest.raises(DuplicateIndexError) as exc:
            export(source, ExportConfig(strict_indices=True))
        assert exc.value.index == 1
        assert exc.value.functions == ["a", "b"]
        assert exc.value.module == "global"


class TestGlossary:
    def test_slugify(self):
        assert slugify("global.my_module", "add") == "global-my_module-add"
        assert slugify("global", "get$size") == "global-get-size"
        assert slugify("global", "==") == "global-op-3d-3d"
        assert slugify("global", "!=") != slugify("global", "==")

    def test_entries(self):
        source = InMemoryMetadataSource()
        source.register_function("global.app", "run", doc=_indexed(1))
        source.register_function("global.app", "skip")
        source.register_type("global.app", "Cache", doc="A cache.")
        module = export(source)["global.app"]

        assert [(e.name, e.kind, e.slug) for e in module.glossary] == [
            ("run", "function", "global-app-run"),
            ("Cache", "type", "global-app-cache"),
        ]
        assert module.slug_for("skip") is None
        assert module.types[0].doc == "A cache."

    def test_colliding_slugs(self):
        source = InMemoryMetadataSource()
        source.register_function("global", "cache", doc=_indexed(1))
        source.register_type("global", "Cache")
        module = export(source)["global"]
        assert module.slug_for("cache") == "global-cache"
        assert module.slug_for("Cache") == "global-cache-2"

    def test_export_glossary_spans_modules(self, source):
        source.register_type("global", "Engine")
        docs = export(source)
        assert [e.name for e in docs.glossary] == ["Engine", "hello_world", "add"]


class TestExport:
    def test_from_metadata_dump(self, metadata_path):
        docs = export(JsonMetadataSource.from_path(metadata_path))
        module = docs["global.my_module"]

        assert [f.name for f in module.functions] == ["hello_world", "add", "get$size"]
        assert module.function("get$size").display_name == "size"
        assert module.function("get$size").kind == "get"
        assert [s.title for s in module.function("add").text.sections] == [
            None,
            "Example",
        ]
        assert docs["global"].function("print_all").signatures[0].definition() == (
            "fn print_all(values: Array)"
        )

    def test_conflict_propagates(self):
        source = InMemoryMetadataSource()
        source.register_function("global", "f", doc=_indexed(1))
        source.register_function("global", "f", [("x", "int")], doc=_indexed(2))
        with pytest.raises(ConflictingDirectiveError):
            export(source)

    def test_registry_error_propagates(self):
        with pytest.raises(RegistryError):
            export(object())

    def test_standard_library_flag(self):
        source = InMemoryMetadataSource()
        source.module("global.math", standard=True)
        assert "global.math" not in export(source)
        assert "global.math" in export(
            source, ExportConfig(include_standard_library=True)
        )

    def test_export_is_read_only(self, source):
        docs = export(source)
        assert isinstance(docs.modules, MappingProxyType)
        with pytest.raises(TypeError):
            docs.modules["new"] = docs["global"]

    def test_repeated_exports_are_equal(self, source):
        assert export(source).to_dict() == export(source).to_dict()

    def test_to_dict_is_json_serialisable(self, source):
        data = json.loads(json.dumps(export(source).to_dict()))
        module = data["global.my_module"]
        assert [f["name"] for f in module["functions"]] == ["hello_world", "add"]
        assert module["glossary"] == {
            "hello_world": "global-my_module-hello_world",
            "add": "global-my_module-add",
        }
        assert module["undocumented"][0]["name"] == "dont_care"
