"""Data models for documentation extraction."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

OPERATORS = frozenset({"==", "!=", ">", ">=", "<", "<=", "in"})
GETTER_PREFIX = "get$"
SETTER_PREFIX = "set$"


def function_kind(name: str) -> str:
    """Classify a registered name as "op", "get", "set" or "fn"."""
    if name in OPERATORS:
        return "op"
    if name.startswith(GETTER_PREFIX):
        return "get"
    if name.startswith(SETTER_PREFIX):
        return "set"
    return "fn"


def display_name(name: str) -> str:
    """Strip the getter/setter prefix Rhai adds to property accessors."""
    for prefix in (GETTER_PREFIX, SETTER_PREFIX):
        if name.startswith(prefix):
            return name[len(prefix) :]
    return name


@dataclass(frozen=True)
class ExportConfig:
    """Options recognised by `export`."""

    include_standard_library: bool = False
    strict_indices: bool = False  # DuplicateIndexError on shared indices


@dataclass(frozen=True)
class Parameter:
    name: str = "_"
    type: str = "?"


@dataclass(frozen=True)
class Signature:
    """One call shape of a registered native function."""

    name: str
    params: tuple[Parameter, ...] = ()
    return_type: str | None = None

    @property
    def arity(self) -> int:
        return len(self.params)

    @property
    def key(self) -> tuple[tuple[str, ...], str | None]:
        """Identity used to collapse duplicate registrations."""
        return tuple(p.type for p in self.params), self.return_type

    def definition(self) -> str:
        """Pseudo-Rust definition, e.g. `fn add(a: int, b: int) -> int`."""
        kind = function_kind(self.name)
        if kind == "op":
            head = f"op {self.name}("
        elif kind in ("get", "set"):
            head = f"fn {kind} {display_name(self.name)}("
        else:
            head = f"fn {self.name}("

        params = ", ".join(f"{p.name}: {p.type}" for p in self.params)
        if self.return_type:
            return f"{head}{params}) -> {self.return_type}"
        return f"{head}{params})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "params": [{"name": p.name, "type": p.type} for p in self.params],
            "return_type": self.return_type,
            "definition": self.definition(),
        }


@dataclass(frozen=True)
class RawFunctionMetadata:
    """A single registered native function, as read from the engine."""

    name: str  # scripting-visible, repeats across overloads
    signature: Signature
    module: str  # "global" | "global.my_module"
    doc: str | None = None  # doc comment with comment markers removed
    position: int = 0  # registration order within the module


@dataclass(frozen=True)
class RawTypeMetadata:
    name: str  # display name
    module: str
    type_name: str = ""  # native type name
    doc: str | None = None


@dataclass(frozen=True)
class RawModule:
    path: str
    doc: str | None = None
    functions: tuple[RawFunctionMetadata, ...] = ()
    types: tuple[RawTypeMetadata, ...] = ()
    standard: bool = False  # provided by a built-in package


@dataclass(frozen=True)
class RegistrySnapshot:
    """Immutable copy of an engine registry, taken once per export."""

    modules: tuple[RawModule, ...] = ()

    def module(self, path: str) -> RawModule | None:
        for m in self.modules:
            if m.path == path:
                return m
        return None


@dataclass(frozen=True)
class Directive:
    """An `# rhai-autodocs:index:<n>` ordering directive."""

    index: int
    line: str  # source line, kept for error messages


@dataclass(frozen=True)
class Section:
    """A heading line (None for the preamble) and the lines below it."""

    heading: str | None
    lines: tuple[str, ...] = ()

    @property
    def title(self) -> str | None:
        if self.heading is None:
            return None
        return self.heading.strip().lstrip("#").strip()

    @property
    def level(self) -> int:
        if self.heading is None:
            return 0
        heading = self.heading.strip()
        return len(heading) - len(heading.lstrip("#"))

    @property
    def body(self) -> str:
        return "\n".join(self.lines)


@dataclass(frozen=True)
class SectionedText:
    sections: tuple[Section, ...] = ()

    @property
    def preamble(self) -> str:
        if self.sections and self.sections[0].heading is None:
            return self.sections[0].body
        return ""

    def join(self) -> str:
        """Rebuild the text the sections were split from."""
        lines: list[str] = []
        for section in self.sections:
            if section.heading is not None:
                lines.append(section.heading)
            lines.extend(section.lines)
        return "\n".join(lines)

    def is_empty(self) -> bool:
        return not self.join().strip()


@dataclass(frozen=True)
class MergedFunction:
    """All overloads sharing one exposed name within a module."""

    name: str
    module: str
    signatures: tuple[Signature, ...]
    position: int  # registration order of the first overload
    text: SectionedText | None = None
    directive: Directive | None = None

    @property
    def documented(self) -> bool:
        return self.directive is not None


@dataclass(frozen=True)
class DocumentedFunction:
    name: str  # unique within the module
    module: str
    index: int
    signatures: tuple[Signature, ...]
    text: SectionedText
    slug: str

    @property
    def kind(self) -> str:
        return function_kind(self.name)

    @property
    def display_name(self) -> str:
        return display_name(self.name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind,
            "index": self.index,
            "slug": self.slug,
            "signatures": [s.to_dict() for s in self.signatures],
            "sections": [
                {"heading": s.title, "level": s.level, "body": s.body}
                for s in self.text.sections
            ],
        }


@dataclass(frozen=True)
class DocumentedType:
    name: str
    module: str
    slug: str
    doc: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "slug": self.slug, "doc": self.doc}


@dataclass(frozen=True)
class GlossaryEntry:
    name: str
    kind: str  # "function" | "type"
    module: str
    slug: str

    @property
    def label(self) -> str:
        """Name as shown in headings, e.g. "get$size" -> "get size"."""
        if self.kind == "function" and function_kind(self.name) in ("get", "set"):
            return f"{function_kind(self.name)} {display_name(self.name)}"
        return self.name


@dataclass(frozen=True)
class ModuleDocumentation:
    path: str
    doc: str | None = None
    functions: tuple[DocumentedFunction, ...] = ()
    types: tuple[DocumentedType, ...] = ()
    glossary: tuple[GlossaryEntry, ...] = ()
    undocumented: tuple[MergedFunction, ...] = ()

    def function(self, name: str) -> DocumentedFunction | None:
        for f in self.functions:
            if f.name == name:
                return f
        return None

    def signatures(self, name: str) -> tuple[Signature, ...]:
        """Signatures of a merged name, documented or not."""
        documented = self.function(name)
        if documented is not None:
            return documented.signatures
        for merged in self.undocumented:
            if merged.name == name:
                return merged.signatures
        return ()

    def slug_for(self, name: str) -> str | None:
        for entry in self.glossary:
            if entry.name == name:
                return entry.slug
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "doc": self.doc,
            "functions": [f.to_dict() for f in self.functions],
            "types": [t.to_dict() for t in self.types],
            "glossary": {e.name: e.slug for e in self.glossary},
            "undocumented": [
                {"name": m.name, "signatures": [s.to_dict() for s in m.signatures]}
                for m in self.undocumented
            ],
        }


@dataclass(frozen=True)
class ExportedDocumentation:
    """Root collection returned by `export`, keyed by module path."""

    modules: Mapping[str, ModuleDocumentation] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self):
        if not isinstance(self.modules, MappingProxyType):
            object.__setattr__(self, "modules", MappingProxyType(dict(self.modules)))

    def __getitem__(self, path: str) -> ModuleDocumentation:
        return self.modules[path]

    def __iter__(self):
        return iter(self.modules)

    def __len__(self) -> int:
        return len(self.modules)

    @property
    def glossary(self) -> tuple[GlossaryEntry, ...]:
        entries: list[GlossaryEntry] = []
        for module in self.modules.values():
            entries.extend(module.glossary)
        return tuple(entries)

    def to_dict(self) -> dict[str, Any]:
        return {path: m.to_dict() for path, m in self.modules.items()}
