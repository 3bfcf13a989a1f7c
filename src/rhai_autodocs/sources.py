"""Metadata sources: where registered functions and types are read from.

The pipeline never talks to an engine directly. It asks a `MetadataSource`
for a `RegistrySnapshot` once per export:

    EngineMetadataSource   - a live engine exposing `gen_fn_metadata_to_json`
    JsonMetadataSource     - a metadata dump produced by that same call
    InMemoryMetadataSource - a hand-built registry, used by tests
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from .directives import strip_comment_markers
from .errors import AutodocsError, RegistryError
from .models import (
    ExportConfig,
    Parameter,
    RawFunctionMetadata,
    RawModule,
    RawTypeMetadata,
    RegistrySnapshot,
    Signature,
)

log = logging.getLogger(__name__)

ROOT_MODULE = "global"
ANONYMOUS_PREFIX = "anon$"


# ---------------------------------------------------------------------------
# Engine metadata schema (output of `Engine::gen_fn_metadata_to_json`)
# ---------------------------------------------------------------------------


class _MetadataModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FunctionMetadataModel(_MetadataModel):
    name: str
    namespace: str = "global"
    access: str = "public"
    num_params: int = 0
    params: list[dict[str, str]] | None = None
    signature: str = ""
    return_type: str | None = None
    doc_comments: list[str] | None = None


class CustomTypeModel(_MetadataModel):
    type_name: str
    display_name: str | None = None
    doc_comments: list[str] | None = None


class ModuleMetadataModel(_MetadataModel):
    doc: str | None = None
    functions: list[FunctionMetadataModel] | None = None
    modules: dict[str, ModuleMetadataModel] | None = None
    custom_types: list[CustomTypeModel] | None = None


ModuleMetadataModel.model_rebuild()


# ---------------------------------------------------------------------------
# Type names
# ---------------------------------------------------------------------------

_RESULT_WRAPPERS = [
    re.compile(r"^Result<(.*?),\s*Box<(?:rhai::)?EvalAltResult>>$"),
    re.compile(r"^EngineResult<(.*)>$"),
    re.compile(r"^(?:rhai::)?RhaiResultOf<(.*)>$"),
]

_TYPE_REPLACEMENTS = [
    (re.compile(r"\bVec<Dynamic>"), "Array"),
    (re.compile(r"\bVec<u8>"), "Blob"),
    (re.compile(r"\bBTreeMap<SmartString(?:<[^>]*>)?,\s*Dynamic>"), "Map"),
    (re.compile(r"Iterator<Item\s*=\s*"), "Iterator<"),
    (re.compile(r"\bDynamic\b"), "?"),
    (re.compile(r"\b(?:INT|i64)\b"), "int"),
    (re.compile(r"\b(?:FLOAT|f64)\b"), "float"),
    (re.compile(r"&str\b"), "String"),
    (re.compile(r"\bImmutableString\b"), "String"),
]


def remove_result(ty: str) -> str:
    """Remove the `Result` wrapper of a return type."""
    for pattern in _RESULT_WRAPPERS:
        match = pattern.match(ty)
        if match:
            return match.group(1).strip()
    return ty


def readable_type(ty: str) -> str:
    """Map a native Rust type name to the name a script author sees."""
    ty = ty.strip()
    ty = ty.removeprefix("&mut").strip()
    ty = remove_result(ty)
    ty = ty.removeprefix("&mut").strip()
    ty = re.sub(r"\b(?:\w+::)+", "", ty)
    for pattern, replacement in _TYPE_REPLACEMENTS:
        ty = pattern.sub(replacement, ty)
    return ty


# ---------------------------------------------------------------------------
# Conversion to the raw snapshot
# ---------------------------------------------------------------------------


def _convert_function(
    fn: FunctionMetadataModel, module: str, position: int
) -> RawFunctionMetadata:
    if fn.num_params and fn.params is None:
        raise RegistryError(
            f"{module}: function '{fn.name}' declares {fn.num_params} "
            "parameters but no parameter metadata"
        )

    params = []
    for i in range(fn.num_params):
        entry = fn.params[i] if i < len(fn.params) else {}
        param_type = entry.get("type")
        params.append(
            Parameter(
                name=entry.get("name", "_"),
                type=readable_type(param_type) if param_type else "?",
            )
        )

    return_type = readable_type(fn.return_type) if fn.return_type else None

    return RawFunctionMetadata(
        name=fn.name,
        signature=Signature(fn.name, tuple(params), return_type),
        module=module,
        doc=strip_comment_markers(fn.doc_comments),
        position=position,
    )


def _convert_module(
    path: str, metadata: ModuleMetadataModel, out: list[RawModule]
) -> None:
    functions = []
    for fn in metadata.functions or []:
        if fn.name.startswith(ANONYMOUS_PREFIX):
            log.debug("%s: skipping closure %s", path, fn.name)
            continue
        functions.append(_convert_function(fn, path, len(functions)))

    types = tuple(
        RawTypeMetadata(
            name=ct.display_name or readable_type(ct.type_name),
            module=path,
            type_name=ct.type_name,
            doc=strip_comment_markers(ct.doc_comments),
        )
        for ct in metadata.custom_types or []
    )

    doc = strip_comment_markers([metadata.doc]) if metadata.doc else None
    out.append(RawModule(path, doc, tuple(functions), types))

    for name, sub_module in (metadata.modules or {}).items():
        _convert_module(f"{path}.{name}", sub_module, out)


def snapshot_from_json(text: str | bytes) -> RegistrySnapshot:
    """Build a snapshot from Rhai's function metadata JSON.

    Raises:
        RegistryError: If the JSON is invalid or does not match the schema.
    """
    try:
        metadata = ModuleMetadataModel.model_validate_json(text)
    except ValidationError as e:
        raise RegistryError(f"Failed to parse engine metadata: {e}") from e

    modules: list[RawModule] = []
    _convert_module(ROOT_MODULE, metadata, modules)
    return RegistrySnapshot(tuple(modules))


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


class MetadataSource(ABC):
    """Read-only introspection capability over an engine registry."""

    @abstractmethod
    def read(self, include_standard_library: bool) -> RegistrySnapshot:
        """Return a snapshot of every module visible in the registry."""


class EngineMetadataSource(MetadataSource):
    """Wraps an engine handle exposing `gen_fn_metadata_to_json(bool)`."""

    def __init__(self, engine: Any):
        self.engine = engine

    def read(self, include_standard_library: bool) -> RegistrySnapshot:
        try:
            text = self.engine.gen_fn_metadata_to_json(include_standard_library)
        except Exception as e:
            raise RegistryError(
                f"Engine metadata generation failed: {e.__class__.__name__}: {e}"
            ) from e
        return snapshot_from_json(text)


class JsonMetadataSource(MetadataSource):
    """A metadata dump taken from an engine ahead of time.

    A dump cannot be re-filtered, so it must have been generated with the
    same standard-library setting the export asks for.
    """

    def __init__(self, text: str | bytes, includes_standard_library: bool = False):
        self.text = text
        self.includes_standard_library = includes_standard_library

    @classmethod
    def from_path(
        cls, path: Path | str, includes_standard_library: bool = False
    ) -> JsonMetadataSource:
        try:
            text = Path(path).read_text()
        except OSError as e:
            raise RegistryError(f"Cannot read metadata file {path}: {e}") from e
        return cls(text, includes_standard_library)

    def read(self, include_standard_library: bool) -> RegistrySnapshot:
        if include_standard_library != self.includes_standard_library:
            state = "includes" if self.includes_standard_library else "excludes"
            raise RegistryError(
                f"Metadata dump {state} standard packages; regenerate it with "
                f"include_packages={include_standard_library}"
            )
        return snapshot_from_json(self.text)


class InMemoryMetadataSource(MetadataSource):
    """Hand-built registry.

    Example:
        source = InMemoryMetadataSource()
        source.register_function(
            "global.my_module", "add", [("a", "int"), ("b", "int")], "int",
            doc="Adds two integers.\\n# rhai-autodocs:index:1",
        )
    """

    def __init__(self):
        self._modules: dict[str, dict[str, Any]] = {}

    def module(
        self, path: str, doc: str | None = None, standard: bool = False
    ) -> InMemoryMetadataSource:
        entry = self._modules.setdefault(
            path, {"doc": None, "functions": [], "types": [], "standard": False}
        )
        if doc is not None:
            entry["doc"] = doc
        entry["standard"] = entry["standard"] or standard
        return self

    def register_function(
        self,
        module: str,
        name: str,
        params: list[tuple[str, str]] | None = None,
        return_type: str | None = None,
        doc: str | None = None,
    ) -> InMemoryMetadataSource:
        self.module(module)
        self._modules[module]["functions"].append(
            (name, list(params or []), return_type, doc)
        )
        return self

    def register_type(
        self, module: str, name: str, doc: str | None = None, type_name: str = ""
    ) -> InMemoryMetadataSource:
        self.module(module)
        self._modules[module]["types"].append((name, doc, type_name or name))
        return self

    def read(self, include_standard_library: bool) -> RegistrySnapshot:
        modules = []
        for path, entry in self._modules.items():
            if entry["standard"] and not include_standard_library:
                continue

            functions = []
            for name, params, return_type, doc in entry["functions"]:
                if not name:
                    raise RegistryError(f"{path}: function registered without a name")
                if name.startswith(ANONYMOUS_PREFIX):
                    continue
                signature = Signature(
                    name,
                    tuple(Parameter(n, t) for n, t in params),
                    return_type,
                )
                functions.append(
                    RawFunctionMetadata(name, signature, path, doc, len(functions))
                )

            types = tuple(
                RawTypeMetadata(name, path, type_name, doc)
                for name, doc, type_name in entry["types"]
            )
            modules.append(
                RawModule(
                    path, entry["doc"], tuple(functions), types, entry["standard"]
                )
            )
        return RegistrySnapshot(tuple(modules))


def as_source(engine: Any) -> MetadataSource:
    """Accept either a MetadataSource or a raw engine handle."""
    if isinstance(engine, MetadataSource):
        return engine
    if hasattr(engine, "gen_fn_metadata_to_json"):
        return EngineMetadataSource(engine)
    raise RegistryError(
        f"Cannot introspect {type(engine).__name__}: not a metadata source "
        "and no gen_fn_metadata_to_json method"
    )


def read_registry(
    source: MetadataSource, config: ExportConfig | None = None
) -> RegistrySnapshot:
    """Read the registry once, converting any failure to RegistryError."""
    config = config or ExportConfig()
    try:
        snapshot = source.read(config.include_standard_library)
    except AutodocsError:
        raise
    except Exception as e:
        raise RegistryError(
            f"Failed to read registry: {e.__class__.__name__}: {e}"
        ) from e

    log.info(
        "Read %d modules, %d functions",
        len(snapshot.modules),
        sum(len(m.functions) for m in snapshot.modules),
    )
    return snapshot
