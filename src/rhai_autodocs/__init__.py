"""Generate Markdown documentation from the metadata of a Rhai engine."""

from rhai_autodocs.builder import export
from rhai_autodocs.errors import (
    AutodocsError,
    ConflictingDirectiveError,
    DuplicateIndexError,
    RegistryError,
    UnsupportedFlavorError,
)
from rhai_autodocs.models import (
    DocumentedFunction,
    DocumentedType,
    ExportConfig,
    ExportedDocumentation,
    ModuleDocumentation,
    Signature,
)
from rhai_autodocs.renderers import render
from rhai_autodocs.sources import (
    EngineMetadataSource,
    InMemoryMetadataSource,
    JsonMetadataSource,
    MetadataSource,
)

__all__ = [
    "AutodocsError",
    "ConflictingDirectiveError",
    "DocumentedFunction",
    "DocumentedType",
    "DuplicateIndexError",
    "EngineMetadataSource",
    "ExportConfig",
    "ExportedDocumentation",
    "InMemoryMetadataSource",
    "JsonMetadataSource",
    "MetadataSource",
    "ModuleDocumentation",
    "RegistryError",
    "Signature",
    "UnsupportedFlavorError",
    "export",
    "render",
]
