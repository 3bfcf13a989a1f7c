"""Documentation model construction."""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from typing import Any

from .errors import DuplicateIndexError
from .merge import merge_overloads
from .models import (
    DocumentedFunction,
    DocumentedType,
    ExportConfig,
    ExportedDocumentation,
    GlossaryEntry,
    MergedFunction,
    ModuleDocumentation,
    RawModule,
)
from .sources import as_source, read_registry

log = logging.getLogger(__name__)


def _slug_part(value: str) -> str:
    part = re.sub(r"[^a-z0-9_]+", "-", value.lower()).strip("-")
    if part:
        return part
    # Operators have no word characters at all
    return "op-" + "-".join(f"{ord(c):x}" for c in value)


def slugify(module: str, name: str) -> str:
    """Anchor slug for a name, e.g. ("global.my_module", "add") -> "global-my_module-add"."""
    return f"{_slug_part(module)}-{_slug_part(name)}"


def _check_unique_indices(module: str, documented: list[MergedFunction]) -> None:
    by_index: dict[int, list[str]] = defaultdict(list)
    for fn in documented:
        by_index[fn.directive.index].append(fn.name)
    for index, names in by_index.items():
        if len(names) > 1:
            raise DuplicateIndexError(module, index, names)


def build_module(
    raw: RawModule, merged: list[MergedFunction], strict_indices: bool = False
) -> ModuleDocumentation:
    """Order, slug and index the merged functions and types of one module.

    Functions are sorted by index; equal indices keep registration order.
    With `strict_indices`, equal indices raise DuplicateIndexError instead.
    """
    documented = sorted(
        (m for m in merged if m.documented), key=lambda m: m.directive.index
    )
    if strict_indices:
        _check_unique_indices(raw.path, documented)

    used: set[str] = set()

    def unique_slug(name: str) -> str:
        base = slugify(raw.path, name)
        slug, n = base, 1
        while slug in used:
            n += 1
            slug = f"{base}-{n}"
        used.add(slug)
        return slug

    functions = tuple(
        DocumentedFunction(
            name=m.name,
            module=raw.path,
            index=m.directive.index,
            signatures=m.signatures,
            text=m.text,
            slug=unique_slug(m.name),
        )
        for m in documented
    )
    types = tuple(
        DocumentedType(name=t.name, module=raw.path, slug=unique_slug(t.name), doc=t.doc)
        for t in raw.types
    )

    glossary = tuple(
        [GlossaryEntry(f.name, "function", raw.path, f.slug) for f in functions]
        + [GlossaryEntry(t.name, "type", raw.path, t.slug) for t in types]
    )

    return ModuleDocumentation(
        path=raw.path,
        doc=raw.doc,
        functions=functions,
        types=types,
        glossary=glossary,
        undocumented=tuple(m for m in merged if not m.documented),
    )


def export(engine: Any, config: ExportConfig | None = None) -> ExportedDocumentation:
    """Generate the documentation model of an engine.

    Make sure all functions, operators, plugins and types are registered in
    the engine before calling this.

    Args:
        engine: A MetadataSource, or an engine handle exposing
            `gen_fn_metadata_to_json`.
        config: Export options, defaults to ExportConfig().

    Returns:
        Documentation for every module, keyed by module path.

    Raises:
        RegistryError: The registry could not be read.
        ConflictingDirectiveError: Two overloads of a name carry an index.
        DuplicateIndexError: Two functions share an index (strict mode only).
    """
    config = config or ExportConfig()
    snapshot = read_registry(as_source(engine), config)

    modules: dict[str, ModuleDocumentation] = {}
    for raw in snapshot.modules:
        merged = merge_overloads(raw.path, list(raw.functions))
        modules[raw.path] = build_module(raw, merged, config.strict_indices)
        log.debug(
            "%s: %d documented, %d undocumented",
            raw.path,
            len(modules[raw.path].functions),
            len(modules[raw.path].undocumented),
        )

    log.info("Exported documentation for %d modules", len(modules))
    return ExportedDocumentation(modules)
