"""Overload merging.

Rhai resolves native overloads by arity and argument types, so one
scripting-visible name is often registered several times. Documentation
describes the name once and lists every call shape:

    /// doc 1
    /// # rhai-autodocs:index:1
    fn my_func(a: int)

    fn my_func(a: int, b: int)

becomes a single `my_func` entry with the text of "doc 1" and both
signatures.
"""

from __future__ import annotations

import logging

from .directives import parse_doc_comment
from .errors import ConflictingDirectiveError
from .models import MergedFunction, RawFunctionMetadata, Signature

log = logging.getLogger(__name__)


def dedupe_signatures(signatures: list[Signature]) -> tuple[Signature, ...]:
    """Drop repeated signatures, keeping the first occurrence of each."""
    seen = set()
    unique = []
    for sig in signatures:
        if sig.key in seen:
            continue
        seen.add(sig.key)
        unique.append(sig)
    return tuple(unique)


def merge_overloads(
    module: str, functions: list[RawFunctionMetadata]
) -> list[MergedFunction]:
    """Collapse functions sharing a name into one entry per name.

    Args:
        module: Module path, used in error messages.
        functions: Functions of the module in registration order.

    Returns:
        One MergedFunction per name, ordered by first registration.

    Raises:
        ConflictingDirectiveError: If more than one overload of a name carries
            an index directive.
    """
    groups: dict[str, list[RawFunctionMetadata]] = {}
    for fn in sorted(functions, key=lambda f: f.position):
        groups.setdefault(fn.name, []).append(fn)

    merged = []
    for name, overloads in groups.items():
        canonical = []
        for fn in overloads:
            directive, text = parse_doc_comment(fn.doc)
            if directive is not None:
                canonical.append((directive, text))

        if len(canonical) > 1:
            raise ConflictingDirectiveError(
                module, name, [directive.line for directive, _ in canonical]
            )

        directive, text = canonical[0] if canonical else (None, None)
        if directive is None:
            log.debug("%s: %s has no index directive, not displayed", module, name)

        merged.append(
            MergedFunction(
                name=name,
                module=module,
                signatures=dedupe_signatures([fn.signature for fn in overloads]),
                position=overloads[0].position,
                text=text,
                directive=directive,
            )
        )

    return merged
