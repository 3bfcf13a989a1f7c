"""Documentation validation and quality checks."""

from __future__ import annotations

from dataclasses import dataclass, field

from .models import ExportedDocumentation


@dataclass
class ValidationResult:
    """Results from documentation validation."""

    errors: list[str] = field(default_factory=list)  # Build fails if non-empty
    warnings: list[str] = field(default_factory=list)  # Printed but allowed


def validate_docs(
    exported: ExportedDocumentation, strict: bool = False
) -> ValidationResult:
    """Validate exported documentation.

    Checks:
    1. Functions should carry an index directive (warning in normal mode,
       error in strict)
    2. Documented functions should have some text (warning)

    Args:
        exported: Model returned by `export`
        strict: If True, undocumented functions are errors instead of warnings

    Returns:
        ValidationResult with errors and warnings
    """
    result = ValidationResult()

    for path, module in exported.modules.items():
        for merged in module.undocumented:
            msg = f"{path}::{merged.name}: missing index directive (undocumented)"
            if strict:
                result.errors.append(msg)
            else:
                result.warnings.append(msg)

        for fn in module.functions:
            if fn.text.is_empty():
                result.warnings.append(
                    f"{path}::{fn.name}: indexed but has no description"
                )

    return result


def compute_coverage(exported: ExportedDocumentation) -> dict[str, float]:
    """Compute documentation coverage by module.

    Returns:
        Dict of module path -> documented names / all names (0.0 - 1.0)
    """
    coverage = {}
    for path, module in exported.modules.items():
        total = len(module.functions) + len(module.undocumented)
        coverage[path] = len(module.functions) / total if total > 0 else 1.0
    return coverage
