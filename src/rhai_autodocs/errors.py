"""Exceptions raised by the documentation pipeline."""

from __future__ import annotations


class AutodocsError(Exception):
    """Base exception for rhai-autodocs operations."""

    pass


class RegistryError(AutodocsError):
    """Raised when the engine registry cannot be introspected."""

    pass


class ConflictingDirectiveError(AutodocsError):
    """Raised when several overloads of one function carry an index directive."""

    def __init__(self, module: str, function: str, directives: list[str]):
        self.module = module
        self.function = function
        self.directives = directives
        lines = ", ".join(repr(d) for d in directives)
        super().__init__(
            f"{module}: function '{function}' has {len(directives)} index "
            f"directives ({lines}); keep exactly one on a single overload"
        )


class DuplicateIndexError(AutodocsError):
    """Raised in strict mode when two documented functions share an index."""

    def __init__(self, module: str, index: int, functions: list[str]):
        self.module = module
        self.index = index
        self.functions = functions
        super().__init__(
            f"{module}: index {index} is used by {', '.join(functions)}"
        )


class UnsupportedFlavorError(AutodocsError):
    """Raised when rendering is requested for an unknown output flavor."""

    def __init__(self, flavor: str, available: list[str] | None = None):
        self.flavor = flavor
        self.available = available or []
        message = f"Unsupported output flavor: {flavor!r}"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message)
