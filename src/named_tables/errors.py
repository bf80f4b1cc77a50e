"""Exceptions raised by the named_tables library."""

from __future__ import annotations

from typing import Any


class NamedTablesError(Exception):
    """Base class for all named_tables errors."""


class TypeRejected(NamedTablesError, TypeError):
    """A type lacks the finite-valued or composite shape, or was never registered.

    Raised by the class decorators while the class is being defined, so a
    malformed type fails at import time rather than on first use.
    """


class NoMatchingName(NamedTablesError, LookupError):
    """Reverse lookup found no constant whose name satisfies the equivalence."""

    def __init__(self, owner: type, name: str) -> None:
        self.owner = owner
        self.name = name
        super().__init__(f"No constant of '{owner.__name__}' matches name {name!r}")


class UnsupportedField(NamedTablesError, TypeError):
    """A composite field's declared type has no textual rendering."""

    def __init__(self, owner: type, field: str, field_type: Any) -> None:
        self.owner = owner
        self.field = field
        self.field_type = field_type
        super().__init__(
            f"Field '{field}' of '{owner.__name__}' has type {field_type!r} "
            "with no textual rendering"
        )
