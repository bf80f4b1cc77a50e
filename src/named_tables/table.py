"""Immutable lookup tables built once per registered type."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

from named_tables.descriptors import COMPOSITE, FINITE, Descriptor, describe, kind_of
from named_tables.errors import TypeRejected


@dataclass(frozen=True)
class LookupTable:
    """The ordered descriptors of one type.

    Entries keep declaration order. No deduplication is done: when two
    constants share a name both entries stay, and lookups take the first.
    """

    owner: type
    kind: str
    entries: tuple[Descriptor, ...]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Descriptor]:
        return iter(self.entries)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(entry.name for entry in self.entries)

    @property
    def identities(self) -> tuple[Any, ...]:
        return tuple(entry.identity for entry in self.entries)


def build_table(
    owner: type, kind: str, descriptors: tuple[Descriptor, ...] | list[Descriptor]
) -> LookupTable:
    """Build a table from a descriptor sequence, keeping its order as given."""
    if kind not in (FINITE, COMPOSITE):
        raise ValueError(f"Unknown table kind '{kind}'")
    return LookupTable(owner=owner, kind=kind, entries=tuple(descriptors))


_tables: dict[type, LookupTable] = {}


def table_for(cls: Any) -> LookupTable:
    """Return the shared table for a registered type, building it on first use.

    Concurrent first uses may each build a table; they are identical, and the
    first one stored is the one every caller gets back.
    """
    table = _tables.get(cls)
    if table is not None:
        return table

    table = build_table(cls, kind_of(cls), describe(cls))
    return _tables.setdefault(cls, table)


def finite_table(cls: Any) -> LookupTable:
    """Return the table of a finite-valued type, rejecting any other type."""
    table = table_for(cls)
    if table.kind != FINITE:
        raise TypeRejected(f"'{cls.__name__}' is composite, not finite-valued")
    return table


def composite_table(cls: Any) -> LookupTable:
    """Return the table of a composite type, rejecting any other type."""
    table = table_for(cls)
    if table.kind != COMPOSITE:
        raise TypeRejected(f"'{cls.__name__}' is finite-valued, not composite")
    return table
