"""Conversion between finite-valued constants and their names."""

from __future__ import annotations

from enum import Enum
from typing import Callable, TypeVar

from named_tables.errors import NoMatchingName
from named_tables.table import finite_table

E = TypeVar("E", bound=Enum)

# (entry_name, query) -> bool; must depend on nothing but its arguments
Equivalence = Callable[[str, str], bool]


def exact(entry_name: str, query: str) -> bool:
    """Default equivalence: the names are the same string."""
    return entry_name == query


def case_insensitive(entry_name: str, query: str) -> bool:
    """Names are equal after Unicode case folding."""
    return entry_name.casefold() == query.casefold()


def to_string(value: Enum) -> str:
    """Return the name of a constant of a registered finite-valued type."""
    table = finite_table(type(value))
    for entry in table:
        if entry.identity is value:
            return entry.name
    # Every member has an entry, so only a foreign value can get here
    raise ValueError(f"{value!r} is not a constant of '{table.owner.__name__}'")


def parse(cls: type[E], name: str, equivalence: Equivalence = exact) -> E:
    """Return the first constant of ``cls`` whose name is equivalent to ``name``.

    Entries are tried in declaration order. Raises NoMatchingName when none
    satisfies ``equivalence(entry_name, name)``.
    """
    table = finite_table(cls)
    for entry in table:
        if equivalence(entry.name, name):
            return entry.identity
    raise NoMatchingName(cls, name)


def names(cls: type[Enum]) -> tuple[str, ...]:
    """Return the names of a finite-valued type's constants in declaration order."""
    return finite_table(cls).names
