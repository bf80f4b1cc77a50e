"""Parsing module for the schema DSL."""

from named_tables.parsing.type_parser import TypeParser

__all__ = [
    "TypeParser",
]
