"""Named Tables - name lookup and delimited text encoding from per-type tables."""

from named_tables.codegen import generate_module
from named_tables.descriptors import (
    COMPOSITE,
    FINITE,
    Descriptor,
    FieldAccessor,
    composite,
    describe,
    finite_valued,
    is_registered,
    kind_of,
)
from named_tables.errors import (
    NamedTablesError,
    NoMatchingName,
    TypeRejected,
    UnsupportedField,
)
from named_tables.names import case_insensitive, exact, names, parse, to_string
from named_tables.parsing import TypeParser
from named_tables.records import (
    DEFAULT_DELIMITER,
    csv_encode,
    csv_header,
    csv_row,
    register_renderer,
)
from named_tables.table import LookupTable, build_table, table_for

__all__ = [
    # Registration
    "finite_valued",
    "composite",
    "is_registered",
    "kind_of",
    "describe",
    "Descriptor",
    "FieldAccessor",
    "FINITE",
    "COMPOSITE",
    # Tables
    "LookupTable",
    "build_table",
    "table_for",
    # Name resolution
    "to_string",
    "parse",
    "names",
    "exact",
    "case_insensitive",
    # Record encoding
    "csv_header",
    "csv_row",
    "csv_encode",
    "register_renderer",
    "DEFAULT_DELIMITER",
    # Schema DSL
    "TypeParser",
    "generate_module",
    # Errors
    "NamedTablesError",
    "TypeRejected",
    "NoMatchingName",
    "UnsupportedField",
]

__version__ = "0.1.0"
