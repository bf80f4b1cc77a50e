"""Generate Python types from a schema.

Each enum becomes an ``@finite_valued`` Enum class and each composite an
``@composite`` frozen dataclass, so the generated module carries everything
the lookup tables need once it is imported.

Usage:
    named-tables-gen schema.nt -o models.py
    named-tables-gen schema.nt -o models.py --check
"""

from __future__ import annotations

import argparse
import keyword
import sys
from pathlib import Path

from structlog import get_logger

from named_tables.log import setup_logging
from named_tables.parsing import TypeParser
from named_tables.types import (
    CompositeTypeDefinition,
    EnumTypeDefinition,
    PrimitiveTypeDefinition,
    TypeDefinition,
    TypeRegistry,
)

logger = get_logger()

# Module-level names the generated source relies on
_MODULE_NAMES = frozenset(
    {"Enum", "dataclass", "composite", "finite_valued", "str", "int", "float", "bool"}
)


def _check_identifier(name: str, what: str) -> None:
    if keyword.iskeyword(name):
        raise ValueError(f"{what} '{name}' is a Python keyword")
    if name.startswith("__") or (name.startswith("_") and name.endswith("_")):
        raise ValueError(f"{what} '{name}' is reserved in Python classes")


def _check_type_name(name: str, what: str) -> None:
    _check_identifier(name, what)
    if name in _MODULE_NAMES:
        raise ValueError(f"{what} '{name}' would shadow '{name}' in the generated module")


def _annotation(type_def: TypeDefinition) -> str:
    """Return the Python annotation for a field of the given type."""
    base = type_def.resolve_base_type()
    if isinstance(base, PrimitiveTypeDefinition):
        return base.primitive.python_type.__name__
    if isinstance(base, EnumTypeDefinition):
        return base.name
    raise ValueError(f"Type '{type_def.name}' cannot be a field type")


def _decorator(name: str, labels: list[tuple[str, str]]) -> str:
    if not labels:
        return f"@{name}"
    items = ", ".join(f"{key!r}: {label!r}" for key, label in labels)
    return f"@{name}(labels={{{items}}})"


def _render_enum(enum_def: EnumTypeDefinition) -> list[str]:
    _check_type_name(enum_def.name, "Enum")
    lines = [
        _decorator("finite_valued", enum_def.labels()),
        f"class {enum_def.name}(Enum):",
    ]
    for variant in enum_def.variants:
        _check_identifier(variant.name, f"Variant of '{enum_def.name}'")
        lines.append(f"    {variant.name} = {variant.discriminant}")
    return lines


def _render_composite(comp_def: CompositeTypeDefinition) -> list[str]:
    _check_type_name(comp_def.name, "Type")
    lines = [
        _decorator("composite", comp_def.labels()),
        "@dataclass(frozen=True)",
        f"class {comp_def.name}:",
    ]
    if not comp_def.fields:
        lines.append("    pass")
    for f in comp_def.fields:
        _check_identifier(f.name, f"Field of '{comp_def.name}'")
        lines.append(f"    {f.name}: {_annotation(f.type_def)}")
    return lines


def generate_module(registry: TypeRegistry, source_name: str | None = None) -> str:
    """Render the enums and composites of a registry as a Python module.

    Enums come first, then composites, each in declaration order, so a
    composite can name any enum in its annotations.
    """
    enums = registry.enums()
    composites = registry.composites()

    origin = f" from {source_name}" if source_name else ""
    lines = [f'"""Generated{origin} by named-tables-gen. Do not edit."""', ""]

    imports = []
    if composites:
        imports.append("from dataclasses import dataclass")
    if enums:
        imports.append("from enum import Enum")
    if imports:
        lines.extend(imports)
        lines.append("")
        names = []
        if composites:
            names.append("composite")
        if enums:
            names.append("finite_valued")
        lines.append(f"from named_tables import {', '.join(names)}")

    for enum_def in enums:
        lines.extend(["", ""])
        lines.extend(_render_enum(enum_def))

    for comp_def in composites:
        lines.extend(["", ""])
        lines.extend(_render_composite(comp_def))

    return "\n".join(lines) + "\n"


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    arg_parser = argparse.ArgumentParser(
        description="Generate finite-valued and composite Python types from a schema"
    )
    arg_parser.add_argument(
        "schema",
        type=Path,
        help="Path to the schema file",
    )
    arg_parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Write the module here instead of to stdout",
    )
    arg_parser.add_argument(
        "--check",
        action="store_true",
        help="Exit with status 1 if OUTPUT differs from what would be generated",
    )
    arg_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log debug events to stderr",
    )
    args = arg_parser.parse_args(argv)

    if args.check and args.output is None:
        arg_parser.error("--check requires --output")

    setup_logging(args.verbose)
    log = logger.new(schema=str(args.schema))

    try:
        registry = TypeParser().parse(args.schema.read_text())
        source = generate_module(registry, source_name=args.schema.name)
    except (OSError, SyntaxError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for enum_def in registry.enums():
        log.debug("rendered enum", name=enum_def.name, variants=len(enum_def.variants))
    for comp_def in registry.composites():
        log.debug("rendered composite", name=comp_def.name, fields=len(comp_def.fields))

    if args.check:
        existing = args.output.read_text() if args.output.exists() else None
        if existing != source:
            log.warning("generated module is stale", output=str(args.output))
            print(f"{args.output} is out of date with {args.schema}", file=sys.stderr)
            return 1
        log.info("generated module is up to date", output=str(args.output))
        return 0

    if args.output is None:
        sys.stdout.write(source)
    else:
        try:
            args.output.write_text(source)
        except OSError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        log.info("wrote generated module", output=str(args.output))
    return 0


if __name__ == "__main__":
    sys.exit(main())
