"""Type definitions produced by the schema DSL."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class PrimitiveType(Enum):
    """Field types every schema can use without declaring them."""

    BOOLEAN = "boolean"
    INT = "int"
    FLOAT = "float"
    STRING = "string"

    @property
    def python_type(self) -> type:
        """Return the Python type a field of this primitive is declared as."""
        python_types = {
            PrimitiveType.BOOLEAN: bool,
            PrimitiveType.INT: int,
            PrimitiveType.FLOAT: float,
            PrimitiveType.STRING: str,
        }
        return python_types[self]


@dataclass
class TypeDefinition:
    """Base class for all type definitions."""

    name: str

    def resolve_base_type(self) -> TypeDefinition:
        """Resolve through aliases to get the underlying type."""
        return self


@dataclass
class PrimitiveTypeDefinition(TypeDefinition):
    primitive: PrimitiveType


@dataclass
class AliasTypeDefinition(TypeDefinition):
    """Type definition for 'define X as Y' aliases."""

    base_type: TypeDefinition

    def resolve_base_type(self) -> TypeDefinition:
        return self.base_type.resolve_base_type()


@dataclass
class FieldDefinition:
    """A field of a record type."""

    name: str
    type_def: TypeDefinition
    label: str | None = None  # None = the field name is its label


@dataclass
class CompositeTypeDefinition(TypeDefinition):
    """A record type: named fields in declaration order."""

    fields: list[FieldDefinition] = field(default_factory=list)

    def labels(self) -> list[tuple[str, str]]:
        """Return (field name, label) for the fields whose label differs from their name."""
        return [(f.name, f.label) for f in self.fields if f.label is not None]


@dataclass
class EnumVariantDefinition:
    name: str
    discriminant: int
    label: str | None = None


@dataclass
class EnumTypeDefinition(TypeDefinition):
    """Enum type definition with C-style integer discriminants."""

    variants: list[EnumVariantDefinition] = field(default_factory=list)

    def labels(self) -> list[tuple[str, str]]:
        """Return (variant name, label) for the labelled variants."""
        return [(v.name, v.label) for v in self.variants if v.label is not None]


class TypeRegistry:
    """The types of one schema, primitives first, then declarations in order."""

    def __init__(self) -> None:
        self._types: dict[str, TypeDefinition] = {
            pt.value: PrimitiveTypeDefinition(name=pt.value, primitive=pt)
            for pt in PrimitiveType
        }

    def register(self, type_def: TypeDefinition) -> None:
        if type_def.name in self._types:
            raise ValueError(f"Type '{type_def.name}' is already defined")
        self._types[type_def.name] = type_def

    def get(self, name: str) -> TypeDefinition | None:
        return self._types.get(name)

    def enums(self) -> list[EnumTypeDefinition]:
        """Return the enum types in definition order."""
        return [td for td in self._types.values() if isinstance(td, EnumTypeDefinition)]

    def composites(self) -> list[CompositeTypeDefinition]:
        """Return the composite types in definition order."""
        return [td for td in self._types.values() if isinstance(td, CompositeTypeDefinition)]
