"""Parser for the schema DSL.

    # comment
    define karma as int
    enum Weekday { Monday, Tuesday, Friday = 4 as "Fri" }
    Account { name: string, karma, cash: int as "balance" }

A field without a type has the type named after the field. Declarations may
refer to types declared further down: the grammar only collects them, and
names are resolved once the whole schema has been read.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

import ply.yacc as yacc

from named_tables.parsing.type_lexer import TypeLexer
from named_tables.types import (
    AliasTypeDefinition,
    CompositeTypeDefinition,
    EnumTypeDefinition,
    EnumVariantDefinition,
    FieldDefinition,
    TypeDefinition,
    TypeRegistry,
)


@dataclass
class AliasDecl:
    name: str
    target: str
    line: int


@dataclass
class FieldDecl:
    name: str
    type_name: str | None
    label: str | None
    line: int


@dataclass
class RecordDecl:
    name: str
    fields: list[FieldDecl]
    line: int


@dataclass
class VariantDecl:
    name: str
    value: int | None
    label: str | None
    line: int


@dataclass
class EnumDecl:
    name: str
    variants: list[VariantDecl]
    line: int


Declaration = Union[AliasDecl, RecordDecl, EnumDecl]


class TypeParser:
    """LALR parser turning schema text into a TypeRegistry."""

    tokens = TypeLexer.tokens

    def __init__(self) -> None:
        self.lexer = TypeLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore

    def p_schema(self, p: yacc.YaccProduction) -> None:
        """schema : schema declaration
                  | empty"""
        if len(p) == 2:
            p[0] = []
        else:
            p[0] = p[1] + [p[2]]

    def p_declaration(self, p: yacc.YaccProduction) -> None:
        """declaration : alias
                       | record
                       | enumeration"""
        p[0] = p[1]

    def p_alias(self, p: yacc.YaccProduction) -> None:
        """alias : DEFINE NAME AS NAME"""
        p[0] = AliasDecl(name=p[2], target=p[4], line=p.lineno(2))

    def p_record(self, p: yacc.YaccProduction) -> None:
        """record : NAME '{' field_list trailing_comma '}'
                  | NAME '{' '}'"""
        fields = p[3] if len(p) == 6 else []
        p[0] = RecordDecl(name=p[1], fields=fields, line=p.lineno(1))

    def p_field_list(self, p: yacc.YaccProduction) -> None:
        """field_list : field_list ',' field
                      | field"""
        p[0] = p[1] + [p[3]] if len(p) == 4 else [p[1]]

    def p_field(self, p: yacc.YaccProduction) -> None:
        """field : NAME field_type label"""
        p[0] = FieldDecl(name=p[1], type_name=p[2], label=p[3], line=p.lineno(1))

    def p_field_type(self, p: yacc.YaccProduction) -> None:
        """field_type : ':' NAME
                      | empty"""
        p[0] = p[2] if len(p) == 3 else None

    def p_enumeration(self, p: yacc.YaccProduction) -> None:
        """enumeration : ENUM NAME '{' variant_list trailing_comma '}'"""
        p[0] = EnumDecl(name=p[2], variants=p[4], line=p.lineno(2))

    def p_variant_list(self, p: yacc.YaccProduction) -> None:
        """variant_list : variant_list ',' variant
                        | variant"""
        p[0] = p[1] + [p[3]] if len(p) == 4 else [p[1]]

    def p_variant(self, p: yacc.YaccProduction) -> None:
        """variant : NAME discriminant label"""
        p[0] = VariantDecl(name=p[1], value=p[2], label=p[3], line=p.lineno(1))

    def p_discriminant(self, p: yacc.YaccProduction) -> None:
        """discriminant : '=' NUMBER
                        | empty"""
        p[0] = p[2] if len(p) == 3 else None

    def p_label(self, p: yacc.YaccProduction) -> None:
        """label : AS LABEL
                 | empty"""
        p[0] = p[2] if len(p) == 3 else None

    def p_trailing_comma(self, p: yacc.YaccProduction) -> None:
        """trailing_comma : ','
                          | empty"""

    def p_empty(self, p: yacc.YaccProduction) -> None:
        """empty :"""

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p is None:
            raise SyntaxError("Syntax error at end of input")
        raise self.lexer.error_at(f"Syntax error at {p.value!r}", p.lineno, p.lexpos)

    def build(self, **kwargs: Any) -> None:
        self.parser = yacc.yacc(module=self, **kwargs)

    def parse(self, data: str) -> TypeRegistry:
        """Parse a schema and return its types.

        Raises SyntaxError for text the grammar does not accept and
        ValueError for declarations that do not fit together.
        """
        if self.parser is None:
            self.build(debug=False, write_tables=False)
        self.lexer.input(data)
        declarations = self.parser.parse(lexer=self.lexer.lexer)
        return _Resolver(declarations).resolve()


class _Resolver:
    """Turns the declarations of one schema into type definitions.

    Every record and enum is registered empty first, in declaration order, so
    any declaration can name any other. Aliases are resolved on demand.
    """

    def __init__(self, declarations: list[Declaration]) -> None:
        self.declarations = declarations
        self.registry = TypeRegistry()
        self.aliases: dict[str, AliasDecl] = {}

    def resolve(self) -> TypeRegistry:
        for decl in self.declarations:
            self._declare(decl)
        for decl in self.declarations:
            if isinstance(decl, AliasDecl):
                self._lookup(decl.name, decl.line)
            elif isinstance(decl, EnumDecl):
                self._fill_enum(decl)
        for decl in self.declarations:
            if isinstance(decl, RecordDecl):
                self._fill_record(decl)
        return self.registry

    def _declare(self, decl: Declaration) -> None:
        if decl.name in self.aliases or self.registry.get(decl.name) is not None:
            raise ValueError(f"Type '{decl.name}' is already defined (line {decl.line})")
        if isinstance(decl, AliasDecl):
            self.aliases[decl.name] = decl
        elif isinstance(decl, EnumDecl):
            self.registry.register(EnumTypeDefinition(name=decl.name))
        else:
            self.registry.register(CompositeTypeDefinition(name=decl.name))

    def _lookup(self, name: str, line: int, chain: tuple[str, ...] = ()) -> TypeDefinition:
        """Return the type called ``name``, defining it first if it is an alias."""
        type_def = self.registry.get(name)
        if type_def is not None:
            return type_def
        alias = self.aliases.get(name)
        if alias is None:
            raise ValueError(f"Unknown type '{name}' (line {line})")
        if name in chain:
            cycle = " -> ".join(chain + (name,))
            raise ValueError(f"Alias cycle {cycle} (line {alias.line})")
        target = self._lookup(alias.target, alias.line, chain + (name,))
        type_def = AliasTypeDefinition(name=name, base_type=target)
        self.registry.register(type_def)
        return type_def

    def _fill_enum(self, decl: EnumDecl) -> None:
        """Number the variants; one without a value follows the one before it."""
        enum_def = self.registry.get(decl.name)
        assert isinstance(enum_def, EnumTypeDefinition)
        by_value: dict[int, str] = {}
        next_value = 0
        for variant in decl.variants:
            value = next_value if variant.value is None else variant.value
            next_value = value + 1
            if any(v.name == variant.name for v in enum_def.variants):
                raise ValueError(
                    f"Enum '{decl.name}': duplicate variant '{variant.name}' "
                    f"(line {variant.line})"
                )
            if value in by_value:
                raise ValueError(
                    f"Enum '{decl.name}': variants '{by_value[value]}' and "
                    f"'{variant.name}' share discriminant {value} (line {variant.line})"
                )
            by_value[value] = variant.name
            enum_def.variants.append(
                EnumVariantDefinition(name=variant.name, discriminant=value, label=variant.label)
            )

    def _fill_record(self, decl: RecordDecl) -> None:
        record = self.registry.get(decl.name)
        assert isinstance(record, CompositeTypeDefinition)
        for field_decl in decl.fields:
            if any(f.name == field_decl.name for f in record.fields):
                raise ValueError(
                    f"Type '{decl.name}': duplicate field '{field_decl.name}' "
                    f"(line {field_decl.line})"
                )
            type_def = self._lookup(field_decl.type_name or field_decl.name, field_decl.line)
            if isinstance(type_def.resolve_base_type(), CompositeTypeDefinition):
                raise ValueError(
                    f"Field '{field_decl.name}' of '{decl.name}': composite-typed "
                    f"fields are not supported (line {field_decl.line})"
                )
            record.fields.append(
                FieldDefinition(name=field_decl.name, type_def=type_def, label=field_decl.label)
            )
