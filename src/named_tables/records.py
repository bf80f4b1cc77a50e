"""Delimited text encoding of composite instances.

The output is a header line of field names followed by one line per
instance. Values are joined with the delimiter as rendered: nothing is quoted
or escaped, so a value containing the delimiter makes the line ambiguous.
"""

from __future__ import annotations

import types
import typing
from datetime import date, datetime, time
from decimal import Decimal
from fractions import Fraction
from typing import Any, Callable, Iterable, NamedTuple
from uuid import UUID

from named_tables.descriptors import FINITE, FieldAccessor, is_registered, kind_of
from named_tables.errors import UnsupportedField
from named_tables.names import to_string
from named_tables.table import LookupTable, composite_table

DEFAULT_DELIMITER = ", "
LINE_TERMINATOR = "\n"

Renderer = Callable[[Any], str]


def _isoformat(value: date | datetime | time) -> str:
    return value.isoformat()


_renderers: dict[type, Renderer] = {
    str: str,
    bool: str,
    int: str,
    float: str,
    Decimal: str,
    Fraction: str,
    UUID: str,
    datetime: _isoformat,
    date: _isoformat,
    time: _isoformat,
}


class FieldRendering(NamedTuple):
    """How the cells of one field are rendered.

    ``field_type`` is None when the field's annotation could not be evaluated;
    its values are then rendered by their runtime type.
    """

    accessor: FieldAccessor
    field_type: Any
    render: Renderer | None


# Per composite type, filled on the first rendered row
_field_renderings: dict[type, tuple[FieldRendering, ...]] = {}


def register_renderer(tp: type, renderer: Renderer) -> None:
    """Give fields declared as ``tp`` (or a subclass) a textual rendering."""
    _renderers[tp] = renderer
    _field_renderings.clear()


def _optional_inner(tp: Any) -> Any | None:
    """Return X for Optional[X] (or X | None), else None."""
    origin = typing.get_origin(tp)
    if origin is typing.Union or origin is types.UnionType:
        args = [arg for arg in typing.get_args(tp) if arg is not type(None)]
        if len(args) == 1 and len(typing.get_args(tp)) == 2:
            return args[0]
    return None


def renderer_for(tp: Any) -> Renderer | None:
    """Find the renderer for a declared field type, or None if it has none."""
    inner = _optional_inner(tp)
    if inner is not None:
        render = renderer_for(inner)
        if render is None:
            return None
        return lambda value: "" if value is None else render(value)

    if not isinstance(tp, type):
        return None
    if is_registered(tp):
        # Nested composites are not encodable
        return to_string if kind_of(tp) == FINITE else None
    for base in tp.__mro__:
        render = _renderers.get(base)
        if render is not None:
            return render
    return None


def _field_types(table: LookupTable) -> list[Any]:
    """Evaluate the field annotations of a composite type.

    Annotations that are still strings, because they name a type that is not
    visible from the class's module, come back as None.
    """
    try:
        hints = typing.get_type_hints(table.owner)
    except NameError:
        hints = {}
    field_types = []
    for entry in table:
        tp = hints.get(entry.identity.name, entry.identity.annotation)
        field_types.append(None if isinstance(tp, str) else tp)
    return field_types


def field_renderings(table: LookupTable) -> tuple[FieldRendering, ...]:
    """Resolve the renderer of every field of a composite table, once per type."""
    renderings = _field_renderings.get(table.owner)
    if renderings is None:
        renderings = tuple(
            FieldRendering(
                accessor=entry.identity,
                field_type=tp,
                render=None if tp is None else renderer_for(tp),
            )
            for entry, tp in zip(table, _field_types(table))
        )
        renderings = _field_renderings.setdefault(table.owner, renderings)
    return renderings


def _render_row(table: LookupTable, instance: Any, delimiter: str) -> str:
    cells = []
    for accessor, field_type, render in field_renderings(table):
        value = accessor(instance)
        if field_type is None:
            field_type = type(value)
            render = renderer_for(field_type)
        if render is None:
            raise UnsupportedField(table.owner, accessor.name, field_type)
        cells.append(render(value))
    return delimiter.join(cells)


def csv_header(cls: type, delimiter: str = DEFAULT_DELIMITER) -> str:
    """Return the field names of a composite type joined by ``delimiter``."""
    return delimiter.join(composite_table(cls).names)


def csv_row(instance: Any, delimiter: str = DEFAULT_DELIMITER) -> str:
    """Render one instance's field values, in declaration order, as one line."""
    return _render_row(composite_table(type(instance)), instance, delimiter)


def csv_encode(
    cls: type, instances: Iterable[Any], delimiter: str = DEFAULT_DELIMITER
) -> str:
    """Encode instances as a header line followed by one line per instance.

    Every line, the header included, ends with a newline.
    """
    table = composite_table(cls)
    lines = [delimiter.join(table.names)]
    lines.extend(_render_row(table, instance, delimiter) for instance in instances)
    return "".join(line + LINE_TERMINATOR for line in lines)
