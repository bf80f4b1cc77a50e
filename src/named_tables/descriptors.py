"""Descriptor extraction for finite-valued and composite types.

A type opts in by decoration when its class is defined:

    @finite_valued
    class Weekday(Enum):
        Monday = 0
        ...

    @composite
    @dataclass
    class Account:
        name: str
        ...

The decorators only validate the type's shape and record how its parts are
labelled. The parts themselves are enumerated by ``describe()``, which the
table builder calls once per type.
"""

from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass
from typing import Any, Callable, Mapping, TypeVar

from named_tables.errors import TypeRejected

FINITE = "finite"
COMPOSITE = "composite"

T = TypeVar("T", bound=type)


@dataclass(frozen=True)
class FieldAccessor:
    """Projects a composite instance to the value of one public field.

    ``annotation`` is the field's annotation as declared, which may still be
    a string under postponed evaluation.
    """

    name: str
    annotation: Any

    def __call__(self, instance: Any) -> Any:
        return getattr(instance, self.name)


@dataclass(frozen=True)
class Descriptor:
    """An (identity, name) pair for one constant or field of a type.

    For a finite-valued type the identity is the enum member itself; for a
    composite type it is the FieldAccessor for the field.
    """

    identity: Any
    name: str


@dataclass(frozen=True)
class Registration:
    """How a decorated type was registered."""

    kind: str
    labels: tuple[tuple[str, str], ...] = ()

    def label_for(self, part_name: str) -> str:
        for key, label in self.labels:
            if key == part_name:
                return label
        return part_name


_registrations: dict[type, Registration] = {}


def _is_namedtuple(cls: type) -> bool:
    return issubclass(cls, tuple) and hasattr(cls, "_fields")


def _constant_names(cls: type[enum.Enum]) -> list[str]:
    # Iterating an Enum skips aliases, so each constant appears once.
    return [member.name for member in cls]


def _field_annotations(cls: type) -> dict[str, Any]:
    """Map public field names to their declared annotations, in declaration order."""
    if dataclasses.is_dataclass(cls):
        annotations = {f.name: f.type for f in dataclasses.fields(cls)}
    else:
        declared = getattr(cls, "__annotations__", {})
        annotations = {name: declared.get(name, Any) for name in cls._fields}  # type: ignore[attr-defined]
    return {name: tp for name, tp in annotations.items() if not name.startswith("_")}


def _check_shape(cls: Any, kind: str) -> list[str]:
    """Validate that ``cls`` has the shape ``kind`` requires and return its part names."""
    if not isinstance(cls, type):
        raise TypeRejected(f"{cls!r} is not a class")
    if kind == FINITE:
        if not issubclass(cls, enum.Enum):
            raise TypeRejected(
                f"'{cls.__name__}' is not finite-valued: expected an Enum subclass"
            )
        return _constant_names(cls)
    if issubclass(cls, enum.Enum) or not (
        dataclasses.is_dataclass(cls) or _is_namedtuple(cls)
    ):
        raise TypeRejected(
            f"'{cls.__name__}' is not composite: expected a dataclass or NamedTuple"
        )
    return list(_field_annotations(cls))


def _register(cls: Any, kind: str, labels: Mapping[str, str] | None) -> None:
    part_names = _check_shape(cls, kind)
    if cls in _registrations:
        raise ValueError(f"Type '{cls.__name__}' is already registered")

    labels = dict(labels or {})
    unknown = [key for key in labels if key not in part_names]
    if unknown:
        raise TypeRejected(f"'{cls.__name__}' has no parts named {unknown}")
    for key, label in labels.items():
        if not isinstance(label, str):
            raise TypeRejected(f"Label for '{cls.__name__}.{key}' must be a string")

    # Labels in declaration order
    ordered = tuple((name, labels[name]) for name in part_names if name in labels)
    _registrations[cls] = Registration(kind=kind, labels=ordered)


def _decorator(kind: str, cls: T | None, labels: Mapping[str, str] | None) -> Any:
    def wrap(cls: T) -> T:
        _register(cls, kind, labels)
        return cls

    if cls is None:
        return wrap
    return wrap(cls)


def finite_valued(
    cls: T | None = None, *, labels: Mapping[str, str] | None = None
) -> T | Callable[[T], T]:
    """Register an Enum subclass as a finite-valued type.

    Usable bare (``@finite_valued``) or with labels overriding the textual
    name of individual members (``@finite_valued(labels={"Friday": "Fri"})``).
    Two members may share one label; lookups then resolve to the first.
    """
    return _decorator(FINITE, cls, labels)


def composite(
    cls: T | None = None, *, labels: Mapping[str, str] | None = None
) -> T | Callable[[T], T]:
    """Register a dataclass or NamedTuple class as a composite type.

    Apply it above ``@dataclass``. Fields whose names start with an underscore
    are not public and are left out of the type's table.
    """
    return _decorator(COMPOSITE, cls, labels)


def is_registered(cls: Any) -> bool:
    """Return whether ``cls`` was registered by one of the decorators."""
    return isinstance(cls, type) and cls in _registrations


def registration_of(cls: Any) -> Registration:
    """Return the registration for ``cls``, raising TypeRejected if there is none."""
    if not is_registered(cls):
        name = getattr(cls, "__name__", repr(cls))
        raise TypeRejected(
            f"'{name}' is not registered; decorate it with @finite_valued or @composite"
        )
    return _registrations[cls]


def kind_of(cls: Any) -> str:
    """Return FINITE or COMPOSITE for a registered type."""
    return registration_of(cls).kind


def describe(cls: Any) -> tuple[Descriptor, ...]:
    """Enumerate the named parts of a registered type in declaration order."""
    registration = registration_of(cls)

    if registration.kind == FINITE:
        return tuple(
            Descriptor(identity=member, name=registration.label_for(member.name))
            for member in cls
        )

    return tuple(
        Descriptor(
            identity=FieldAccessor(name=name, annotation=annotation),
            name=registration.label_for(name),
        )
        for name, annotation in _field_annotations(cls).items()
    )
