"""Tests for delimited text encoding of composite types."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from typing import NamedTuple, Optional

import pytest

from named_tables import (
    DEFAULT_DELIMITER,
    TypeRejected,
    UnsupportedField,
    composite,
    csv_encode,
    csv_header,
    csv_row,
    finite_valued,
    register_renderer,
)
from named_tables.records import field_renderings
from named_tables.table import composite_table


@composite
@dataclass
class Account:
    name: str
    password: str
    karma: int
    cash: int


ACCOUNTS = [
    Account("John Doe", "secret", 42, 0),
    Account("Max Mustermann", "****", 1, 45678),
]


@finite_valued(labels={"ADMIN": "admin"})
class Role(Enum):
    ADMIN = 1
    GUEST = 2


class Plain(Enum):
    A = 1


@composite(labels={"joined": "member_since"})
@dataclass
class Member:
    nick: str
    role: Role
    joined: date
    score: Optional[int] = None
    ratio: float = 0.5
    active: bool = True


@composite
@dataclass
class Ledger:
    balance: Decimal
    share: Fraction
    updated: datetime


@composite
@dataclass
class Tagged:
    title: str
    tags: list[str]


@composite
@dataclass
class Wrapper:
    inner: Account


@composite
@dataclass
class Flagged:
    flag: Plain


class Money:
    def __init__(self, cents: int) -> None:
        self.cents = cents


register_renderer(Money, lambda money: f"{money.cents // 100}.{money.cents % 100:02d}")


@composite
@dataclass
class Invoice:
    number: int
    total: Money


@composite
class Coordinate(NamedTuple):
    lat: float
    lon: float


class Stamp:
    def __init__(self, code: str) -> None:
        self.code = code


@composite
@dataclass
class Parcel:
    weight: int
    stamp: Stamp


class TestHeader:
    """Tests for csv_header."""

    def test_header(self):
        """The header lists field names in declaration order."""
        assert csv_header(Account) == "name, password, karma, cash"

    def test_labels(self):
        assert csv_header(Member) == "nick, role, member_since, score, ratio, active"

    def test_custom_delimiter(self):
        assert csv_header(Account, delimiter=";") == "name;password;karma;cash"

    def test_default_delimiter(self):
        assert DEFAULT_DELIMITER == ", "

    def test_unsupported_field_does_not_affect_header(self):
        """Header generation only reads names, so it never fails."""
        assert csv_header(Tagged) == "title, tags"

    def test_finite_type_rejected(self):
        with pytest.raises(TypeRejected):
            csv_header(Role)


class TestRow:
    """Tests for csv_row."""

    def test_row(self):
        assert csv_row(ACCOUNTS[0]) == "John Doe, secret, 42, 0"

    def test_custom_delimiter(self):
        assert csv_row(ACCOUNTS[1], delimiter="|") == "Max Mustermann|****|1|45678"

    def test_natural_rendering(self):
        """Each field is rendered from its declared type."""
        member = Member(nick="ada", role=Role.ADMIN, joined=date(2024, 1, 31), score=7)
        assert csv_row(member) == "ada, admin, 2024-01-31, 7, 0.5, True"

    def test_optional_none_is_empty(self):
        member = Member(nick="bob", role=Role.GUEST, joined=date(2023, 12, 1), active=False)
        assert csv_row(member) == "bob, GUEST, 2023-12-01, , 0.5, False"

    def test_numeric_and_time_types(self):
        ledger = Ledger(
            balance=Decimal("10.50"),
            share=Fraction(1, 3),
            updated=datetime(2024, 5, 6, 7, 8, 9),
        )
        assert csv_row(ledger) == "10.50, 1/3, 2024-05-06T07:08:09"

    def test_registered_renderer(self):
        assert csv_row(Invoice(number=17, total=Money(1234))) == "17, 12.34"

    def test_namedtuple(self):
        assert csv_row(Coordinate(52.5, 13.4)) == "52.5, 13.4"

    def test_no_escaping(self):
        """Values containing the delimiter are written as they are."""
        account = Account("Doe, John", "a, b", 1, 2)
        assert csv_row(account) == "Doe, John, a, b, 1, 2"

    def test_list_field_unsupported(self):
        """A field with no textual rendering fails the row."""
        with pytest.raises(UnsupportedField) as exc_info:
            csv_row(Tagged(title="x", tags=["a"]))
        assert exc_info.value.owner is Tagged
        assert exc_info.value.field == "tags"

    def test_nested_composite_unsupported(self):
        with pytest.raises(UnsupportedField, match="inner"):
            csv_row(Wrapper(inner=ACCOUNTS[0]))

    def test_unregistered_enum_unsupported(self):
        with pytest.raises(UnsupportedField):
            csv_row(Flagged(flag=Plain.A))

    def test_unsupported_field_is_type_error(self):
        with pytest.raises(TypeError):
            csv_row(Tagged(title="x", tags=[]))

    def test_finite_value_rejected(self):
        with pytest.raises(TypeRejected):
            csv_row(Role.ADMIN)


class TestEncode:
    """Tests for csv_encode."""

    def test_encode(self):
        """Header then one row per record, each line ending in a newline."""
        assert csv_encode(Account, ACCOUNTS) == (
            "name, password, karma, cash\n"
            "John Doe, secret, 42, 0\n"
            "Max Mustermann, ****, 1, 45678\n"
        )

    def test_empty(self):
        """With no records only the header is written."""
        assert csv_encode(Account, []) == "name, password, karma, cash\n"

    def test_any_iterable(self):
        """Records can come from any finite iterable, in traversal order."""
        encoded = csv_encode(Account, (a for a in reversed(ACCOUNTS)))
        assert encoded.splitlines()[1:] == [
            "Max Mustermann, ****, 1, 45678",
            "John Doe, secret, 42, 0",
        ]

    def test_custom_delimiter(self):
        assert csv_encode(Coordinate, [Coordinate(1.0, 2.0)], delimiter=",") == (
            "lat,lon\n1.0,2.0\n"
        )

    def test_deterministic(self):
        """Encoding the same records twice gives identical text."""
        assert csv_encode(Account, ACCOUNTS) == csv_encode(Account, ACCOUNTS)
        assert csv_header(Account) == csv_header(Account)

    def test_unsupported_field(self):
        with pytest.raises(UnsupportedField):
            csv_encode(Tagged, [Tagged(title="x", tags=["a"])])

    def test_unsupported_field_without_rows(self):
        """Rendering only fails when there is a row to render."""
        assert csv_encode(Tagged, []) == "title, tags\n"


class TestFieldTypes:
    """Tests for resolving field types when rows are rendered."""

    def test_local_types(self):
        """Types defined inside a function are found through the values."""

        @finite_valued(labels={"HIGH": "high"})
        class Level(Enum):
            LOW = 1
            HIGH = 2

        @composite
        @dataclass
        class Reading:
            level: Level
            value: int

        assert csv_header(Reading) == "level, value"
        assert csv_encode(Reading, [Reading(Level.HIGH, 3), Reading(Level.LOW, 0)]) == (
            "level, value\n"
            "high, 3\n"
            "LOW, 0\n"
        )

    def test_local_type_without_rendering(self):
        class Blob:
            pass

        @composite
        @dataclass
        class Upload:
            name: str
            blob: Blob

        assert csv_header(Upload) == "name, blob"
        with pytest.raises(UnsupportedField) as exc_info:
            csv_row(Upload(name="a", blob=Blob()))
        assert exc_info.value.field == "blob"
        assert exc_info.value.field_type is Blob

    def test_local_namedtuple(self):
        @finite_valued
        class Axis(Enum):
            X = 0
            Y = 1

        @composite
        class Tick(NamedTuple):
            axis: Axis
            at: float

        assert csv_header(Tick) == "axis, at"
        assert csv_row(Tick(Axis.Y, 0.25)) == "Y, 0.25"

    def test_renderers_resolved_once(self):
        table = composite_table(Account)
        assert field_renderings(table) is field_renderings(table)
        assert [r.field_type for r in field_renderings(table)] == [str, str, int, int]

    def test_renderer_registered_later(self):
        """Registering a renderer applies to types already encoded."""
        parcel = Parcel(weight=2, stamp=Stamp("DE-1"))
        with pytest.raises(UnsupportedField, match="stamp"):
            csv_row(parcel)

        register_renderer(Stamp, lambda stamp: stamp.code)
        assert csv_row(parcel) == "2, DE-1"
