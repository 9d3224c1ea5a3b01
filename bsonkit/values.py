"""BSON value types and conversion of Python values into them."""

from __future__ import annotations

import base64
import datetime as _stdlib_datetime
import enum
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from .datetime import DateTime

_I32_MIN, _I32_MAX = -(2**31), 2**31 - 1
_I64_MIN, _I64_MAX = -(2**63), 2**63 - 1
_U32_MAX = 2**32 - 1
_U64_MASK = 2**64 - 1


class ElementKind(enum.IntEnum):
    """BSON element type codes."""

    DOUBLE = 0x01
    STRING = 0x02
    EMBEDDED_DOCUMENT = 0x03
    ARRAY = 0x04
    BINARY = 0x05
    UNDEFINED = 0x06
    OBJECT_ID = 0x07
    BOOLEAN = 0x08
    DATE_TIME = 0x09
    NULL = 0x0A
    REGULAR_EXPRESSION = 0x0B
    DB_POINTER = 0x0C
    JAVASCRIPT_CODE = 0x0D
    SYMBOL = 0x0E
    JAVASCRIPT_CODE_WITH_SCOPE = 0x0F
    INT32 = 0x10
    TIMESTAMP = 0x11
    INT64 = 0x12
    DECIMAL128 = 0x13
    MAX_KEY = 0x7F
    MIN_KEY = 0xFF


class Special(enum.Enum):
    """The BSON values that carry no data."""

    UNDEFINED = "undefined"
    MIN_KEY = "MinKey"
    MAX_KEY = "MaxKey"

    def __str__(self) -> str:
        return self.value


class Int64(int):
    """An integer stored as a 64-bit BSON integer regardless of its size."""

    def __new__(cls, value: int = 0) -> Int64:
        number = int.__new__(cls, value)
        if not _I64_MIN <= number <= _I64_MAX:
            raise OverflowError(f"{int(number)} does not fit in 64 bits")
        return number

    def __repr__(self) -> str:
        return f"Int64({int.__repr__(self)})"

    __str__ = int.__repr__


@dataclass(frozen=True, repr=False)
class ObjectId:
    """A 12-byte BSON object identifier."""

    data: bytes

    def __post_init__(self) -> None:
        data = bytes(self.data)
        if len(data) != 12:
            raise ValueError(f"an ObjectId needs 12 bytes, got {len(data)}")
        object.__setattr__(self, "data", data)

    @classmethod
    def from_bytes(cls, data: bytes) -> ObjectId:
        return cls(bytes(data))

    @classmethod
    def parse_str(cls, text: str) -> ObjectId:
        """Parse a 24-character hexadecimal string."""
        if len(text) != 24 or any(c not in "0123456789abcdefABCDEF" for c in text):
            raise ValueError(f"invalid ObjectId string: {text!r}")
        return cls(bytes.fromhex(text))

    def to_hex(self) -> str:
        return self.data.hex()

    def __str__(self) -> str:
        return self.to_hex()

    def __repr__(self) -> str:
        return f'ObjectId("{self.to_hex()}")'


@dataclass(frozen=True, order=True)
class Timestamp:
    """A BSON timestamp: seconds since the epoch and an ordinal within that second."""

    time: int
    increment: int

    def __post_init__(self) -> None:
        for name in ("time", "increment"):
            value = getattr(self, name)
            if not 0 <= value <= _U32_MAX:
                raise OverflowError(f"Timestamp {name} {value} is not an unsigned 32-bit value")

    @classmethod
    def from_int(cls, value: int) -> Timestamp:
        """Split a 64-bit value into time (high half) and increment (low half)."""
        bits = value & _U64_MASK
        return cls(bits >> 32, bits & _U32_MAX)

    def to_int(self) -> int:
        """Pack into a signed 64-bit integer, time in the high half."""
        bits = (self.time << 32) | self.increment
        return bits - 2**64 if bits > _I64_MAX else bits


@dataclass(frozen=True)
class Regex:
    """A BSON regular expression; options are single letters in alphabetical order."""

    pattern: str
    options: str = ""


@dataclass(frozen=True)
class JavaScriptCode:
    code: str


@dataclass
class JavaScriptCodeWithScope:
    code: str
    scope: dict = field(default_factory=dict)


@dataclass(frozen=True)
class Binary:
    """Binary data tagged with a one-byte subtype."""

    subtype: int
    data: bytes

    def __post_init__(self) -> None:
        if not 0 <= self.subtype <= 0xFF:
            raise ValueError(f"binary subtype {self.subtype} is not a byte")
        object.__setattr__(self, "data", bytes(self.data))


@dataclass(frozen=True)
class DbPointer:
    """A deprecated reference to a document in another collection."""

    namespace: str
    id: ObjectId


@dataclass(frozen=True)
class Symbol:
    """A deprecated BSON symbol."""

    name: str


@dataclass(frozen=True)
class Decimal128:
    """The 16 raw little-endian bytes of a 128-bit decimal."""

    data: bytes

    def __post_init__(self) -> None:
        data = bytes(self.data)
        if len(data) != 16:
            raise ValueError(f"a Decimal128 needs 16 bytes, got {len(data)}")
        object.__setattr__(self, "data", data)


_KIND_BY_TYPE: dict[type, ElementKind] = {
    float: ElementKind.DOUBLE,
    str: ElementKind.STRING,
    Regex: ElementKind.REGULAR_EXPRESSION,
    JavaScriptCode: ElementKind.JAVASCRIPT_CODE,
    JavaScriptCodeWithScope: ElementKind.JAVASCRIPT_CODE_WITH_SCOPE,
    Timestamp: ElementKind.TIMESTAMP,
    Binary: ElementKind.BINARY,
    ObjectId: ElementKind.OBJECT_ID,
    DateTime: ElementKind.DATE_TIME,
    Symbol: ElementKind.SYMBOL,
    Decimal128: ElementKind.DECIMAL128,
    DbPointer: ElementKind.DB_POINTER,
}

_KIND_BY_SPECIAL = {
    Special.UNDEFINED: ElementKind.UNDEFINED,
    Special.MIN_KEY: ElementKind.MIN_KEY,
    Special.MAX_KEY: ElementKind.MAX_KEY,
}


def element_type(value: Any) -> ElementKind:
    """The BSON element type a value is stored as."""
    if value is None:
        return ElementKind.NULL
    if isinstance(value, bool):
        return ElementKind.BOOLEAN
    if isinstance(value, Int64):
        return ElementKind.INT64
    if isinstance(value, int):
        if _I32_MIN <= value <= _I32_MAX:
            return ElementKind.INT32
        if _I64_MIN <= value <= _I64_MAX:
            return ElementKind.INT64
        raise OverflowError(f"{value} does not fit in 64 bits")
    if isinstance(value, Special):
        return _KIND_BY_SPECIAL[value]
    if isinstance(value, Mapping):
        return ElementKind.EMBEDDED_DOCUMENT
    if isinstance(value, (list, tuple)):
        return ElementKind.ARRAY
    for kind_type, kind in _KIND_BY_TYPE.items():
        if isinstance(value, kind_type):
            return kind
    raise TypeError(f"{type(value).__name__} is not a BSON value")


_PASSTHROUGH = (float, str, Int64, Special, *_KIND_BY_TYPE)


def to_bson(value: Any) -> Any:
    """Convert a Python value into the normalised form used for BSON values.

    Integers become plain ints when they fit in 32 bits and Int64 otherwise,
    datetimes become DateTime, 12-byte strings become ObjectId, mappings become
    dicts with string keys and other iterables become lists.
    """
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, Int64):
        return value
    if isinstance(value, int):
        if _I32_MIN <= value <= _I32_MAX:
            return int(value)
        return Int64(value)
    if isinstance(value, _PASSTHROUGH):
        return value
    if isinstance(value, _stdlib_datetime.datetime):
        return DateTime.from_datetime(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        if len(value) != 12:
            raise TypeError("only 12-byte values convert to BSON (as an ObjectId)")
        return ObjectId.from_bytes(value)
    if isinstance(value, Mapping):
        converted = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"document keys must be strings, got {type(key).__name__}")
            converted[key] = to_bson(item)
        return converted
    if isinstance(value, Iterable):
        return [to_bson(item) for item in value]
    raise TypeError(f"{type(value).__name__} cannot be converted to BSON")


def _format_double(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value == int(value):
        text = str(int(value))
        return "-0" if text == "0" and math.copysign(1.0, value) < 0 else text
    return format(Decimal(repr(value)), "f")


def format_value(value: Any) -> str:
    """Render a BSON value as human-readable text."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return int.__repr__(value)
    if isinstance(value, float):
        return _format_double(value)
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, Mapping):
        if not value:
            return "{}"
        items = ", ".join(f'"{key}": {format_value(item)}' for key, item in value.items())
        return f"{{ {items} }}"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(format_value(item) for item in value) + "]"
    if isinstance(value, Regex):
        return f"/{value.pattern}/{value.options}"
    if isinstance(value, (JavaScriptCode, JavaScriptCodeWithScope)):
        return value.code
    if isinstance(value, Timestamp):
        return f"Timestamp({value.time}, {value.increment})"
    if isinstance(value, Binary):
        encoded = base64.b64encode(value.data).decode("ascii")
        return f"Binary({value.subtype:#x}, {encoded})"
    if isinstance(value, ObjectId):
        return f'ObjectId("{value.to_hex()}")'
    if isinstance(value, DateTime):
        return f'DateTime("{value}")'
    if isinstance(value, Symbol):
        return f'Symbol("{value.name}")'
    if isinstance(value, Decimal128):
        return f"Decimal128({value.data.hex()})"
    if isinstance(value, Special):
        return str(value)
    if isinstance(value, DbPointer):
        return f"DbPointer({value.namespace}, {value.id})"
    raise TypeError(f"{type(value).__name__} is not a BSON value")