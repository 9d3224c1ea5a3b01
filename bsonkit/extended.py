"""Conversion between BSON values and their extended-document form.

An extended document is an ordinary document whose keys start with ``$`` and
which describes a BSON value that has no plain document counterpart, such as
``{"$oid": "..."}`` for an ObjectId.
"""

from __future__ import annotations

import base64
import binascii
import datetime as _stdlib_datetime
import math
import re
from collections.abc import Mapping
from typing import Any

from .datetime import DateTime
from .values import (
    Binary,
    DbPointer,
    Decimal128,
    ElementKind,
    Int64,
    JavaScriptCode,
    JavaScriptCodeWithScope,
    ObjectId,
    Regex,
    Special,
    Symbol,
    Timestamp,
    element_type,
    to_bson,
)

_I32_MIN, _I32_MAX = -(2**31), 2**31 - 1
_I64_MIN, _I64_MAX = -(2**63), 2**63 - 1
_U32_MAX = 2**32 - 1
_LARGEST_STRING_YEAR = 9999
_EPOCH_ORDINAL = _stdlib_datetime.date(1970, 1, 1).toordinal()

_INTEGER = re.compile(r"[+-]?[0-9]+", re.ASCII)
_HEX = re.compile(r"(?:[0-9a-fA-F]{2})*", re.ASCII)
_RFC3339 = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})[Tt ](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?"
    r"(?:([Zz])|([+-])(\d{2}):(\d{2}))",
    re.ASCII,
)


def _sorted_options(options: str) -> str:
    return "".join(sorted(options))


def _date_document(value: DateTime) -> dict:
    if value.millis >= 0:
        text = value.to_rfc3339()
        year = int(text.split("-", 1)[0])
        if year <= _LARGEST_STRING_YEAR:
            return {"$date": text}
    return {"$date": {"$numberLong": str(value.millis)}}


def to_extended_document(value: Any) -> dict:
    """Describe a BSON value that has no plain document form as an extended document.

    Raises ValueError for values that are already plain data (numbers, strings,
    booleans, null, arrays and documents) and for Decimal128 values.
    """
    if isinstance(value, Regex):
        return {
            "$regularExpression": {
                "pattern": value.pattern,
                "options": _sorted_options(value.options),
            }
        }
    if isinstance(value, JavaScriptCode):
        return {"$code": value.code}
    if isinstance(value, JavaScriptCodeWithScope):
        return {"$code": value.code, "$scope": value.scope}
    if isinstance(value, Timestamp):
        return {"$timestamp": {"t": to_bson(value.time), "i": to_bson(value.increment)}}
    if isinstance(value, Binary):
        return {
            "$binary": {
                "base64": base64.b64encode(value.data).decode("ascii"),
                "subType": f"{value.subtype:02x}",
            }
        }
    if isinstance(value, ObjectId):
        return {"$oid": value.to_hex()}
    if isinstance(value, DateTime):
        return _date_document(value)
    if isinstance(value, Symbol):
        return {"$symbol": value.name}
    if isinstance(value, Special):
        match value:
            case Special.UNDEFINED:
                return {"$undefined": True}
            case Special.MIN_KEY:
                return {"$minKey": 1}
            case Special.MAX_KEY:
                return {"$maxKey": 1}
    if isinstance(value, DbPointer):
        return {"$dbPointer": {"$ref": value.namespace, "$id": {"$oid": value.id.to_hex()}}}
    raise ValueError(f"cannot convert {format(value)!r} to an extended document")


def _kind(value: Any) -> ElementKind | None:
    try:
        return element_type(value)
    except (TypeError, OverflowError):
        return None


def _str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _document(value: Any) -> Mapping | None:
    return value if isinstance(value, Mapping) else None


def _i32(value: Any) -> int | None:
    return int(value) if _kind(value) is ElementKind.INT32 else None


def _i64(value: Any) -> int | None:
    return int(value) if _kind(value) is ElementKind.INT64 else None


def _parse_integer(text: str | None, low: int, high: int) -> int | None:
    if text is None or not _INTEGER.fullmatch(text):
        return None
    number = int(text)
    return number if low <= number <= high else None


def _parse_double(text: str | None) -> float | None:
    if text is None:
        return None
    if text == "Infinity":
        return math.inf
    if text == "-Infinity":
        return -math.inf
    if text == "NaN":
        return math.nan
    if not text or text != text.strip() or "_" in text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _parse_binary(doc: Mapping) -> Binary | None:
    binary = _document(doc.get("$binary"))
    if binary is None:
        return None
    encoded = _str(binary.get("base64"))
    subtype = _str(binary.get("subType"))
    if encoded is None or subtype is None:
        return None
    try:
        data = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        return None
    if not _HEX.fullmatch(subtype):
        return None
    subtype_bytes = bytes.fromhex(subtype)
    if len(subtype_bytes) != 1:
        return None
    return Binary(subtype_bytes[0], data)


def _parse_timestamp(doc: Mapping) -> Timestamp | None:
    timestamp = _document(doc.get("$timestamp"))
    if timestamp is None:
        return None
    time, increment = _i32(timestamp.get("t")), _i32(timestamp.get("i"))
    if time is not None and increment is not None:
        return Timestamp(time & _U32_MAX, increment & _U32_MAX)
    time, increment = _i64(timestamp.get("t")), _i64(timestamp.get("i"))
    if time is not None and increment is not None:
        if 0 <= time <= _U32_MAX and 0 <= increment <= _U32_MAX:
            return Timestamp(time, increment)
    return None


def _parse_regex(doc: Mapping) -> Regex | None:
    regex = _document(doc.get("$regularExpression"))
    if regex is None:
        return None
    pattern, options = _str(regex.get("pattern")), _str(regex.get("options"))
    if pattern is None or options is None:
        return None
    return Regex(pattern, _sorted_options(options))


def _parse_db_pointer(doc: Mapping) -> DbPointer | None:
    pointer = _document(doc.get("$dbPointer"))
    if pointer is None:
        return None
    namespace, oid = _str(pointer.get("$ref")), pointer.get("$id")
    if namespace is None or not isinstance(oid, ObjectId):
        return None
    return DbPointer(namespace, oid)


def _parse_rfc3339(text: str) -> DateTime | None:
    match = _RFC3339.fullmatch(text)
    if match is None:
        return None
    year, month, day, hour, minute, second = (int(part) for part in match.group(1, 2, 3, 4, 5, 6))
    fraction = match.group(7) or ""
    if hour > 23 or minute > 59 or second > 60:
        return None
    offset = 0
    if match.group(9):
        offset_hours, offset_minutes = int(match.group(10)), int(match.group(11))
        if offset_hours > 23 or offset_minutes > 59:
            return None
        offset = (offset_hours * 3600 + offset_minutes * 60) * (1 if match.group(9) == "+" else -1)
    try:
        days = _stdlib_datetime.date(year, month, day).toordinal() - _EPOCH_ORDINAL
    except ValueError:
        return None
    seconds = days * 86_400 + hour * 3600 + minute * 60 + second - offset
    millis = seconds * 1000 + int((fraction + "000")[:3])
    return DateTime.from_millis(millis)


def _parse_date(doc: Mapping) -> DateTime | None:
    value = doc.get("$date")
    millis = _i64(value)
    if millis is not None:
        return DateTime.from_millis(millis)
    text = _str(value)
    return _parse_rfc3339(text) if text is not None else None


def _is_one(value: Any) -> bool:
    return _kind(value) in (ElementKind.INT32, ElementKind.INT64) and value == 1


def _parse_special(doc: Mapping, keys: tuple[str, ...]) -> Any:
    match keys:
        case ("$oid",):
            text = _str(doc["$oid"])
            if text is not None:
                try:
                    return ObjectId.parse_str(text)
                except ValueError:
                    return None
        case ("$symbol",):
            text = _str(doc["$symbol"])
            return Symbol(text) if text is not None else None
        case ("$numberInt",):
            return _parse_integer(_str(doc["$numberInt"]), _I32_MIN, _I32_MAX)
        case ("$numberLong",):
            number = _parse_integer(_str(doc["$numberLong"]), _I64_MIN, _I64_MAX)
            return Int64(number) if number is not None else None
        case ("$numberDouble",):
            return _parse_double(_str(doc["$numberDouble"]))
        case ("$numberDecimalBytes",):
            binary = doc["$numberDecimalBytes"]
            if isinstance(binary, Binary) and binary.subtype == 0 and len(binary.data) == 16:
                return Decimal128(binary.data)
        case ("$binary",):
            return _parse_binary(doc)
        case ("$code",):
            code = _str(doc["$code"])
            return JavaScriptCode(code) if code is not None else None
        case ("$code", "$scope"):
            code, scope = _str(doc["$code"]), _document(doc["$scope"])
            if code is not None and scope is not None:
                return JavaScriptCodeWithScope(code, dict(scope))
        case ("$timestamp",):
            return _parse_timestamp(doc)
        case ("$regularExpression",):
            return _parse_regex(doc)
        case ("$dbPointer",):
            return _parse_db_pointer(doc)
        case ("$date",):
            return _parse_date(doc)
        case ("$minKey",):
            return Special.MIN_KEY if _is_one(doc["$minKey"]) else None
        case ("$maxKey",):
            return Special.MAX_KEY if _is_one(doc["$maxKey"]) else None
        case ("$undefined",):
            value = doc["$undefined"]
            return Special.UNDEFINED if value is True else None
    return None


def from_extended_document(doc: Mapping) -> Any:
    """Turn an extended document back into the BSON value it describes.

    Documents with more than two keys are returned as they are. A document
    that describes no value is returned with its sub-documents converted.
    """
    if len(doc) > 2:
        return doc
    keys = tuple(sorted(doc))
    value = _parse_special(doc, keys)
    if value is not None:
        return value
    return {
        key: from_extended_document(item) if isinstance(item, Mapping) else item
        for key, item in doc.items()
    }