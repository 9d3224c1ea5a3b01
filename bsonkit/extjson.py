"""Conversion of BSON values into relaxed and canonical extended JSON."""

from __future__ import annotations

import base64
import math
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from .datetime import DateTime
from .values import (
    Binary,
    DbPointer,
    ElementKind,
    JavaScriptCode,
    JavaScriptCodeWithScope,
    ObjectId,
    Regex,
    Special,
    Symbol,
    Timestamp,
    element_type,
)

_LARGEST_RELAXED_YEAR = 99999


def _special_double(value: float) -> dict | None:
    """The $numberDouble form for NaN and infinities, or None for finite values."""
    negative = math.copysign(1.0, value) < 0
    if math.isnan(value):
        return {"$numberDouble": "-NaN" if negative else "NaN"}
    if math.isinf(value):
        return {"$numberDouble": "-Infinity" if negative else "Infinity"}
    return None


def _relaxed_date(value: DateTime) -> dict:
    if value.millis >= 0:
        text = value.to_rfc3339()
        year = int(text.split("-", 1)[0])
        if year <= _LARGEST_RELAXED_YEAR:
            return {"$date": text}
    return {"$date": {"$numberLong": str(value.millis)}}


def _sorted_options(options: str) -> str:
    return "".join(sorted(options))


def _oid(value: ObjectId) -> dict:
    return {"$oid": value.to_hex()}


def to_relaxed_extjson(value: Any) -> Any:
    """Convert a BSON value into its relaxed extended JSON form.

    The result is built from dicts, lists, strings, numbers, booleans and None,
    ready to be passed to ``json.dumps``.
    """
    kind = element_type(value)
    match kind:
        case ElementKind.DOUBLE:
            special = _special_double(value)
            return special if special is not None else float(value)
        case ElementKind.STRING:
            return str(value)
        case ElementKind.ARRAY:
            return [to_relaxed_extjson(item) for item in value]
        case ElementKind.EMBEDDED_DOCUMENT:
            return {key: to_relaxed_extjson(item) for key, item in value.items()}
        case ElementKind.BOOLEAN:
            return bool(value)
        case ElementKind.NULL:
            return None
        case ElementKind.REGULAR_EXPRESSION:
            regex: Regex = value
            return {
                "$regularExpression": {
                    "pattern": regex.pattern,
                    "options": _sorted_options(regex.options),
                }
            }
        case ElementKind.JAVASCRIPT_CODE:
            code: JavaScriptCode = value
            return {"$code": code.code}
        case ElementKind.JAVASCRIPT_CODE_WITH_SCOPE:
            scoped: JavaScriptCodeWithScope = value
            return {"$code": scoped.code, "$scope": to_relaxed_extjson(scoped.scope)}
        case ElementKind.INT32 | ElementKind.INT64:
            return int(value)
        case ElementKind.TIMESTAMP:
            ts: Timestamp = value
            return {"$timestamp": {"t": ts.time, "i": ts.increment}}
        case ElementKind.BINARY:
            binary: Binary = value
            return {
                "$binary": {
                    "base64": base64.b64encode(binary.data).decode("ascii"),
                    "subType": f"{binary.subtype:02x}",
                }
            }
        case ElementKind.OBJECT_ID:
            return _oid(value)
        case ElementKind.DATE_TIME:
            return _relaxed_date(value)
        case ElementKind.SYMBOL:
            symbol: Symbol = value
            return {"$symbol": symbol.name}
        case ElementKind.DECIMAL128:
            raise ValueError("Decimal128 values have no extended JSON representation")
        case ElementKind.UNDEFINED:
            return {"$undefined": True}
        case ElementKind.MIN_KEY:
            return {"$minKey": 1}
        case ElementKind.MAX_KEY:
            return {"$maxKey": 1}
        case ElementKind.DB_POINTER:
            pointer: DbPointer = value
            return {"$dbPointer": {"$ref": pointer.namespace, "$id": _oid(pointer.id)}}
    raise TypeError(f"{type(value).__name__} is not a BSON value")


def _is_normal(value: float) -> bool:
    return math.isfinite(value) and abs(value) >= 2.2250738585072014e-308


def _canonical_double_text(value: float) -> str:
    number = Decimal(repr(value))
    if value == int(value):
        return format(number.to_integral_value(), "f") + ".0"
    return format(number, "f")


def to_canonical_extjson(value: Any) -> Any:
    """Convert a BSON value into its canonical extended JSON form."""
    kind = element_type(value)
    match kind:
        case ElementKind.INT32:
            return {"$numberInt": str(int(value))}
        case ElementKind.INT64:
            return {"$numberLong": str(int(value))}
        case ElementKind.DOUBLE if _is_normal(value):
            return {"$numberDouble": _canonical_double_text(value)}
        case ElementKind.DOUBLE if value == 0.0:
            negative = math.copysign(1.0, value) < 0
            return {"$numberDouble": "-0.0" if negative else "0.0"}
        case ElementKind.DATE_TIME:
            return {"$date": {"$numberLong": str(value.millis)}}
        case ElementKind.ARRAY:
            return [to_canonical_extjson(item) for item in value]
        case ElementKind.EMBEDDED_DOCUMENT:
            document: Mapping = value
            return {key: to_canonical_extjson(item) for key, item in document.items()}
        case ElementKind.JAVASCRIPT_CODE_WITH_SCOPE:
            return {"$code": value.code, "$scope": to_canonical_extjson(value.scope)}
    return to_relaxed_extjson(value)


__all__ = ["to_relaxed_extjson", "to_canonical_extjson", "Special"]