import json

import pytest

from bsonkit.datetime import DateTime
from bsonkit.extjson import to_canonical_extjson, to_relaxed_extjson
from bsonkit.values import (
    Binary,
    DbPointer,
    Decimal128,
    Int64,
    JavaScriptCode,
    JavaScriptCodeWithScope,
    ObjectId,
    Regex,
    Special,
    Symbol,
    Timestamp,
)


def test_to_json_document():
    doc = {
        "_id": ObjectId.from_bytes(b"abcdefghijkl"),
        "first": 1,
        "second": "foo",
        "alphanumeric": "bar",
    }
    data = to_relaxed_extjson(doc)
    assert data == {
        "_id": {"$oid": "6162636465666768696a6b6c"},
        "first": 1,
        "second": "foo",
        "alphanumeric": "bar",
    }
    assert list(data) == ["_id", "first", "second", "alphanumeric"]


def test_relaxed_output_is_json_serialisable():
    doc = {"a": [1, 2.5, True, None], "b": Timestamp(1, 2)}
    text = json.dumps(to_relaxed_extjson(doc))
    assert json.loads(text) == {
        "a": [1, 2.5, True, None],
        "b": {"$timestamp": {"t": 1, "i": 2}},
    }


@pytest.mark.parametrize(
    "value, expected",
    [
        (float("nan"), "NaN"),
        (-float("nan"), "-NaN"),
        (float("inf"), "Infinity"),
        (float("-inf"), "-Infinity"),
    ],
)
def test_special_doubles(value, expected):
    assert to_relaxed_extjson(value) == {"$numberDouble": expected}
    assert to_canonical_extjson(value) == {"$numberDouble": expected}


def test_relaxed_scalars():
    assert to_relaxed_extjson(1.5) == 1.5
    assert to_relaxed_extjson(Int64(7)) == 7
    assert to_relaxed_extjson("x") == "x"
    assert to_relaxed_extjson(False) is False
    assert to_relaxed_extjson(None) is None


def test_regex_options_sorted():
    assert to_relaxed_extjson(Regex("abc", "mi")) == {
        "$regularExpression": {"pattern": "abc", "options": "im"}
    }


def test_code_and_symbol():
    assert to_relaxed_extjson(JavaScriptCode("console.log(1)")) == {"$code": "console.log(1)"}
    assert to_relaxed_extjson(Symbol("ok")) == {"$symbol": "ok"}


def test_code_with_scope():
    value = JavaScriptCodeWithScope("x", {"x": 12})
    assert to_relaxed_extjson(value) == {"$code": "x", "$scope": {"x": 12}}
    assert to_canonical_extjson(value) == {
        "$code": "x",
        "$scope": {"x": {"$numberInt": "12"}},
    }


def test_binary():
    assert to_relaxed_extjson(Binary(0x00, b"\xff\xff")) == {
        "$binary": {"base64": "//8=", "subType": "00"}
    }
    assert to_relaxed_extjson(Binary(0x80, b"\x01\x02\x03\x04")) == {
        "$binary": {"base64": "AQIDBA==", "subType": "80"}
    }


def test_specials():
    assert to_relaxed_extjson(Special.UNDEFINED) == {"$undefined": True}
    assert to_relaxed_extjson(Special.MIN_KEY) == {"$minKey": 1}
    assert to_relaxed_extjson(Special.MAX_KEY) == {"$maxKey": 1}


def test_db_pointer():
    pointer = DbPointer("db.coll", ObjectId.parse_str("507f1f77bcf86cd799439011"))
    assert to_relaxed_extjson(pointer) == {
        "$dbPointer": {"$ref": "db.coll", "$id": {"$oid": "507f1f77bcf86cd799439011"}}
    }


def test_relaxed_dates():
    assert to_relaxed_extjson(DateTime(0)) == {"$date": "1970-01-01T00:00:00Z"}
    assert to_relaxed_extjson(DateTime(1356351330501)) == {"$date": "2012-12-24T12:15:30.501Z"}
    assert to_relaxed_extjson(DateTime(-284643869501)) == {
        "$date": {"$numberLong": "-284643869501"}
    }
    assert to_relaxed_extjson(DateTime.MAX) == {
        "$date": {"$numberLong": "9223372036854775807"}
    }


def test_canonical_dates():
    assert to_canonical_extjson(DateTime(1356351330501)) == {
        "$date": {"$numberLong": "1356351330501"}
    }


def test_canonical_integers():
    assert to_canonical_extjson(1) == {"$numberInt": "1"}
    assert to_canonical_extjson(-2147483648) == {"$numberInt": "-2147483648"}
    assert to_canonical_extjson(Int64(1)) == {"$numberLong": "1"}
    assert to_canonical_extjson(2**40) == {"$numberLong": "1099511627776"}


@pytest.mark.parametrize(
    "value, expected",
    [
        (1.0, "1.0"),
        (-1.0, "-1.0"),
        (1.0001, "1.0001"),
        (-1.0001, "-1.0001"),
        (0.0, "0.0"),
        (-0.0, "-0.0"),
        (1e-05, "0.00001"),
        (1.7976931348623157e308, "17976931348623157" + "0" * 292 + ".0"),
    ],
)
def test_canonical_doubles(value, expected):
    assert to_canonical_extjson(value) == {"$numberDouble": expected}


def test_canonical_subnormal_falls_back_to_number():
    assert to_canonical_extjson(5e-324) == 5e-324


def test_canonical_nested():
    doc = {"a": [1, Int64(2)], "b": {"c": 1.5}, "t": Timestamp(3, 4)}
    assert to_canonical_extjson(doc) == {
        "a": [{"$numberInt": "1"}, {"$numberLong": "2"}],
        "b": {"c": {"$numberDouble": "1.5"}},
        "t": {"$timestamp": {"t": 3, "i": 4}},
    }


def test_decimal128_is_rejected():
    with pytest.raises(ValueError):
        to_relaxed_extjson(Decimal128(bytes(16)))
    with pytest.raises(ValueError):
        to_canonical_extjson({"d": Decimal128(bytes(16))})


def test_non_bson_value_is_rejected():
    with pytest.raises(TypeError):
        to_relaxed_extjson(object())