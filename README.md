# bsonkit

BSON value types, millisecond-precision datetimes, and conversion of BSON values
to and from MongoDB extended JSON forms. It uses only the standard library.

## Install

```
pip install bsonkit
```

To run the tests:

```
pip install "bsonkit[test]"
pytest
```

## Value types (`bsonkit.values`)

Python's own `float`, `str`, `bool`, `None`, `int`, `list` and `dict` stand for the
matching BSON types. An `int` that fits in 32 bits is a BSON int32. A larger one is
an int64. The other BSON types have classes of their own:

- `ObjectId`: 12 bytes. Build it with `ObjectId.from_bytes(data)` or
  `ObjectId.parse_str(hex_text)`, and read it back with `to_hex()`.
- `Timestamp(time, increment)`: both parts are unsigned 32-bit values, and
  timestamps are ordered. `to_int()` and `Timestamp.from_int(value)` pack the two
  parts into one 64-bit integer and unpack them again.
- `Regex(pattern, options)`, `JavaScriptCode(code)` and
  `JavaScriptCodeWithScope(code, scope)`.
- `Binary(subtype, data)`: the subtype is one byte.
- `DbPointer(namespace, id)` and `Symbol(name)`, both deprecated in BSON.
- `Decimal128(data)`: the 16 raw bytes of a 128-bit decimal.
- `Int64`: an `int` that is always stored as a 64-bit integer.
- `Special`: `UNDEFINED`, `MIN_KEY` and `MAX_KEY`.

`ElementKind` lists the BSON element type codes. Three helpers work on any value:

- `element_type(value)` returns the value's `ElementKind`.
- `to_bson(value)` normalises a Python value:
  - integers become `int` or `Int64`;
  - `datetime.datetime` becomes `DateTime`;
  - a 12-byte `bytes` value becomes an `ObjectId`;
  - mappings become dicts with string keys;
  - other iterables become lists.
- `format_value(value)` renders a value as readable text.

```python
from bsonkit.values import ObjectId, Timestamp, element_type, to_bson, format_value

oid = ObjectId.parse_str("541b1a00e8a23afa832b218e")
oid.to_hex()                       # '541b1a00e8a23afa832b218e'

ts = Timestamp(time=1, increment=2)
Timestamp.from_int(ts.to_int()) == ts   # True

element_type(1.5)                  # ElementKind.DOUBLE
to_bson(2**40)                     # Int64(1099511627776)
format_value({"a": "foo", "b": {"ok": "then"}})
# '{ "a": "foo", "b": { "ok": "then" } }'
```

## Datetimes (`bsonkit.datetime`)

`DateTime` holds a signed 64-bit count of milliseconds since the Unix epoch, in UTC.
`DateTime.MIN` and `DateTime.MAX` are the two ends of that range.

It converts in these ways:

- `from_millis` builds a value from a count of milliseconds.
- `now` gives the current time.
- `from_datetime` and `to_datetime` convert to and from `datetime.datetime`. A naive
  datetime is taken as UTC. Values beyond the range of `datetime` are clamped to it.
- `from_timestamp` and `to_timestamp` convert to and from POSIX seconds.
- `to_rfc3339` gives RFC 3339 text.

```python
from bsonkit.datetime import DateTime

dt = DateTime.from_millis(1234)
dt.to_timestamp()                  # 1.234
dt.to_rfc3339()                    # '1970-01-01T00:00:01.234Z'
str(dt)                            # '1970-01-01 00:00:01.234 UTC'
```

## Extended JSON (`bsonkit.extjson`)

`to_relaxed_extjson(value)` and `to_canonical_extjson(value)` turn a BSON value into
plain dicts, lists, strings, numbers, booleans and `None`. The result is ready for
`json.dumps`.

```python
from bsonkit.extjson import to_relaxed_extjson, to_canonical_extjson

to_canonical_extjson({"x": 1})     # {'x': {'$numberInt': '1'}}
to_relaxed_extjson({"x": 1})       # {'x': 1}
```

A `Decimal128` value has no extended JSON form here, and both functions raise
`ValueError` for it.

## Extended documents (`bsonkit.extended`)

`to_extended_document(value)` describes a non-plain value, such as an ObjectId, a
date or a regex, as a `$`-keyed document. It raises `ValueError` in two cases:

- for plain data such as numbers, strings, arrays and documents;
- for `Decimal128`.

`from_extended_document(doc)` turns such a document back into the value it
describes, in these ways:

- A document that describes no value comes back with its sub-documents converted.
- A document with more than two keys comes back unchanged.

```python
from bsonkit.extended import from_extended_document

from_extended_document({"$oid": "507f1f77bcf86cd799439011"})
# ObjectId("507f1f77bcf86cd799439011")
```

## What it does not do

bsonkit has no BSON wire format. It does not encode documents to bytes or decode
them from bytes, and it cannot read or write BSON files or streams.

It does not map user-defined classes to and from documents.

`Decimal128` is kept only as raw bytes. There is no decimal arithmetic, and there is
no conversion to or from text.

`from_extended_document` reads parsed dicts, not JSON text. Values nested inside one
extended form are not converted first. A `$dbPointer` whose `$id` is still an `$oid`
document therefore comes back as a plain dict.