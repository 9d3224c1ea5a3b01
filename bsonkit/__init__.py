"""BSON value types, millisecond datetimes and extended JSON conversion."""

__version__ = "0.1.0"
__all__ = ["datetime", "values", "extjson", "extended"]