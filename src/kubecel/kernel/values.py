"""Conversion of JSON-like Python values into CEL values.

The value bridge turns decoded JSON (None, bool, int, float, str, bytes,
list, dict) into ``celpy.celtypes`` values that can be bound as ``self`` and
``oldSelf``. The schema-aware variants additionally honour the ``format`` of
each schema node:

- ``date-time`` strings become ``TimestampType`` when they parse as RFC 3339
- ``duration`` strings become ``DurationType`` when they parse as Go durations
- anything that does not parse stays a ``StringType``; conversion never fails

Number conversion priority (same as the JSON decoder sees them):
1. bool -> BoolType (checked before int)
2. int in int64 range -> IntType
3. int in uint64 range -> UintType
4. anything else numeric -> DoubleType
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional

from celpy import celtypes

from kubecel.codes import SchemaFormat
from .formats import parse_duration_nanos, parse_rfc3339, split_nanos
from .schema import CompiledSchema, RawSchemaNode, SchemaNode

logger = logging.getLogger(__name__)

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_UINT64_MAX = (1 << 64) - 1


def to_value(value: Any) -> Any:
    """Convert a JSON-like value to a CEL value, ignoring any schema."""
    if value is None:
        return None
    elif isinstance(value, bool):
        return celtypes.BoolType(value)
    elif isinstance(value, int):
        return _convert_int(value)
    elif isinstance(value, float):
        return celtypes.DoubleType(value)
    elif isinstance(value, str):
        return celtypes.StringType(value)
    elif isinstance(value, (bytes, bytearray)):
        return celtypes.BytesType(bytes(value))
    elif isinstance(value, (list, tuple)):
        return celtypes.ListType([to_value(item) for item in value])
    elif isinstance(value, Mapping):
        return celtypes.MapType({
            _convert_key(key): to_value(item) for key, item in value.items()
        })
    else:
        raise TypeError(f"Cannot convert {type(value).__name__} to a CEL value")


def to_value_with_schema(value: Any, schema: Any) -> Any:
    """Convert a value using format hints from a raw schema dict.

    Args:
        value: Decoded JSON value
        schema: Raw schema node (dict); anything else converts as unschemaed

    Returns:
        CEL value
    """
    return _convert(value, RawSchemaNode.wrap(schema))


def to_value_with_compiled_schema(value: Any, compiled: Optional[CompiledSchema]) -> Any:
    """Convert a value using format hints from a compiled schema tree.

    Produces exactly what ``to_value_with_schema`` produces for the raw schema
    the tree was compiled from.
    """
    return _convert(value, compiled)


def convert_for_node(value: Any, node: Optional[SchemaNode]) -> Any:
    """Convert a value against either schema node shape (raw or compiled)."""
    return _convert(value, node)


def _convert(value: Any, node: Optional[SchemaNode]) -> Any:
    if node is None:
        return to_value(value)

    if isinstance(value, str):
        return _convert_string(value, node.format)

    if isinstance(value, Mapping) and _accepts(node, "object"):
        additional = node.additional_properties
        converted = {}
        for key, item in value.items():
            child = node.child(key) if isinstance(key, str) else None
            if child is None and not node.has_property(key):
                child = additional
            converted[_convert_key(key)] = _convert(item, child)
        return celtypes.MapType(converted)

    if isinstance(value, (list, tuple)) and _accepts(node, "array"):
        items = node.items
        return celtypes.ListType([_convert(item, items) for item in value])

    return to_value(value)


def _accepts(node: SchemaNode, kind: str) -> bool:
    # An untyped node follows the instance's shape.
    return node.type is None or node.type == kind


def _convert_string(text: str, fmt: Optional[str]) -> Any:
    if fmt == SchemaFormat.DATE_TIME.value:
        try:
            return celtypes.TimestampType(parse_rfc3339(text))
        except ValueError as e:
            logger.debug("date-time value %r kept as string: %s", text, e)
    elif fmt == SchemaFormat.DURATION.value:
        try:
            seconds, nanos = split_nanos(parse_duration_nanos(text))
            return celtypes.DurationType(seconds=seconds, nanos=nanos)
        except ValueError as e:
            logger.debug("duration value %r kept as string: %s", text, e)
    return celtypes.StringType(text)


def _convert_int(value: int) -> Any:
    if _INT64_MIN <= value <= _INT64_MAX:
        return celtypes.IntType(value)
    if 0 <= value <= _UINT64_MAX:
        return celtypes.UintType(value)
    return celtypes.DoubleType(float(value))


def _convert_key(key: Any) -> Any:
    if isinstance(key, str):
        return celtypes.StringType(key)
    return to_value(key)
