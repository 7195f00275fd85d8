"""Kubernetes CEL extension functions, grouped for ``build_context``.

Receiver-style calls (``'abc'.charAt(1)``) arrive with the receiver as the
first argument. Names shared between value kinds (``indexOf``,
``lastIndexOf``, ``reverse``) live in the DISPATCH group, which matches on the
receiver's CEL type and rejects anything else with a TypeError.
"""

import re
from typing import Any, Optional

from celpy import celtypes

from .environment import FunctionGroup


def _require_int(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{what} must be an int, got {type(value).__name__}")
    return int(value)


# -- strings ---------------------------------------------------------------


def char_at(text: celtypes.StringType, index: Any) -> celtypes.StringType:
    i = _require_int(index, "charAt index")
    if i == len(text):
        return celtypes.StringType("")
    if i < 0 or i > len(text):
        raise ValueError(f"charAt index out of range: {i}")
    return celtypes.StringType(text[i])


def lower_ascii(text: celtypes.StringType) -> celtypes.StringType:
    return celtypes.StringType("".join(
        chr(ord(c) + 32) if "A" <= c <= "Z" else c for c in text
    ))


def upper_ascii(text: celtypes.StringType) -> celtypes.StringType:
    return celtypes.StringType("".join(
        chr(ord(c) - 32) if "a" <= c <= "z" else c for c in text
    ))


def trim(text: celtypes.StringType) -> celtypes.StringType:
    return celtypes.StringType(text.strip())


def replace(
    text: celtypes.StringType,
    old: celtypes.StringType,
    new: celtypes.StringType,
    limit: Any = -1,
) -> celtypes.StringType:
    n = _require_int(limit, "replace limit")
    if n == 0:
        return celtypes.StringType(text)
    return celtypes.StringType(text.replace(old, new, n if n > 0 else -1))


def split(text: celtypes.StringType, sep: celtypes.StringType, limit: Any = -1) -> celtypes.ListType:
    n = _require_int(limit, "split limit")
    if n == 0:
        return celtypes.ListType([])
    if sep == "":
        chars = list(text)
        if 0 < n < len(chars):
            chars = chars[:n - 1] + ["".join(chars[n - 1:])]
        parts = chars
    else:
        parts = text.split(sep, n - 1 if n > 0 else -1)
    return celtypes.ListType([celtypes.StringType(p) for p in parts])


def substring(text: celtypes.StringType, start: Any, end: Optional[Any] = None) -> celtypes.StringType:
    s = _require_int(start, "substring start")
    e = len(text) if end is None else _require_int(end, "substring end")
    if s < 0 or s > len(text) or e < 0 or e > len(text):
        raise ValueError(f"substring index out of range: [{s}:{e}]")
    if s > e:
        raise ValueError(f"substring start {s} is after end {e}")
    return celtypes.StringType(text[s:e])


def join(items: celtypes.ListType, sep: celtypes.StringType = celtypes.StringType("")) -> celtypes.StringType:
    for item in items:
        if not isinstance(item, str):
            raise TypeError(f"join requires a list of strings, found {type(item).__name__}")
    return celtypes.StringType(sep.join(items))


# -- lists -----------------------------------------------------------------


def is_sorted(items: celtypes.ListType) -> celtypes.BoolType:
    return celtypes.BoolType(all(items[i] <= items[i + 1] for i in range(len(items) - 1)))


def list_sum(items: celtypes.ListType) -> Any:
    if not items:
        return celtypes.IntType(0)
    total = items[0]
    for item in items[1:]:
        if type(item) is not type(total):
            raise TypeError(f"sum requires homogeneous numbers, found {type(item).__name__}")
        total = total + item
    return total


def list_min(items: celtypes.ListType) -> Any:
    if not items:
        raise ValueError("min called on an empty list")
    return min(items)


def list_max(items: celtypes.ListType) -> Any:
    if not items:
        raise ValueError("max called on an empty list")
    return max(items)


def list_slice(items: celtypes.ListType, start: Any, end: Any) -> celtypes.ListType:
    s = _require_int(start, "slice start")
    e = _require_int(end, "slice end")
    if s < 0 or e > len(items) or s > e:
        raise ValueError(f"slice index out of range: [{s}:{e}]")
    return celtypes.ListType(items[s:e])


# -- regex -----------------------------------------------------------------


def find(text: celtypes.StringType, pattern: celtypes.StringType) -> celtypes.StringType:
    match = re.search(pattern, text)
    return celtypes.StringType(match.group(0) if match else "")


def find_all(text: celtypes.StringType, pattern: celtypes.StringType, limit: Any = -1) -> celtypes.ListType:
    n = _require_int(limit, "findAll limit")
    found = []
    for match in re.finditer(pattern, text):
        if 0 <= n <= len(found):
            break
        found.append(celtypes.StringType(match.group(0)))
    return celtypes.ListType(found)


# -- dispatch on receiver type ---------------------------------------------


def index_of(receiver: Any, needle: Any, offset: Any = 0) -> celtypes.IntType:
    if isinstance(receiver, celtypes.StringType):
        start = _require_int(offset, "indexOf offset")
        if start < 0 or start > len(receiver):
            raise ValueError(f"indexOf offset out of range: {start}")
        return celtypes.IntType(receiver.find(needle, start))
    if isinstance(receiver, celtypes.ListType):
        for i, item in enumerate(receiver):
            if item == needle:
                return celtypes.IntType(i)
        return celtypes.IntType(-1)
    raise TypeError(f"indexOf not supported on {type(receiver).__name__}")


def last_index_of(receiver: Any, needle: Any, offset: Optional[Any] = None) -> celtypes.IntType:
    if isinstance(receiver, celtypes.StringType):
        if offset is None:
            return celtypes.IntType(receiver.rfind(needle))
        end = _require_int(offset, "lastIndexOf offset")
        if end < 0 or end > len(receiver):
            raise ValueError(f"lastIndexOf offset out of range: {end}")
        return celtypes.IntType(receiver.rfind(needle, 0, end + len(needle)))
    if isinstance(receiver, celtypes.ListType):
        for i in range(len(receiver) - 1, -1, -1):
            if receiver[i] == needle:
                return celtypes.IntType(i)
        return celtypes.IntType(-1)
    raise TypeError(f"lastIndexOf not supported on {type(receiver).__name__}")


def reverse(receiver: Any) -> Any:
    if isinstance(receiver, celtypes.StringType):
        return celtypes.StringType(receiver[::-1])
    if isinstance(receiver, celtypes.ListType):
        return celtypes.ListType(list(reversed(receiver)))
    raise TypeError(f"reverse not supported on {type(receiver).__name__}")


STRINGS = FunctionGroup("strings", {
    "charAt": char_at,
    "lowerAscii": lower_ascii,
    "upperAscii": upper_ascii,
    "trim": trim,
    "replace": replace,
    "split": split,
    "substring": substring,
    "join": join,
})

LISTS = FunctionGroup("lists", {
    "isSorted": is_sorted,
    "sum": list_sum,
    "min": list_min,
    "max": list_max,
    "slice": list_slice,
})

REGEX = FunctionGroup("regex", {
    "find": find,
    "findAll": find_all,
})

DISPATCH = FunctionGroup("dispatch", {
    "indexOf": index_of,
    "lastIndexOf": last_index_of,
    "reverse": reverse,
})

ALL_GROUPS = (STRINGS, LISTS, REGEX, DISPATCH)
