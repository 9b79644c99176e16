"""
CBOR helpers shared by the envelope, payload and schema decoders.

cbor2 turns the wire bytes into generic Python values (maps, arrays, bytes,
str, int). Inside tags it does not know (COSE_Sign1 is one of them) recent
cbor2 releases decode in immutable mode, so maps may arrive as
cbor2.frozendict and arrays as tuple; containers are therefore checked
against collections.abc.Mapping / Sequence, never dict / list.

The readers below project one key of such a generic map into a typed
field, so every decoder applies the same rules:

  - absent key        → the field's zero value (or None for optional headers)
  - wrong container   → STRUCTURE_ERROR (map/array expected)
  - wrong scalar type → TYPE_ERROR (text/int/bytes expected)
  - integer outside int64 → TYPE_ERROR
  - unknown keys      → never looked at

bool is a subclass of int in Python but a distinct CBOR major type, so it is
never accepted where an integer is expected. For the same reason keys are
matched by type as well as value: a map keyed by `true` or `1.0` has no
claim 1.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import cbor2
from railway import CodedError, ErrorCode

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_MISSING = object()


def loads_item(data: bytes, what: str) -> Any:
    """Decode one CBOR data item; undecodable input is a STRUCTURE_ERROR."""
    try:
        return cbor2.loads(data)
    except (cbor2.CBORDecodeError, ValueError, EOFError) as e:
        raise CodedError(ErrorCode.STRUCTURE_ERROR, f"{what} is not valid CBOR: {e}") from e


def unwrap_tags(item: Any, allowed: frozenset[int]) -> Any:
    """Strip enclosing CBOR tags listed in `allowed`; any other tag is a STRUCTURE_ERROR."""
    while isinstance(item, cbor2.CBORTag):
        if item.tag not in allowed:
            raise CodedError(ErrorCode.STRUCTURE_ERROR, f"Unexpected CBOR tag {item.tag}")
        item = item.value
    return item


def type_name(value: Any) -> str:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, str):
        return "text"
    if isinstance(value, (bytes, bytearray)):
        return "bytes"
    if is_map(value):
        return "map"
    if is_array(value):
        return "array"
    return type(value).__name__


def is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_map(value: Any) -> bool:
    return isinstance(value, Mapping)


def is_array(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def lookup(mapping: Mapping[Any, Any], key: Any) -> Any:
    """Value stored under `key` with the same type as `key`, or _MISSING."""
    for candidate, value in mapping.items():
        if type(candidate) is type(key) and candidate == key:
            return value
    return _MISSING


def has_key(mapping: Mapping[Any, Any], key: Any) -> bool:
    return lookup(mapping, key) is not _MISSING


def require_map(value: Any, label: str) -> Mapping[Any, Any]:
    if not is_map(value):
        raise CodedError(ErrorCode.STRUCTURE_ERROR, f"{label} must be a map, got {type_name(value)}")
    return value


def require_array(value: Any, label: str) -> Sequence[Any]:
    if not is_array(value):
        raise CodedError(ErrorCode.STRUCTURE_ERROR, f"{label} must be an array, got {type_name(value)}")
    return value


def require_bytes(value: Any, label: str) -> bytes:
    if not isinstance(value, (bytes, bytearray)):
        raise CodedError(ErrorCode.TYPE_ERROR, f"{label} must be a byte string, got {type_name(value)}")
    return bytes(value)


def require_int64(value: Any, label: str) -> int:
    if not is_int(value):
        raise CodedError(ErrorCode.TYPE_ERROR, f"{label} must be an integer, got {type_name(value)}")
    if not INT64_MIN <= value <= INT64_MAX:
        raise CodedError(ErrorCode.TYPE_ERROR, f"{label} does not fit in a signed 64-bit integer: {value}")
    return int(value)


def read_text(mapping: Mapping[Any, Any], key: Any, label: str) -> str:
    value = lookup(mapping, key)
    if value is _MISSING:
        return ""
    if not isinstance(value, str):
        raise CodedError(ErrorCode.TYPE_ERROR, f"{label} must be a text string, got {type_name(value)}")
    return value


def read_int(mapping: Mapping[Any, Any], key: Any, label: str) -> int:
    value = lookup(mapping, key)
    if value is _MISSING:
        return 0
    return require_int64(value, label)


def read_optional_int(mapping: Mapping[Any, Any], key: Any, label: str) -> int | None:
    value = lookup(mapping, key)
    if value is _MISSING:
        return None
    return require_int64(value, label)


def read_optional_bytes(mapping: Mapping[Any, Any], key: Any, label: str) -> bytes | None:
    value = lookup(mapping, key)
    if value is _MISSING:
        return None
    return require_bytes(value, label)


def read_map(mapping: Mapping[Any, Any], key: Any, label: str) -> Mapping[Any, Any]:
    value = lookup(mapping, key)
    if value is _MISSING:
        return {}
    return require_map(value, label)


def read_array(mapping: Mapping[Any, Any], key: Any, label: str) -> Sequence[Any]:
    value = lookup(mapping, key)
    if value is _MISSING:
        return ()
    return require_array(value, label)
