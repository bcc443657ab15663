"""
Typed extraction of values from decoded JSON payloads.

Every helper takes a JSON object and a key. Required helpers raise
``MissingKey`` when the key is absent; all helpers raise ``TypeMismatch``
when the key is present with the wrong JSON type. Optional helpers return
``None`` for absent keys and for explicit JSON ``null``.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union

from .errors import InvalidDateFormat, MissingKey, TypeMismatch

JSONValue = Union[
    None,
    bool,
    int,
    float,
    str,
    List["JSONValue"],
    Dict[str, "JSONValue"],
]
JSONObject = Dict[str, JSONValue]

R = TypeVar("R")
Decoder = Callable[[JSONValue], R]

ROOT_KEY = "<root>"

_MISSING = object()

# 2016-04-08T16:30:00.000Z, 2016-04-08T12:30:00.000-0400, ...+05:30
DATE_RE = re.compile(
    r"([0-9]{4})-([0-9]{2})-([0-9]{2})T([0-9]{2}):([0-9]{2}):([0-9]{2})\.([0-9]{3})"
    r"(Z|[+-][0-9]{2}:?[0-9]{2})"
)


# --- Shape checks ---------------------------------------------------------- #


def expect_object(value: JSONValue, key: str = ROOT_KEY) -> JSONObject:
    if not isinstance(value, dict):
        raise TypeMismatch(key, "object", value)
    return value


def expect_array(value: JSONValue, key: str = ROOT_KEY) -> List[JSONValue]:
    if not isinstance(value, list):
        raise TypeMismatch(key, "array", value)
    return value


def _lookup(obj: JSONObject, key: str, *, required: bool) -> Any:
    value = obj.get(key, _MISSING)
    if value is _MISSING:
        if required:
            raise MissingKey(key)
        return None
    if value is None and required:
        raise TypeMismatch(key, "non-null value", None)
    return value


# --- Scalars --------------------------------------------------------------- #


def _as_str(key: str, value: Any) -> str:
    if not isinstance(value, str):
        raise TypeMismatch(key, "string", value)
    return value


def _as_bool(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise TypeMismatch(key, "boolean", value)
    return value


def _as_int(key: str, value: Any) -> int:
    # bool is an int subclass; JSON true/false is never an integer
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeMismatch(key, "integer", value)
    return value


def _as_number(key: str, value: Any) -> Union[int, float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeMismatch(key, "number", value)
    return value


def required_str(obj: JSONObject, key: str, *, non_empty: bool = False) -> str:
    value = _as_str(key, _lookup(obj, key, required=True))
    if non_empty and not value:
        raise TypeMismatch(key, "non-empty string", value)
    return value


def optional_str(obj: JSONObject, key: str) -> Optional[str]:
    value = _lookup(obj, key, required=False)
    return None if value is None else _as_str(key, value)


def required_bool(obj: JSONObject, key: str) -> bool:
    return _as_bool(key, _lookup(obj, key, required=True))


def optional_bool(obj: JSONObject, key: str) -> Optional[bool]:
    value = _lookup(obj, key, required=False)
    return None if value is None else _as_bool(key, value)


def required_int(obj: JSONObject, key: str) -> int:
    return _as_int(key, _lookup(obj, key, required=True))


def optional_int(obj: JSONObject, key: str) -> Optional[int]:
    value = _lookup(obj, key, required=False)
    return None if value is None else _as_int(key, value)


def optional_number(obj: JSONObject, key: str) -> Optional[Union[int, float]]:
    value = _lookup(obj, key, required=False)
    return None if value is None else _as_number(key, value)


# --- Collections and nested records ---------------------------------------- #


def _str_list(key: str, value: Any) -> List[str]:
    items = expect_array(value, key)
    return [_as_str(f"{key}[{i}]", item) for i, item in enumerate(items)]


def optional_str_list(obj: JSONObject, key: str) -> Optional[List[str]]:
    value = _lookup(obj, key, required=False)
    return None if value is None else _str_list(key, value)


def _record_list(key: str, value: Any, decoder: Decoder[R]) -> List[R]:
    items = expect_array(value, key)
    # fail-fast: the first bad element fails the whole collection
    return [
        decoder(expect_object(item, f"{key}[{i}]")) for i, item in enumerate(items)
    ]


def required_record_list(obj: JSONObject, key: str, decoder: Decoder[R]) -> List[R]:
    return _record_list(key, _lookup(obj, key, required=True), decoder)


def optional_record_list(
    obj: JSONObject, key: str, decoder: Decoder[R]
) -> Optional[List[R]]:
    value = _lookup(obj, key, required=False)
    return None if value is None else _record_list(key, value, decoder)


def required_record(obj: JSONObject, key: str, decoder: Decoder[R]) -> R:
    return decoder(expect_object(_lookup(obj, key, required=True), key))


def optional_record(obj: JSONObject, key: str, decoder: Decoder[R]) -> Optional[R]:
    value = _lookup(obj, key, required=False)
    return None if value is None else decoder(expect_object(value, key))


def decode_list(payload: JSONValue, decoder: Decoder[R]) -> List[R]:
    """Decode a top-level JSON array returned by a collection endpoint."""
    return _record_list(ROOT_KEY, payload, decoder)


# --- Dates ----------------------------------------------------------------- #


def parse_date(text: str) -> datetime:
    """
    Parse ``YYYY-MM-DDThh:mm:ss.sssZ`` into an aware UTC datetime.

    The zone designator may be ``Z`` or a numeric offset (``-0400``,
    ``+05:30``). Parsing is purely numeric, so the process locale never
    affects the result.
    """
    match = DATE_RE.fullmatch(text)
    if not match:
        raise InvalidDateFormat(text)

    year, month, day, hour, minute, second, millis = (
        int(part) for part in match.groups()[:7]
    )
    zone = match.group(8)
    if zone == "Z":
        offset = timedelta(0)
    else:
        digits = zone[1:].replace(":", "")
        hours, minutes = int(digits[:2]), int(digits[2:])
        if hours > 23 or minutes > 59:
            raise InvalidDateFormat(text)
        offset = timedelta(hours=hours, minutes=minutes)
        if zone[0] == "-":
            offset = -offset

    try:
        local = datetime(
            year,
            month,
            day,
            hour,
            minute,
            second,
            millis * 1000,
            tzinfo=timezone(offset),
        )
    except ValueError as exc:
        raise InvalidDateFormat(text) from exc
    return local.astimezone(timezone.utc)


def format_date(instant: datetime) -> str:
    """Render an aware datetime in the canonical ``...sssZ`` UTC form."""
    if instant.tzinfo is None:
        raise ValueError("format_date requires a timezone-aware datetime.")
    utc = instant.astimezone(timezone.utc)
    return (
        f"{utc.year:04d}-{utc.month:02d}-{utc.day:02d}"
        f"T{utc.hour:02d}:{utc.minute:02d}:{utc.second:02d}"
        f".{utc.microsecond // 1000:03d}Z"
    )


def to_local(instant: datetime) -> datetime:
    """Convert an instant to the machine's local time zone."""
    return instant.astimezone()


def optional_date(obj: JSONObject, key: str) -> Optional[datetime]:
    value = optional_str(obj, key)
    return None if value is None else parse_date(value)


__all__ = [
    "JSONValue",
    "JSONObject",
    "Decoder",
    "ROOT_KEY",
    "expect_object",
    "expect_array",
    "required_str",
    "optional_str",
    "required_bool",
    "optional_bool",
    "required_int",
    "optional_int",
    "optional_number",
    "optional_str_list",
    "required_record_list",
    "optional_record_list",
    "required_record",
    "optional_record",
    "decode_list",
    "parse_date",
    "format_date",
    "to_local",
    "optional_date",
]
