from typing import Any, Optional


class TrelloError(Exception):
    """Base error for client failures."""


class TransportError(TrelloError):
    """
    The HTTP call did not produce a usable JSON body.
    Covers connectivity, timeouts, non-2xx statuses and unreadable bodies.
    """

    def __init__(
        self,
        message: str,
        *,
        method: Optional[str] = None,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        response_text: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.method = method
        self.url = url
        self.status_code = status_code
        self.response_text = response_text
        self.cause = cause


class DecodeError(TrelloError):
    """The response body did not match the expected record shape."""


class MissingKey(DecodeError):
    def __init__(self, key: str):
        super().__init__(f"missing required key {key!r}")
        self.key = key

    def __eq__(self, other: object) -> bool:
        return isinstance(other, MissingKey) and other.key == self.key

    def __hash__(self) -> int:
        return hash(("MissingKey", self.key))


class TypeMismatch(DecodeError):
    def __init__(self, key: str, expected: str, actual: Any = None):
        super().__init__(
            f"key {key!r}: expected {expected}, got {_json_type_name(actual)}"
        )
        self.key = key
        self.expected = expected
        self.actual = actual

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, TypeMismatch)
            and other.key == self.key
            and other.expected == self.expected
        )

    def __hash__(self) -> int:
        return hash(("TypeMismatch", self.key, self.expected))


class InvalidDateFormat(DecodeError):
    def __init__(self, value: str):
        super().__init__(f"invalid date {value!r}")
        self.value = value

    def __eq__(self, other: object) -> bool:
        return isinstance(other, InvalidDateFormat) and other.value == self.value

    def __hash__(self) -> int:
        return hash(("InvalidDateFormat", self.value))


def _json_type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


__all__ = [
    "TrelloError",
    "TransportError",
    "DecodeError",
    "MissingKey",
    "TypeMismatch",
    "InvalidDateFormat",
]
