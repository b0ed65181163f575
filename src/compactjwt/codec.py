"""JSON serialization and base64url framing for token segments."""

from __future__ import annotations

import base64
import binascii
import json
import re
from typing import Any

from compactjwt.errors import EncodingError, ErrorCode

DEFAULT_MAX_DEPTH = 512

_B64URL_RE = re.compile(r"[A-Za-z0-9_-]*")


def _check_keys(value: Any) -> None:
    """Reject mapping keys JSON would silently coerce to strings."""
    seen: set[int] = set()
    stack = [value]
    while stack:
        item = stack.pop()
        if not isinstance(item, (dict, list, tuple)) or id(item) in seen:
            continue
        seen.add(id(item))
        if isinstance(item, dict):
            for key in item:
                if not isinstance(key, str):
                    raise EncodingError(
                        f"object keys must be strings, got {type(key).__name__} {key!r}",
                        ErrorCode.UNSERIALIZABLE,
                    )
            stack.extend(item.values())
        else:
            stack.extend(item)


def serialize(value: Any) -> bytes:
    """Serialize a value to compact UTF-8 JSON.

    Non-ASCII characters are written as-is; only control characters and
    characters JSON requires to be escaped are escaped.

    Raises:
        EncodingError: The value holds something JSON cannot represent
            (arbitrary objects, cycles, NaN/Infinity, lone surrogates,
            non-string object keys).
    """
    _check_keys(value)
    try:
        text = json.dumps(value, ensure_ascii=False, separators=(",", ":"), allow_nan=False)
        data = text.encode("utf-8")
    except RecursionError as exc:
        raise EncodingError("maximum nesting depth exceeded", ErrorCode.JSON_DEPTH) from exc
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"value is not JSON serializable: {exc}", ErrorCode.UNSERIALIZABLE) from exc

    if text == "null" and value is not None:
        raise EncodingError("null result with non-null input", ErrorCode.NULL_RESULT)
    return data


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant {name}")


def _nesting_depth(value: Any, limit: int) -> int:
    """Depth of nested objects/arrays, stopping early once past ``limit``."""
    deepest = 0
    stack = [(value, 1)]
    while stack:
        item, level = stack.pop()
        if isinstance(item, dict):
            children = item.values()
        elif isinstance(item, list):
            children = item
        else:
            continue
        deepest = max(deepest, level)
        if deepest > limit:
            break
        stack.extend((child, level + 1) for child in children)
    return deepest


def deserialize(data: bytes | str, max_depth: int = DEFAULT_MAX_DEPTH) -> Any:
    """Parse JSON text.

    Raises:
        EncodingError: with ``code`` set to JSON_SYNTAX, JSON_DEPTH,
            JSON_CTRL_CHAR or NULL_RESULT.
    """
    if isinstance(data, (bytes, bytearray)):
        try:
            text = bytes(data).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise EncodingError("malformed UTF-8 in JSON text", ErrorCode.JSON_SYNTAX) from exc
    else:
        text = data

    try:
        result = json.loads(text, parse_constant=_reject_constant)
    except RecursionError as exc:
        raise EncodingError("maximum stack depth exceeded", ErrorCode.JSON_DEPTH) from exc
    except json.JSONDecodeError as exc:
        if exc.msg.startswith("Invalid control character"):
            raise EncodingError("unexpected control character found", ErrorCode.JSON_CTRL_CHAR) from exc
        raise EncodingError(f"syntax error, malformed JSON: {exc}", ErrorCode.JSON_SYNTAX) from exc
    except ValueError as exc:
        raise EncodingError(f"syntax error, malformed JSON: {exc}", ErrorCode.JSON_SYNTAX) from exc

    if _nesting_depth(result, max_depth) > max_depth:
        raise EncodingError("maximum stack depth exceeded", ErrorCode.JSON_DEPTH)
    if result is None and text.strip() != "null":
        raise EncodingError("null result with non-null input", ErrorCode.NULL_RESULT)
    return result


def base64url_encode(data: bytes) -> str:
    """Base64url-encode bytes without ``=`` padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def base64url_decode(data: str | bytes) -> bytes:
    """Decode unpadded base64url text.

    Input is re-padded to a multiple of 4 before decoding. Only the
    canonical encoding of a byte string is accepted, so two different
    segment strings never decode to the same bytes.

    Raises:
        EncodingError: Characters outside the base64url alphabet, an
            impossible length, or non-zero trailing bits.
    """
    if isinstance(data, (bytes, bytearray)):
        try:
            data = bytes(data).decode("ascii")
        except UnicodeDecodeError as exc:
            raise EncodingError("invalid base64url input", ErrorCode.BASE64) from exc

    if not _B64URL_RE.fullmatch(data):
        raise EncodingError("invalid base64url alphabet", ErrorCode.BASE64)

    padded = data + "=" * ((4 - len(data) % 4) % 4)
    try:
        decoded = base64.b64decode(padded.translate(str.maketrans("-_", "+/")), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise EncodingError(f"invalid base64url length: {exc}", ErrorCode.BASE64) from exc

    if base64url_encode(decoded) != data:
        raise EncodingError("non-canonical base64url encoding", ErrorCode.BASE64)
    return decoded
