"""Error taxonomy for token encoding, decoding and verification."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable symbolic subcodes callers can branch on."""

    # Codec
    JSON_SYNTAX = "json_syntax"
    JSON_DEPTH = "json_depth"
    JSON_CTRL_CHAR = "json_ctrl_char"
    NULL_RESULT = "null_result"
    UNSERIALIZABLE = "unserializable"
    BASE64 = "base64"

    # Token structure
    WRONG_SEGMENT_COUNT = "wrong_segment_count"
    INVALID_SEGMENT_ENCODING = "invalid_segment_encoding"

    # Algorithm
    EMPTY_ALGORITHM = "empty_algorithm"
    UNSUPPORTED_ALGORITHM = "unsupported_algorithm"

    # Signature
    SIGNATURE_MISMATCH = "signature_mismatch"

    # Temporal claims
    IAT_IN_FUTURE = "iat_in_future"
    EXPIRED = "expired"
    NOT_YET_VALID = "not_yet_valid"
    INVALID_CLAIM = "invalid_claim"


class TokenError(Exception):
    """Base class for every failure raised by compactjwt."""

    default_code: ErrorCode = ErrorCode.JSON_SYNTAX

    def __init__(
        self,
        message: str,
        code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code.value!r})"


class EncodingError(TokenError):
    """JSON or base64url could not be produced or parsed."""

    default_code = ErrorCode.JSON_SYNTAX


class AlgorithmError(TokenError):
    """The token header names no usable algorithm."""

    default_code = ErrorCode.EMPTY_ALGORITHM


class UnsupportedAlgorithmError(AlgorithmError):
    """Algorithm identifier outside the supported HMAC family."""

    default_code = ErrorCode.UNSUPPORTED_ALGORITHM

    def __init__(self, algorithm: Any):
        super().__init__(
            f"algorithm not supported: {algorithm!r}",
            details={"algorithm": algorithm},
        )
        self.algorithm = algorithm


class MalformedTokenError(TokenError):
    """Structural defect: segment count, base64url or JSON shape."""

    default_code = ErrorCode.INVALID_SEGMENT_ENCODING


class SignatureError(TokenError):
    """Computed MAC does not match the one carried by the token."""

    default_code = ErrorCode.SIGNATURE_MISMATCH


class ClaimTimingError(TokenError):
    """An iat, exp or nbf claim rejects the token at the current time."""

    default_code = ErrorCode.EXPIRED

    def __init__(
        self,
        message: str,
        code: ErrorCode | None = None,
        claim: str | None = None,
        value: Any = None,
    ):
        super().__init__(message, code, details={"claim": claim, "value": value})
        self.claim = claim
        self.value = value
