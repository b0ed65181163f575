"""Token encode/decode and the staged verification pipeline.

Decoding runs these stages in order, each of which can reject the token:

1. split into exactly three non-empty segments
2. decode the header segment
3. decode the payload segment
4. check the header names a supported algorithm
5. verify the signature over the literal ``header.payload`` input
6. validate the ``iat``/``exp``/``nbf`` claims against the clock

Stages 1-5 are cryptographic and always run when a key is given; stage 6 is
policy and can be switched off with ``verify_claims=False``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any, Callable

from compactjwt.algorithms import DEFAULT_ALGORITHM, Algorithm, get_algorithm, sign, verify
from compactjwt.codec import (
    DEFAULT_MAX_DEPTH,
    base64url_decode,
    base64url_encode,
    deserialize,
    serialize,
)
from compactjwt.errors import (
    AlgorithmError,
    ClaimTimingError,
    EncodingError,
    ErrorCode,
    MalformedTokenError,
    SignatureError,
    TokenError,
)

logger = logging.getLogger(__name__)

TOKEN_TYPE = "JWT"

Clock = Callable[[], float]


def encode(
    payload: Mapping[str, Any],
    key: bytes | str,
    algorithm: str | Algorithm = DEFAULT_ALGORITHM,
) -> str:
    """Encode a claim set into a signed compact token.

    Raises:
        UnsupportedAlgorithmError: ``algorithm`` is not an HMAC algorithm.
        EncodingError: The payload is not a mapping or not JSON serializable.
    """
    alg = get_algorithm(algorithm)
    if not isinstance(payload, Mapping):
        raise EncodingError(
            f"payload must be a mapping, got {type(payload).__name__}",
            ErrorCode.UNSERIALIZABLE,
        )

    header = {"typ": TOKEN_TYPE, "alg": alg.value}
    segments = [
        base64url_encode(serialize(header)),
        base64url_encode(serialize(dict(payload))),
    ]
    signing_input = ".".join(segments)
    segments.append(base64url_encode(sign(signing_input, key, alg)))
    return ".".join(segments)


def split_token(token: str | bytes) -> tuple[str, str, str]:
    """Split a token into its header, payload and signature segments."""
    if isinstance(token, (bytes, bytearray)):
        try:
            token = bytes(token).decode("ascii")
        except UnicodeDecodeError as exc:
            raise MalformedTokenError(
                "invalid segment encoding", ErrorCode.INVALID_SEGMENT_ENCODING
            ) from exc
    if not isinstance(token, str):
        raise MalformedTokenError("wrong number of segments", ErrorCode.WRONG_SEGMENT_COUNT)

    segments = token.split(".")
    if len(segments) != 3 or not all(segments):
        raise MalformedTokenError("wrong number of segments", ErrorCode.WRONG_SEGMENT_COUNT)
    header_b64, payload_b64, signature_b64 = segments
    return header_b64, payload_b64, signature_b64


def _decode_segment(segment: str, max_depth: int) -> dict[str, Any]:
    try:
        value = deserialize(base64url_decode(segment), max_depth=max_depth)
    except EncodingError as exc:
        raise MalformedTokenError(
            "invalid segment encoding",
            ErrorCode.INVALID_SEGMENT_ENCODING,
            details={"cause": exc.code.value},
        ) from exc
    if not isinstance(value, dict):
        raise MalformedTokenError(
            "invalid segment encoding",
            ErrorCode.INVALID_SEGMENT_ENCODING,
            details={"cause": "not a JSON object"},
        )
    return value


def get_unverified_header(token: str | bytes, max_depth: int = DEFAULT_MAX_DEPTH) -> dict[str, Any]:
    """Return the decoded header without checking anything else."""
    header_b64, _, _ = split_token(token)
    return _decode_segment(header_b64, max_depth)


def _header_algorithm(header: Mapping[str, Any]) -> Algorithm:
    name = header.get("alg")
    if not name:
        raise AlgorithmError("empty algorithm", ErrorCode.EMPTY_ALGORITHM)
    return get_algorithm(name)


def decode_unverified(
    token: str | bytes, max_depth: int = DEFAULT_MAX_DEPTH
) -> tuple[dict[str, Any], dict[str, Any]]:
    """Decode header and payload, checking structure and algorithm only.

    The signature is NOT verified; never trust the returned claims.
    """
    header_b64, payload_b64, _ = split_token(token)
    header = _decode_segment(header_b64, max_depth)
    payload = _decode_segment(payload_b64, max_depth)
    _header_algorithm(header)
    return header, payload


def verify_signature(
    token: str | bytes,
    key: bytes | str,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> tuple[dict[str, Any], dict[str, Any]]:
    """Run the cryptographic stages and return ``(header, payload)``.

    The MAC is recomputed over the segments exactly as they appear in the
    token, never over a re-serialization of the decoded JSON.
    """
    header_b64, payload_b64, signature_b64 = split_token(token)
    header = _decode_segment(header_b64, max_depth)
    payload = _decode_segment(payload_b64, max_depth)
    alg = _header_algorithm(header)

    try:
        signature = base64url_decode(signature_b64)
    except EncodingError as exc:
        raise MalformedTokenError(
            "invalid segment encoding",
            ErrorCode.INVALID_SEGMENT_ENCODING,
            details={"cause": exc.code.value},
        ) from exc

    if not verify(f"{header_b64}.{payload_b64}", key, alg, signature):
        raise SignatureError("signature verification failed", ErrorCode.SIGNATURE_MISMATCH)
    return header, payload


def _timestamp(payload: Mapping[str, Any], claim: str) -> float | None:
    if claim not in payload:
        return None
    value = payload[claim]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ClaimTimingError(
            f"{claim} must be a numeric timestamp", ErrorCode.INVALID_CLAIM, claim, value
        )
    return value


def validate_claims(
    payload: Mapping[str, Any],
    *,
    leeway: float = 0,
    now: Clock | None = None,
) -> None:
    """Check ``iat``, ``exp`` and ``nbf`` against the current time.

    Checks run in that order and the first violation is raised.
    ``leeway`` widens each bound by that many seconds of clock skew.
    """
    if leeway < 0:
        raise ValueError("leeway must be non-negative")
    current = (now or time.time)()

    iat = _timestamp(payload, "iat")
    if iat is not None and iat > current + leeway:
        raise ClaimTimingError("iat in the future", ErrorCode.IAT_IN_FUTURE, "iat", iat)

    exp = _timestamp(payload, "exp")
    if exp is not None and exp < current - leeway:
        raise ClaimTimingError("token expired", ErrorCode.EXPIRED, "exp", exp)

    nbf = _timestamp(payload, "nbf")
    if nbf is not None and nbf > current + leeway:
        raise ClaimTimingError("token not yet valid", ErrorCode.NOT_YET_VALID, "nbf", nbf)


def decode(
    token: str | bytes,
    key: bytes | str | None,
    verify_claims: bool = True,
    *,
    leeway: float = 0,
    now: Clock | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> dict[str, Any]:
    """Decode and verify a token, returning its claims unchanged.

    Args:
        token: Compact token string.
        key: Shared secret. ``None`` skips signature verification.
        verify_claims: Validate ``iat``/``exp``/``nbf``. Does not affect the
            signature check.
        leeway: Clock-skew tolerance in seconds for the claim checks.
        now: Clock returning epoch seconds (defaults to ``time.time``).
        max_depth: Maximum JSON nesting depth of header and payload.

    Raises:
        MalformedTokenError, AlgorithmError, UnsupportedAlgorithmError,
        SignatureError, ClaimTimingError.
    """
    try:
        if key is None:
            logger.warning("Decoding token without a key: signature NOT verified")
            _, payload = decode_unverified(token, max_depth=max_depth)
        else:
            _, payload = verify_signature(token, key, max_depth=max_depth)
        if verify_claims:
            validate_claims(payload, leeway=leeway, now=now)
    except TokenError as exc:
        logger.debug("Token rejected: %s (%s)", exc, exc.code.value)
        raise
    return payload
