"""HMAC signing algorithms and the name -> hash function table."""

from __future__ import annotations

import hashlib
import hmac
from enum import Enum
from typing import Any, Callable

from compactjwt.errors import UnsupportedAlgorithmError


class Algorithm(str, Enum):
    """Supported signing algorithm identifiers (case-sensitive)."""

    HS256 = "HS256"
    HS384 = "HS384"
    HS512 = "HS512"


_HASHES: dict[Algorithm, Callable[..., Any]] = {
    Algorithm.HS256: hashlib.sha256,
    Algorithm.HS384: hashlib.sha384,
    Algorithm.HS512: hashlib.sha512,
}

DEFAULT_ALGORITHM = Algorithm.HS256


def supported_algorithms() -> list[str]:
    """Return the supported algorithm identifiers."""
    return [alg.value for alg in _HASHES]


def get_algorithm(name: Any) -> Algorithm:
    """Resolve an algorithm identifier, rejecting anything unsupported."""
    if isinstance(name, Algorithm):
        return name
    if not isinstance(name, str):
        raise UnsupportedAlgorithmError(name)
    try:
        return Algorithm(name)
    except ValueError:
        raise UnsupportedAlgorithmError(name) from None


def _to_bytes(value: bytes | str) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f"expected str or bytes, got {type(value).__name__}")


def sign(message: bytes | str, key: bytes | str, algorithm: str | Algorithm = DEFAULT_ALGORITHM) -> bytes:
    """Compute the raw HMAC of ``message`` under ``key``."""
    alg = get_algorithm(algorithm)
    return hmac.new(_to_bytes(key), _to_bytes(message), _HASHES[alg]).digest()


def verify(
    message: bytes | str,
    key: bytes | str,
    algorithm: str | Algorithm,
    signature: bytes,
) -> bool:
    """Recompute the MAC and compare it to ``signature`` in constant time."""
    return hmac.compare_digest(sign(message, key, algorithm), signature)
