"""Compact HMAC-signed JSON Web Tokens.

Re-exports the public API so ``from compactjwt import encode, decode`` works.
"""

from compactjwt.algorithms import (  # noqa: F401
    Algorithm,
    get_algorithm,
    sign,
    supported_algorithms,
    verify,
)
from compactjwt.codec import (  # noqa: F401
    base64url_decode,
    base64url_encode,
    deserialize,
    serialize,
)
from compactjwt.config import TokenSettings, load_settings  # noqa: F401
from compactjwt.errors import (  # noqa: F401
    AlgorithmError,
    ClaimTimingError,
    EncodingError,
    ErrorCode,
    MalformedTokenError,
    SignatureError,
    TokenError,
    UnsupportedAlgorithmError,
)
from compactjwt.token import (  # noqa: F401
    decode,
    decode_unverified,
    encode,
    get_unverified_header,
    split_token,
    validate_claims,
    verify_signature,
)
