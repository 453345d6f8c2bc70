"""
Boundary to the JWT library. Claim sets are assembled by the authorization
engine; signing is left entirely to PyJWT.
"""

import logging
from typing import Any, Mapping

import jwt

from mule.mule_errors import TokenEncodingError

logger = logging.getLogger("mule.auth")

HS256 = "HS256"
HS384 = "HS384"
HS512 = "HS512"
NONE = "none"

SUPPORTED_ALGORITHMS = (HS256, HS384, HS512, NONE)


def encode(claims: Mapping[str, Any], algorithm: str, secret: str) -> str:
    """Returns the compact signed token for a claim set.

    Only the HMAC family and the unsigned `none` algorithm are accepted.
    """
    if algorithm not in SUPPORTED_ALGORITHMS:
        logger.warning("unsupported JWT algorithm %r", algorithm)
        raise TokenEncodingError(f"{algorithm}: unsupported algorithm")
    key = None if algorithm == NONE else secret
    try:
        return jwt.encode(dict(claims), key, algorithm=algorithm)
    except (jwt.PyJWTError, TypeError, ValueError) as e:
        raise TokenEncodingError(str(e)) from e
