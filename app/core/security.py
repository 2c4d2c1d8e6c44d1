"""
Core security module — bearer token verification.

Tokens are issued by the platform's auth service; this service only
verifies them. Supports RS256 with an HS256 fallback when the public
key file is missing.
"""

import logging
from pathlib import Path

import jwt
from fastapi import HTTPException, status

from app.config import settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Key loading
# ---------------------------------------------------------------------------

_public_key: str | bytes | None = None
_algorithm: str = settings.JWT_ALGORITHM


def _load_keys() -> None:
    """Load the RSA public key from disk. Falls back to HS256 with SECRET_KEY."""
    global _public_key, _algorithm

    public_path = Path(settings.JWT_PUBLIC_KEY_PATH)

    if public_path.exists():
        _public_key = public_path.read_bytes()
        _algorithm = "RS256"
        logger.info("Loaded RSA public key for JWT verification (RS256).")
    else:
        _public_key = settings.SECRET_KEY
        _algorithm = "HS256"
        logger.warning(
            "JWT public key not found at %s. Falling back to HS256.", public_path,
        )


_load_keys()


def configure_keys(*, public_key: str | bytes, algorithm: str = "RS256") -> None:
    """Override the verification key at runtime (used in tests)."""
    global _public_key, _algorithm
    _public_key = public_key
    _algorithm = algorithm


# ---------------------------------------------------------------------------
# Token verification
# ---------------------------------------------------------------------------


def decode_token(token: str) -> dict:
    """
    Decode and return the JWT payload.

    Raises HTTP 401 on expiry or any other invalid-token error.
    """
    try:
        return jwt.decode(token, _public_key, algorithms=[_algorithm])
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
        )
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )


def verify_token(token: str, expected_type: str) -> dict:
    """Decode a JWT and validate its ``type`` claim."""
    payload = decode_token(token)
    if payload.get("type") != expected_type:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Expected {expected_type} token",
        )
    return payload
