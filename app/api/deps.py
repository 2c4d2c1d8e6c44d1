"""
Reusable FastAPI dependencies.

Dependencies:
  - get_current_user_id  — user id (``sub``) from a Bearer JWT (401 if invalid)
  - get_rate_source      — market rate provider backed by Redis
"""

from fastapi import Depends, Header, HTTPException, status

from app.core.security import verify_token
from app.redis_client import get_redis
from app.services.rate_service import MarketRateService


async def get_current_user_id(
    authorization: str | None = Header(None, description="Bearer <access_token>"),
) -> str:
    """
    Parse the ``Authorization: Bearer <token>`` header, verify the JWT
    and return its subject.

    Raises 401 if the header is missing or malformed, the token is
    invalid or expired, or the subject is empty.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header",
        )

    token = authorization[len("Bearer "):]
    payload = verify_token(token, expected_type="access")
    user_id = str(payload.get("sub") or "").strip()

    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has no subject",
        )
    return user_id


async def get_rate_source(redis=Depends(get_redis)) -> MarketRateService:
    """Per-request market rate provider."""
    return MarketRateService(redis)
