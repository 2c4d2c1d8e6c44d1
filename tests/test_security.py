"""Tests for bearer token verification and the current-user dependency."""

import jwt
import pytest
from fastapi import HTTPException

from app.api.deps import get_current_user_id
from app.core import security

FOREIGN_KEY = "a-different-signing-key-that-we-never-trust"
SHARED_SECRET = "shared-hs256-secret-for-local-development"


class TestVerifyToken:

    def test_valid_access_token(self, make_token):
        payload = security.verify_token(make_token("user-42"), expected_type="access")
        assert payload["sub"] == "user-42"

    def test_wrong_type(self, make_token):
        with pytest.raises(HTTPException) as exc_info:
            security.verify_token(make_token(token_type="refresh"), expected_type="access")
        assert exc_info.value.status_code == 401

    def test_expired(self, make_token):
        with pytest.raises(HTTPException) as exc_info:
            security.decode_token(make_token(expires_in=-1))
        assert exc_info.value.detail == "Token has expired"

    def test_foreign_signature(self):
        token = jwt.encode({"sub": "x", "type": "access"}, FOREIGN_KEY, algorithm="HS256")
        with pytest.raises(HTTPException) as exc_info:
            security.decode_token(token)
        assert exc_info.value.detail == "Invalid token"

    def test_hs256_fallback(self):
        security.configure_keys(public_key=SHARED_SECRET, algorithm="HS256")
        token = jwt.encode({"sub": "x", "type": "access"}, SHARED_SECRET, algorithm="HS256")
        assert security.decode_token(token)["sub"] == "x"


class TestCurrentUser:

    @pytest.mark.asyncio
    async def test_bearer(self, make_token):
        user_id = await get_current_user_id(authorization=f"Bearer {make_token('user-7')}")
        assert user_id == "user-7"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header", [None, "", "Token abc", "bearer abc"])
    async def test_malformed_header(self, header):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user_id(authorization=header)
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_empty_subject(self, make_token):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user_id(authorization=f"Bearer {make_token(sub='  ')}")
        assert exc_info.value.detail == "Token has no subject"
