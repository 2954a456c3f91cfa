"""
Tests for password hashing and access tokens.
"""

import uuid
from datetime import timedelta

from jose import jwt

from app.core.config import settings
from app.core.security import create_access_token, decode_access_token, hash_password, verify_password


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("secret123")

        assert hashed != "secret123"
        assert verify_password("secret123", hashed) is True
        assert verify_password("wrong", hashed) is False


class TestAccessTokens:
    """Tests for create_access_token / decode_access_token."""

    def test_round_trip(self):
        user_id = uuid.uuid4()
        assert decode_access_token(create_access_token(str(user_id))) == user_id

    def test_expired_token(self):
        token = create_access_token(str(uuid.uuid4()), expires_delta=timedelta(seconds=-1))
        assert decode_access_token(token) is None

    def test_tampered_token(self):
        token = create_access_token(str(uuid.uuid4()))
        assert decode_access_token(token[:-2] + "xx") is None

    def test_subject_must_be_a_uuid(self):
        assert decode_access_token(create_access_token("not-a-uuid")) is None

    def test_other_token_type(self):
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "type": "refresh"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM
        )
        assert decode_access_token(token) is None
