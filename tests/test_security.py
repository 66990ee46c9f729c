from datetime import timedelta

import pytest
from jose import jwt

from task_service import config
from task_service.errors import InvalidInput, Unauthorized
from task_service.security import (
    MAX_BCRYPT_BYTES,
    create_token,
    decode_token,
    hash_password,
    verify_password,
)


@pytest.mark.unit
class TestPasswords:
    def test_hash_is_salted_and_verifies(self):
        first = hash_password("hunter2")
        second = hash_password("hunter2")

        assert first != "hunter2"
        assert first != second
        assert verify_password("hunter2", first)
        assert not verify_password("hunter3", first)

    def test_rejects_oversized_password(self):
        with pytest.raises(InvalidInput):
            hash_password("x" * (MAX_BCRYPT_BYTES + 1))

    def test_oversized_password_never_verifies(self):
        hashed = hash_password("x" * MAX_BCRYPT_BYTES)
        assert not verify_password("x" * (MAX_BCRYPT_BYTES + 1), hashed)


@pytest.mark.unit
class TestTokens:
    def test_round_trip(self):
        assert decode_token(create_token("user-1")) == "user-1"

    def test_expires_after_thirty_days(self):
        claims = jwt.get_unverified_claims(create_token("user-1"))
        assert claims["exp"] - claims["iat"] == int(timedelta(days=30).total_seconds())

    def test_expired_token_rejected(self):
        token = create_token("user-1", expires_delta=timedelta(seconds=-10))
        with pytest.raises(Unauthorized):
            decode_token(token)

    def test_wrong_secret_rejected(self):
        forged = jwt.encode({"sub": "user-1"}, "not-the-secret", algorithm=config.JWT_ALGORITHM)
        with pytest.raises(Unauthorized):
            decode_token(forged)

    def test_token_without_subject_rejected(self):
        token = jwt.encode({"role": "admin"}, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)
        with pytest.raises(Unauthorized):
            decode_token(token)

    def test_garbage_rejected(self):
        with pytest.raises(Unauthorized):
            decode_token("not-a-jwt")
