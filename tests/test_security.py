import unittest
from datetime import datetime, timedelta, timezone

import jwt

from vetcatalog.models import ROLE_VENDOR, User
from vetcatalog.security import (
    InvalidTokenError,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from vetcatalog.settings import Settings


SETTINGS = Settings(jwt_secret="unit-test-secret", jwt_expires_minutes=5)


class PasswordHashingTests(unittest.TestCase):
    def test_hash_verifies_only_the_original_password(self) -> None:
        hashed = hash_password("s3cret!")
        self.assertNotEqual(hashed, "s3cret!")
        self.assertTrue(verify_password("s3cret!", hashed))
        self.assertFalse(verify_password("wrong", hashed))

    def test_malformed_hash_is_rejected(self) -> None:
        self.assertFalse(verify_password("anything", "not-a-bcrypt-hash"))


class AccessTokenTests(unittest.TestCase):
    def setUp(self) -> None:
        self.user = User(
            id=7,
            name="Ana",
            email="ana@example.com",
            phone_number="555",
            password_hash="x",
            role=ROLE_VENDOR,
        )

    def test_round_trip_keeps_identity_and_role(self) -> None:
        token = create_access_token(self.user, SETTINGS)
        payload = decode_access_token(token, SETTINGS)
        self.assertEqual(payload.user_id, 7)
        self.assertEqual(payload.role, ROLE_VENDOR)
        self.assertEqual(payload.email, "ana@example.com")
        self.assertEqual(payload.name, "Ana")

    def test_token_signed_with_other_secret_is_rejected(self) -> None:
        token = create_access_token(self.user, Settings(jwt_secret="other"))
        with self.assertRaises(InvalidTokenError):
            decode_access_token(token, SETTINGS)

    def test_expired_token_is_rejected(self) -> None:
        past = datetime.now(timezone.utc) - timedelta(days=2)
        token = jwt.encode(
            {"sub": "7", "userId": 7, "role": ROLE_VENDOR, "exp": past},
            SETTINGS.jwt_secret,
            algorithm="HS256",
        )
        with self.assertRaises(InvalidTokenError):
            decode_access_token(token, SETTINGS)

    def test_unknown_role_is_rejected(self) -> None:
        token = jwt.encode(
            {
                "sub": "7",
                "userId": 7,
                "role": "admin",
                "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
            },
            SETTINGS.jwt_secret,
            algorithm="HS256",
        )
        with self.assertRaises(InvalidTokenError):
            decode_access_token(token, SETTINGS)


if __name__ == "__main__":
    unittest.main()
