"""Unit tests for portal.core.security: bcrypt hashing and signed session cookies."""

import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import jwt

from portal.core.security import (
    PASSWORD_MAX_BYTES,
    SESSION_COOKIE_ALGORITHM,
    decode_session_cookie,
    encode_session_cookie,
    hash_password,
    new_session_id,
    verify_password,
)

SECRET = "unit-test-secret"


class TestPasswordHashing(unittest.TestCase):
    """hash_password is salted one-way; verify_password only matches the original plaintext."""

    def setUp(self) -> None:
        patcher = patch("portal.core.security.BCRYPT_ROUNDS", 4)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_verify_matches_own_hash(self) -> None:
        for plain in ("secret1", "correct horse battery", "пароль123", "x" * 72):
            with self.subTest(plain=plain):
                self.assertTrue(verify_password(plain, hash_password(plain)))

    def test_verify_rejects_other_plaintext(self) -> None:
        digest = hash_password("secret1")
        self.assertFalse(verify_password("secret2", digest))
        self.assertFalse(verify_password("", digest))

    def test_same_input_gives_distinct_digests(self) -> None:
        a = hash_password("secret1")
        b = hash_password("secret1")
        self.assertNotEqual(a, b)
        self.assertNotIn("secret1", a)

    def test_passwords_sharing_a_72_byte_prefix_do_not_verify(self) -> None:
        prefix = "\N{GRINNING FACE}" * 18
        self.assertEqual(len(prefix.encode("utf-8")), PASSWORD_MAX_BYTES)
        digest = hash_password(prefix)
        self.assertFalse(verify_password(prefix + "totally-wrong", digest))

    def test_over_long_password_is_rejected_not_truncated(self) -> None:
        for plain in ("x" * 73, "\N{GRINNING FACE}" * 18 + "correct-tail"):
            with self.subTest(length=len(plain)):
                with self.assertRaises(ValueError):
                    hash_password(plain)

    def test_malformed_digest_returns_false(self) -> None:
        for digest in ("", "not-a-bcrypt-hash", "$2b$12$short"):
            with self.subTest(digest=digest):
                self.assertFalse(verify_password("secret1", digest))


class TestSessionIds(unittest.TestCase):
    def test_ids_are_unique_and_url_safe(self) -> None:
        ids = {new_session_id() for _ in range(100)}
        self.assertEqual(len(ids), 100)
        for sid in ids:
            self.assertRegex(sid, r"^[A-Za-z0-9_-]{40,}$")


class TestSessionCookie(unittest.TestCase):
    """encode_session_cookie / decode_session_cookie: signed, expiring wrapper around the session id."""

    def test_round_trip(self) -> None:
        expires = datetime.now(UTC) + timedelta(hours=1)
        value = encode_session_cookie("abc123", expires, SECRET)
        self.assertEqual(decode_session_cookie(value, SECRET), "abc123")

    def test_wrong_secret_rejected(self) -> None:
        expires = datetime.now(UTC) + timedelta(hours=1)
        value = encode_session_cookie("abc123", expires, SECRET)
        self.assertIsNone(decode_session_cookie(value, "other-secret"))

    def test_tampered_value_rejected(self) -> None:
        expires = datetime.now(UTC) + timedelta(hours=1)
        value = encode_session_cookie("abc123", expires, SECRET)
        forged = jwt.encode({"sid": "someone-else", "exp": expires}, "guess", algorithm="HS256")
        self.assertIsNone(decode_session_cookie(forged, SECRET))
        # Original signature on a swapped payload.
        header, _, signature = value.split(".")
        _, forged_payload, _ = forged.split(".")
        self.assertIsNone(
            decode_session_cookie(f"{header}.{forged_payload}.{signature}", SECRET)
        )

    def test_expired_cookie_rejected(self) -> None:
        expires = datetime.now(UTC) - timedelta(seconds=5)
        value = encode_session_cookie("abc123", expires, SECRET)
        self.assertIsNone(decode_session_cookie(value, SECRET))

    def test_missing_or_garbage_cookie(self) -> None:
        self.assertIsNone(decode_session_cookie(None, SECRET))
        self.assertIsNone(decode_session_cookie("", SECRET))
        self.assertIsNone(decode_session_cookie("garbage", SECRET))

    def test_payload_without_sid_rejected(self) -> None:
        expires = datetime.now(UTC) + timedelta(hours=1)
        value = jwt.encode({"exp": expires}, SECRET, algorithm=SESSION_COOKIE_ALGORITHM)
        self.assertIsNone(decode_session_cookie(value, SECRET))


if __name__ == "__main__":
    unittest.main()
