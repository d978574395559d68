"""Password hashing, session identifiers and signed session cookies."""

import secrets
from datetime import UTC, datetime
from functools import lru_cache

import bcrypt
import jwt

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 50
PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 128
# bcrypt only reads the first 72 bytes; longer passwords are rejected, never truncated.
PASSWORD_MAX_BYTES = 72
BIO_MAX_LEN = 500

# Bytes of entropy in a session identifier.
SESSION_ID_BYTES = 32

SESSION_COOKIE_ALGORITHM = "HS256"


def hash_password(plain_password: str) -> str:
    """
    Hash a plain-text password for storage. Each call uses a fresh salt.

    Raises ValueError when the UTF-8 encoding exceeds PASSWORD_MAX_BYTES.
    """
    pw_bytes = plain_password.encode("utf-8")
    if len(pw_bytes) > PASSWORD_MAX_BYTES:
        raise ValueError(f"Password must not exceed {PASSWORD_MAX_BYTES} bytes.")
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash. Malformed hashes verify as False."""
    pw_bytes = plain_password.encode("utf-8")
    if len(pw_bytes) > PASSWORD_MAX_BYTES:
        return False
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        return False


@lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    """Hash verified against when the username is unknown, so both login failure paths cost the same."""
    return hash_password(secrets.token_urlsafe(16))


def new_session_id() -> str:
    """Return a fresh opaque session identifier."""
    return secrets.token_urlsafe(SESSION_ID_BYTES)


def encode_session_cookie(session_id: str, expires_at: datetime, secret: str) -> str:
    """Sign the session id into a cookie value that expires with the session."""
    payload = {
        "sid": session_id,
        "exp": expires_at,
        "iat": datetime.now(UTC),
    }
    return jwt.encode(payload, secret, algorithm=SESSION_COOKIE_ALGORITHM)


def decode_session_cookie(value: str | None, secret: str) -> str | None:
    """
    Return the session id carried by a cookie value.

    None when the cookie is missing, tampered with, expired or malformed.
    """
    if not value:
        return None
    try:
        payload = jwt.decode(value, secret, algorithms=[SESSION_COOKIE_ALGORITHM])
    except jwt.PyJWTError:
        return None
    sid = payload.get("sid")
    if not isinstance(sid, str) or not sid:
        return None
    return sid
