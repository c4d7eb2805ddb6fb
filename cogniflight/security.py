"""Random tokens and bcrypt password hashing."""

from __future__ import annotations

import secrets

import bcrypt

_TOKEN_BYTES = 32
_BCRYPT_COST = 10
_BCRYPT_MAX_BYTES = 72


def generate_token() -> str:
    """Return 32 random bytes as unpadded URL-safe base64."""
    return secrets.token_urlsafe(_TOKEN_BYTES)


def hash_password(password: str) -> str:
    """Hash a password with bcrypt at the default cost."""
    raw = password.encode("utf-8")
    if len(raw) > _BCRYPT_MAX_BYTES:
        raise ValueError("password length exceeds 72 bytes")
    return bcrypt.hashpw(raw, bcrypt.gensalt(rounds=_BCRYPT_COST)).decode("ascii")


def check_password(hashed: str, plain: str) -> bool:
    """Tell whether ``plain`` matches the bcrypt hash ``hashed``."""
    try:
        return bcrypt.checkpw(
            plain.encode("utf-8")[:_BCRYPT_MAX_BYTES], hashed.encode("utf-8")
        )
    except ValueError:
        return False