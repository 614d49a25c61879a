"""
oishine_backoffice.auth.passwords

bcrypt password hashing.
"""

from __future__ import annotations

import bcrypt

# bcrypt only looks at the first 72 bytes; longer inputs are rejected outright.
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, *, rounds: int = 10) -> str:
    raw = password.encode("utf-8")
    if len(raw) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(raw, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    raw = password.encode("utf-8")
    if len(raw) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(raw, password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False
