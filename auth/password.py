"""
bcrypt password hashing.

Each hash carries its own random salt and work factor, so the same password
never hashes twice to the same string.  bcrypt ignores input past 72 bytes;
registration rejects longer passwords before they get here.
"""

from __future__ import annotations

import bcrypt

DEFAULT_ROUNDS = 10
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    """True if ``password`` matches; malformed hashes count as a mismatch."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("ascii"))
    except (ValueError, TypeError):
        return False
