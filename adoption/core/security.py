"""Security helpers (hashing and verification)."""

from __future__ import annotations

import secrets

from argon2 import PasswordHasher, exceptions as argon_exc

_ph = PasswordHasher()
_PREFIX = "argon2$"


def hash_password(password: str) -> str:
    """Create a modern Argon2 hash with a prefix for detection."""
    hashed = _ph.hash(password)
    return f"{_PREFIX}{hashed}"


def is_hashed(stored: str | None) -> bool:
    return (stored or "").startswith(_PREFIX)


def verify_password(password: str, stored_hash: str | None) -> bool:
    stored = stored_hash or ""
    if stored.startswith(_PREFIX):
        hashed = stored[len(_PREFIX) :]
        try:
            return _ph.verify(hashed, password)
        except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
            return False
    # Legacy users.dat rows store the password in plaintext.
    if not stored:
        return False
    return secrets.compare_digest(stored.encode(), (password or "").encode())
