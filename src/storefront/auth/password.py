"""Password hashing utilities.

Learn: Uses bcrypt for secure password hashing. bcrypt automatically
handles salting and is resistant to rainbow table attacks.
The cost factor is fixed by STOREFRONT_BCRYPT_ROUNDS (default 10).
"""

from typing import Optional

import bcrypt

from storefront.config import settings


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password with bcrypt.

    Passwords are truncated to 72 bytes (bcrypt's limit).
    """
    pw_bytes = password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash. Malformed hashes never match."""
    try:
        pw_bytes = password.encode("utf-8")[:72]
        hash_bytes = password_hash.encode("utf-8")
        return bcrypt.checkpw(pw_bytes, hash_bytes)
    except (ValueError, TypeError, AttributeError):
        return False
