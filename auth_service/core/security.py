"""Password hashing and verification (bcrypt)."""

import bcrypt

from auth_service.core.errors import InternalError

# Min/max lengths for password validation. bcrypt only looks at the first 72 bytes.
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128
BCRYPT_MAX_BYTES = 72


def hash_password(plain_password: str, rounds: int) -> str:
    """
    Hash a plain-text password for storage. Do not store plain passwords.

    Returns the 60-character modular crypt string ($2b$<rounds>$<salt><digest>).
    Raises InternalError if bcrypt itself fails; that is never a mismatch.
    """
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    try:
        hashed = bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds))
    except (ValueError, TypeError) as e:
        raise InternalError("Failed to hash password", cause=e) from e
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash. False on mismatch or a malformed hash."""
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        return False
