"""
Password hashing helpers (argon2 via pwdlib).
"""
from pwdlib import PasswordHash
from pwdlib.exceptions import UnknownHashError

_password_hash = PasswordHash.recommended()


def hash_password(password: str) -> str:
    """Hash a plain-text password."""
    if not password:
        raise ValueError("Password must not be empty")
    return _password_hash.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Return True if the password matches the stored hash."""
    if not password or not hashed:
        return False
    try:
        return _password_hash.verify(password, hashed)
    except UnknownHashError:
        # Malformed or unrecognized hash
        return False
