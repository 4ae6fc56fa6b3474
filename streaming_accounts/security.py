"""
Security utilities: credential hashing and session token generation.

This module centralizes all cryptographic operations so they're easy to
audit and update. Two concerns are handled here:

1. CREDENTIAL HASHING (Argon2)
   - Passwords and parental-control PINs are never stored in plaintext
   - Argon2id is memory-hard and time-hard, and every hash embeds its own
     random salt, so hashing the same password twice gives two different
     strings that both verify
   - We use passlib's CryptContext for safe, high-level Argon2 operations

2. SESSION TOKENS
   - After login, the client receives an opaque bearer token that is looked
     up in the user_sessions table on every request
   - Tokens come from the OS CSPRNG via `secrets` (256 bits, URL-safe)
   - There is deliberately no time-based or PRNG fallback: if the OS source
     fails, token generation fails

Legacy hashes:
  Only Argon2 hashes are accepted. A stored hash in any other format (for
  example an unsalted hex digest from an older schema) never verifies; it is
  reported as a warning so operators can force a password reset.
"""

import logging
import secrets

from passlib.context import CryptContext

from streaming_accounts.exceptions import TokenGenerationError

logger = logging.getLogger(__name__)

# CryptContext manages hashing schemes. "argon2" is the only scheme, so any
# foreign-format hash fails identification instead of silently verifying
# through a weaker algorithm.
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

# 32 random bytes -> 43 URL-safe base64 characters
SESSION_TOKEN_BYTES = 32


# ---------------------------------------------------------------------------
# 1. Credential Hashing (Argon2)
# ---------------------------------------------------------------------------


def hash_password(plain_password: str) -> str:
    """
    Hash a plaintext secret using Argon2id.

    Args:
        plain_password: The user's raw password (or parental PIN).

    Returns:
        An Argon2 hash string (e.g., "$argon2id$v=19$m=65536,t=3,p=4$...").

    Raises:
        ValueError: If the secret is empty.
    """
    if not plain_password:
        raise ValueError("Cannot hash an empty secret")
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """
    Verify a plaintext secret against a stored Argon2 hash.

    The comparison inside argon2 is constant-time. A stored value that is
    missing, malformed, or in a foreign format returns False instead of
    raising, so a corrupt row behaves like a wrong password.

    Args:
        plain_password: The secret the user just typed.
        hashed_password: The hash stored in the database.

    Returns:
        True if the secret matches, False otherwise.
    """
    if not plain_password or not hashed_password:
        return False

    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        logger.warning("Stored credential hash is malformed or in an unsupported format")
        return False


# ---------------------------------------------------------------------------
# 2. Session Tokens
# ---------------------------------------------------------------------------


def generate_session_token() -> str:
    """
    Generate an unguessable, URL-safe session token.

    Returns:
        A 43-character URL-safe string carrying 256 bits of entropy.

    Raises:
        TokenGenerationError: If the OS random source is unavailable.
    """
    try:
        return secrets.token_urlsafe(SESSION_TOKEN_BYTES)
    except (NotImplementedError, OSError) as exc:
        logger.critical(
            "SECURITY: OS random source unavailable, refusing to issue a session token",
            exc_info=True,
        )
        raise TokenGenerationError() from exc
