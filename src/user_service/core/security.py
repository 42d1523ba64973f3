"""
Password hashing with Argon2id.

Argon2 is deliberately expensive, so hashing and verification are pushed to
the thread pool instead of running on the event loop.
"""

import logging

from argon2 import PasswordHasher
from argon2.exceptions import (
    InvalidHashError,
    VerificationError,
    VerifyMismatchError,
)
from starlette.concurrency import run_in_threadpool

from user_service.core.config import Settings

logger = logging.getLogger(__name__)

# Verification reads the parameters stored in the hash itself, so any
# hasher instance can verify any Argon2 hash.
_verifier = PasswordHasher()


def create_password_hasher(settings: Settings) -> PasswordHasher:
    """
    Create an Argon2id hasher from the configured cost parameters.

    Configuration:
    - time_cost: settings.hash_cost iterations
    - memory_cost: settings.hash_memory_cost KiB
    - parallelism: settings.hash_parallelism threads
    - hash_len=32, salt_len=16
    """
    return PasswordHasher(
        time_cost=settings.hash_cost,
        memory_cost=settings.hash_memory_cost,
        parallelism=settings.hash_parallelism,
        hash_len=32,
        salt_len=16,
    )


async def hash_password(hasher: PasswordHasher, password: str) -> str:
    """
    Hash a password using Argon2id.

    Args:
        hasher: Configured Argon2 hasher
        password: Plain text password to hash

    Returns:
        Argon2id hash string, e.g. $argon2id$v=19$m=65536,t=2,p=4$...
    """
    return await run_in_threadpool(hasher.hash, password)


async def verify_password(password: str, hashed_password: str) -> bool:
    """
    Verify a password against an Argon2id hash.

    Returns:
        True if password matches hash, False otherwise (including when the
        stored hash is malformed)
    """
    try:
        return await run_in_threadpool(_verifier.verify, hashed_password, password)
    except VerifyMismatchError:
        return False
    except (VerificationError, InvalidHashError) as e:
        logger.warning(f"Password verification failed on stored hash: {e}")
        return False
