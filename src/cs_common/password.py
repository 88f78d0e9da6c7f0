"""Password hashing using bcrypt.

Uses the ``bcrypt`` library directly (>=4.0). passlib[bcrypt] is avoided
because passlib is unmaintained and incompatible with bcrypt >=4.

Only hashing lives here: this service stores credentials on create but never
authenticates, so there is no verify path.
"""

import asyncio

import bcrypt

from config.settings import settings


def hash_password(plain: str, rounds: int | None = None) -> str:
    """Hash a plain-text password with bcrypt. Returns a utf-8 hash string."""
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")


async def hash_password_async(plain: str) -> str:
    """bcrypt is CPU-bound; run it off the event loop."""
    return await asyncio.to_thread(hash_password, plain)
