"""Password hashing for registered users.

bcrypt via passlib's CryptContext, with an optional cost from settings. When
the bcrypt backend cannot initialise (missing or incompatible ``bcrypt``
package) the context falls back to pbkdf2_sha256 so registration keeps working.
"""
from __future__ import annotations

import logging
from typing import Optional

from passlib.context import CryptContext

from notes_drive.logging_setup import LOGGER_NAME

logger = logging.getLogger(f"{LOGGER_NAME}.passwords")


def build_context(rounds: Optional[int] = None) -> CryptContext:
    try:
        if rounds:
            ctx = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)
        else:
            ctx = CryptContext(schemes=["bcrypt"], deprecated="auto")
        ctx.hash("bcrypt-self-test")
        return ctx
    except Exception as exc:
        logger.warning("bcrypt unavailable, falling back to pbkdf2_sha256: %s", exc)
        if rounds:
            return CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto", pbkdf2_sha256__rounds=rounds)
        return CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class PasswordHasher:
    def __init__(self, rounds: Optional[int] = None):
        self.context = build_context(rounds)

    def hash(self, plain: str) -> str:
        if plain is None:
            raise ValueError("Password must not be None")
        return self.context.hash(plain)

    def verify(self, plain: str, hashed: str) -> bool:
        if plain is None or hashed is None:
            return False
        try:
            return self.context.verify(plain, hashed)
        except (ValueError, TypeError):
            return False
