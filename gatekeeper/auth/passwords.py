from __future__ import annotations

from passlib.hash import argon2

from .errors import InvalidHashError


class PasswordHasher:
    def hash(self, plaintext: str) -> str:
        return argon2.hash(plaintext)

    def verify(self, plaintext: str, hash_value: str) -> bool:
        if not hash_value or not argon2.identify(hash_value):
            raise InvalidHashError("not an argon2 hash")
        try:
            return argon2.verify(plaintext, hash_value)
        except ValueError as exc:
            raise InvalidHashError(str(exc)) from exc
