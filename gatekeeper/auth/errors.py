from __future__ import annotations


class AuthError(Exception):
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AuthError):
    status_code = 400


class AuthenticationError(AuthError):
    status_code = 401


class ConflictError(AuthError):
    status_code = 400


class StateError(AuthError):
    status_code = 400


class NotFoundError(AuthError):
    status_code = 404


class RateLimitError(AuthError):
    status_code = 429


class InvalidHashError(ValueError):
    pass
