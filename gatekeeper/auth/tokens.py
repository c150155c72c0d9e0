from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Protocol

import jwt

from .errors import AuthenticationError

TOKEN_LIFETIME = timedelta(days=7)
BEARER_PREFIX = "Bearer "


class TokenSubject(Protocol):
    id: int
    email: str


@dataclass(frozen=True)
class Identity:
    id: int
    email: str


class TokenIssuer:
    algorithm = "HS256"

    def __init__(self, secret: str, lifetime: timedelta = TOKEN_LIFETIME) -> None:
        self.secret = secret
        self.lifetime = lifetime

    def issue(self, user: TokenSubject, now: datetime | None = None) -> str:
        moment = now or datetime.now(timezone.utc)
        payload = {
            "id": user.id,
            "email": user.email,
            "iat": moment,
            "exp": moment + self.lifetime,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def validate(self, token: str, now: datetime | None = None) -> Identity:
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"], "verify_exp": False, "verify_iat": False},
            )
        except jwt.InvalidTokenError as exc:
            raise AuthenticationError("Invalid token") from exc
        moment = now or datetime.now(timezone.utc)
        expires_at = payload.get("exp")
        if not isinstance(expires_at, (int, float)) or moment.timestamp() >= expires_at:
            raise AuthenticationError("Invalid token")
        subject_id = payload.get("id")
        email = payload.get("email")
        if isinstance(subject_id, bool) or not isinstance(subject_id, int) or not isinstance(email, str):
            raise AuthenticationError("Invalid token")
        return Identity(id=subject_id, email=email)


def parse_authorization_header(value: str | None) -> str:
    if not value or not value.startswith(BEARER_PREFIX):
        raise AuthenticationError("Unauthorized")
    return value[len(BEARER_PREFIX):]
