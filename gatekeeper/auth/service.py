from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from gatekeeper.logging import log_event
from gatekeeper.models import User

from .errors import (
    AuthenticationError,
    ConflictError,
    InvalidHashError,
    NotFoundError,
    RateLimitError,
    StateError,
    ValidationError,
)
from .passwords import PasswordHasher
from .rate_limit import RateLimiter
from .store import CredentialStore
from .tokens import Identity, TokenIssuer
from .totp import TotpEngine
from .validation import is_valid_email, is_valid_password

INVALID_CREDENTIALS = "Invalid credentials"


@dataclass(frozen=True)
class RateLimits:
    register_max: int = 5
    login_max: int = 10
    window_seconds: float = 60.0


@dataclass(frozen=True)
class LoginResult:
    requires_totp: bool
    token: str | None = None
    user: User | None = None


@dataclass(frozen=True)
class TotpSetup:
    secret: str
    qr_code: str


@dataclass(frozen=True)
class UserProfile:
    email: str
    totp_enabled: bool
    last_login: datetime | None


class AuthService:
    def __init__(
        self,
        session: Session,
        token_issuer: TokenIssuer,
        totp_engine: TotpEngine,
        rate_limiter: RateLimiter,
        limits: RateLimits | None = None,
        password_hasher: PasswordHasher | None = None,
    ) -> None:
        self.store = CredentialStore(session)
        self.token_issuer = token_issuer
        self.totp_engine = totp_engine
        self.rate_limiter = rate_limiter
        self.limits = limits or RateLimits()
        self.password_hasher = password_hasher or PasswordHasher()

    def register(self, email: object, password: object, client_id: str) -> User:
        self._check_rate(client_id, "register", self.limits.register_max)
        if not is_valid_email(email) or not is_valid_password(password):
            raise ValidationError("Invalid email or password")
        password_hash = self.password_hasher.hash(password)
        try:
            user = self.store.add_user(email, password_hash)
        except ConflictError:
            log_event("register_failed", logging.ERROR, email=email)
            raise
        log_event("user_registered", email=email)
        return user

    def login(self, email: object, password: object, client_id: str, now: datetime | None = None) -> LoginResult:
        self._check_rate(client_id, "login", self.limits.login_max)
        user = self._verify_credentials(email, password)
        if user.totp_enabled:
            log_event("login_requires_totp", email=user.email)
            return LoginResult(requires_totp=True)
        token = self._complete_login(user, now)
        log_event("user_logged_in", email=user.email)
        return LoginResult(requires_totp=False, token=token, user=user)

    def login_with_totp(
        self,
        email: object,
        password: object,
        code: object,
        client_id: str,
        now: datetime | None = None,
    ) -> LoginResult:
        self._check_rate(client_id, "login2fa", self.limits.login_max)
        user = self._verify_credentials(email, password)
        if not user.totp_enabled or not user.totp_secret:
            raise StateError("2FA not enabled")
        if not self._verify_code(user, code, now):
            log_event("login_totp_rejected", logging.WARNING, email=user.email)
            raise AuthenticationError("Invalid 2FA code")
        token = self._complete_login(user, now)
        log_event("user_logged_in_with_totp", email=user.email)
        return LoginResult(requires_totp=False, token=token, user=user)

    def setup_totp(self, identity: Identity) -> TotpSetup:
        user = self._require_user(identity)
        enrollment = self.totp_engine.generate_secret(user.email)
        self.store.set_pending_totp(user, enrollment.secret)
        if self.totp_engine.replay_guard is not None:
            self.totp_engine.replay_guard.forget(str(user.id))
        qr_code = self.totp_engine.qr_data_url(enrollment.provisioning_uri)
        log_event("totp_setup_started", email=user.email)
        return TotpSetup(secret=enrollment.secret, qr_code=qr_code)

    def verify_totp(self, identity: Identity, code: object, now: datetime | None = None) -> None:
        user = self.store.get_by_id(identity.id)
        if user is None or not user.totp_secret:
            raise StateError("No 2FA setup in progress")
        if not self._verify_code(user, code, now):
            raise ValidationError("Invalid code")
        self.store.enable_totp(user)
        log_event("totp_enabled", email=user.email)

    def disable_totp(self, identity: Identity) -> None:
        user = self._require_user(identity)
        self.store.disable_totp(user)
        log_event("totp_disabled", email=user.email)

    def current_user(self, identity: Identity) -> UserProfile:
        user = self._require_user(identity)
        return UserProfile(
            email=user.email,
            totp_enabled=bool(user.totp_enabled),
            last_login=self._normalize_time(user.last_login),
        )

    def _check_rate(self, client_id: str, action: str, max_count: int) -> None:
        if self.rate_limiter.check_and_record(client_id, action, max_count, self.limits.window_seconds):
            log_event("rate_limited", logging.WARNING, client=client_id, action=action)
            raise RateLimitError("Too many requests")

    def _verify_credentials(self, email: object, password: object) -> User:
        if not is_valid_email(email) or not is_valid_password(password):
            raise AuthenticationError(INVALID_CREDENTIALS)
        user = self.store.get_by_email(email)
        if user is None:
            raise AuthenticationError(INVALID_CREDENTIALS)
        try:
            matches = self.password_hasher.verify(password, user.password_hash)
        except InvalidHashError:
            log_event("stored_hash_unreadable", logging.ERROR, user_id=user.id)
            matches = False
        if not matches:
            raise AuthenticationError(INVALID_CREDENTIALS)
        return user

    def _verify_code(self, user: User, code: object, now: datetime | None) -> bool:
        if isinstance(code, int) and not isinstance(code, bool) and code >= 0:
            code = str(code).zfill(6)
        if not isinstance(code, str):
            return False
        return self.totp_engine.verify(user.totp_secret, code, for_time=now, account=str(user.id))

    def _complete_login(self, user: User, now: datetime | None) -> str:
        moment = now or datetime.now(timezone.utc)
        self.store.record_login(user, moment)
        return self.token_issuer.issue(user, moment)

    def _require_user(self, identity: Identity) -> User:
        user = self.store.get_by_id(identity.id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def _normalize_time(self, value: datetime | None) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
