from .errors import (
    AuthError,
    AuthenticationError,
    ConflictError,
    InvalidHashError,
    NotFoundError,
    RateLimitError,
    StateError,
    ValidationError,
)
from .passwords import PasswordHasher
from .rate_limit import RateLimiter, client_identifier
from .service import AuthService, LoginResult, RateLimits, TotpSetup, UserProfile
from .store import CredentialStore
from .tokens import Identity, TokenIssuer, parse_authorization_header
from .totp import ReplayGuard, TotpEngine, TotpEnrollment

__all__ = [
    "AuthError",
    "AuthService",
    "AuthenticationError",
    "ConflictError",
    "CredentialStore",
    "Identity",
    "InvalidHashError",
    "LoginResult",
    "NotFoundError",
    "PasswordHasher",
    "RateLimitError",
    "RateLimiter",
    "RateLimits",
    "ReplayGuard",
    "StateError",
    "TokenIssuer",
    "TotpEngine",
    "TotpEnrollment",
    "TotpSetup",
    "UserProfile",
    "ValidationError",
    "client_identifier",
    "parse_authorization_header",
]
