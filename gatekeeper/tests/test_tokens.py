from __future__ import annotations

import unittest
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from gatekeeper.auth import AuthenticationError, Identity, TokenIssuer, parse_authorization_header


@dataclass
class _Subject:
    id: int
    email: str


class TokenIssuerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.issuer = TokenIssuer("secret")
        self.subject = _Subject(id=123, email="user@test.com")

    def test_issue_produces_signed_jwt(self) -> None:
        token = self.issuer.issue(self.subject)
        self.assertEqual(len(token.split(".")), 3)
        decoded = jwt.decode(token, "secret", algorithms=["HS256"])
        self.assertEqual(decoded["id"], 123)
        self.assertEqual(decoded["email"], "user@test.com")
        self.assertEqual(decoded["exp"] - decoded["iat"], 7 * 24 * 3600)

    def test_validate_returns_identity(self) -> None:
        token = self.issuer.issue(self.subject)
        self.assertEqual(self.issuer.validate(token), Identity(id=123, email="user@test.com"))

    def test_validate_rejects_expired_token(self) -> None:
        issued = datetime.now(timezone.utc) - timedelta(days=1)
        token = self.issuer.issue(self.subject, issued)
        self.assertEqual(self.issuer.validate(token, issued + timedelta(days=6, hours=23)).id, 123)
        with self.assertRaises(AuthenticationError):
            self.issuer.validate(token, issued + timedelta(days=7))
        with self.assertRaises(AuthenticationError):
            self.issuer.validate(token, issued + timedelta(days=8))

    def test_validate_rejects_foreign_signature(self) -> None:
        token = TokenIssuer("other-secret").issue(self.subject)
        with self.assertRaises(AuthenticationError) as ctx:
            self.issuer.validate(token)
        self.assertEqual(ctx.exception.message, "Invalid token")

    def test_validate_rejects_garbage_and_missing_claims(self) -> None:
        for token in ("", "not-a-jwt", "a.b.c"):
            with self.assertRaises(AuthenticationError):
                self.issuer.validate(token)
        now = datetime.now(timezone.utc)
        no_email = jwt.encode({"id": 1, "iat": now, "exp": now + timedelta(hours=1)}, "secret", algorithm="HS256")
        no_expiry = jwt.encode({"id": 1, "email": "x@y.co", "iat": now}, "secret", algorithm="HS256")
        for token in (no_email, no_expiry):
            with self.assertRaises(AuthenticationError):
                self.issuer.validate(token)


class AuthorizationHeaderTests(unittest.TestCase):
    def test_extracts_bearer_token(self) -> None:
        self.assertEqual(parse_authorization_header("Bearer abc.def.ghi"), "abc.def.ghi")

    def test_rejects_missing_or_malformed_header(self) -> None:
        for value in (None, "", "Token abc", "bearer abc", "Bearerabc"):
            with self.assertRaises(AuthenticationError) as ctx:
                parse_authorization_header(value)
            self.assertEqual(ctx.exception.message, "Unauthorized")


if __name__ == "__main__":
    unittest.main()
