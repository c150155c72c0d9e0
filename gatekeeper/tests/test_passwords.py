from __future__ import annotations

import unittest

from gatekeeper.auth import InvalidHashError, PasswordHasher


class PasswordHasherTests(unittest.TestCase):
    def setUp(self) -> None:
        self.hasher = PasswordHasher()

    def test_hash_is_salted(self) -> None:
        first = self.hasher.hash("testpassword123")
        second = self.hasher.hash("testpassword123")
        self.assertNotEqual(first, second)
        self.assertNotEqual(first, "testpassword123")
        self.assertTrue(first.startswith("$argon2"))

    def test_verify_matches_only_hashed_password(self) -> None:
        stored = self.hasher.hash("testpassword123")
        self.assertTrue(self.hasher.verify("testpassword123", stored))
        self.assertFalse(self.hasher.verify("wrongpassword456", stored))

    def test_verify_rejects_foreign_hash_format(self) -> None:
        with self.assertRaises(InvalidHashError):
            self.hasher.verify("testpassword123", "invalid-hash")
        with self.assertRaises(InvalidHashError):
            self.hasher.verify("testpassword123", "")

    def test_verify_rejects_truncated_hash(self) -> None:
        stored = self.hasher.hash("testpassword123")
        with self.assertRaises(ValueError):
            self.hasher.verify("testpassword123", stored.rsplit("$", 1)[0])


if __name__ == "__main__":
    unittest.main()
