"""Unit tests for retailhub.core.security: bcrypt hashing, verification and username normalization."""

import unittest
from unittest.mock import patch

from retailhub.core.security import hash_password, normalize_username, verify_password


class TestHashPassword(unittest.TestCase):
    """hash_password produces salted bcrypt hashes that verify_password accepts."""

    @patch("retailhub.core.security.BCRYPT_ROUNDS", 4)
    def test_hash_verifies(self) -> None:
        hashed = hash_password("secret123")
        self.assertTrue(hashed.startswith("$2"))
        self.assertTrue(verify_password("secret123", hashed))

    @patch("retailhub.core.security.BCRYPT_ROUNDS", 4)
    def test_same_password_gets_different_salts(self) -> None:
        self.assertNotEqual(hash_password("secret123"), hash_password("secret123"))

    @patch("retailhub.core.security.BCRYPT_ROUNDS", 4)
    def test_wrong_password_does_not_verify(self) -> None:
        hashed = hash_password("secret123")
        self.assertFalse(verify_password("secret124", hashed))

    def test_default_cost_is_adaptive(self) -> None:
        from retailhub.core import security

        self.assertGreaterEqual(security.BCRYPT_ROUNDS, 10)


class TestVerifyPasswordMalformed(unittest.TestCase):
    """verify_password returns False instead of raising on malformed hashes."""

    def test_garbage_hash(self) -> None:
        self.assertFalse(verify_password("secret123", "not-a-bcrypt-hash"))

    def test_empty_hash(self) -> None:
        self.assertFalse(verify_password("secret123", ""))

    def test_none_hash(self) -> None:
        self.assertFalse(verify_password("secret123", None))  # type: ignore[arg-type]


class TestNormalizeUsername(unittest.TestCase):
    def test_lowercases_and_strips(self) -> None:
        self.assertEqual(normalize_username("  Alice "), "alice")


if __name__ == "__main__":
    unittest.main()
