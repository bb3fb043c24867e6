"""Tests for password hashing."""

from codearena.users.password import check_needs_rehash, hash_password, verify_password


class TestPasswordHashing:
    def test_hash_and_verify(self):
        hashed = hash_password("admin123")
        assert verify_password("admin123", hashed) is True

    def test_wrong_password_rejected(self):
        hashed = hash_password("CorrectHorse1")
        assert verify_password("WrongHorse1", hashed) is False

    def test_hash_is_argon2id(self):
        assert hash_password("TestPass1").startswith("$argon2id$")

    def test_hashes_are_salted(self):
        assert hash_password("same") != hash_password("same")

    def test_plaintext_is_not_a_hash(self):
        assert verify_password("admin123", "admin123") is False

    def test_check_needs_rehash(self):
        assert check_needs_rehash(hash_password("TestPass1")) is False

    def test_weaker_parameters_need_rehash(self):
        import argon2

        weak = argon2.PasswordHasher(time_cost=1, memory_cost=8192, type=argon2.Type.ID)
        assert check_needs_rehash(weak.hash("TestPass1")) is True
