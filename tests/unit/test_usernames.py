"""Google profile to username derivation."""

from codearena.users.service import legacy_google_username, sanitize_username


class TestSanitizeUsername:
    def test_display_name(self):
        assert sanitize_username("1234567890", "Ada Lovelace") == "ada_lovelace"

    def test_punctuation_replaced(self):
        assert sanitize_username("1234567890", "J.R.R. Tolkien!") == "j_r_r__tolkien_"

    def test_email_fallback(self):
        assert sanitize_username("1234567890", None, "grace.hopper@example.com") == "grace_hopper"

    def test_google_id_fallback(self):
        assert sanitize_username("1234567890") == "user_567890"

    def test_legacy_username(self):
        assert legacy_google_username("42") == "google_42"
