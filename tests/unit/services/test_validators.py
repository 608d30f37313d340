"""Unit tests for form validators."""

import pytest

from notely.services.validators import (
    validate_login,
    validate_note,
    validate_password_change,
    validate_profile,
    validate_signup,
)


class TestValidateSignup:
    def test_valid(self):
        assert validate_signup("Ada", "Lovelace", "ada", "ada@example.com", "secret1") == {}

    def test_all_missing(self):
        errors = validate_signup("", " ", "", "", "")
        assert errors == {
            "first_name": "First name is required",
            "last_name": "Last name is required",
            "username": "Username is required",
            "email": "Email is required",
            "password": "Password is required",
        }

    @pytest.mark.parametrize("email", ["ada", "ada@example", "@.", "ada example.com"])
    def test_invalid_email(self, email):
        errors = validate_signup("Ada", "Lovelace", "ada", email, "secret1")
        assert errors == {"email": "Please enter a valid email"}

    def test_short_password(self):
        errors = validate_signup("Ada", "Lovelace", "ada", "ada@example.com", "12345")
        assert errors == {"password": "Password must be at least 6 characters"}


class TestValidateLogin:
    def test_valid(self):
        assert validate_login("ada", "x") == {}

    def test_missing(self):
        assert validate_login("  ", "") == {
            "identifier": "Email or username is required",
            "password": "Password is required",
        }


class TestValidateNote:
    def test_valid(self):
        assert validate_note("Title", "Synopsis", "Content") == {}

    def test_required_fields(self):
        assert validate_note("", "", "   ") == {
            "title": "Title is required",
            "synopsis": "Synopsis is required",
            "content": "Content is required",
        }

    def test_length_limits(self):
        errors = validate_note("t" * 101, "s" * 301, "c")
        assert errors == {
            "title": "Title must be less than 100 characters",
            "synopsis": "Synopsis must be less than 300 characters",
        }

    def test_limits_are_inclusive(self):
        assert validate_note("t" * 100, "s" * 300, "c") == {}


class TestValidateProfile:
    def test_valid(self):
        assert validate_profile("Ada", "Lovelace", "ada", "ada@example.com") == {}

    def test_invalid_email(self):
        assert validate_profile("Ada", "Lovelace", "ada", "nope") == {"email": "Please enter a valid email"}


class TestValidatePasswordChange:
    def test_valid(self):
        assert validate_password_change("old-pass", "new-pass", "new-pass") == {}

    def test_mismatch(self):
        assert validate_password_change("old-pass", "new-pass", "other") == {
            "confirm_password": "Passwords do not match",
        }

    def test_missing_and_short(self):
        errors = validate_password_change("", "abc", "abc")
        assert errors == {
            "current_password": "Current password is required",
            "new_password": "Password must be at least 6 characters",
        }
