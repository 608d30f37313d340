"""
Form Validators.

Client-side checks run before any request is sent. Each validator returns
a field → message map; an empty map means the input is valid.
"""

import re

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")
MIN_PASSWORD_LENGTH = 6
MAX_TITLE_LENGTH = 100
MAX_SYNOPSIS_LENGTH = 300


def _blank(value: str | None) -> bool:
    return not (value or "").strip()


def validate_signup(
    first_name: str,
    last_name: str,
    username: str,
    email: str,
    password: str,
) -> dict[str, str]:
    errors: dict[str, str] = {}
    if _blank(first_name):
        errors["first_name"] = "First name is required"
    if _blank(last_name):
        errors["last_name"] = "Last name is required"
    if _blank(username):
        errors["username"] = "Username is required"
    if _blank(email):
        errors["email"] = "Email is required"
    elif not EMAIL_PATTERN.search(email):
        errors["email"] = "Please enter a valid email"
    if not password:
        errors["password"] = "Password is required"
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    return errors


def validate_login(identifier: str, password: str) -> dict[str, str]:
    errors: dict[str, str] = {}
    if _blank(identifier):
        errors["identifier"] = "Email or username is required"
    if not password:
        errors["password"] = "Password is required"
    return errors


def validate_note(title: str, synopsis: str, content: str) -> dict[str, str]:
    errors: dict[str, str] = {}
    if _blank(title):
        errors["title"] = "Title is required"
    elif len(title) > MAX_TITLE_LENGTH:
        errors["title"] = f"Title must be less than {MAX_TITLE_LENGTH} characters"
    if _blank(synopsis):
        errors["synopsis"] = "Synopsis is required"
    elif len(synopsis) > MAX_SYNOPSIS_LENGTH:
        errors["synopsis"] = f"Synopsis must be less than {MAX_SYNOPSIS_LENGTH} characters"
    if _blank(content):
        errors["content"] = "Content is required"
    return errors


def validate_profile(first_name: str, last_name: str, username: str, email: str) -> dict[str, str]:
    errors: dict[str, str] = {}
    if _blank(first_name):
        errors["first_name"] = "First name is required"
    if _blank(last_name):
        errors["last_name"] = "Last name is required"
    if _blank(username):
        errors["username"] = "Username is required"
    if _blank(email):
        errors["email"] = "Email is required"
    elif not EMAIL_PATTERN.search(email):
        errors["email"] = "Please enter a valid email"
    return errors


def validate_password_change(current: str, new: str, confirm: str) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not current:
        errors["current_password"] = "Current password is required"
    if not new:
        errors["new_password"] = "New password is required"
    elif len(new) < MIN_PASSWORD_LENGTH:
        errors["new_password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    if new != confirm:
        errors["confirm_password"] = "Passwords do not match"
    return errors
