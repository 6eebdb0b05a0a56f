"""
Input validation utilities
"""
import re

NAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6
MICROPOST_MAX_LENGTH = 140

VALID_EMAIL_REGEX = re.compile(r'[\w+\-.]+@[a-z\d\-.]+\.[a-z]+', re.IGNORECASE | re.ASCII)


def normalize_email(email):
    """Strip and lowercase an email address"""
    if not email or not isinstance(email, str):
        return ''
    return email.strip().lower()


def validate_email(email):
    """Validate email format"""
    if not email or not isinstance(email, str):
        return False

    return VALID_EMAIL_REGEX.fullmatch(email) is not None


def is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def validate_name(name):
    """Return the list of messages for a user name"""
    if is_blank(name):
        return ["can't be blank"]
    if len(name) > NAME_MAX_LENGTH:
        return [f"is too long (maximum is {NAME_MAX_LENGTH} characters)"]
    return []


def validate_password(password, confirmation=None, require_confirmation=False):
    """Return a dict of field messages for a password and its confirmation"""
    errors = {}
    if is_blank(password):
        errors['password'] = ["can't be blank"]
    elif len(password) < PASSWORD_MIN_LENGTH:
        errors['password'] = [f"is too short (minimum is {PASSWORD_MIN_LENGTH} characters)"]

    if confirmation is None:
        if require_confirmation:
            errors['password_confirmation'] = ["can't be blank"]
    elif confirmation != password:
        errors['password_confirmation'] = ["doesn't match Password"]

    return errors


def validate_micropost_content(content):
    """Return the list of messages for micropost content"""
    if is_blank(content):
        return ["can't be blank"]
    if len(content) > MICROPOST_MAX_LENGTH:
        return [f"is too long (maximum is {MICROPOST_MAX_LENGTH} characters)"]
    return []
