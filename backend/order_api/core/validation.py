"""
Explicit input validation.

Each ``validate_*`` function returns a list of structured errors shaped like
the ones produced for request validation failures::

    {"field": "email", "message": "Invalid email", "type": "value_error"}

An empty list means the input is acceptable. ``raise_for_errors`` turns a
non-empty list into a ``ValidationError`` before any business logic runs.
"""

import re
from typing import Dict, List, Optional

from order_api.core.exceptions import ValidationError

FieldError = Dict[str, str]

EMAIL_REGEX = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
NAME_REGEX = re.compile(r"^(?!.*[#@!0-9])[A-Za-zÀ-ÖØ-öø-ÿ]+(?: [A-Za-zÀ-ÖØ-öø-ÿ]+)*$")
PASSWORD_REGEX = re.compile(
    r"^(?=.*[A-Za-z])(?=.*\d)[A-Za-z\d!@#$%^&*()\-_=+{}\[\]|\\:;\"'<>,.?/`~]{6,}$"
)
PHONE_REGEX = re.compile(r"^$|^\(?([0-9]{3})\)?([ .-]?)([0-9]{3})\2([0-9]{4})$|^([0-9]{11})$")

MAX_EMAIL_LENGTH = 254
# bcrypt only reads the first 72 bytes
MAX_PASSWORD_LENGTH = 72


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _error(field: str, message: str, kind: str = "value_error") -> FieldError:
    return {"field": field, "message": message, "type": kind}


def _required(field: str, value: Optional[str]) -> Optional[FieldError]:
    if value is None or not value.strip():
        return _error(field, f"{field} can not be null or empty", "missing")
    return None


def validate_email(email: Optional[str], field: str = "email") -> List[FieldError]:
    missing = _required(field, email)
    if missing:
        return [missing]
    email = normalize_email(email)
    if len(email) > MAX_EMAIL_LENGTH or not EMAIL_REGEX.match(email):
        return [_error(field, "Invalid email")]
    return []


def validate_login(email: Optional[str], password: Optional[str]) -> List[FieldError]:
    """
    Login only requires both fields to be present.

    Anything else, however malformed, is left to credential verification so
    it fails the same way as an unknown email or a wrong password.
    """
    errors: List[FieldError] = []
    missing = _required("email", email)
    if missing:
        errors.append(missing)
    if password is None or password == "":
        errors.append(_error("password", "password can not be null or empty", "missing"))
    return errors


def validate_refresh(email: Optional[str], refresh_token: Optional[str]) -> List[FieldError]:
    checks = (_required("email", email), _required("refreshToken", refresh_token))
    return [error for error in checks if error]


def validate_new_user(
    name: Optional[str],
    email: Optional[str],
    password: Optional[str],
    phone: Optional[str],
) -> List[FieldError]:
    """Registration rules for a new identity."""
    errors: List[FieldError] = []

    missing = _required("name", name)
    if missing:
        errors.append(missing)
    elif not 2 <= len(name.strip()) <= 65:
        errors.append(_error("name", "Name must be between 2 and 65 characters"))
    elif not NAME_REGEX.match(name.strip()):
        errors.append(_error("name", "Invalid name"))

    errors.extend(validate_email(email))

    if password is None:
        errors.append(_error("password", "password can not be null", "missing"))
    elif len(password) > MAX_PASSWORD_LENGTH or not PASSWORD_REGEX.match(password):
        errors.append(
            _error("password", "Password must contain at least 6 characters, with at least one number")
        )

    if phone is None:
        errors.append(_error("phone", "phone can not be null", "missing"))
    elif not PHONE_REGEX.match(phone):
        errors.append(_error("phone", "Invalid phone"))

    return errors


def raise_for_errors(errors: List[FieldError]) -> None:
    if errors:
        raise ValidationError("Validation failed", details={"errors": errors})
