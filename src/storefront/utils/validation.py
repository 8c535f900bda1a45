"""
Field validators shared by the request schemas.

Each validator returns the (possibly normalized) value or raises
ValueError, which pydantic turns into a field error.
"""

import re
from datetime import date, datetime
from typing import Optional, Union


PASSWORD_REGEX = re.compile(r"[A-Za-z\d@$!%*#?&]{8,}")
PHONE_REGEX = re.compile(r"^\+?[1-9]\d{1,14}$")
DOCUMENT_REGEX = re.compile(r"^\d{3}\.\d{3}\.\d{3}-\d{2}$")
URL_REGEX = re.compile(r"^https?://[^\s/$.?#][^\s]*$", re.IGNORECASE)


def validate_password(password: str) -> str:
    """
    Validate password strength.

    At least 8 characters from letters, digits and @$!%*#?&, with at
    least one letter and one digit.
    """
    if not PASSWORD_REGEX.search(password):
        raise ValueError("Password must be at least 8 characters long and contain letters and numbers")

    if not any(c.isalpha() for c in password):
        raise ValueError("Password must contain at least one letter")

    if not any(c.isdigit() for c in password):
        raise ValueError("Password must contain at least one number")

    return password


def validate_phone(phone: str) -> str:
    """Validate an E.164-like phone number."""
    if not PHONE_REGEX.match(phone):
        raise ValueError("Invalid phone number")
    return phone


def validate_document(document: str) -> str:
    """Validate a CPF document in 000.000.000-00 format."""
    if not DOCUMENT_REGEX.match(document):
        raise ValueError("Invalid CPF. Use the format: 000.000.000-00")
    return document


def validate_birth_date(birth_date: Union[str, date, None]) -> Optional[date]:
    """Parse a YYYY-MM-DD birth date."""
    if birth_date is None or isinstance(birth_date, date):
        return birth_date

    try:
        return datetime.strptime(birth_date, "%Y-%m-%d").date()
    except ValueError:
        raise ValueError("Invalid birth date. Use the format: YYYY-MM-DD")


def validate_url(url: str) -> str:
    """Validate an absolute http(s) URL."""
    if not URL_REGEX.match(url):
        raise ValueError("Invalid URL")
    return url
