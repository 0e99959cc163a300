"""Validation rules for usernames, passwords, pet names/breeds and ages."""
from __future__ import annotations

import re

from adoption.core.errors import InvalidInputError

WORD_PATTERN = re.compile(r"[A-Za-z0-9 ]+")
DIGITS_PATTERN = re.compile(r"[0-9]+")
AGE_PATTERN = re.compile(r"([0-9]+)\s*(years?|months?)", re.ASCII)
USERNAME_MIN_LENGTH = 4
USERNAME_MAX_LENGTH = 20
STRONG_PASSWORD_MIN_LENGTH = 8


def _is_word_text(value: str | None) -> bool:
    """Alphanumeric and single spaces only."""
    if not value:
        return False
    if not WORD_PATTERN.fullmatch(value):
        return False
    return "  " not in value


def is_valid_username(value: str | None) -> bool:
    """Return True for 4-20 characters of letters, digits and single spaces."""
    if not value or not USERNAME_MIN_LENGTH <= len(value) <= USERNAME_MAX_LENGTH:
        return False
    return _is_word_text(value)


def is_valid_password(value: str | None) -> bool:
    return bool(value)


def is_strong_password(value: str | None) -> bool:
    """Stricter rule: at least 8 characters with a letter and a digit."""
    if not value or len(value) < STRONG_PASSWORD_MIN_LENGTH:
        return False
    return any(ch.isalpha() for ch in value) and any(ch.isdigit() for ch in value)


def password_validator(policy: str):
    """Pick the password rule for a configured policy name."""
    return is_strong_password if policy == "strict" else is_valid_password


def is_valid_name(value: str | None) -> bool:
    return _is_word_text(value)


def is_valid_breed(value: str | None) -> bool:
    return _is_word_text(value)


def parse_age(text: str | None) -> int:
    """
    Parse an age answer into whole years.

    Accepts "5", "3 years", "1 year", "18 months". Months are floor-divided
    by 12, so anything under a year becomes 0.
    """
    raw = (text or "").strip()
    if DIGITS_PATTERN.fullmatch(raw):
        return int(raw)
    match = AGE_PATTERN.fullmatch(raw)
    if not match:
        raise InvalidInputError("Invalid age format. Please enter like '2', '3 years', or '6 months'")
    value = int(match.group(1))
    if match.group(2).startswith("month"):
        return value // 12
    return value
