"""Error hierarchy shared by the domain, repositories, services and CLI."""

from __future__ import annotations


class AdoptionError(Exception):
    """Base class for every error the application reports to the user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(AdoptionError):
    """A value failed validation (username, name, age, status change...)."""


class DuplicateUsernameError(InvalidInputError):
    """Raised when a username is already taken by another account."""


class OutOfRangeError(AdoptionError):
    """An index does not address an existing record."""

    def __init__(self, kind: str, index: int, size: int):
        super().__init__(f"{kind} index {index} out of range (0..{size - 1})" if size else f"No {kind} records")
        self.kind = kind
        self.index = index
        self.size = size


class FileOperationError(AdoptionError):
    """A persistence file could not be read or written."""


class InvalidFormatError(AdoptionError):
    """A persisted line does not match the expected record layout."""


class AuthenticationError(AdoptionError):
    """Credentials or role did not match any account."""
