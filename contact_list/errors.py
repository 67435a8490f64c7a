"""Exceptions raised by the contact service and its collaborators."""
from __future__ import annotations


class ContactError(Exception):
    """Base class for caller-visible contact failures."""

    message = "Contact operation failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)

    @property
    def detail(self) -> str:
        return str(self)


class ContactNotFound(ContactError):
    message = "Contact not found"


class DuplicatePhone(ContactError):
    message = "Phone number already exists"


class InvalidImage(ContactError):
    """Avatar payload could not be accepted."""


class InvalidImageData(InvalidImage):
    message = "Invalid image data"


class InvalidImageFormat(InvalidImage):
    message = "Invalid image format"


class StorageUnavailable(ContactError):
    """The datastore or filesystem failed underneath an operation."""

    message = "Storage unavailable"
