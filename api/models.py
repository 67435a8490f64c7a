"""Request models for the contact endpoints.

Field rules mirror what the UI enforces: names are 2-100 characters,
phones allow an optional leading ``+`` followed by at least ten digits,
spaces, dashes or parentheses, and bios stop at 500 characters. All
strings are trimmed before the checks run.
"""
from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

PHONE_PATTERN = re.compile(r"^\+?[\d\s\-()]{10,}$")


def _check_phone(value: Optional[str]) -> Optional[str]:
    if value is not None and not PHONE_PATTERN.match(value):
        raise ValueError("Invalid phone number format")
    return value


class ContactCreateRequest(BaseModel):
    """Request body for creating a contact."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=2, max_length=100)
    phone: str
    bio: Optional[str] = Field(None, max_length=500)
    avatar: Optional[str] = Field(
        None, description="Base64 data URI, e.g. data:image/png;base64,...",
    )

    @field_validator("phone")
    @classmethod
    def _phone_format(cls, value: str) -> str:
        return _check_phone(value)


class ContactUpdateRequest(BaseModel):
    """Request body for a partial contact update.

    Omitted fields stay as they are. ``bio: ""`` clears the bio. ``avatar``
    may be a new data URI or the contact's current ``/uploads/...`` path,
    which is treated as unchanged.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=2, max_length=100)
    phone: Optional[str] = None
    bio: Optional[str] = Field(None, max_length=500)
    avatar: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def _phone_format(cls, value: Optional[str]) -> Optional[str]:
        return _check_phone(value)
