"""Contact record and listing result types."""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10


@dataclass
class Contact:
    """A single entry in the contact list."""
    id: str
    name: str
    phone: str
    bio: Optional[str] = None
    avatar: Optional[str] = None  # stored filename, or /uploads/ path once shaped
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Contact:
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            phone=data.get("phone", ""),
            bio=data.get("bio") or None,
            avatar=data.get("avatar") or None,
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
        )

    def matches(self, term: str) -> bool:
        """Case-insensitive substring match on name, phone or bio."""
        if not term:
            return True
        needle = term.casefold()
        return any(
            needle in value.casefold()
            for value in (self.name, self.phone, self.bio)
            if value
        )

    def sort_key(self) -> tuple:
        return (self.name.casefold(), self.name, self.id)


@dataclass
class Pagination:
    page: int
    page_size: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size)

    @property
    def has_more(self) -> bool:
        return self.page * self.page_size < self.total


@dataclass
class ContactPage:
    """One page of a contact listing."""
    contacts: List[Contact] = field(default_factory=list)
    pagination: Pagination = field(
        default_factory=lambda: Pagination(DEFAULT_PAGE, DEFAULT_PAGE_SIZE, 0)
    )


def normalize_paging(page: Optional[int], page_size: Optional[int]) -> tuple[int, int]:
    """Fall back to the defaults for absent or non-positive values."""
    if not page or page < 1:
        page = DEFAULT_PAGE
    if not page_size or page_size < 1:
        page_size = DEFAULT_PAGE_SIZE
    return page, page_size
