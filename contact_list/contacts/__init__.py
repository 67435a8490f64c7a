"""Contact records, storage backends and lifecycle service."""
from __future__ import annotations

from .models import Contact, ContactPage, Pagination
from .repository import (
    ContactRepository,
    FileContactRepository,
    FirestoreContactRepository,
    build_repository,
)
from .service import ContactService

__all__ = [
    # Records
    "Contact",
    "ContactPage",
    "Pagination",
    # Storage
    "ContactRepository",
    "FileContactRepository",
    "FirestoreContactRepository",
    "build_repository",
    # Lifecycle
    "ContactService",
]
