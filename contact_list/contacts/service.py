"""Contact lifecycle: repository writes plus avatar file side effects."""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, Optional

from ..errors import ContactNotFound, DuplicatePhone
from ..images import ImageStore, is_public_url, public_url
from .models import Contact, ContactPage, Pagination, normalize_paging
from .repository import ContactRepository

logger = logging.getLogger(__name__)


def present(contact: Contact) -> Contact:
    """Copy of ``contact`` with its avatar filename mapped to the served path."""
    return replace(contact, avatar=public_url(contact.avatar))


class ContactService:
    """Orchestrates the contact repository and the avatar image store.

    Both collaborators are injected so tests can hand in file-backed or
    fake implementations.
    """

    def __init__(self, repository: ContactRepository, images: ImageStore) -> None:
        self.repository = repository
        self.images = images

    def list(
        self,
        search_term: Optional[str] = None,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> ContactPage:
        term = (search_term or "").strip().lower()
        page, page_size = normalize_paging(page, page_size)

        contacts, total = self.repository.search(term, page, page_size)
        return ContactPage(
            contacts=[present(c) for c in contacts],
            pagination=Pagination(page=page, page_size=page_size, total=total),
        )

    def get(self, contact_id: str) -> Contact:
        contact = self.repository.find_by_id(contact_id)
        if contact is None:
            raise ContactNotFound()
        return present(contact)

    def create(
        self,
        name: str,
        phone: str,
        bio: Optional[str] = None,
        avatar: Optional[str] = None,
    ) -> Contact:
        if self.repository.find_by_phone(phone) is not None:
            raise DuplicatePhone()

        avatar_filename = self.images.save(avatar) if avatar else None

        try:
            contact = self.repository.create(
                name=name, phone=phone, bio=bio or None, avatar=avatar_filename
            )
        except Exception:
            self._discard_avatar(avatar_filename)
            raise

        logger.info("Created contact %s", contact.id)
        return present(contact)

    def update(
        self,
        contact_id: str,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        bio: Optional[str] = None,
        avatar: Optional[str] = None,
    ) -> Contact:
        existing = self.repository.find_by_id(contact_id)
        if existing is None:
            raise ContactNotFound()

        if phone and phone != existing.phone:
            if self.repository.find_by_phone(phone, exclude_id=contact_id) is not None:
                raise DuplicatePhone()

        fields: Dict[str, Any] = {}
        if name:
            fields["name"] = name
        if phone:
            fields["phone"] = phone
        if bio == "":
            fields["bio"] = None
        elif bio:
            fields["bio"] = bio

        new_avatar = None
        if avatar and avatar != existing.avatar and not is_public_url(avatar):
            # Save first: a rejected image must leave the old avatar in place.
            new_avatar = self.images.save(avatar)
            fields["avatar"] = new_avatar

        try:
            updated = self.repository.update(contact_id, fields)
        except Exception:
            self._discard_avatar(new_avatar)
            raise

        if new_avatar:
            self._discard_avatar(existing.avatar)

        logger.info("Updated contact %s", contact_id)
        return present(updated)

    def delete(self, contact_id: str) -> None:
        existing = self.repository.find_by_id(contact_id)
        if existing is None:
            raise ContactNotFound()

        self._discard_avatar(existing.avatar)
        self.repository.delete(contact_id)
        logger.info("Deleted contact %s", contact_id)

    def _discard_avatar(self, filename: Optional[str]) -> None:
        result = self.images.delete(filename)
        if not result.ok:
            logger.warning("Avatar %s left on disk: %s", filename, result.error)
