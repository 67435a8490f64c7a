"""Contact persistence: Firestore with a local JSON-file fallback."""
from __future__ import annotations

import json
import logging
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from ..config import Settings
from ..errors import ContactError, ContactNotFound, StorageUnavailable
from ..firestore import get_firestore_client
from .models import Contact, normalize_paging

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "phone", "bio", "avatar")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@contextmanager
def _storage_errors(action: str) -> Iterator[None]:
    """Re-raise backend failures as StorageUnavailable."""
    try:
        yield
    except ContactError:
        raise
    except Exception as exc:
        raise StorageUnavailable(f"Failed to {action}: {exc}") from exc


def _paginate(
    contacts: Iterable[Contact], term: str, page: Optional[int], page_size: Optional[int]
) -> Tuple[List[Contact], int]:
    page, page_size = normalize_paging(page, page_size)
    matches = sorted((c for c in contacts if c.matches(term)), key=Contact.sort_key)
    skip = (page - 1) * page_size
    return matches[skip:skip + page_size], len(matches)


class ContactRepository(ABC):
    """Storage boundary for contact rows."""

    backend = ""

    @abstractmethod
    def find_by_id(self, contact_id: str) -> Optional[Contact]:
        ...

    @abstractmethod
    def find_by_phone(self, phone: str, exclude_id: Optional[str] = None) -> Optional[Contact]:
        ...

    @abstractmethod
    def search(
        self, term: str = "", page: Optional[int] = None, page_size: Optional[int] = None
    ) -> Tuple[List[Contact], int]:
        """Return one page of contacts matching ``term`` and the total match count."""

    @abstractmethod
    def _write(self, contact: Contact) -> None:
        ...

    @abstractmethod
    def delete(self, contact_id: str) -> None:
        ...

    def create(
        self,
        *,
        name: str,
        phone: str,
        bio: Optional[str] = None,
        avatar: Optional[str] = None,
    ) -> Contact:
        now = _now()
        contact = Contact(
            id=str(uuid.uuid4()),
            name=name,
            phone=phone,
            bio=bio or None,
            avatar=avatar,
            created_at=now,
            updated_at=now,
        )
        self._write(contact)
        return contact

    def update(self, contact_id: str, fields: Dict[str, Any]) -> Contact:
        """Apply ``fields`` to an existing row. Unknown keys are ignored."""
        existing = self.find_by_id(contact_id)
        if existing is None:
            raise ContactNotFound()

        for key in UPDATABLE_FIELDS:
            if key in fields:
                setattr(existing, key, fields[key])
        existing.updated_at = _now()
        self._write(existing)
        return existing


class FileContactRepository(ContactRepository):
    """One JSON document per contact inside ``directory``."""

    backend = "file"

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def _contact_file(self, contact_id: str) -> Path:
        safe_id = contact_id.replace("/", "_").replace("\\", "_")
        return self.directory / f"{safe_id}.json"

    def _load_all(self) -> List[Contact]:
        if not self.directory.exists():
            return []

        contacts = []
        for filepath in self.directory.glob("*.json"):
            try:
                with open(filepath, "r", encoding="utf-8") as f:
                    contacts.append(Contact.from_dict(json.load(f)))
            except (ValueError, AttributeError):
                # bad UTF-8, bad JSON, or a top-level value that is not an object
                logger.warning("Skipping unreadable contact file %s", filepath)
        return contacts

    def find_by_id(self, contact_id: str) -> Optional[Contact]:
        filepath = self._contact_file(contact_id)
        with _storage_errors("read contact"):
            if not filepath.exists():
                return None
            with open(filepath, "r", encoding="utf-8") as f:
                return Contact.from_dict(json.load(f))

    def find_by_phone(self, phone: str, exclude_id: Optional[str] = None) -> Optional[Contact]:
        with _storage_errors("look up phone"):
            contacts = self._load_all()
        return next(
            (c for c in contacts if c.phone == phone and c.id != exclude_id),
            None,
        )

    def search(
        self, term: str = "", page: Optional[int] = None, page_size: Optional[int] = None
    ) -> Tuple[List[Contact], int]:
        with _storage_errors("search contacts"):
            contacts = self._load_all()
        return _paginate(contacts, term, page, page_size)

    def _write(self, contact: Contact) -> None:
        with _storage_errors("save contact"):
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(self._contact_file(contact.id), "w", encoding="utf-8") as f:
                json.dump(contact.to_dict(), f, indent=2)

    def delete(self, contact_id: str) -> None:
        with _storage_errors("delete contact"):
            self._contact_file(contact_id).unlink(missing_ok=True)


class FirestoreContactRepository(ContactRepository):
    """Contacts stored as documents keyed by id in a Firestore collection.

    Firestore has no substring queries, so search streams the collection
    and filters in process.
    """

    backend = "firestore"

    def __init__(self, db: Any, collection: str = "contacts") -> None:
        self.db = db
        self.collection_name = collection

    def _collection(self) -> Any:
        return self.db.collection(self.collection_name)

    def find_by_id(self, contact_id: str) -> Optional[Contact]:
        with _storage_errors("read contact"):
            doc = self._collection().document(contact_id).get()
            if doc.exists:
                return Contact.from_dict(doc.to_dict())
        return None

    def find_by_phone(self, phone: str, exclude_id: Optional[str] = None) -> Optional[Contact]:
        with _storage_errors("look up phone"):
            docs = self._collection().where("phone", "==", phone).stream()
            for doc in docs:
                contact = Contact.from_dict(doc.to_dict())
                if contact.id != exclude_id:
                    return contact
        return None

    def search(
        self, term: str = "", page: Optional[int] = None, page_size: Optional[int] = None
    ) -> Tuple[List[Contact], int]:
        with _storage_errors("search contacts"):
            contacts = [Contact.from_dict(doc.to_dict()) for doc in self._collection().stream()]
        return _paginate(contacts, term, page, page_size)

    def _write(self, contact: Contact) -> None:
        with _storage_errors("save contact"):
            self._collection().document(contact.id).set(contact.to_dict())

    def delete(self, contact_id: str) -> None:
        with _storage_errors("delete contact"):
            self._collection().document(contact_id).delete()


def build_repository(settings: Settings) -> ContactRepository:
    """Pick the Firestore backend unless forced (or unable) to use files."""
    if settings.force_file:
        return FileContactRepository(settings.data_dir)

    try:
        db = get_firestore_client(settings)
    except Exception as exc:
        logger.warning("Firestore unavailable, using file storage in %s: %s", settings.data_dir, exc)
        return FileContactRepository(settings.data_dir)
    return FirestoreContactRepository(db, settings.collection)
