"""Tests for contact storage backends.

This module tests:
- File backend CRUD, phone lookup and search/pagination
- Firestore backend against a mocked client
- Backend selection in build_repository
- Firebase initialization from settings
"""
from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from contact_list import firestore as firestore_module
from contact_list.contacts import (
    Contact,
    FileContactRepository,
    FirestoreContactRepository,
    build_repository,
)
from contact_list.contacts import repository as repository_module
from contact_list.errors import ContactNotFound, StorageUnavailable


def _seed(repo, *rows):
    return [repo.create(name=name, phone=phone, bio=bio) for name, phone, bio in rows]


# =============================================================================
# File backend
# =============================================================================

class TestFileRepositoryCrud:

    def test_create_assigns_id_and_timestamps(self, repository):
        contact = repository.create(name="Ada Lovelace", phone="+44 20 7946 0000")

        assert contact.id
        assert contact.created_at
        assert contact.created_at == contact.updated_at
        assert contact.bio is None
        assert contact.avatar is None

    def test_create_stores_empty_bio_as_absent(self, repository):
        contact = repository.create(name="Ada Lovelace", phone="+44 20 7946 0000", bio="")
        assert repository.find_by_id(contact.id).bio is None

    def test_writes_json_document(self, repository):
        contact = repository.create(name="Ada Lovelace", phone="+44 20 7946 0000")

        data = json.loads((repository.directory / f"{contact.id}.json").read_text())

        assert data["name"] == "Ada Lovelace"
        assert data["phone"] == "+44 20 7946 0000"

    def test_find_by_id_missing(self, repository):
        assert repository.find_by_id("nope") is None

    def test_update_applies_fields(self, repository):
        contact = repository.create(name="Ada Lovelace", phone="+44 20 7946 0000", bio="math")

        updated = repository.update(contact.id, {"name": "Ada King", "bio": None, "id": "ignored"})

        assert updated.id == contact.id
        assert updated.name == "Ada King"
        assert updated.bio is None
        assert updated.phone == contact.phone
        assert updated.created_at == contact.created_at
        assert repository.find_by_id(contact.id).name == "Ada King"

    def test_update_missing_raises(self, repository):
        with pytest.raises(ContactNotFound):
            repository.update("nope", {"name": "X"})

    def test_delete(self, repository):
        contact = repository.create(name="Ada Lovelace", phone="+44 20 7946 0000")

        repository.delete(contact.id)
        repository.delete(contact.id)

        assert repository.find_by_id(contact.id) is None

    def test_unwritable_directory_is_storage_error(self, tmp_path):
        blocker = tmp_path / "data"
        blocker.write_text("file in the way")
        repo = FileContactRepository(blocker)

        with pytest.raises(StorageUnavailable):
            repo.create(name="Ada Lovelace", phone="+44 20 7946 0000")

    def test_corrupt_file_is_skipped_in_search(self, repository):
        _seed(repository, ("Ada Lovelace", "+44 20 7946 0000", None))
        (repository.directory / "broken.json").write_text("{not json")

        contacts, total = repository.search("")

        assert total == 1
        assert contacts[0].name == "Ada Lovelace"

    @pytest.mark.parametrize("raw", [
        b"\xff\xfe\x00garbage",
        b"[1, 2]",
        b'"just a string"',
        b"null",
    ])
    def test_unreadable_file_is_skipped(self, repository, raw):
        _seed(repository, ("Ada Lovelace", "+44 20 7946 0000", None))
        (repository.directory / "stray.json").write_bytes(raw)

        contacts, total = repository.search("")

        assert total == 1
        assert contacts[0].name == "Ada Lovelace"
        assert repository.find_by_phone("+44 20 7946 0000").name == "Ada Lovelace"
        assert repository.find_by_phone("+1 555 000 0009") is None


class TestFileRepositoryPhone:

    def test_find_by_phone(self, repository):
        ada, _ = _seed(
            repository,
            ("Ada Lovelace", "+44 20 7946 0000", None),
            ("Alan Turing", "+44 20 7946 1111", None),
        )
        assert repository.find_by_phone("+44 20 7946 0000").id == ada.id
        assert repository.find_by_phone("000") is None

    def test_find_by_phone_excludes_own_id(self, repository):
        ada, = _seed(repository, ("Ada Lovelace", "+44 20 7946 0000", None))
        assert repository.find_by_phone("+44 20 7946 0000", exclude_id=ada.id) is None


class TestFileRepositorySearch:

    @pytest.fixture
    def five(self, repository):
        return _seed(
            repository,
            ("Eve", "555-000-0005", None),
            ("alice", "555-000-0001", "guitarist"),
            ("Carol", "555-000-0003", "drummer"),
            ("Bob", "555-000-0002", None),
            ("Dave", "555-000-0004", "Plays GUITAR badly"),
        )

    def test_orders_by_name_case_insensitively(self, repository, five):
        contacts, total = repository.search("")
        assert total == 5
        assert [c.name for c in contacts] == ["alice", "Bob", "Carol", "Dave", "Eve"]

    def test_pagination_window(self, repository, five):
        first, total = repository.search("", page=1, page_size=2)
        last, _ = repository.search("", page=3, page_size=2)
        beyond, _ = repository.search("", page=4, page_size=2)

        assert total == 5
        assert [c.name for c in first] == ["alice", "Bob"]
        assert [c.name for c in last] == ["Eve"]
        assert beyond == []

    @pytest.mark.parametrize("page,page_size", [(None, None), (0, 0), (-1, -5)])
    def test_invalid_paging_falls_back_to_defaults(self, repository, five, page, page_size):
        contacts, total = repository.search("", page=page, page_size=page_size)
        assert len(contacts) == 5
        assert total == 5

    def test_matches_bio_case_insensitively(self, repository, five):
        contacts, total = repository.search("GUITAR")
        assert total == 2
        assert [c.name for c in contacts] == ["alice", "Dave"]

    def test_matches_phone(self, repository, five):
        contacts, total = repository.search("0003")
        assert total == 1
        assert contacts[0].name == "Carol"

    def test_matches_name(self, repository, five):
        contacts, _ = repository.search("bo")
        assert [c.name for c in contacts] == ["Bob"]

    def test_no_match(self, repository, five):
        assert repository.search("zzz") == ([], 0)

    def test_empty_directory(self, tmp_path):
        assert FileContactRepository(tmp_path / "missing").search("") == ([], 0)


# =============================================================================
# Firestore backend
# =============================================================================

def _doc(data, exists=True):
    doc = MagicMock()
    doc.exists = exists
    doc.to_dict.return_value = data
    return doc


@pytest.fixture
def firestore_db():
    return MagicMock()


@pytest.fixture
def firestore_repo(firestore_db):
    return FirestoreContactRepository(firestore_db, collection="contacts_test")


class TestFirestoreRepository:

    def test_find_by_id(self, firestore_db, firestore_repo):
        collection = firestore_db.collection.return_value
        collection.document.return_value.get.return_value = _doc(
            {"id": "c1", "name": "Ada", "phone": "5550000000", "bio": ""}
        )

        contact = firestore_repo.find_by_id("c1")

        firestore_db.collection.assert_called_with("contacts_test")
        collection.document.assert_called_with("c1")
        assert contact.name == "Ada"
        assert contact.bio is None

    def test_find_by_id_missing(self, firestore_db, firestore_repo):
        firestore_db.collection.return_value.document.return_value.get.return_value = _doc(None, exists=False)
        assert firestore_repo.find_by_id("c1") is None

    def test_find_by_phone_skips_excluded(self, firestore_db, firestore_repo):
        query = firestore_db.collection.return_value.where.return_value
        query.stream.return_value = iter([
            _doc({"id": "c1", "name": "Ada", "phone": "5550000000"}),
        ])

        assert firestore_repo.find_by_phone("5550000000", exclude_id="c1") is None
        firestore_db.collection.return_value.where.assert_called_with("phone", "==", "5550000000")

    def test_find_by_phone_hit(self, firestore_db, firestore_repo):
        query = firestore_db.collection.return_value.where.return_value
        query.stream.return_value = iter([
            _doc({"id": "c1", "name": "Ada", "phone": "5550000000"}),
        ])

        assert firestore_repo.find_by_phone("5550000000").id == "c1"

    def test_search_filters_and_pages(self, firestore_db, firestore_repo):
        firestore_db.collection.return_value.stream.return_value = iter([
            _doc({"id": "c2", "name": "Bob", "phone": "5550000002", "bio": "Guitarist"}),
            _doc({"id": "c1", "name": "Ada", "phone": "5550000001", "bio": "guitar"}),
            _doc({"id": "c3", "name": "Cy", "phone": "5550000003"}),
        ])

        contacts, total = firestore_repo.search("guitar", page=1, page_size=1)

        assert total == 2
        assert [c.id for c in contacts] == ["c1"]

    def test_create_sets_document(self, firestore_db, firestore_repo):
        document = firestore_db.collection.return_value.document

        contact = firestore_repo.create(name="Ada", phone="5550000000", avatar="a.png")

        document.assert_called_with(contact.id)
        stored = document.return_value.set.call_args[0][0]
        assert stored["name"] == "Ada"
        assert stored["avatar"] == "a.png"

    def test_update_missing_raises_not_found(self, firestore_db, firestore_repo):
        firestore_db.collection.return_value.document.return_value.get.return_value = _doc(None, exists=False)
        with pytest.raises(ContactNotFound):
            firestore_repo.update("c1", {"name": "X"})

    def test_delete(self, firestore_db, firestore_repo):
        firestore_repo.delete("c1")
        firestore_db.collection.return_value.document.return_value.delete.assert_called_once()

    def test_backend_failure_is_storage_error(self, firestore_db, firestore_repo):
        firestore_db.collection.side_effect = RuntimeError("deadline exceeded")

        with pytest.raises(StorageUnavailable) as exc_info:
            firestore_repo.search("")
        assert isinstance(exc_info.value.__cause__, RuntimeError)


# =============================================================================
# Backend selection
# =============================================================================

class TestBuildRepository:

    def test_force_file(self, settings):
        repo = build_repository(settings)
        assert isinstance(repo, FileContactRepository)
        assert repo.directory == settings.data_dir

    def test_firestore_when_available(self, settings, monkeypatch):
        settings.force_file = False
        db = MagicMock()
        monkeypatch.setattr(repository_module, "get_firestore_client", lambda *args: db)

        repo = build_repository(settings)

        assert isinstance(repo, FirestoreContactRepository)
        assert repo.db is db
        assert repo.collection_name == settings.collection

    def test_falls_back_to_file(self, settings, monkeypatch):
        settings.force_file = False

        def _unavailable(*args):
            raise RuntimeError("no credentials")

        monkeypatch.setattr(repository_module, "get_firestore_client", _unavailable)

        assert isinstance(build_repository(settings), FileContactRepository)


def test_contact_round_trips_through_dict():
    contact = Contact(id="c1", name="Ada", phone="5550000000", bio="b", avatar="a.png")
    assert Contact.from_dict(contact.to_dict()) == contact


class TestFirestoreClient:

    @pytest.fixture
    def firebase(self, monkeypatch):
        firebase_admin = pytest.importorskip("firebase_admin")
        from firebase_admin import credentials, firestore

        monkeypatch.setattr(firestore_module, "_firestore_client", None)
        monkeypatch.setattr(firebase_admin, "_apps", {})
        monkeypatch.setattr(firebase_admin, "initialize_app", MagicMock())
        monkeypatch.setattr(credentials, "Certificate", MagicMock(return_value="cert"))
        monkeypatch.setattr(firestore, "client", MagicMock(return_value="db"))
        return firebase_admin, credentials

    def test_uses_configured_project_and_credentials(self, settings, tmp_path, firebase):
        firebase_admin, credentials = firebase
        key_file = tmp_path / "service-account.json"
        key_file.write_text("{}")
        settings.firestore_project = "contacts-prod"
        settings.firebase_credentials = key_file

        assert firestore_module.get_firestore_client(settings) == "db"

        credentials.Certificate.assert_called_once_with(str(key_file))
        firebase_admin.initialize_app.assert_called_once_with("cert", {"projectId": "contacts-prod"})

    def test_application_default_credentials(self, settings, firebase):
        firebase_admin, credentials = firebase

        firestore_module.get_firestore_client(settings)

        credentials.Certificate.assert_not_called()
        firebase_admin.initialize_app.assert_called_once_with(None, None)

    def test_client_is_cached(self, settings, firebase):
        firebase_admin, _ = firebase

        first = firestore_module.get_firestore_client(settings)
        second = firestore_module.get_firestore_client(settings)

        assert first is second
        assert firebase_admin.initialize_app.call_count == 1
