"""Shared fixtures for contact list tests."""
from __future__ import annotations

import base64

import pytest

from contact_list.config import Settings
from contact_list.contacts import ContactService, FileContactRepository
from contact_list.images import ImageStore

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR-test-avatar"
GIF_BYTES = b"GIF89a-test-avatar"


def data_uri(kind: str, payload: bytes) -> str:
    return f"data:image/{kind};base64,{base64.b64encode(payload).decode('ascii')}"


@pytest.fixture
def make_data_uri():
    return data_uri


@pytest.fixture
def png_uri() -> str:
    return data_uri("png", PNG_BYTES)


@pytest.fixture
def gif_uri() -> str:
    return data_uri("gif", GIF_BYTES)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        uploads_dir=tmp_path / "uploads",
        logs_dir=tmp_path / "logs",
        data_dir=tmp_path / "contacts_data",
        force_file=True,
        allowed_origins=[],
    )


@pytest.fixture
def image_store(settings) -> ImageStore:
    return ImageStore(settings.uploads_dir)


@pytest.fixture
def repository(settings) -> FileContactRepository:
    return FileContactRepository(settings.data_dir)


@pytest.fixture
def service(repository, image_store) -> ContactService:
    return ContactService(repository=repository, images=image_store)
