"""Shared dependencies and serialization helpers for API routers.

Routers receive the contact service through ``Depends(get_contact_service)``.
It is built once per app from the ``Settings`` that ``create_app`` stored on
``app.state``, so the service writes avatars where the app serves them.
"""
from __future__ import annotations

from functools import lru_cache

from fastapi import Request

from contact_list.config import Settings, load_settings
from contact_list.contacts import Contact, ContactPage, ContactService, build_repository
from contact_list.images import ImageStore


# =============================================================================
# Cached Functions
# =============================================================================

@lru_cache
def get_settings() -> Settings:
    """Get application settings (cached)."""
    return load_settings()


def build_contact_service(settings: Settings) -> ContactService:
    """Wire the repository and image store described by ``settings``."""
    return ContactService(
        repository=build_repository(settings),
        images=ImageStore(settings.uploads_dir),
    )


def get_contact_service(request: Request) -> ContactService:
    """Return the app's contact service, building it on first use."""
    state = request.app.state
    service = getattr(state, "contact_service", None)
    if service is None:
        service = build_contact_service(state.settings)
        state.contact_service = service
    return service


# =============================================================================
# Serialization Helpers
# =============================================================================

def serialize_contact(contact: Contact) -> dict:
    """Serialize a presented Contact to API response format."""
    return {
        "id": contact.id,
        "name": contact.name,
        "phone": contact.phone,
        "bio": contact.bio,
        "avatar": contact.avatar,
        "createdAt": contact.created_at,
        "updatedAt": contact.updated_at,
    }


def serialize_page(result: ContactPage) -> dict:
    pagination = result.pagination
    return {
        "contacts": [serialize_contact(c) for c in result.contacts],
        "pagination": {
            "page": pagination.page,
            "pageSize": pagination.page_size,
            "total": pagination.total,
            "totalPages": pagination.total_pages,
            "hasMore": pagination.has_more,
        },
    }
