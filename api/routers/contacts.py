"""Contacts Router - list, fetch, create, update and delete contacts.

Service failures (duplicate phone, bad avatar, missing contact) propagate
as ``ContactError`` subclasses and are turned into status codes by the
handlers registered in ``api.main``.
"""
from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_contact_service, serialize_contact, serialize_page
from api.models import ContactCreateRequest, ContactUpdateRequest
from contact_list.contacts import ContactService

router = APIRouter()


@router.get("")
def list_contacts(
    q: Optional[str] = Query(None, description="Search name, phone and bio."),
    page: Optional[int] = Query(None, ge=1),
    page_size: Optional[int] = Query(None, alias="pageSize", ge=1, le=100),
    service: ContactService = Depends(get_contact_service),
) -> dict:
    """List contacts ordered by name, optionally filtered by ``q``."""
    return serialize_page(service.list(q, page, page_size))


@router.get("/{contact_id}")
def get_contact(
    contact_id: UUID,
    service: ContactService = Depends(get_contact_service),
) -> dict:
    return serialize_contact(service.get(str(contact_id)))


@router.post("", status_code=201)
def create_contact(
    request: ContactCreateRequest,
    service: ContactService = Depends(get_contact_service),
) -> dict:
    contact = service.create(
        name=request.name,
        phone=request.phone,
        bio=request.bio,
        avatar=request.avatar,
    )
    return serialize_contact(contact)


@router.put("/{contact_id}")
def update_contact(
    contact_id: UUID,
    request: ContactUpdateRequest,
    service: ContactService = Depends(get_contact_service),
) -> dict:
    contact = service.update(
        str(contact_id),
        name=request.name,
        phone=request.phone,
        bio=request.bio,
        avatar=request.avatar,
    )
    return serialize_contact(contact)


@router.delete("/{contact_id}")
def delete_contact(
    contact_id: UUID,
    service: ContactService = Depends(get_contact_service),
) -> dict:
    service.delete(str(contact_id))
    return {"message": "Contact deleted successfully"}
