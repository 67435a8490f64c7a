"""Firestore client for the contact backend."""
from __future__ import annotations

from typing import Optional

from .config import Settings

_firestore_client = None


def get_firestore_client(settings: Optional[Settings] = None):
    """Return the process-wide Firestore client, initializing Firebase once.

    A service-account file from ``settings.firebase_credentials`` and a
    project id from ``settings.firestore_project`` are used when set;
    otherwise Application Default Credentials decide both.
    """

    global _firestore_client
    if _firestore_client is not None:
        return _firestore_client

    try:
        import firebase_admin
        from firebase_admin import credentials, firestore
    except ModuleNotFoundError as exc:  # pragma: no cover
        raise RuntimeError(
            "firebase-admin is required for the Firestore contact backend. "
            "Install dependencies or set CONTACTS_FORCE_FILE=1."
        ) from exc

    if not firebase_admin._apps:
        credential = None
        options = {}
        if settings is not None and settings.firebase_credentials:
            credential = credentials.Certificate(str(settings.firebase_credentials))
        if settings is not None and settings.firestore_project:
            options["projectId"] = settings.firestore_project
        firebase_admin.initialize_app(credential, options or None)

    _firestore_client = firestore.client()
    return _firestore_client
