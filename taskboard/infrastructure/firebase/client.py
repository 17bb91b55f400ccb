"""Firestore client construction (REST-based, no firebase-admin).

Built at app startup from either FIREBASE_SERVICE_ACCOUNT_KEY (JSON string)
or FIREBASE_SERVICE_ACCOUNT_PATH (file path). The client is handed to the
document store and closed at shutdown; there is no module-level instance.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from taskboard.infrastructure.firebase._rest_client import (
    FirestoreRESTClient,
    _get_credentials,
)

if TYPE_CHECKING:
    from taskboard.core.config import Settings

logger = logging.getLogger(__name__)


def _load_key_dict(settings: "Settings") -> dict:
    """Return service account dict from env key or file path."""
    key_json = (
        settings.firebase_service_account_key.get_secret_value()
        if settings.firebase_service_account_key
        else None
    )
    if key_json:
        try:
            return json.loads(key_json)
        except json.JSONDecodeError as e:
            raise ValueError("FIREBASE_SERVICE_ACCOUNT_KEY is not valid JSON") from e
    path = settings.firebase_service_account_path
    if path:
        resolved = Path(path).expanduser().resolve()
        if not resolved.is_file():
            raise ValueError(
                f"FIREBASE_SERVICE_ACCOUNT_PATH set but file not found: {path} (resolved: {resolved})"
            )
        with open(resolved, encoding="utf-8") as f:
            return json.load(f)
    raise ValueError(
        "Firestore backend needs FIREBASE_SERVICE_ACCOUNT_KEY or FIREBASE_SERVICE_ACCOUNT_PATH"
    )


def create_firestore_client(settings: "Settings") -> FirestoreRESTClient:
    """Build a Firestore REST client from service account settings.

    Raises:
        ValueError: Credentials missing, unreadable, or without project_id.
    """
    key_dict = _load_key_dict(settings)
    project_id = key_dict.get("project_id")
    if not project_id:
        raise ValueError("Firebase service account JSON missing 'project_id'")
    cred = _get_credentials(key_dict)
    logger.info("Firestore client created for project %s", project_id)
    return FirestoreRESTClient(
        project_id, cred, timeout=settings.firestore_timeout_seconds
    )
