# cartboard/services/firebase.py
from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore

from ..settings import settings

logger = logging.getLogger(__name__)


def _service_account() -> Optional[credentials.Certificate]:
    """The key file named by GOOGLE_APPLICATION_CREDENTIALS, if it exists."""
    path = settings.google_application_credentials or os.environ.get(
        "GOOGLE_APPLICATION_CREDENTIALS"
    )
    if path and os.path.isfile(path):
        return credentials.Certificate(path)
    if path:
        logger.warning("credentials file %s not found, falling back to ADC", path)
    return None


@lru_cache
def ensure_firestore() -> firestore.Client:
    """
    Firestore client for the workshop project. The Firebase app is set up
    on first use; later calls return the cached client.
    """
    if not firebase_admin._apps:
        options = {"projectId": settings.firebase_project_id}
        cred = _service_account()
        try:
            firebase_admin.initialize_app(cred, options)
        except ValueError:
            # another thread got there first
            logger.debug("firebase app already initialized")
        else:
            logger.info("firebase app initialized for project %s (%s)",
                        settings.firebase_project_id,
                        "service account" if cred else "application default credentials")
    return firestore.client()
