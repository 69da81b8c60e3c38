"""Firebase Admin bootstrap for the Iqra backend.

The Firebase app is initialised once per process.  Components never reach for
these handles themselves; ``app.py`` and the scripts call :func:`get_db` and
friends at start-up and pass the results into constructors.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Optional

import firebase_admin
from firebase_admin import auth, credentials, firestore, storage

_app: Optional[firebase_admin.App] = None
_db_client: Optional[firestore.Client] = None


def _load_credentials() -> Optional[credentials.Base]:
    """Return service account credentials from the environment.

    ``FIREBASE_CREDENTIALS`` may hold the JSON document itself or a path to
    it.  When unset, application default credentials are used (Cloud Run,
    Functions, or ``GOOGLE_APPLICATION_CREDENTIALS``).
    """

    raw = os.getenv("FIREBASE_CREDENTIALS", "").strip()
    if not raw:
        return None
    if raw.startswith("{"):
        try:
            return credentials.Certificate(json.loads(raw))
        except json.JSONDecodeError as exc:
            raise RuntimeError("FIREBASE_CREDENTIALS must be valid JSON") from exc
    return credentials.Certificate(raw)


def get_app() -> firebase_admin.App:
    """Return the process-wide Firebase app, initialising it on first use."""

    global _app
    if _app is not None:
        return _app
    if firebase_admin._apps:  # guard against re-init
        _app = firebase_admin.get_app()
        return _app

    options = {}
    bucket = os.getenv("FIREBASE_STORAGE_BUCKET", "").strip()
    if bucket:
        options["storageBucket"] = bucket
    try:
        _app = firebase_admin.initialize_app(_load_credentials(), options or None)
    except Exception as exc:  # pragma: no cover - runtime side effects
        logging.exception("Firebase init failed: %s", exc)
        raise RuntimeError("Firebase initialization failed") from exc
    return _app


def get_db() -> firestore.Client:
    """Return a cached Firestore client."""

    global _db_client
    if _db_client is None:
        _db_client = firestore.client(get_app())
    return _db_client


def get_auth():
    """Return the Firebase Auth module bound to the initialised app."""

    get_app()
    return auth


def get_bucket():
    """Return the recordings bucket, or ``None`` when none is configured."""

    app = get_app()
    if not os.getenv("FIREBASE_STORAGE_BUCKET", "").strip():
        return None
    return storage.bucket(app=app)


__all__ = ["get_app", "get_db", "get_auth", "get_bucket"]
