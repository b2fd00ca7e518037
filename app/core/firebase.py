import json
import logging
import os
from functools import lru_cache

import firebase_admin
from firebase_admin import auth, credentials

logger = logging.getLogger("agenda.auth")


def _credentials_from_env():
    """Service account via JSON inline, arquivo ou Application Default Credentials."""
    raw = os.getenv("FIREBASE_CREDENTIALS_JSON")
    if raw:
        return credentials.Certificate(json.loads(raw))
    path = os.getenv("FIREBASE_CREDENTIALS_PATH") or os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
    if path and os.path.exists(path):
        return credentials.Certificate(path)
    return credentials.ApplicationDefault()


@lru_cache
def get_firebase_app() -> firebase_admin.App:
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass
    project_id = os.getenv("FIREBASE_PROJECT_ID")
    options = {"projectId": project_id} if project_id else None
    app = firebase_admin.initialize_app(_credentials_from_env(), options)
    logger.info("firebase app initialized project=%s", project_id or "default")
    return app


def verify_id_token(id_token: str) -> dict:
    """Valida um ID token do Firebase Auth e devolve as claims (uid, email, name...)."""
    check_revoked = os.getenv("FIREBASE_CHECK_REVOKED", "0") == "1"
    return auth.verify_id_token(id_token, app=get_firebase_app(), check_revoked=check_revoked)
