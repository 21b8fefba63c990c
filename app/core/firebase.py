"""Firebase Admin SDK initialization and Firestore access."""

import json
import os

import firebase_admin
from firebase_admin import credentials, firestore_async
from google.cloud.firestore import AsyncClient
from structlog import get_logger

logger = get_logger(__name__)

_firebase_app: firebase_admin.App | None = None


def initialize_firebase(
    firebase_credentials_path: str | None = None, firebase_config_json: str | None = None
) -> None:
    """
    Initialize Firebase Admin SDK.

    Args:
        firebase_credentials_path: Optional path to service account JSON file.
        firebase_config_json: Optional raw JSON string of service account.

    Looks for Firebase credentials in order:
    1. firebase_config_json parameter
    2. firebase_credentials_path parameter
    3. Default application credentials
    """
    global _firebase_app

    if _firebase_app is not None:
        logger.info("Firebase already initialized")
        return

    try:
        cred = None

        if firebase_config_json:
            logger.info("Initializing Firebase with JSON string from environment")
            cred = credentials.Certificate(json.loads(firebase_config_json))

        elif firebase_credentials_path and os.path.exists(firebase_credentials_path):
            logger.info("Initializing Firebase with JSON file", path=firebase_credentials_path)
            cred = credentials.Certificate(firebase_credentials_path)

        if cred:
            _firebase_app = firebase_admin.initialize_app(cred)
        else:
            _firebase_app = firebase_admin.initialize_app()
            logger.info("Firebase initialized with default credentials")

    except Exception as e:
        logger.error("Failed to initialize Firebase", error=str(e))
        raise


def get_firebase_app() -> firebase_admin.App:
    """
    Get the Firebase app instance.

    Raises:
        RuntimeError: If Firebase is not initialized
    """
    if _firebase_app is None:
        raise RuntimeError("Firebase not initialized. Call initialize_firebase() first.")
    return _firebase_app


def get_firestore_client() -> AsyncClient:
    """Get an async Firestore client bound to the initialized app."""
    return firestore_async.client(app=get_firebase_app())
