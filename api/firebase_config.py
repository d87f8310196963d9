import json
import logging
import os
from pathlib import Path

import firebase_admin
from django.conf import settings
from firebase_admin import credentials

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent

# Local fallbacks when FIREBASE_CREDENTIALS is not set
possible_paths = [
    BASE_DIR / 'config' / 'serviceAccountKey.json',
    BASE_DIR / 'serviceAccountKey.json',
]


def _load_credentials():
    raw = settings.FIREBASE_CREDENTIALS
    if raw:
        # Either the service account JSON itself (hosted envs) or a path to it
        if raw.lstrip().startswith('{'):
            return credentials.Certificate(json.loads(raw)), 'environment variable'
        if os.path.exists(raw):
            return credentials.Certificate(raw), raw

    for p in possible_paths:
        if p.exists():
            return credentials.Certificate(str(p)), str(p)
    return None, None


def initialize_firebase():
    if firebase_admin._apps:
        return

    try:
        cred, source = _load_credentials()
    except (ValueError, OSError) as e:
        logger.error("Failed to load Firebase credentials: %s", e)
        return

    if cred is None:
        logger.warning(
            "Firebase credentials not found (FIREBASE_CREDENTIALS unset). "
            "Only API session tokens will be accepted."
        )
        return

    firebase_admin.initialize_app(cred)
    logger.info("Firebase Admin initialized from %s", source)
