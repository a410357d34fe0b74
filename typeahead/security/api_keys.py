# typeahead/security/api_keys.py

import hashlib
import hmac
import logging
import secrets
import threading
from typing import Iterable, Optional

from typeahead.config import API_KEY_PREFIX, PUBLIC_API_KEYS

logger = logging.getLogger(__name__)


def generate_api_key() -> str:
    """tk_live_ followed by 32 url-safe random characters."""
    return f"{API_KEY_PREFIX}{secrets.token_urlsafe(24)}"


def hash_api_key(api_key: str) -> str:
    return hashlib.sha256(api_key.encode("utf-8")).hexdigest()


def verify_api_key(api_key: str, hashed_key: str) -> bool:
    return hmac.compare_digest(hash_api_key(api_key), hashed_key)


class ApiKeyRegistry:
    """
    In-memory set of accepted key hashes.

    Raw keys are never stored: only their SHA-256 digests.
    """

    def __init__(self, seed_keys: Iterable[str] = PUBLIC_API_KEYS):

        self._hashes = set()
        self._lock = threading.Lock()

        for key in seed_keys:
            self._hashes.add(hash_api_key(key))

        logger.info("API key registry ready", extra={"keys": len(self._hashes)})

    def issue(self) -> str:

        key = generate_api_key()

        with self._lock:
            self._hashes.add(hash_api_key(key))

        return key

    def authenticate(self, api_key: Optional[str]) -> Optional[str]:
        """Return the key hash when api_key is known, None otherwise."""

        if not api_key or not api_key.startswith(API_KEY_PREFIX):
            return None

        with self._lock:
            known = list(self._hashes)

        for hashed in known:
            if verify_api_key(api_key, hashed):
                return hashed

        return None
