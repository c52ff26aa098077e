"""
Client Configuration Module

Resolves the Gemini API key and builds the generation client.

Resolution order for the key:
1. An explicit key passed by the caller
2. The user-registered key in the credential store
3. Environment defaults (GEMINI_API_KEY, then API_KEY)

Nothing is cached: every call re-resolves, so a key registered or rotated a moment
ago is used by the next operation.
"""

import os
import logging
from typing import Dict, Optional

from dotenv import load_dotenv
from google import genai

from .constants import API_KEY_ENV_VARS, REQUEST_TIMEOUT_SECONDS
from .credential_store import CredentialStore
from .errors import MissingCredentialError

logger = logging.getLogger(__name__)


def load_environment(env_path: Optional[str] = None) -> bool:
    """Load variables from a .env file without overriding ones already set."""
    env_path = env_path or ".env"
    if os.path.exists(env_path):
        load_dotenv(dotenv_path=env_path, override=False)
        logger.info(f"✅ Loaded .env file from: {env_path}")
        return True

    logger.debug(f"No .env file found at {env_path}; using process environment only")
    return False


def _environment_api_key() -> Optional[str]:
    for env_var in API_KEY_ENV_VARS:
        value = (os.getenv(env_var) or "").strip()
        if value:
            return value
    return None


def get_api_key(api_key: Optional[str] = None, store: Optional[CredentialStore] = None) -> str:
    """
    Resolve the active API key.

    Args:
        api_key: Key threaded in explicitly by the caller; wins when non-empty.
        store: Credential store holding the user-registered key.

    Returns:
        The non-empty key string.

    Raises:
        MissingCredentialError: When no source yields a non-empty key.
    """
    if api_key and api_key.strip():
        return api_key.strip()

    registered = (store or CredentialStore()).read()
    if registered:
        return registered

    env_key = _environment_api_key()
    if env_key:
        return env_key

    raise MissingCredentialError()


def get_client(api_key: Optional[str] = None, store: Optional[CredentialStore] = None) -> genai.Client:
    """Build a fresh Gemini client from the currently active key."""
    resolved_key = get_api_key(api_key, store)
    return genai.Client(
        api_key=resolved_key,
        http_options={"timeout": REQUEST_TIMEOUT_SECONDS * 1000},
    )


def credential_status(store: Optional[CredentialStore] = None) -> Dict[str, object]:
    """Report which credential source is active without revealing the key."""
    store = store or CredentialStore()
    if store.read():
        source = "registered"
    elif _environment_api_key():
        source = "environment"
    else:
        source = "missing"

    return {
        "configured": source != "missing",
        "source": source,
    }
