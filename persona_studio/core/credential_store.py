"""
User-registered credential storage.

Holds the single named API key a user registers from the UI. The key lives in a
plain text file under the studio home directory so that a freshly registered
key is picked up by the very next operation.
"""

import os
import logging
from pathlib import Path
from typing import Optional

from .constants import CREDENTIAL_NAME, DEFAULT_STUDIO_HOME, STUDIO_HOME_ENV_VAR

logger = logging.getLogger(__name__)


def get_studio_home() -> Path:
    """Resolve the studio home directory (PERSONA_STUDIO_HOME overrides the default)."""
    return Path(os.getenv(STUDIO_HOME_ENV_VAR) or DEFAULT_STUDIO_HOME)


class CredentialStore:
    """File-backed store for one named credential string."""

    def __init__(self, home: Optional[Path] = None, name: str = CREDENTIAL_NAME):
        self.home = Path(home) if home is not None else get_studio_home()
        self.name = name

    @property
    def path(self) -> Path:
        return self.home / self.name

    def read(self) -> Optional[str]:
        """Return the registered key, or None when nothing usable is stored."""
        if not self.path.exists():
            return None
        value = self.path.read_text(encoding="utf-8").strip()
        return value or None

    def register(self, api_key: str) -> None:
        """Persist a new key, replacing any previous one."""
        value = (api_key or "").strip()
        if not value:
            raise ValueError("API key must not be empty")

        self.home.mkdir(parents=True, exist_ok=True)
        self.path.write_text(value, encoding="utf-8")
        try:
            os.chmod(self.path, 0o600)
        except OSError as e:
            logger.warning(f"Could not restrict permissions on {self.path}: {e}")
        logger.info(f"🔑 Registered API key stored at {self.path}")

    def clear(self) -> bool:
        """Remove the registered key. Returns True if a key was removed."""
        if not self.path.exists():
            return False
        self.path.unlink()
        logger.info("🔑 Registered API key cleared")
        return True
