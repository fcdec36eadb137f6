"""
Credential store for Google OAuth2 credentials.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

from cryptography.fernet import Fernet, InvalidToken
from google.oauth2.credentials import Credentials  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)


class CredentialStore(ABC):
    """Abstract interface for storing Google OAuth2 credentials."""

    @abstractmethod
    def get(self, user_key: str) -> Credentials | None:
        """Get credentials for a user."""
        pass

    @abstractmethod
    def save(self, user_key: str, credentials: Credentials) -> None:
        """Save credentials for a user."""
        pass

    @abstractmethod
    def delete(self, user_key: str) -> None:
        """Delete credentials for a user."""
        pass


class FileCredentialStore(CredentialStore):
    """Credential store keeping one token file per user in a local directory.

    The directory lives under the invoking user's home by default and is
    shared by every build run on the machine. If ``encryption_key`` is given
    the token files are Fernet encrypted.
    """

    def __init__(
        self,
        directory: Path,
        encryption_key: str | None = None,
        scopes: list[str] | None = None,
    ):
        self.directory = Path(directory)
        self.scopes = scopes
        self.fernet = Fernet(encryption_key.encode()) if encryption_key else None

    def _path(self, user_key: str) -> Path:
        return self.directory / f"{user_key}.json"

    def get(self, user_key: str) -> Credentials | None:
        """Get credentials for a user."""
        path = self._path(user_key)
        if not path.exists():
            logger.info(f"No credentials found for {user_key} in {self.directory}")
            return None

        raw = path.read_bytes()
        try:
            if self.fernet is not None:
                raw = self.fernet.decrypt(raw)
            creds_dict = json.loads(raw.decode())
            return Credentials.from_authorized_user_info(creds_dict, self.scopes)
        except (InvalidToken, ValueError) as e:
            logger.error(f"Failed to load credentials for {user_key}: {e}")
            return None

    def save(self, user_key: str, credentials: Credentials) -> None:
        """Save credentials for a user."""
        self.directory.mkdir(mode=0o700, parents=True, exist_ok=True)

        data = credentials.to_json().encode()
        if self.fernet is not None:
            data = self.fernet.encrypt(data)

        path = self._path(user_key)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "wb") as fh:
            # O_CREAT only applies the mode to new files
            os.fchmod(fh.fileno(), 0o600)
            fh.write(data)
        logger.info(f"Saved credentials for {user_key} to {path}")

    def delete(self, user_key: str) -> None:
        """Delete credentials for a user."""
        self._path(user_key).unlink(missing_ok=True)
        logger.info(f"Deleted credentials for {user_key}")
