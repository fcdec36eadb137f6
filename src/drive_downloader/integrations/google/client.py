"""
Google Drive Client - OAuth2 installed-app authorization and file transfer.

Credentials are cached through a CredentialStore so that only the first run
on a machine needs the interactive consent in a browser. Every later build
refreshes the cached token and runs headless.
"""

import json
import logging
from pathlib import Path
from typing import Any

from google.auth.exceptions import RefreshError  # type: ignore[import-untyped]
from google.auth.transport.requests import Request  # type: ignore[import-untyped]
from google.oauth2.credentials import Credentials  # type: ignore[import-untyped]
from google_auth_oauthlib.flow import InstalledAppFlow  # type: ignore[import-untyped]
from googleapiclient.discovery import build  # type: ignore[import-untyped]
from googleapiclient.errors import HttpError  # type: ignore[import-untyped]
from googleapiclient.http import MediaIoBaseDownload  # type: ignore[import-untyped]

from drive_downloader.integrations.google.credential_store import (
    CredentialStore,
    FileCredentialStore,
)
from drive_downloader.models.drive import DriveFile
from drive_downloader.settings import get_settings

logger = logging.getLogger(__name__)

USER_KEY = "user"
LIST_FIELDS = "nextPageToken, files(id, name, modifiedTime, parents)"
LIST_ORDER_BY = "modifiedTime"


class GoogleAuthError(Exception):
    """Google authentication failed."""

    pass


class GoogleDriveError(Exception):
    """Google Drive operation failed."""

    pass


def parse_client_secret(client_secret_json: str) -> dict[str, Any]:
    """Parse an OAuth client secret JSON document.

    Args:
        client_secret_json: Contents of the client secret file downloaded
            from the Google API console

    Returns:
        The client configuration dict accepted by InstalledAppFlow

    Raises:
        GoogleAuthError: If the JSON is malformed or has no client section
    """
    try:
        config = json.loads(client_secret_json)
    except (TypeError, ValueError) as e:
        raise GoogleAuthError(f"Client secret is not valid JSON: {e}") from e

    if not isinstance(config, dict) or not ({"installed", "web"} & config.keys()):
        raise GoogleAuthError(
            "Client secret must contain an 'installed' or 'web' client section"
        )
    return config


class GoogleDriveClient:
    """
    Google Drive API client for a single build step run.

    All calls are synchronous and blocking; files are transferred one at a
    time in the order the listing returned them.
    """

    def __init__(
        self,
        client_secret_json: str,
        credential_store: CredentialStore | None = None,
        user_key: str = USER_KEY,
    ):
        """
        Initialize the Google Drive client.

        Args:
            client_secret_json: OAuth 2.0 client secret JSON
            credential_store: Token cache, defaults to the file store in
                the configured token directory
            user_key: Key the credentials are cached under
        """
        self.settings = get_settings()
        self.client_config = parse_client_secret(client_secret_json)
        self.scopes = self.settings.google_oauth_scopes
        self.user_key = user_key

        self.credential_store = credential_store or FileCredentialStore(
            self.settings.google_token_dir,
            encryption_key=self.settings.google_token_encryption_key,
            scopes=self.scopes,
        )

        self._credentials: Credentials | None = None
        self._drive_service: Any = None

    def get_credentials(self) -> Credentials | None:
        """
        Get cached credentials, refreshing if needed.

        Returns:
            Valid credentials or None if the cache holds nothing usable
        """
        credentials = self.credential_store.get(self.user_key)
        if not credentials:
            return None

        logger.debug(
            f"Cached credentials: expired={credentials.expired}, "
            f"has_refresh_token={bool(credentials.refresh_token)}"
        )

        if credentials.expired and credentials.refresh_token:
            try:
                credentials.refresh(Request())
            except RefreshError as e:
                logger.error(f"Failed to refresh credentials: {e}")
                self.credential_store.delete(self.user_key)
                return None
            self.credential_store.save(self.user_key, credentials)
            logger.info("Refreshed cached credentials")
        elif credentials.expired:
            logger.error("Cached credentials expired and no refresh token available")
            self.credential_store.delete(self.user_key)
            return None

        return credentials

    def authorize(self) -> Credentials:
        """
        Return authorized credentials, running the consent flow if needed.

        The flow starts a local loopback server to receive the authorization
        code and asks for offline access so a refresh token is issued.

        Raises:
            GoogleAuthError: If the authorization flow fails
        """
        if self._credentials is not None:
            return self._credentials

        credentials = self.get_credentials()
        if credentials is None:
            logger.info("No usable cached credentials, starting authorization flow")
            try:
                flow = InstalledAppFlow.from_client_config(
                    self.client_config, self.scopes
                )
                credentials = flow.run_local_server(
                    port=self.settings.oauth_local_port,
                    open_browser=self.settings.oauth_open_browser,
                    access_type="offline",
                    prompt="consent",
                )
            except Exception as e:
                logger.error(f"Authorization flow failed: {e}")
                raise GoogleAuthError(f"Authorization flow failed: {e}") from e

            self.credential_store.save(self.user_key, credentials)

        self._credentials = credentials
        return credentials

    def get_drive_service(self) -> Any:
        """Build and return an authorized Drive v3 service."""
        if self._drive_service is None:
            credentials = self.authorize()
            try:
                self._drive_service = build(
                    "drive", "v3", credentials=credentials, cache_discovery=False
                )
            except Exception as e:
                raise GoogleDriveError(f"Failed to create drive service: {e}") from e

        return self._drive_service

    def list_files(self, query: str | None = None) -> list[DriveFile]:
        """
        List files matching a Drive search query, oldest modification first.

        Args:
            query: Drive API search query, None lists every visible file

        Returns:
            File descriptors in the order the API returned them
        """
        service = self.get_drive_service()
        params: dict[str, Any] = {
            "pageSize": self.settings.drive_page_size,
            "orderBy": LIST_ORDER_BY,
            "fields": LIST_FIELDS,
        }
        if query:
            params["q"] = query

        files: list[DriveFile] = []
        try:
            request = service.files().list(**params)
            while request is not None:
                response = request.execute()
                files.extend(DriveFile.from_api(f) for f in response.get("files", []))
                request = service.files().list_next(request, response)
        except HttpError as e:
            logger.error(f"Drive API error listing files: {e}")
            raise GoogleDriveError(f"Failed to list files: {e}") from e

        logger.info(f"Found {len(files)} files matching query {query!r}")
        return files

    def download_file(self, file: DriveFile, destination: Path) -> Path:
        """
        Stream a file's content to a local path, overwriting it.

        Args:
            file: Remote file to download
            destination: Local file path

        Returns:
            The destination path
        """
        service = self.get_drive_service()
        request = service.files().get_media(fileId=file.id)

        try:
            with open(destination, "wb") as fh:
                downloader = MediaIoBaseDownload(fh, request)
                done = False
                while not done:
                    status, done = downloader.next_chunk()
                    if status:
                        logger.debug(
                            f"{file.name}: {int(status.progress() * 100)}% downloaded"
                        )
        except HttpError as e:
            logger.error(f"Drive API error downloading {file.name}: {e}")
            raise GoogleDriveError(f"Failed to download {file.name}: {e}") from e

        return destination
