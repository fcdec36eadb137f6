"""
Build step that downloads files from Google Drive into the workspace.

You can specify a query for target files. Matching files land in
``<workspace>/googledrive/`` under their remote names.
"""

import logging
from collections.abc import Callable
from pathlib import Path

from drive_downloader.integrations.google.client import GoogleDriveClient
from drive_downloader.models.drive import BuildStepConfig, DownloadResult, DriveFile
from drive_downloader.settings import get_settings

logger = logging.getLogger(__name__)

build_logger = logging.getLogger("drive_downloader.build")


def build_query(query: str | None, folder_id: str | None) -> str | None:
    """Combine the search query with the folder restriction."""
    query = (query or "").strip() or None
    folder_id = (folder_id or "").strip() or None
    if folder_id is None:
        return query

    folder_clause = "'{}' in parents".format(folder_id.replace("'", "\\'"))
    if query is None:
        return folder_clause
    return f"{folder_clause} and ({query})"


def mkdir(directory: Path) -> None:
    if directory.exists():
        return
    directory.mkdir()


class BuildStepDescriptor:
    """Describes the build step to the CI host."""

    display_name = "download files from Google Drive"

    def is_applicable(self, project_type: type | None = None) -> bool:
        # Indicates that this builder can be used with all kinds of project types
        return True


class DriveDownloaderBuilder:
    """File downloader from Google Drive."""

    descriptor = BuildStepDescriptor()

    def __init__(
        self,
        config: BuildStepConfig,
        client_factory: Callable[[str], GoogleDriveClient] = GoogleDriveClient,
    ):
        self.config = config
        self.client_factory = client_factory
        self.settings = get_settings()

    @property
    def drive_folder_id(self) -> str | None:
        return self.config.drive_folder_id

    @property
    def client_secret_json(self) -> str:
        return self.config.client_secret_json

    @property
    def query(self) -> str | None:
        return self.config.query

    def perform(
        self, workspace: Path, listener: logging.Logger | None = None
    ) -> DownloadResult:
        """
        Download files that match the query from Google Drive.

        Args:
            workspace: Build workspace directory
            listener: Logger for the build console, defaults to the
                ``drive_downloader.build`` logger

        Returns:
            The download directory and the files written to it

        Raises:
            GoogleAuthError: If authorization fails
            GoogleDriveError: If listing or downloading fails
            OSError: If the download directory or a file can't be written
        """
        listener = listener or build_logger
        download_directory = Path(workspace).absolute() / (
            self.settings.drive_download_dirname
        )
        mkdir(download_directory)

        client = self.client_factory(self.client_secret_json)
        files = client.list_files(build_query(self.query, self.drive_folder_id))
        result = DownloadResult(download_directory=download_directory)
        if not files:
            listener.info("no files in Google Drive.")
            return result

        self._download_files(download_directory, client, files, result, listener)
        return result

    def _download_files(
        self,
        download_directory: Path,
        client: GoogleDriveClient,
        files: list[DriveFile],
        result: DownloadResult,
        listener: logging.Logger,
    ) -> None:
        for file in files:
            path = client.download_file(file, download_directory / file.local_name)
            listener.info(f"downloaded {file.name} to {path}")
            result.files.append(file)
            result.paths.append(path)
