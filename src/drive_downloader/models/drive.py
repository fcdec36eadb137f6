"""
Google Drive data models using Pydantic v2.

This module contains the file descriptors returned by the Drive listing and
the configuration and result types of the download build step.
"""

from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import ConfigDict, Field

from .base import BaseDriveModel


class DriveFile(BaseDriveModel):
    """A remote file descriptor as returned by ``files.list``."""

    id: str = Field(description="Drive file ID")
    name: str = Field(description="File name in Drive")
    modified_time: datetime | None = Field(
        default=None, alias="modifiedTime", description="Last modification time"
    )
    parents: list[str] = Field(
        default_factory=list, description="IDs of the parent folders"
    )

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "DriveFile":
        """Create a DriveFile from a Drive API file resource."""
        return cls.model_validate(data)

    @property
    def local_name(self) -> str:
        """Name of the local file, kept inside the download directory."""
        name = self.name.replace("/", "_")
        # "", "." and ".." would name the directory itself or its parent
        if name in ("", ".", ".."):
            return "_" * max(len(name), 1)
        return name


class BuildStepConfig(BaseDriveModel):
    """The three free-text fields of the download build step."""

    model_config = ConfigDict(frozen=True)

    drive_folder_id: str | None = Field(
        default=None, description="Google Drive folder ID for download"
    )
    client_secret_json: str = Field(
        description="OAuth 2.0 client secret JSON of the Google API project",
        repr=False,
    )
    query: str | None = Field(default=None, description="Drive API search query")


class DownloadResult(BaseDriveModel):
    """Outcome of a single build step run."""

    download_directory: Path = Field(description="Directory files were written to")
    files: list[DriveFile] = Field(
        default_factory=list, description="Remote files that were downloaded"
    )
    paths: list[Path] = Field(
        default_factory=list, description="Local paths written, in list order"
    )

    @property
    def count(self) -> int:
        return len(self.paths)
