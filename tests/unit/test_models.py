"""Tests for Drive downloader data models."""

from datetime import UTC, datetime
from pathlib import Path

import pytest
from pydantic import ValidationError

from drive_downloader.models import BuildStepConfig, DownloadResult, DriveFile


class TestDriveFile:
    def test_from_api(self, drive_file_payloads):
        file = DriveFile.from_api(drive_file_payloads[0])

        assert file.id == "file-1"
        assert file.name == "report.csv"
        assert file.modified_time == datetime(2024, 5, 1, 10, 0, tzinfo=UTC)
        assert file.parents == ["folder-1"]

    def test_optional_fields_missing(self):
        file = DriveFile.from_api({"id": "x", "name": "notes.txt"})

        assert file.modified_time is None
        assert file.parents == []

    def test_extra_fields_ignored(self):
        file = DriveFile.from_api({"id": "x", "name": "a", "mimeType": "text/plain"})
        assert not hasattr(file, "mimeType")

    def test_missing_name_rejected(self):
        with pytest.raises(ValidationError):
            DriveFile.from_api({"id": "x"})

    def test_local_name_strips_separators(self):
        file = DriveFile(id="x", name="2024/05/report.csv")
        assert file.local_name == "2024_05_report.csv"

    @pytest.mark.parametrize(
        "name, expected", [(".", "_"), ("..", "__"), ("", "_"), ("../", ".._")]
    )
    def test_local_name_never_names_a_directory(self, name, expected):
        assert DriveFile(id="x", name=name).local_name == expected


class TestBuildStepConfig:
    def test_fields(self):
        config = BuildStepConfig(
            drive_folder_id="folder-1",
            client_secret_json='{"installed": {}}',
            query="trashed = false",
        )

        assert config.drive_folder_id == "folder-1"
        assert config.client_secret_json == '{"installed": {}}'
        assert config.query == "trashed = false"

    def test_is_immutable(self):
        config = BuildStepConfig(client_secret_json="{}")
        with pytest.raises(ValidationError):
            config.query = "changed"

    def test_secret_hidden_from_repr(self):
        config = BuildStepConfig(client_secret_json='{"installed": "secret"}')
        assert "secret" not in repr(config)


def test_download_result_count(tmp_path):
    result = DownloadResult(download_directory=tmp_path)
    assert result.count == 0

    result.paths.append(Path(tmp_path / "a.txt"))
    assert result.count == 1
