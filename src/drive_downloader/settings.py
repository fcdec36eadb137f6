"""Central application settings using Pydantic."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DRIVE_SCOPE = "https://www.googleapis.com/auth/drive"


class Settings(BaseSettings):
    """Build step configuration loaded from environment variables."""

    # Core application
    log_level: str = Field("INFO", env="LOG_LEVEL")

    # Build step fields
    drive_folder_id: str | None = Field(None, env="DRIVE_FOLDER_ID")
    drive_query: str | None = Field(None, env="DRIVE_QUERY")

    # Google
    google_client_secret_json: str | None = Field(
        None, env="GOOGLE_CLIENT_SECRET_JSON"
    )
    google_client_secret_path: Path | None = Field(
        None, env="GOOGLE_CLIENT_SECRET_PATH"
    )
    # Delete this directory after changing the scopes.
    google_token_dir: Path = Field(
        Path("~/.credentials/jenkins-google-drive-downloader"),
        env="GOOGLE_TOKEN_DIR",
    )
    google_token_encryption_key: str | None = Field(
        None, env="GOOGLE_TOKEN_ENCRYPTION_KEY"
    )
    google_oauth_scopes: list[str] = Field(default_factory=lambda: [DRIVE_SCOPE])
    oauth_local_port: int = Field(0, ge=0, le=65535, env="OAUTH_LOCAL_PORT")
    oauth_open_browser: bool = Field(True, env="OAUTH_OPEN_BROWSER")

    # Drive listing and download
    drive_page_size: int = Field(100, gt=0, le=1000, env="DRIVE_PAGE_SIZE")
    drive_download_dirname: str = Field("googledrive", env="DRIVE_DOWNLOAD_DIRNAME")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator(
        "google_client_secret_path",
        "google_token_dir",
        mode="before",
    )
    @classmethod
    def expand_path(cls, v: str | Path | None) -> Path | None:
        if v is None:
            return None
        return Path(v).expanduser()

    def load_client_secret(self) -> str | None:
        """Return the OAuth client secret JSON from the env value or file."""
        if self.google_client_secret_json:
            return self.google_client_secret_json
        if self.google_client_secret_path is not None:
            return self.google_client_secret_path.read_text(encoding="utf-8")
        return None


def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    return Settings()
