"""
Command line entry point for the Google Drive download build step.

``drive-downloader download`` runs the build step against the CI workspace.
``drive-downloader auth`` only seeds the token cache, so the consent screen
can be completed once on a machine with a browser.
"""

import argparse
import logging
import os
import sys
from pathlib import Path

import dotenv

from drive_downloader.builder import DriveDownloaderBuilder, build_logger
from drive_downloader.integrations.google.client import (
    GoogleAuthError,
    GoogleDriveClient,
    GoogleDriveError,
)
from drive_downloader.models.drive import BuildStepConfig
from drive_downloader.settings import get_settings

logger = logging.getLogger(__name__)


def add_client_secret_options(
    parser: argparse.ArgumentParser, default: object = None
) -> None:
    secrets = parser.add_mutually_exclusive_group()
    secrets.add_argument(
        "--client-secret-json",
        default=default,
        help="OAuth 2.0 client secret JSON of the Google API",
    )
    secrets.add_argument(
        "--client-secret-file",
        type=Path,
        default=default,
        help="Path to the client secret JSON file",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="drive-downloader",
        description="Download files from Google Drive into the build workspace",
    )
    parser.add_argument("--log-level", help="Logging level (default: LOG_LEVEL)")
    add_client_secret_options(parser)

    subparsers = parser.add_subparsers(dest="command")

    # Suppressed defaults keep values given before the subcommand.
    download = subparsers.add_parser("download", help="Run the download build step")
    add_client_secret_options(download, default=argparse.SUPPRESS)
    download.add_argument(
        "--workspace",
        type=Path,
        help="Build workspace (default: $WORKSPACE or the current directory)",
    )
    download.add_argument("--folder-id", help="Google Drive folder ID for download")
    download.add_argument("--query", help="Search query of the Drive API")

    auth = subparsers.add_parser("auth", help="Authorize and cache the OAuth token")
    add_client_secret_options(auth, default=argparse.SUPPRESS)
    parser.set_defaults(workspace=None, folder_id=None, query=None)
    return parser


def configure_build_listener(listener: logging.Logger = build_logger) -> None:
    """Send build listener lines to the console whatever the log level."""
    for handler in list(listener.handlers):
        listener.removeHandler(handler)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    listener.addHandler(handler)
    listener.setLevel(logging.INFO)
    listener.propagate = False


def resolve_client_secret(args: argparse.Namespace) -> str | None:
    if args.client_secret_json:
        return args.client_secret_json
    if args.client_secret_file:
        return args.client_secret_file.expanduser().read_text(encoding="utf-8")
    return get_settings().load_client_secret()


def resolve_workspace(args: argparse.Namespace) -> Path:
    if args.workspace:
        return args.workspace
    return Path(os.environ.get("WORKSPACE", "."))


def run_download(args: argparse.Namespace, client_secret_json: str) -> None:
    settings = get_settings()
    config = BuildStepConfig(
        drive_folder_id=(
            args.folder_id if args.folder_id is not None else settings.drive_folder_id
        ),
        client_secret_json=client_secret_json,
        query=args.query if args.query is not None else settings.drive_query,
    )
    builder = DriveDownloaderBuilder(config)
    logger.info(f"Running build step: {builder.descriptor.display_name}")

    result = builder.perform(resolve_workspace(args))
    logger.info(f"Downloaded {result.count} files to {result.download_directory}")


def run_auth(client_secret_json: str) -> None:
    client = GoogleDriveClient(client_secret_json)
    client.authorize()
    logger.info(f"Credentials cached in {client.settings.google_token_dir}")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    dotenv.load_dotenv(dotenv.find_dotenv(usecwd=True))

    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        args.command = "download"

    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, (args.log_level or settings.log_level).upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    configure_build_listener()

    client_secret_json = resolve_client_secret(args)
    if not client_secret_json:
        parser.error(
            "no client secret given: use --client-secret-json, "
            "--client-secret-file, GOOGLE_CLIENT_SECRET_JSON "
            "or GOOGLE_CLIENT_SECRET_PATH"
        )

    try:
        if args.command == "auth":
            run_auth(client_secret_json)
        else:
            run_download(args, client_secret_json)
    except (GoogleAuthError, GoogleDriveError, OSError) as e:
        logger.error(f"Build step failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
