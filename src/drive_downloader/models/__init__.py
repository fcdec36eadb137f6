"""
Shared data models for the Drive downloader.
"""

from .drive import BuildStepConfig, DownloadResult, DriveFile

__all__ = [
    "BuildStepConfig",
    "DownloadResult",
    "DriveFile",
]
