"""drive-backup: back up a MySQL database to Google Drive and restore it.

Dumps the database with ``mysqldump``, zips the dump, uploads it to a
Google Drive folder, and restores a chosen archive with ``mysql``. Every
pipeline cleans up its local files however it ends.

Usage:
    from drive_backup import load_settings, GoogleDriveStore, run_backup

    settings = load_settings()
    run = await run_backup(settings, GoogleDriveStore(settings.drive))
"""

__version__ = "0.1.0"

# Config
from drive_backup.config.loader import load_settings
from drive_backup.config.models import DatabaseConnection, DriveCredentials, Settings

# Errors
from drive_backup.errors import (
    BackupToolError,
    ConfigError,
    DumpError,
    DumpImportError,
    PackError,
    RemoteError,
    UnpackError,
)

# Pipelines
from drive_backup.backup.models import PipelineOutcome, PipelineRun, RemoteBackupRecord
from drive_backup.backup.pipeline import run_backup, run_restore

# Storage
from drive_backup.storage.base import RemoteStore
from drive_backup.storage.gdrive import GoogleDriveStore

__all__ = [
    # Config
    "load_settings",
    "Settings",
    "DatabaseConnection",
    "DriveCredentials",
    # Errors
    "BackupToolError",
    "ConfigError",
    "DumpError",
    "DumpImportError",
    "PackError",
    "UnpackError",
    "RemoteError",
    # Pipelines
    "run_backup",
    "run_restore",
    "PipelineRun",
    "PipelineOutcome",
    "RemoteBackupRecord",
    # Storage
    "RemoteStore",
    "GoogleDriveStore",
]
