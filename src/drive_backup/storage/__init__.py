"""Remote stores holding backup archives.

Usage:
    >>> from drive_backup.storage import RemoteStore, GoogleDriveStore
"""

from drive_backup.storage.base import ZIP_MIME_TYPE, RemoteStore
from drive_backup.storage.gdrive import GoogleDriveStore

__all__ = ["RemoteStore", "GoogleDriveStore", "ZIP_MIME_TYPE"]
