"""Remote store protocol definition.

Defines the ``RemoteStore`` Protocol the pipelines talk to. All methods
are ``async def`` and report failures as ``RemoteError``.

Usage:
    from drive_backup.storage.base import RemoteStore

    async def newest(store: RemoteStore) -> RemoteBackupRecord | None:
        records = await store.list_backups(limit=1)
        return records[0] if records else None
"""

from pathlib import Path
from typing import Protocol

from drive_backup.backup.models import RemoteBackupRecord

ZIP_MIME_TYPE = "application/zip"


class RemoteStore(Protocol):
    """Folder of backup archives in a cloud file store.

    The folder is fixed when the store is constructed; callers only deal
    in records, identifiers and local paths.
    """

    async def list_backups(
        self,
        name_prefix: str = "backup-",
        mime_type: str = ZIP_MIME_TYPE,
        limit: int = 20,
    ) -> list[RemoteBackupRecord]:
        """List archives in the folder, newest first.

        Args:
            name_prefix: Only files whose name contains this text.
            mime_type: Only files of this MIME type.
            limit: Maximum number of records returned.

        Returns:
            Records ordered by creation time, descending. Empty list if
            the folder holds no matching file.

        Raises:
            RemoteError: On API or transport failure.
        """
        ...

    async def upload(self, local_path: Path) -> RemoteBackupRecord:
        """Upload ``local_path`` into the folder under its own name.

        Returns:
            Record of the newly created remote file.

        Raises:
            RemoteError: On API or transport failure.
        """
        ...

    async def download(self, record_id: str, destination: Path) -> None:
        """Stream the body of remote file ``record_id`` into ``destination``.

        Raises:
            RemoteError: On API, transport or local write failure.
        """
        ...
