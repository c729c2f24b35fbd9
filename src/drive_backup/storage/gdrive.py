"""Google Drive implementation of the ``RemoteStore`` protocol.

Authenticates with a service account and keeps all archives in one Drive
folder. The Drive v3 client is blocking, so every call runs in a worker
thread via ``asyncio.to_thread``; calls never overlap.

Usage:
    from drive_backup.storage.gdrive import GoogleDriveStore

    store = GoogleDriveStore(settings.drive)
    records = await store.list_backups()
    await store.download(records[0].id, Path(records[0].name))
"""

import asyncio
import logging
from pathlib import Path
from typing import Any

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import Error as GoogleApiError
from googleapiclient.http import MediaFileUpload, MediaIoBaseDownload

from drive_backup.backup.models import RemoteBackupRecord
from drive_backup.config.models import DriveCredentials
from drive_backup.errors import RemoteError
from drive_backup.storage.base import ZIP_MIME_TYPE

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/drive.file"]
TOKEN_URI = "https://oauth2.googleapis.com/token"

RECORD_FIELDS = "id, name, createdTime"
UPLOAD_FIELDS = "id, name, createdTime, webViewLink"

# Errors raised by google-auth, the API client, and the httplib2 transport
_REMOTE_ERRORS = (GoogleApiError, GoogleAuthError, httplib2.HttpLib2Error, OSError)


def _quote(value: str) -> str:
    """Escape a literal for a Drive ``files.list`` query string."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def build_list_query(folder_id: str, name_prefix: str, mime_type: str) -> str:
    """Drive query for non-trashed archives in ``folder_id``.

    Example:
        >>> build_list_query("F1", "backup-", "application/zip")
        "'F1' in parents and name contains 'backup-' and mimeType='application/zip' and trashed = false"
    """
    return (
        f"'{_quote(folder_id)}' in parents"
        f" and name contains '{_quote(name_prefix)}'"
        f" and mimeType='{_quote(mime_type)}'"
        " and trashed = false"
    )


class GoogleDriveStore:
    """Backup archives stored in a Google Drive folder.

    Args:
        credentials: Service account email, private key and folder id.
        service: Pre-built Drive v3 resource. When ``None`` one is built
            on first use from ``credentials``.
    """

    def __init__(self, credentials: DriveCredentials, service: Any = None):
        self.credentials = credentials
        self.folder_id = credentials.folder_id
        self._service = service

    def _get_service(self) -> Any:
        """Build (once) and return the authenticated Drive v3 resource."""
        if self._service is None:
            try:
                creds = service_account.Credentials.from_service_account_info(
                    {
                        "type": "service_account",
                        "client_email": self.credentials.client_email,
                        "private_key": self.credentials.private_key,
                        "token_uri": TOKEN_URI,
                    },
                    scopes=SCOPES,
                )
            except (ValueError, GoogleAuthError) as e:
                raise RemoteError(f"Invalid Google Drive service account credentials: {e}") from e
            self._service = build("drive", "v3", credentials=creds, cache_discovery=False)
        return self._service

    async def list_backups(
        self,
        name_prefix: str = "backup-",
        mime_type: str = ZIP_MIME_TYPE,
        limit: int = 20,
    ) -> list[RemoteBackupRecord]:
        """List archives in the folder, newest first (at most ``limit``)."""
        logger.info("Listing backups from Google Drive...")
        query = build_list_query(self.folder_id, name_prefix, mime_type)
        response = await self._call(
            "list backups",
            lambda service: service.files()
            .list(
                q=query,
                fields=f"files({RECORD_FIELDS})",
                orderBy="createdTime desc",
                pageSize=limit,
            )
            .execute(),
        )
        files = response.get("files", [])
        return [RemoteBackupRecord.model_validate(f) for f in files[:limit]]

    async def upload(self, local_path: Path) -> RemoteBackupRecord:
        """Upload ``local_path`` as a zip into the folder."""
        local_path = Path(local_path)
        logger.info(f"Uploading {local_path.name} to Google Drive...")
        metadata = {"name": local_path.name, "parents": [self.folder_id]}

        def _create(service: Any) -> dict:
            media = MediaFileUpload(str(local_path), mimetype=ZIP_MIME_TYPE, resumable=True)
            return (
                service.files()
                .create(body=metadata, media_body=media, fields=UPLOAD_FIELDS)
                .execute()
            )

        response = await self._call(f"upload {local_path.name}", _create)
        record = RemoteBackupRecord.model_validate(response)
        logger.info(
            f"Upload successful: id={record.id} name={record.name} link={record.web_view_link}"
        )
        return record

    async def download(self, record_id: str, destination: Path) -> None:
        """Stream remote file ``record_id`` into ``destination``."""
        destination = Path(destination)
        logger.info(f"Downloading {destination.name}...")

        def _fetch(service: Any) -> None:
            request = service.files().get_media(fileId=record_id)
            with open(destination, "wb") as fh:
                downloader = MediaIoBaseDownload(fh, request)
                done = False
                while not done:
                    _, done = downloader.next_chunk()

        await self._call(f"download {record_id}", _fetch)
        logger.info("Download complete.")

    async def _call(self, description: str, func):
        """Run ``func(service)`` in a worker thread, mapping errors to ``RemoteError``."""

        def _run():
            return func(self._get_service())

        try:
            return await asyncio.to_thread(_run)
        except _REMOTE_ERRORS as e:
            raise RemoteError(f"Google Drive {description} failed: {e}") from e
