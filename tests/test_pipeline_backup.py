"""Tests for the backup pipeline.

Verifies file naming, the dump -> pack -> upload order, short-circuiting
on the first failing stage, and that cleanup runs exactly once with
exactly the files created so far.
"""

from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from drive_backup.backup.models import PipelineOutcome, RemoteBackupRecord
from drive_backup.backup.pipeline import (
    archive_file_name,
    dump_file_name,
    format_timestamp,
    run_backup,
)
from drive_backup.errors import DumpError, PackError, RemoteError

TIMESTAMP = "2024-01-01T00-00-00-000Z"
DUMP_NAME = f"backup-shop-{TIMESTAMP}.sql"
ARCHIVE_NAME = f"{DUMP_NAME}.zip"


def _uploaded(name: str = ARCHIVE_NAME) -> RemoteBackupRecord:
    return RemoteBackupRecord(
        id="uploaded-1",
        name=name,
        created_time=datetime(2024, 1, 1, tzinfo=timezone.utc),
        web_view_link="https://drive.google.com/file/d/uploaded-1/view",
    )


async def _write_dump(connection, destination: Path) -> None:
    destination.write_text(f"-- dump of {connection.name}\nCREATE TABLE t (id INT);\n")


def _fake_process(returncode: int, stderr: bytes = b"") -> MagicMock:
    proc = MagicMock()
    proc.returncode = returncode
    proc.communicate = AsyncMock(return_value=(None, stderr))
    return proc


# ------------------------------------------------------------------
# Naming
# ------------------------------------------------------------------


class TestNaming:
    """Test timestamp and file name derivation."""

    def test_format_timestamp(self) -> None:
        moment = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert format_timestamp(moment) == TIMESTAMP

    def test_format_timestamp_keeps_milliseconds(self) -> None:
        moment = datetime(2024, 3, 9, 14, 5, 7, 123456, tzinfo=timezone.utc)
        assert format_timestamp(moment) == "2024-03-09T14-05-07-123Z"

    def test_format_timestamp_converts_to_utc(self) -> None:
        from datetime import timedelta

        moment = datetime(2024, 1, 1, 2, 0, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(moment) == TIMESTAMP

    def test_format_timestamp_is_filesystem_safe(self) -> None:
        value = format_timestamp()
        assert ":" not in value
        assert "." not in value
        assert value.endswith("Z")

    def test_dump_and_archive_names(self) -> None:
        """Database 'shop' at the fixed timestamp gives the documented names."""
        assert dump_file_name("shop", TIMESTAMP) == "backup-shop-2024-01-01T00-00-00-000Z.sql"
        assert archive_file_name(DUMP_NAME) == "backup-shop-2024-01-01T00-00-00-000Z.sql.zip"


# ------------------------------------------------------------------
# Successful run
# ------------------------------------------------------------------


class TestBackupSuccess:
    """Test a backup run where every stage succeeds."""

    async def test_uploads_archive_and_cleans_up(self, settings, store, tmp_path: Path) -> None:
        uploaded_paths = []

        async def _upload(path: Path) -> RemoteBackupRecord:
            uploaded_paths.append(path)
            assert path.exists(), "archive must be complete before upload"
            return _uploaded(path.name)

        store.upload = AsyncMock(side_effect=_upload)

        with patch("drive_backup.backup.pipeline.produce_dump", AsyncMock(side_effect=_write_dump)):
            run = await run_backup(settings, store, timestamp=TIMESTAMP)

        assert run.outcome is PipelineOutcome.SUCCEEDED
        assert run.exit_code == 0
        assert run.error is None
        assert uploaded_paths == [tmp_path / ARCHIVE_NAME]
        assert run.record.name == ARCHIVE_NAME
        assert run.compressed_bytes and run.compressed_bytes > 0
        assert run.artifacts == [tmp_path / DUMP_NAME, tmp_path / ARCHIVE_NAME]
        assert not (tmp_path / DUMP_NAME).exists()
        assert not (tmp_path / ARCHIVE_NAME).exists()

    async def test_dump_receives_connection_settings(self, settings, store, tmp_path: Path) -> None:
        store.upload = AsyncMock(return_value=_uploaded())
        produce = AsyncMock(side_effect=_write_dump)

        with patch("drive_backup.backup.pipeline.produce_dump", produce):
            await run_backup(settings, store, timestamp=TIMESTAMP)

        connection, destination = produce.call_args.args
        assert connection == settings.database
        assert destination == tmp_path / DUMP_NAME

    async def test_default_timestamp(self, settings, store) -> None:
        store.upload = AsyncMock(return_value=_uploaded())
        with patch("drive_backup.backup.pipeline.produce_dump", AsyncMock(side_effect=_write_dump)):
            run = await run_backup(settings, store)

        assert run.name.startswith("backup-shop-")
        assert run.name.endswith("Z.sql")


# ------------------------------------------------------------------
# Failures and cleanup
# ------------------------------------------------------------------


class TestBackupFailures:
    """Each failing stage short-circuits the rest; cleanup runs once."""

    async def test_dump_failure_access_denied(self, settings, store, tmp_path: Path) -> None:
        """mysqldump exiting 1 with 'Access denied' fails the run before packing."""
        fake = AsyncMock(return_value=_fake_process(1, b"Access denied"))

        with patch("drive_backup.backup.dump.asyncio.create_subprocess_exec", fake):
            run = await run_backup(settings, store, timestamp=TIMESTAMP)

        assert run.outcome is PipelineOutcome.FAILED
        assert run.exit_code == 1
        assert "Access denied" in run.error
        assert not (tmp_path / ARCHIVE_NAME).exists()
        assert not (tmp_path / DUMP_NAME).exists()
        store.upload.assert_not_awaited()

    async def test_dump_failure_cleans_only_dump(self, settings, store, tmp_path: Path) -> None:
        clean = MagicMock()
        produce = AsyncMock(side_effect=DumpError("Database dump failed"))

        with patch("drive_backup.backup.pipeline.produce_dump", produce), \
                patch("drive_backup.backup.pipeline.cleanup", clean):
            run = await run_backup(settings, store, timestamp=TIMESTAMP)

        clean.assert_called_once_with([tmp_path / DUMP_NAME])
        assert run.outcome is PipelineOutcome.FAILED

    async def test_pack_failure_cleans_dump_and_archive(self, settings, store, tmp_path: Path) -> None:
        clean = MagicMock()

        with patch("drive_backup.backup.pipeline.produce_dump", AsyncMock(side_effect=_write_dump)), \
                patch("drive_backup.backup.pipeline.pack", AsyncMock(side_effect=PackError("disk full"))), \
                patch("drive_backup.backup.pipeline.cleanup", clean):
            run = await run_backup(settings, store, timestamp=TIMESTAMP)

        clean.assert_called_once_with([tmp_path / DUMP_NAME, tmp_path / ARCHIVE_NAME])
        assert run.error == "disk full"
        store.upload.assert_not_awaited()

    async def test_upload_failure(self, settings, store, tmp_path: Path) -> None:
        store.upload = AsyncMock(side_effect=RemoteError("Google Drive upload failed: 403"))

        with patch("drive_backup.backup.pipeline.produce_dump", AsyncMock(side_effect=_write_dump)):
            run = await run_backup(settings, store, timestamp=TIMESTAMP)

        assert run.outcome is PipelineOutcome.FAILED
        assert "403" in run.error
        assert run.record is None
        assert not (tmp_path / DUMP_NAME).exists()
        assert not (tmp_path / ARCHIVE_NAME).exists()

    async def test_missing_work_dir_fails_the_run(self, settings, store, tmp_path: Path) -> None:
        """A work directory that does not exist ends the run as FAILED."""
        missing = tmp_path / "does-not-exist"
        settings = settings.model_copy(update={"backup_work_dir": missing})
        fake = AsyncMock()

        with patch("drive_backup.backup.dump.asyncio.create_subprocess_exec", fake):
            run = await run_backup(settings, store, timestamp=TIMESTAMP)

        assert run.outcome is PipelineOutcome.FAILED
        assert run.exit_code == 1
        assert "Cannot write dump file" in run.error
        fake.assert_not_awaited()
        store.upload.assert_not_awaited()
        assert not missing.exists()

    async def test_unexpected_error_propagates_after_cleanup(self, settings, store, tmp_path: Path) -> None:
        """Non-domain exceptions are not swallowed, but cleanup still runs."""
        clean = MagicMock()
        produce = AsyncMock(side_effect=RuntimeError("bug"))

        with patch("drive_backup.backup.pipeline.produce_dump", produce), \
                patch("drive_backup.backup.pipeline.cleanup", clean):
            with pytest.raises(RuntimeError, match="bug"):
                await run_backup(settings, store, timestamp=TIMESTAMP)

        clean.assert_called_once_with([tmp_path / DUMP_NAME])

    async def test_cleanup_runs_once_on_success(self, settings, store, tmp_path: Path) -> None:
        clean = MagicMock()
        store.upload = AsyncMock(return_value=_uploaded())

        with patch("drive_backup.backup.pipeline.produce_dump", AsyncMock(side_effect=_write_dump)), \
                patch("drive_backup.backup.pipeline.cleanup", clean):
            await run_backup(settings, store, timestamp=TIMESTAMP)

        clean.assert_called_once_with([tmp_path / DUMP_NAME, tmp_path / ARCHIVE_NAME])
