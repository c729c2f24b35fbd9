"""Backup and restore pipelines.

Each pipeline is a strictly sequential chain of stages. The first stage
that raises ``BackupToolError`` ends the run as failed; the remaining stages
are skipped. Whatever the outcome, the local files registered on the run
are passed to ``cleanup`` exactly once.

Backup:  dump -> pack -> upload -> cleanup
Restore: list -> select -> confirm -> download -> unpack -> import -> cleanup

Usage:
    from drive_backup.backup.pipeline import run_backup, run_restore

    run = await run_backup(settings, store)
    run = await run_restore(settings, store, prompter)
    sys.exit(run.exit_code)
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from drive_backup.backup.archive import ARCHIVE_SUFFIX, pack, unpack
from drive_backup.backup.cleanup import cleanup
from drive_backup.backup.dump import import_dump, produce_dump
from drive_backup.backup.models import PipelineOutcome, PipelineRun
from drive_backup.config.models import Settings
from drive_backup.errors import BackupToolError

if TYPE_CHECKING:
    from drive_backup.cli.prompts import Prompter
    from drive_backup.storage.base import RemoteStore

logger = logging.getLogger(__name__)


# ============================================================================
# Naming
# ============================================================================


def format_timestamp(moment: datetime | None = None) -> str:
    """Filesystem-safe UTC timestamp with millisecond precision.

    ISO-8601 with a ``Z`` suffix, colons and dots replaced by dashes.

    Example:
        >>> format_timestamp(datetime(2024, 1, 1, tzinfo=timezone.utc))
        '2024-01-01T00-00-00-000Z'
    """
    moment = (moment or datetime.now(timezone.utc)).astimezone(timezone.utc)
    iso = moment.strftime("%Y-%m-%dT%H:%M:%S") + f".{moment.microsecond // 1000:03d}Z"
    return iso.replace(":", "-").replace(".", "-")


def dump_file_name(db_name: str, timestamp: str) -> str:
    """``backup-<db>-<timestamp>.sql``"""
    return f"backup-{db_name}-{timestamp}.sql"


def archive_file_name(dump_name: str) -> str:
    """``<dump name>.zip``"""
    return f"{dump_name}{ARCHIVE_SUFFIX}"


# ============================================================================
# Backup
# ============================================================================


async def run_backup(
    settings: Settings,
    store: RemoteStore,
    timestamp: str | None = None,
) -> PipelineRun:
    """Dump the database, compress the dump, and upload the archive.

    Args:
        settings: Tool settings.
        store: Remote store receiving the archive.
        timestamp: Run timestamp used in file names. Defaults to now
            (see ``format_timestamp``).

    Returns:
        Finished ``PipelineRun`` with outcome ``SUCCEEDED`` or ``FAILED``.
        Exceptions other than ``BackupToolError`` propagate after cleanup.

    Example:
        run = await run_backup(settings, GoogleDriveStore(settings.drive))
        if run.outcome is PipelineOutcome.FAILED:
            print(run.error)
    """
    timestamp = timestamp or format_timestamp()
    dump_name = dump_file_name(settings.db_name, timestamp)
    work_dir = Path(settings.backup_work_dir)
    run = PipelineRun(kind="backup", name=dump_name)

    try:
        dump_path = run.register(work_dir / dump_name)
        await produce_dump(settings.database, dump_path)

        archive_path = run.register(work_dir / archive_file_name(dump_name))
        run.compressed_bytes = await pack(dump_path, archive_path)

        run.record = await store.upload(archive_path)
        run.finish(PipelineOutcome.SUCCEEDED)
        logger.info("Backup completed successfully!")
    except BackupToolError as e:
        logger.error(f"Backup failed: {e}")
        run.finish(PipelineOutcome.FAILED, str(e))
    finally:
        cleanup(run.artifacts)

    return run


# ============================================================================
# Restore
# ============================================================================


async def run_restore(
    settings: Settings,
    store: RemoteStore,
    prompter: Prompter,
) -> PipelineRun:
    """Let the user pick a remote backup and replay it into the database.

    Nothing is written locally until the user has confirmed the restore.
    Declining ends the run as ``CANCELLED``; an empty folder ends it as
    ``NOTHING_TO_RESTORE`` without prompting.

    Args:
        settings: Tool settings.
        store: Remote store holding the archives.
        prompter: Selection and confirmation prompts.

    Returns:
        Finished ``PipelineRun``. Exceptions other than ``BackupToolError``
        propagate after cleanup.
    """
    run = PipelineRun(kind="restore", name=f"restore-{format_timestamp()}")
    work_dir = Path(settings.backup_work_dir)

    try:
        records = await store.list_backups(
            name_prefix=settings.backup_name_prefix,
            limit=settings.backup_list_limit,
        )
        if not records:
            logger.info("No backup files found in the Google Drive folder.")
            run.finish(PipelineOutcome.NOTHING_TO_RESTORE)
            return run

        record = prompter.select_backup(records)
        if not prompter.confirm_restore(record, settings.db_name):
            logger.info("Restore cancelled.")
            run.finish(PipelineOutcome.CANCELLED)
            return run
        run.record = record

        # Remote names are not trusted as paths
        archive_path = run.register(work_dir / Path(record.name).name)
        await store.download(record.id, archive_path)

        # Registered only once extracted; a file already at that path is not ours
        dump_path = run.register(await unpack(archive_path, work_dir))
        await import_dump(settings.database, dump_path)

        run.finish(PipelineOutcome.SUCCEEDED)
        logger.info("Restore completed successfully!")
    except BackupToolError as e:
        logger.error(f"Restore failed: {e}")
        run.finish(PipelineOutcome.FAILED, str(e))
    finally:
        cleanup(run.artifacts)

    return run
