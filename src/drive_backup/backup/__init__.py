"""Backup and restore pipelines and their building blocks.

Usage:
    from drive_backup.backup import run_backup, run_restore
    from drive_backup.backup import PipelineRun, PipelineOutcome, RemoteBackupRecord
"""

from drive_backup.backup.archive import pack, unpack
from drive_backup.backup.cleanup import cleanup
from drive_backup.backup.dump import import_dump, produce_dump
from drive_backup.backup.models import PipelineOutcome, PipelineRun, RemoteBackupRecord
from drive_backup.backup.pipeline import run_backup, run_restore

__all__ = [
    "PipelineOutcome",
    "PipelineRun",
    "RemoteBackupRecord",
    "cleanup",
    "import_dump",
    "pack",
    "produce_dump",
    "run_backup",
    "run_restore",
    "unpack",
]
