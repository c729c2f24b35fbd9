"""Models shared by the backup and restore pipelines.

Usage:
    from drive_backup.backup.models import PipelineRun, PipelineOutcome

    run = PipelineRun(kind="backup", name="backup-shop-2024-01-01T00-00-00-000Z")
    run.register(Path("backup-shop-2024-01-01T00-00-00-000Z.sql"))
    run.finish(PipelineOutcome.SUCCEEDED)
"""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class PipelineOutcome(str, Enum):
    """Terminal state of a pipeline run."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"
    NOTHING_TO_RESTORE = "nothing_to_restore"

    @property
    def exit_code(self) -> int:
        """Process exit code: only a failure is non-zero."""
        return 1 if self is PipelineOutcome.FAILED else 0


class RemoteBackupRecord(BaseModel):
    """An archive already stored in the remote folder.

    Built from the remote API's file resource, so it accepts the API field
    names (``createdTime``, ``webViewLink``) as well as the Python ones.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    created_time: datetime = Field(alias="createdTime")
    web_view_link: str | None = Field(default=None, alias="webViewLink")

    def label(self) -> str:
        """Human-readable choice label with the creation time in local time."""
        created = self.created_time.astimezone().strftime("%Y-%m-%d %H:%M:%S")
        return f"{self.name} (Created: {created})"


class PipelineRun(BaseModel):
    """Execution context of one backup or restore run.

    Attributes:
        kind: Which pipeline produced this run.
        name: Timestamp-derived run name.
        artifacts: Local paths registered by the run, in creation order.
            Every one is handed to cleanup exactly once.
        outcome: Terminal state, ``None`` while running.
        error: Human-readable failure cause.
        record: Uploaded (backup) or restored (restore) remote record.
        compressed_bytes: Archive size produced by a backup run.
    """

    kind: Literal["backup", "restore"]
    name: str
    artifacts: list[Path] = Field(default_factory=list)
    outcome: PipelineOutcome | None = None
    error: str | None = None
    record: RemoteBackupRecord | None = None
    compressed_bytes: int | None = None

    def register(self, path: Path) -> Path:
        """Record a local artifact the current stage is about to create."""
        if path not in self.artifacts:
            self.artifacts.append(path)
        return path

    def finish(self, outcome: PipelineOutcome, error: str | None = None) -> None:
        """Set the terminal outcome (and failure cause, if any)."""
        self.outcome = outcome
        self.error = error

    @property
    def exit_code(self) -> int:
        """Exit code for this run; an unfinished run counts as failed."""
        if self.outcome is None:
            return 1
        return self.outcome.exit_code
