"""Exception hierarchy for backup and restore pipelines.

Every failure a pipeline stage can report derives from ``BackupToolError``,
so the pipelines catch one type and let anything else propagate.

Usage:
    from drive_backup.errors import BackupToolError, DumpError

    try:
        await produce_dump(settings.database, dump_path)
    except DumpError as e:
        print(e.stderr)
"""


class BackupToolError(Exception):
    """Base class for all backup/restore failures."""

    pass


class ConfigError(BackupToolError):
    """Raised when required configuration is missing or invalid."""

    pass


class CommandError(BackupToolError):
    """An external database tool exited non-zero or could not be started.

    Attributes:
        returncode: Process exit status, or ``None`` if the tool never ran.
        stderr: Diagnostic output captured from the tool.
    """

    action = "Command"

    def __init__(self, message: str, returncode: int | None = None, stderr: str = ""):
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)

    @classmethod
    def from_exit(cls, returncode: int, stderr: str) -> "CommandError":
        """Build an error for a tool that ran and exited with ``returncode``."""
        detail = stderr.strip() or "no diagnostic output"
        return cls(
            f"{cls.action} failed (exit code {returncode}): {detail}",
            returncode=returncode,
            stderr=stderr,
        )


class DumpError(CommandError):
    """Database export tool failed."""

    action = "Database dump"


class DumpImportError(CommandError):
    """Database import tool failed."""

    action = "Database restore"


class PackError(BackupToolError):
    """Compressing a dump into an archive failed."""

    pass


class UnpackError(BackupToolError):
    """Extracting a dump from an archive failed."""

    pass


class RemoteError(BackupToolError):
    """Remote store call (list, upload, download) failed."""

    pass
