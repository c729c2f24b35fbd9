"""CLI entry point: interactive backup/restore menu.

Loads settings from the environment (and ``.env``), shows the menu, runs
the chosen pipeline once and exits.

Usage:
    drive-backup

Exit codes:
    0   - success, restore cancelled, nothing to restore, or Exit chosen
    1   - configuration error, pipeline failure, or unexpected error
    130 - interrupted with Ctrl-C
"""

import asyncio
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

from drive_backup.backup.models import PipelineOutcome, PipelineRun
from drive_backup.backup.pipeline import run_backup, run_restore
from drive_backup.cli.prompts import MenuAction, Prompter, RichPrompter
from drive_backup.config.loader import load_settings
from drive_backup.config.models import Settings
from drive_backup.errors import ConfigError
from drive_backup.storage.base import RemoteStore
from drive_backup.storage.gdrive import GoogleDriveStore

console = Console()
logger = logging.getLogger(__name__)

BANNER = (
    "====================================\n"
    "   Database Backup & Restore Tool   \n"
    "===================================="
)


# ============================================================================
# Logging
# ============================================================================


def setup_logging(level: str | int = logging.INFO) -> None:
    """Send all log records to the console through ``RichHandler``.

    Args:
        level: Root log level name or number.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


# ============================================================================
# Reporting
# ============================================================================


def report(run: PipelineRun) -> None:
    """Print the user-facing summary of a finished run."""
    title = run.kind.capitalize()

    if run.outcome is PipelineOutcome.SUCCEEDED:
        console.print()
        console.print(f"[bold green]v[/bold green] {title} completed successfully!")
        if run.record:
            console.print(f"  Remote file: [cyan]{run.record.name}[/cyan]")
            if run.record.web_view_link:
                console.print(f"  Link: {run.record.web_view_link}")
        if run.compressed_bytes is not None:
            console.print(f"  Archive size: {run.compressed_bytes} bytes")
    elif run.outcome is PipelineOutcome.NOTHING_TO_RESTORE:
        console.print(
            "[yellow]No backup files found in the specified Google Drive folder.[/yellow]"
        )
    elif run.outcome is PipelineOutcome.CANCELLED:
        console.print("[yellow]Restore cancelled.[/yellow]")
    else:
        console.print()
        console.print(f"[bold red]x[/bold red] {title} failed: {run.error}")


# ============================================================================
# Async command implementations
# ============================================================================


async def _async_backup(settings: Settings, store: RemoteStore) -> int:
    """Async implementation for the backup action.

    Returns:
        0 on success, 1 on failure.
    """
    run = await run_backup(settings, store)
    report(run)
    return run.exit_code


async def _async_restore(settings: Settings, store: RemoteStore, prompter: Prompter) -> int:
    """Async implementation for the restore action.

    Returns:
        0 on success, cancel or empty folder; 1 on failure.
    """
    run = await run_restore(settings, store, prompter)
    report(run)
    return run.exit_code


def cmd_backup(settings: Settings, store: RemoteStore) -> int:
    """Run the backup pipeline; wraps the async implementation with ``asyncio.run()``."""
    return asyncio.run(_async_backup(settings, store))


def cmd_restore(settings: Settings, store: RemoteStore, prompter: Prompter) -> int:
    """Run the restore pipeline; wraps the async implementation with ``asyncio.run()``."""
    return asyncio.run(_async_restore(settings, store, prompter))


# ============================================================================
# Main entry point
# ============================================================================


def main() -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    setup_logging()

    try:
        settings = load_settings()
    except ConfigError as e:
        console.print(f"[bold red]Configuration error:[/bold red]\n{e}")
        return 1

    logging.getLogger().setLevel(settings.log_level)
    store = GoogleDriveStore(settings.drive)
    prompter = RichPrompter(console)

    console.clear()
    console.print(BANNER, style="bold")

    try:
        action = prompter.choose_action()
        if action is MenuAction.BACKUP:
            return cmd_backup(settings, store)
        if action is MenuAction.RESTORE:
            return cmd_restore(settings, store, prompter)
        console.print("Goodbye!")
        return 0
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        return 130
    except Exception as e:
        logger.debug("Unexpected error", exc_info=True)
        console.print(f"[bold red]An unexpected error occurred:[/bold red] {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
