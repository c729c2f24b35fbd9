"""Interactive prompts for the menu, backup selection and restore confirmation.

``Prompter`` is the contract the CLI and the restore pipeline rely on;
``RichPrompter`` implements it on top of ``rich.prompt``. Tests and
scripted drivers can pass any object with the same three methods.
"""

from enum import Enum
from typing import Protocol

from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.table import Table

from drive_backup.backup.models import RemoteBackupRecord


class MenuAction(str, Enum):
    """Main menu choices."""

    BACKUP = "backup"
    RESTORE = "restore"
    EXIT = "exit"


MENU_ITEMS: list[tuple[MenuAction, str]] = [
    (MenuAction.BACKUP, "Backup Database to Google Drive"),
    (MenuAction.RESTORE, "Restore Database from Google Drive"),
    (MenuAction.EXIT, "Exit"),
]


class Prompter(Protocol):
    """User interaction needed by the CLI and the restore pipeline."""

    def choose_action(self) -> MenuAction:
        """Ask which operation to run."""
        ...

    def select_backup(self, records: list[RemoteBackupRecord]) -> RemoteBackupRecord:
        """Ask the user to pick exactly one of ``records`` (never empty)."""
        ...

    def confirm_restore(self, record: RemoteBackupRecord, db_name: str) -> bool:
        """Ask for explicit confirmation before overwriting ``db_name``.

        Returns:
            ``True`` only on an affirmative answer; the default is ``False``.
        """
        ...


class RichPrompter:
    """``Prompter`` backed by rich's ``Prompt``/``Confirm`` widgets."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def choose_action(self) -> MenuAction:
        for index, (_, label) in enumerate(MENU_ITEMS, start=1):
            self.console.print(f"  [cyan]{index}.[/cyan] {label}")
        answer = Prompt.ask(
            "What do you want to do?",
            choices=[str(i) for i in range(1, len(MENU_ITEMS) + 1)],
            console=self.console,
        )
        return MENU_ITEMS[int(answer) - 1][0]

    def select_backup(self, records: list[RemoteBackupRecord]) -> RemoteBackupRecord:
        table = Table(title="Available Backups", show_header=True, header_style="bold")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Backup")
        for index, record in enumerate(records, start=1):
            table.add_row(str(index), record.label())
        self.console.print(table)

        answer = Prompt.ask(
            "Select a backup to restore",
            choices=[str(i) for i in range(1, len(records) + 1)],
            show_choices=False,
            console=self.console,
        )
        return records[int(answer) - 1]

    def confirm_restore(self, record: RemoteBackupRecord, db_name: str) -> bool:
        return Confirm.ask(
            f'[bold red]ARE YOU SURE[/bold red] you want to restore from "{record.name}"?\n'
            f'  This will OVERWRITE the current "{db_name}" database.',
            default=False,
            console=self.console,
        )
