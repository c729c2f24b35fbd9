"""Database export and import through the MySQL command-line tools.

Both tools run without a shell: the dump tool's stdout is redirected into
the dump file and the import tool's stdin is read from it.

Usage:
    from drive_backup.backup.dump import produce_dump, import_dump

    await produce_dump(settings.database, Path("backup-shop.sql"))
    await import_dump(settings.database, Path("backup-shop.sql"))
"""

import asyncio
import logging
from pathlib import Path

from drive_backup.config.models import DatabaseConnection
from drive_backup.errors import CommandError, DumpError, DumpImportError

logger = logging.getLogger(__name__)


def connection_args(connection: DatabaseConnection) -> list[str]:
    """Shared ``-h/-P/-u/-p <database>`` arguments for mysqldump and mysql.

    An empty password leaves the ``-p`` flag out entirely; passing a bare
    ``-p`` would make the tools prompt for one.

    Args:
        connection: Database connection settings.

    Returns:
        Argument list ending with the database name.

    Example:
        >>> connection_args(DatabaseConnection(host="db", user="root", password="", name="shop"))
        ['-h', 'db', '-u', 'root', 'shop']
    """
    args = ["-h", connection.host]
    if connection.port is not None:
        args += ["-P", str(connection.port)]
    args += ["-u", connection.user]
    if connection.password:
        args.append(f"-p{connection.password}")
    args.append(connection.name)
    return args


def build_dump_command(connection: DatabaseConnection) -> list[str]:
    """Full argv for the export tool."""
    return [connection.dump_bin, *connection_args(connection)]


def build_import_command(connection: DatabaseConnection) -> list[str]:
    """Full argv for the import tool."""
    return [connection.import_bin, *connection_args(connection)]


def mask_command(command: list[str]) -> str:
    """Render ``command`` for logging with the password hidden."""
    return " ".join("-p***" if arg.startswith("-p") and len(arg) > 2 else arg for arg in command)


async def produce_dump(connection: DatabaseConnection, destination: Path) -> None:
    """Export the database into ``destination``.

    The file is created before the tool starts, so it may exist (partially
    written) after a failure.

    Args:
        connection: Database connection settings.
        destination: Dump file to write.

    Raises:
        DumpError: If the dump file cannot be created, the tool cannot be
            started, or the tool exits non-zero.
    """
    logger.info(f"Creating database dump for {connection.name}...")
    command = build_dump_command(connection)
    try:
        out = open(destination, "wb")
    except OSError as e:
        raise DumpError(f"Cannot write dump file {destination}: {e}") from e
    with out:
        await _run_tool(command, DumpError, stdout=out)
    logger.info(f"Database dump created: {destination}")


async def import_dump(connection: DatabaseConnection, source: Path) -> None:
    """Replay ``source`` into the database, overwriting its contents.

    Args:
        connection: Database connection settings.
        source: Dump file to read.

    Raises:
        DumpImportError: If the dump cannot be read, the tool cannot be
            started, or the tool exits non-zero.
    """
    logger.info(f"Restoring database {connection.name} from {source}...")
    command = build_import_command(connection)
    try:
        src = open(source, "rb")
    except OSError as e:
        raise DumpImportError(f"Cannot read dump file {source}: {e}") from e
    with src:
        await _run_tool(command, DumpImportError, stdin=src)
    logger.info("Database restored successfully.")


async def _run_tool(command: list[str], error_cls: type[CommandError], **streams) -> None:
    """Run ``command`` to completion, raising ``error_cls`` on failure.

    Args:
        command: Argument vector; ``command[0]`` is the executable.
        error_cls: ``CommandError`` subclass to raise.
        **streams: ``stdin``/``stdout`` file objects for redirection.
    """
    logger.debug(f"Running: {mask_command(command)}")
    streams.setdefault("stdout", asyncio.subprocess.DEVNULL)
    try:
        proc = await asyncio.create_subprocess_exec(
            *command,
            stderr=asyncio.subprocess.PIPE,
            **streams,
        )
    except OSError as e:
        raise error_cls(f"{error_cls.action} failed: cannot run {command[0]}: {e}") from e

    _, stderr_bytes = await proc.communicate()
    stderr = (stderr_bytes or b"").decode(errors="replace")

    if proc.returncode != 0:
        logger.error(f"{error_cls.action} failed: {stderr.strip()}")
        raise error_cls.from_exit(proc.returncode, stderr)
    if stderr.strip():
        # mysqldump warns on stderr even on success (e.g. password on CLI)
        logger.warning(stderr.strip())
