"""Single-entry zip archives for dump files.

``pack`` and ``unpack`` write to a ``.part`` file and rename it into place
only once it is complete, so an output path that exists is never partial
and a failed run leaves any earlier file at that path untouched.
Both operations run in a worker thread.

Usage:
    from drive_backup.backup.archive import pack, unpack

    size = await pack(Path("backup-shop.sql"), Path("backup-shop.sql.zip"))
    dump = await unpack(Path("backup-shop.sql.zip"), Path("."))
"""

import asyncio
import logging
import os
import shutil
import zipfile
import zlib
from pathlib import Path

from drive_backup.errors import PackError, UnpackError

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIX = ".zip"
COMPRESS_LEVEL = 9


def extracted_name(archive_name: str) -> str:
    """Dump file name for an archive name: the literal ``.zip`` removed.

    Only the first occurrence is removed, matching how archive names were
    always derived. ``backup-shop.sql.zip`` -> ``backup-shop.sql``.
    """
    return archive_name.replace(ARCHIVE_SUFFIX, "", 1)


async def pack(source: Path, archive: Path) -> int:
    """Compress ``source`` into a single-entry zip at ``archive``.

    Args:
        source: File to compress; its name becomes the entry name.
        archive: Archive path to create.

    Returns:
        Size of the finished archive in bytes.

    Raises:
        PackError: If the source cannot be read or the archive written.
    """
    logger.info(f"Compressing {source}...")
    size = await asyncio.to_thread(_pack_sync, Path(source), Path(archive))
    logger.info(f"File compressed: {archive} ({size} bytes)")
    return size


def _pack_sync(source: Path, archive: Path) -> int:
    partial = archive.with_name(archive.name + ".part")
    try:
        with zipfile.ZipFile(
            partial, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=COMPRESS_LEVEL
        ) as zf:
            zf.write(source, arcname=source.name)
        os.replace(partial, archive)
    except (OSError, zipfile.LargeZipFile) as e:
        partial.unlink(missing_ok=True)
        raise PackError(f"Compression failed: {e}") from e
    return archive.stat().st_size


async def unpack(archive: Path, destination_dir: Path) -> Path:
    """Extract the single entry of ``archive`` into ``destination_dir``.

    The output name comes from the archive name (see ``extracted_name``),
    not from the entry name stored inside the zip.

    Args:
        archive: Zip file to read.
        destination_dir: Directory for the extracted dump.

    Returns:
        Path of the extracted dump file.

    Raises:
        UnpackError: If the archive is corrupt, does not hold exactly one
            file, or the output cannot be written.
    """
    archive = Path(archive)
    target = Path(destination_dir) / extracted_name(archive.name)
    if target.resolve() == archive.resolve():
        raise UnpackError(f"Archive name {archive.name} has no {ARCHIVE_SUFFIX} to remove")
    logger.info(f"Unzipping {archive}...")
    await asyncio.to_thread(_unpack_sync, archive, target)
    logger.info(f"Unzipped to {target}.")
    return target


def _unpack_sync(archive: Path, target: Path) -> None:
    partial = target.with_name(target.name + ".part")
    try:
        with zipfile.ZipFile(archive) as zf:
            entries = [info for info in zf.infolist() if not info.is_dir()]
            if len(entries) != 1:
                raise UnpackError(
                    f"Expected exactly one file in {archive.name}, found {len(entries)}"
                )
            with zf.open(entries[0]) as src, open(partial, "wb") as dst:
                shutil.copyfileobj(src, dst)
        os.replace(partial, target)
    except (zipfile.BadZipFile, zlib.error) as e:
        partial.unlink(missing_ok=True)
        raise UnpackError(f"Corrupt archive {archive.name}: {e}") from e
    except OSError as e:
        partial.unlink(missing_ok=True)
        raise UnpackError(f"Unzip failed: {e}") from e
