"""Best-effort removal of transient pipeline files."""

import logging
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)


def cleanup(paths: Iterable[Path]) -> None:
    """Delete each existing path; log failures and carry on.

    Runs from the pipelines' ``finally`` blocks, so it never raises.

    Args:
        paths: Local files to remove. Missing files are skipped.
    """
    paths = list(paths)
    if not paths:
        return

    logger.info("Cleaning up temporary files...")
    for path in paths:
        try:
            if path.exists():
                path.unlink()
                logger.info(f"  - Deleted: {path}")
        except OSError as e:
            logger.error(f"  - Failed to delete {path}: {e}")
