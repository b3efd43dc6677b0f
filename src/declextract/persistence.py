# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Output file persistence."""

import logging
from pathlib import Path

from declextract.errors import PersistenceError

logger = logging.getLogger(__name__)


def write_file(path: Path, data: str) -> None:
    """Write one output file, creating parent directories.

    Args:
        path: Target file path.
        data: Text to write.

    Raises:
        PersistenceError: If directory creation or the write fails.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(data, encoding="utf-8")
    except OSError as exc:
        logger.warning(f"Failed to write output file (path={path} error={exc})")
        raise PersistenceError(f"failed to write {path}: {exc}") from exc
    logger.debug(f"Wrote output file (path={path} bytes={len(data)})")
