"""
Atomic-write persistence for documentation artifacts.

Artifacts are written to a temporary file in the target directory and
renamed over the destination, so a reader never sees a half-written file
and a failed write leaves the previous content in place.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

import aiofiles
import aiofiles.os

logger = logging.getLogger(__name__)

TEMP_SUFFIX = ".tmp"


async def ensure_dir(path: Path) -> Path:
    """Create ``path`` and its parents; an existing directory is fine."""
    await aiofiles.os.makedirs(path, exist_ok=True)
    return path


async def atomic_write(path: Path, content: str) -> None:
    """
    Write content to a file atomically.

    Args:
        path: Target file path
        content: Content to write to the file

    Raises:
        OSError: If the write operation fails
    """
    await ensure_dir(path.parent)

    fd, temp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=TEMP_SUFFIX,
    )
    os.close(fd)

    try:
        async with aiofiles.open(temp_path, "w", encoding="utf-8") as f:
            await f.write(content)
            await f.flush()
        await aiofiles.os.replace(temp_path, path)
    except BaseException:
        # Clean up temp file on failure
        try:
            await aiofiles.os.remove(temp_path)
        except OSError as e:
            logger.debug("Could not remove temp file %s: %s", temp_path, e)
        raise


async def read_text(path: Path) -> str:
    async with aiofiles.open(path, "r", encoding="utf-8") as f:
        return await f.read()
