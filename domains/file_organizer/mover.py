"""
Conflict-safe file mover for the File Organizer domain.

Moves a file into a destination directory without overwriting anything:
name collisions get a numeric ``_N`` suffix before the extension. Uses an
atomic rename and falls back to copy + delete when the rename fails
(typically across filesystems). The fallback is not atomic; a crash in the
middle of it can leave both copies on disk.
"""

import os
import shutil
from pathlib import Path

from loguru import logger

from autofile.models.exceptions import ConflictUnresolvedError, MoveError, SourceNotFoundError
from autofile.utils.helpers import format_bytes, numbered_name

MAX_CONFLICT_ATTEMPTS = 10000


def resolve_conflict(path: Path, max_attempts: int = MAX_CONFLICT_ATTEMPTS) -> Path:
    """
    Return ``path`` or the first free ``<stem>_<N><suffix>`` variant.

    Args:
        path: Desired target path
        max_attempts: Highest suffix tried

    Returns:
        Unused path

    Raises:
        ConflictUnresolvedError: if every candidate is taken
    """
    if not os.path.lexists(path):
        return path

    for index in range(1, max_attempts + 1):
        candidate = numbered_name(path, index)
        if not os.path.lexists(candidate):
            logger.warning(f"File conflict detected, using new name: {candidate.name}")
            return candidate

    raise ConflictUnresolvedError(
        f"Could not resolve file name conflict for {path.name} after {max_attempts} attempts",
        path=path,
    )


def _copy_then_delete(source: Path, destination: Path) -> None:
    """Cross-device fallback: copy with metadata, then remove the source."""
    try:
        shutil.copy2(source, destination)
    except OSError as e:
        # Never leave a truncated copy behind
        try:
            destination.unlink(missing_ok=True)
        except OSError:
            logger.warning(f"Could not remove partial copy {destination}")
        raise MoveError(f"Failed to copy {source} to {destination}: {e}", path=source) from e

    try:
        source.unlink()
    except OSError as e:
        raise MoveError(
            f"Copied to {destination} but failed to remove source {source}: {e}",
            path=source,
        ) from e


def move_file(source: Path, destination_dir: Path, max_attempts: int = MAX_CONFLICT_ATTEMPTS) -> Path:
    """
    Move ``source`` into ``destination_dir`` without overwriting.

    Args:
        source: File to move
        destination_dir: Target directory, created if missing
        max_attempts: Bound on conflict disambiguation

    Returns:
        Final path of the moved file

    Raises:
        SourceNotFoundError: if ``source`` does not exist (nothing is touched)
        ConflictUnresolvedError: if no free name exists
        MoveError: if both rename and copy fallback fail
    """
    source = Path(source)
    destination_dir = Path(destination_dir)

    if not source.is_file():
        raise SourceNotFoundError(f"Source file does not exist: {source}", path=source)

    try:
        destination_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise MoveError(f"Failed to create destination directory {destination_dir}: {e}", path=source) from e

    destination = resolve_conflict(destination_dir / source.name, max_attempts)
    logger.info(f"Moving {source} -> {destination}")

    try:
        os.rename(source, destination)
    except OSError as e:
        logger.warning(f"Rename failed, attempting copy + delete: {e}")
        size = source.stat().st_size if source.exists() else 0
        _copy_then_delete(source, destination)
        logger.success(f"Copied {format_bytes(size)} and removed source, now at {destination}")
        return destination

    logger.success(f"Successfully moved file to {destination}")
    return destination


class ConflictSafeMover:
    """Moves files into destination directories, never overwriting."""

    def __init__(self, max_attempts: int = MAX_CONFLICT_ATTEMPTS):
        self.max_attempts = max_attempts

    def move(self, source: Path, destination_dir: Path) -> Path:
        """Move ``source`` into ``destination_dir``; see ``move_file``."""
        return move_file(source, destination_dir, self.max_attempts)
