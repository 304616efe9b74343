"""
Helper utilities for AutoFile.

Common path functions used across the organizer domain.
"""

from pathlib import Path

# Partial downloads and editor scratch files that must never be organized
TEMPORARY_SUFFIXES = {".crdownload", ".part", ".partial", ".download", ".tmp", ".swp"}


def normalise_path(path: Path) -> Path:
    """Return a resolved version of ``path`` without forcing existence."""
    try:
        return path.expanduser().resolve()
    except (FileNotFoundError, RuntimeError):
        return path.expanduser().absolute()


def get_file_extension(path: Path) -> str:
    """Get lowercase file extension without dot."""
    return path.suffix.lstrip('.').lower()


def is_hidden(path: Path) -> bool:
    """Check if path is hidden (starts with dot)."""
    return path.name.startswith('.')


def is_temporary(path: Path) -> bool:
    """Check if path looks like an in-progress download or scratch file."""
    return path.suffix.lower() in TEMPORARY_SUFFIXES or path.name.endswith('~')


def should_ignore_path(path: Path) -> bool:
    """Check whether the watcher should drop events for ``path``."""
    return is_hidden(path) or is_temporary(path)


def numbered_name(path: Path, index: int) -> Path:
    """Return ``path`` with ``_<index>`` inserted before the extension."""
    if path.suffix:
        return path.with_name(f"{path.stem}_{index}{path.suffix}")
    return path.with_name(f"{path.name}_{index}")


def format_bytes(bytes_count: float) -> str:
    """Format bytes as human-readable string."""
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if bytes_count < 1024.0:
            return f"{bytes_count:.1f} {unit}"
        bytes_count /= 1024.0
    return f"{bytes_count:.1f} PB"


def is_embeddable_name(name: str) -> bool:
    """
    Check whether a file or folder name can be sent to the embedding model.

    Blank names carry no meaning, and names holding undecodable filesystem
    bytes (surrogate escapes) cannot be encoded as UTF-8 text.
    """
    if not name or not name.strip():
        return False
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True
