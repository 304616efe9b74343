"""
Error taxonomy for AutoFile.

Startup errors (ConfigurationError, a failed model load) terminate the
process. Everything else is a per-file failure: it is logged with the
offending path by the pipeline and the next file is processed.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class AutoFileError(Exception):
    """Base class for all AutoFile errors."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class ConfigurationError(AutoFileError):
    """Missing home/config paths, bad watch directory, uncreatable destinations."""


class ClassificationError(AutoFileError):
    """File content could not be read for signature sniffing."""


class RuleMissingError(AutoFileError):
    """No destination directory is configured for a category."""


class MoveError(AutoFileError):
    """Both the atomic rename and the copy fallback failed."""


class SourceNotFoundError(MoveError, FileNotFoundError):
    """The file to move does not exist."""


class ConflictUnresolvedError(MoveError):
    """No free file name was found in the destination directory."""


class EmbeddingError(AutoFileError):
    """The embedding model could not produce a vector."""


class PreprocessError(AutoFileError):
    """A preprocessing stage failed to transform the file."""
