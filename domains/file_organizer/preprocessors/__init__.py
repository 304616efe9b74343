"""
File Organizer Preprocessors

Stages that transform a file before it is classified:
- image_renamer.py - Rename camera-style image names to their capture time
- heic_converter.py - Convert HEIC/HEIF images to PNG

Stages run in a fixed order; each may return a new path for the file.
"""

from pathlib import Path
from typing import Iterable, Protocol, Sequence

from loguru import logger

from autofile.models.exceptions import AutoFileError, PreprocessError
from domains.file_organizer.preprocessors.heic_converter import HeicConverter
from domains.file_organizer.preprocessors.image_renamer import ImageRenamer


class Preprocessor(Protocol):
    """Transforms a file before organization."""

    name: str

    def should_process(self, path: Path) -> bool:
        ...

    def process(self, path: Path) -> Path:
        """Return the file's new path (or the same path if unchanged)."""
        ...


# Registry keyed by the names used in the enabled_preprocessors setting
AVAILABLE_PREPROCESSORS = {
    "image_renamer": ImageRenamer,
    "heic_converter": HeicConverter,
}


class PreprocessorChain:
    """Applies preprocessors in order, feeding each result to the next."""

    def __init__(self, preprocessors: Sequence[Preprocessor] = ()):
        self.preprocessors = list(preprocessors)

        logger.info(f"Initialized preprocessing pipeline with {len(self.preprocessors)} preprocessor(s)")
        for preprocessor in self.preprocessors:
            logger.info(f"  - {preprocessor.name}")

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "PreprocessorChain":
        """Build a chain from registry names; unknown names are skipped."""
        preprocessors = []
        for name in names:
            factory = AVAILABLE_PREPROCESSORS.get(name)
            if factory is None:
                logger.warning(f"Unknown preprocessor '{name}', ignoring")
                continue
            preprocessors.append(factory())
        return cls(preprocessors)

    def process(self, path: Path) -> Path:
        """
        Run every applicable preprocessor over ``path``.

        Returns:
            Path of the file after the last stage

        Raises:
            PreprocessError: if a stage fails
        """
        current = Path(path)

        for preprocessor in self.preprocessors:
            if not preprocessor.should_process(current):
                continue

            logger.info(f"Applying preprocessor '{preprocessor.name}' to {current}")
            try:
                current = Path(preprocessor.process(current))
            except AutoFileError:
                raise
            except Exception as e:
                raise PreprocessError(f"Preprocessor '{preprocessor.name}' failed on {current}: {e}", path=current) from e
            logger.info(f"Preprocessor result: {current}")

        return current


__all__ = [
    "AVAILABLE_PREPROCESSORS",
    "HeicConverter",
    "ImageRenamer",
    "Preprocessor",
    "PreprocessorChain",
]
