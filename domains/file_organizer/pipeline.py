"""
Organization pipeline for the File Organizer domain.

Per file: preprocess → classify → look up the category's destination →
resolve a semantic subfolder → move. ``handle`` lets per-file errors
propagate; ``process`` is the failure-isolating boundary the worker uses so
that one bad file never stops the next one.
"""

from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from autofile.models.exceptions import AutoFileError, RuleMissingError
from autofile.models.schemas import Category, OrganizeResult, OrganizeStatus
from domains.file_organizer import classifier
from domains.file_organizer.mover import ConflictSafeMover
from domains.file_organizer.preprocessors import PreprocessorChain
from domains.file_organizer.resolver import SubfolderResolver
from domains.file_organizer.rules import DestinationRuleTable


class OrganizationPipeline:
    """Moves one file at a time to its semantic destination."""

    def __init__(
        self,
        rules: DestinationRuleTable,
        resolver: SubfolderResolver,
        mover: Optional[ConflictSafeMover] = None,
        preprocessors: Optional[PreprocessorChain] = None,
        classify: Callable[[Path], Category] = classifier.detect,
    ):
        """
        Initialize pipeline.

        Args:
            rules: Category → destination table (read-only)
            resolver: Semantic subfolder resolver
            mover: File mover
            preprocessors: Ordered preprocessing stages
            classify: Content classifier
        """
        self.rules = rules
        self.resolver = resolver
        self.mover = mover or ConflictSafeMover()
        self.preprocessors = preprocessors or PreprocessorChain()
        self.classify = classify

    def _skip(self, path: Path, reason: str, category: Optional[Category] = None) -> OrganizeResult:
        return OrganizeResult(source=path, status=OrganizeStatus.SKIPPED, category=category, reason=reason)

    def handle(self, file_path: Path) -> OrganizeResult:
        """
        Organize a single file.

        Args:
            file_path: Candidate file from the watcher

        Returns:
            Outcome of the run

        Raises:
            AutoFileError: preprocessing, embedding or move failures
        """
        file_path = Path(file_path)

        if not file_path.exists():
            logger.warning(f"File no longer exists, skipping: {file_path}")
            return self._skip(file_path, "missing")

        if not file_path.is_file() or file_path.is_symlink():
            logger.warning(f"Path is not a regular file, skipping: {file_path}")
            return self._skip(file_path, "not a regular file")

        logger.info(f"Processing file: {file_path}")

        processed_path = self.preprocessors.process(file_path)

        category = self.classify(processed_path)
        logger.info(f"Detected category: {category.value}")

        if category is Category.UNKNOWN:
            logger.warning(f"Unknown file type, skipping: {processed_path}")
            return self._skip(processed_path, "unknown file type", category)

        try:
            top_level_destination = self.rules.require_destination(category)
        except RuleMissingError as e:
            logger.warning(f"{e}, skipping {processed_path}")
            return self._skip(processed_path, "no rule", category)

        final_destination = self.resolver.resolve_for(processed_path, top_level_destination)
        logger.info(f"Destination: {top_level_destination} -> {final_destination}")

        new_path = self.mover.move(processed_path, final_destination)
        logger.success(f"Successfully organized file to: {new_path}")

        return OrganizeResult(
            source=file_path,
            status=OrganizeStatus.MOVED,
            category=category,
            destination=new_path,
        )

    def process(self, file_path: Path) -> Optional[OrganizeResult]:
        """
        Organize a file, logging instead of raising on failure.

        Returns:
            Outcome, or None if the file failed
        """
        try:
            return self.handle(file_path)
        except AutoFileError as e:
            logger.error(f"Error organizing file {file_path}: {type(e).__name__}: {e}")
        except Exception as e:
            logger.exception(f"Unexpected error organizing file {file_path}: {e}")
        return None
