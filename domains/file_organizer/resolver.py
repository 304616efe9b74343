"""
Semantic subfolder resolver for the File Organizer domain.

Starting from a category's top-level destination, descends greedily into
the existing subfolder whose name is most similar to the file name, as long
as the similarity clears a threshold. Never backtracks and never creates
directories, so the cost is one embedding per folder on the chosen path
plus one per sibling inspected along the way.
"""

from pathlib import Path
from typing import Iterable, Optional

from loguru import logger

from autofile.models.schemas import CandidateFolder
from autofile.utils.helpers import is_embeddable_name, is_hidden, normalise_path
from domains.file_organizer.similarity import SimilarityEngine, Vector

SIMILARITY_THRESHOLD = 0.7


class SubfolderResolver:
    """Greedy best-first descent over the live destination tree."""

    def __init__(
        self,
        engine: SimilarityEngine,
        excluded_folders: Optional[Iterable[str]] = None,
        threshold: float = SIMILARITY_THRESHOLD,
        reserved_dirs: Optional[Iterable[Path]] = None,
    ):
        """
        Initialize resolver.

        Args:
            engine: Similarity engine
            excluded_folders: Folder names never considered or entered
            threshold: Minimum similarity required to descend
            reserved_dirs: Directories owned by a category rule; never
                entered while resolving another category
        """
        self.engine = engine
        self.excluded_folders = frozenset(excluded_folders or ())
        self.threshold = threshold
        self.reserved_dirs = frozenset(normalise_path(Path(p)) for p in (reserved_dirs or ()))

        if self.excluded_folders:
            logger.info(f"Excluded folders: {sorted(self.excluded_folders)}")

    def list_candidates(self, directory: Path) -> list[Path]:
        """
        List eligible subdirectories of ``directory`` in lexicographic order.

        Hidden, excluded, symlinked and reserved directories are skipped, as
        are names the embedding model cannot take. An unreadable directory has
        no candidates.
        """
        try:
            entries = list(directory.iterdir())
        except OSError as e:
            logger.warning(f"Cannot list {directory}: {e}")
            return []

        candidates = []
        for entry in entries:
            if is_hidden(entry) or entry.name in self.excluded_folders:
                continue
            if entry.is_symlink() or not entry.is_dir():
                continue
            if not is_embeddable_name(entry.name):
                logger.debug(f"Skipping folder with unusable name: {entry.name!r}")
                continue
            if normalise_path(entry) in self.reserved_dirs:
                continue
            candidates.append(entry)

        return sorted(candidates, key=lambda p: p.name)

    def score_candidates(self, stem_embedding: Vector, folders: list[Path]) -> list[CandidateFolder]:
        """Embed each folder name and score it against the stem."""
        scored = []
        for folder in folders:
            folder_embedding = self.engine.embed(folder.name)
            similarity = self.engine.similarity(stem_embedding, folder_embedding)
            scored.append(CandidateFolder(path=folder, name=folder.name, similarity=similarity))
        return scored

    def best_candidate(self, scored: list[CandidateFolder]) -> Optional[CandidateFolder]:
        """Strictly highest similarity; ties keep the first (lexicographic) one."""
        best: Optional[CandidateFolder] = None
        for candidate in scored:
            if best is None or candidate.similarity > best.similarity:
                best = candidate
        return best

    def resolve(self, file_stem: str, start_dir: Path) -> Path:
        """
        Find the deepest fitting existing subfolder for ``file_stem``.

        Args:
            file_stem: File name without extension
            start_dir: Top-level destination directory

        Returns:
            Chosen directory (``start_dir`` itself when nothing fits)

        Raises:
            EmbeddingError: if the embedding model fails
        """
        start_dir = Path(start_dir)
        if not start_dir.is_dir():
            return start_dir
        if not is_embeddable_name(file_stem):
            if file_stem:
                logger.warning(f"File name {file_stem!r} cannot be embedded, using top-level destination")
            return start_dir

        stem_embedding: Optional[Vector] = None
        current = start_dir
        depth = 0

        while True:
            folders = self.list_candidates(current)
            if not folders:
                break

            if stem_embedding is None:
                # Stems rarely repeat, so they stay out of the cache
                stem_embedding = self.engine.embed(file_stem, use_cache=False)

            scored = self.score_candidates(stem_embedding, folders)
            for candidate in scored:
                logger.debug(f"  '{file_stem}' <-> '{candidate.name}': similarity = {candidate.similarity:.3f}")

            best = self.best_candidate(scored)
            if best is None or best.similarity < self.threshold:
                break

            logger.info(f"Matched '{file_stem}' to folder '{best.name}' (similarity: {best.similarity:.3f}, depth {depth + 1})")
            current = best.path
            depth += 1

        if current == start_dir:
            logger.info(f"No semantic match found for '{file_stem}', using top-level destination")
        return current

    def resolve_for(self, path: Path, start_dir: Path) -> Path:
        """Resolve using the stem of ``path``."""
        return self.resolve(Path(path).stem, start_dir)
