"""
Similarity engine for the File Organizer domain.

Wraps the embedding capability. The model is not assumed thread-safe, so
every request is served by a single owner thread; callers only see
``embed`` and never a lock.
"""

import math
from concurrent.futures import ThreadPoolExecutor
from typing import List, Protocol, Sequence

from loguru import logger

from autofile.models.exceptions import EmbeddingError

Vector = List[float]


class Embedder(Protocol):
    """Anything that turns text into a fixed-length vector."""

    def embed(self, text: str, use_cache: bool = True) -> Vector:
        ...


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity between two vectors.

    Returns 0.0 when either vector has zero magnitude.

    Raises:
        EmbeddingError: if the vectors differ in length
    """
    if len(a) != len(b):
        raise EmbeddingError(f"Vector length mismatch: {len(a)} != {len(b)}")

    dot_product = math.fsum(x * y for x, y in zip(a, b))
    magnitude_a = math.sqrt(math.fsum(x * x for x in a))
    magnitude_b = math.sqrt(math.fsum(y * y for y in b))

    if magnitude_a == 0.0 or magnitude_b == 0.0:
        return 0.0
    # Clamp rounding noise so identical vectors score exactly 1.0
    return max(-1.0, min(1.0, dot_product / (magnitude_a * magnitude_b)))


class SimilarityEngine:
    """Serialized access to one shared embedding model."""

    def __init__(self, embedder: Embedder):
        """
        Initialize similarity engine.

        Args:
            embedder: Embedding capability, created once by the caller
        """
        self.embedder = embedder
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="embedding")

    def embed(self, text: str, use_cache: bool = True) -> Vector:
        """
        Embed ``text`` on the owner thread and wait for the result.

        ``use_cache=False`` is for one-off texts such as file stems.

        Raises:
            EmbeddingError: if the model call fails
        """
        future = self._executor.submit(self.embedder.embed, text, use_cache)
        try:
            return future.result()
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError(f"Embedding failed for '{text}': {e}") from e

    def similarity(self, a: Sequence[float], b: Sequence[float]) -> float:
        """Cosine similarity between two embeddings."""
        return cosine_similarity(a, b)

    def close(self) -> None:
        """Stop the owner thread after pending requests finish."""
        logger.debug("Shutting down embedding thread")
        self._executor.shutdown(wait=True)
