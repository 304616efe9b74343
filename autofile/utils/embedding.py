"""
Embedding generation using Ollama.

Provides:
- Text embeddings via Ollama (local)
- A persistent HTTP client created once and reused
- A bounded least-recently-used cache
"""

import hashlib
from collections import OrderedDict
from typing import List, Optional

import httpx
from loguru import logger

from autofile.models.exceptions import EmbeddingError
from autofile.utils.config import Settings, get_settings
from autofile.utils.helpers import is_embeddable_name


class EmbeddingClient:
    """Client for generating text embeddings.

    Not safe for concurrent use; callers serialize access through
    ``SimilarityEngine``.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize embedding client."""
        self.settings = settings or get_settings()
        self.ollama_url = self.settings.ollama_url.rstrip("/")
        self.ollama_model = self.settings.ollama_embedding_model
        self.cache_size = self.settings.embedding_cache_size
        self.cache: "OrderedDict[str, List[float]]" = OrderedDict()
        self.dimension: Optional[int] = None
        self._client = httpx.Client(
            base_url=self.ollama_url,
            timeout=self.settings.ollama_timeout,
            transport=transport,
        )

    def _get_cache_key(self, text: str) -> str:
        """Generate cache key for text."""
        return hashlib.sha256(text.encode()).hexdigest()

    def warm_up(self) -> int:
        """
        Load the model on the Ollama side and record the vector length.

        Called once at startup; a failure here is fatal for the process.

        Returns:
            Embedding dimension
        """
        logger.info(f"Loading embedding model '{self.ollama_model}' from {self.ollama_url}")
        vector = self.embed("warm up", use_cache=False)
        self.dimension = len(vector)
        logger.success(f"Embedding model ready ({self.dimension} dimensions)")
        return self.dimension

    def generate_embedding_ollama(self, text: str) -> List[float]:
        """Generate embedding using Ollama."""
        try:
            response = self._client.post(
                "/api/embeddings",
                json={
                    "model": self.ollama_model,
                    "prompt": text
                }
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise EmbeddingError(f"Ollama embedding failed for '{text}': {e}") from e

        embedding = data.get("embedding")
        if not embedding:
            raise EmbeddingError(f"Ollama returned no embedding for '{text}'")
        return [float(value) for value in embedding]

    def embed(self, text: str, use_cache: bool = True) -> List[float]:
        """
        Generate embedding for text.

        Args:
            text: Text to embed
            use_cache: Whether to use cache

        Returns:
            Embedding vector

        Raises:
            EmbeddingError: if text is empty or the model call fails
        """
        if not is_embeddable_name(text):
            raise EmbeddingError(f"Text cannot be embedded: {text!r}")

        cache_key = self._get_cache_key(text)
        if use_cache and cache_key in self.cache:
            logger.debug(f"Cache hit for text: {text[:50]}")
            self.cache.move_to_end(cache_key)
            return self.cache[cache_key]

        embedding = self.generate_embedding_ollama(text)

        if self.dimension is not None and len(embedding) != self.dimension:
            raise EmbeddingError(
                f"Embedding length {len(embedding)} differs from model dimension {self.dimension}"
            )

        if use_cache and self.cache_size > 0:
            self.cache[cache_key] = embedding
            if len(self.cache) > self.cache_size:
                self.cache.popitem(last=False)

        return embedding

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        self._client.close()

