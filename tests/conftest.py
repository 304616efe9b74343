"""Shared fixtures: a deterministic stand-in for the embedding model."""

import threading
from pathlib import Path

import pytest

from autofile.models.exceptions import EmbeddingError
from autofile.utils.helpers import is_embeddable_name
from domains.file_organizer.similarity import SimilarityEngine

# Orthogonal to every vector below unless stated otherwise
DEFAULT_VECTOR = [0.0, 0.0, 0.0, 1.0]


class FakeEmbedder:
    """Returns fixed vectors per text and records every call."""

    def __init__(self, vectors=None, default=None):
        self.vectors = dict(vectors or {})
        self.default = list(default or DEFAULT_VECTOR)
        self.calls: list[str] = []
        self.uncached: list[str] = []
        self.threads: set[str] = set()
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def embed(self, text: str, use_cache: bool = True) -> list[float]:
        if not is_embeddable_name(text):
            raise EmbeddingError(f"Text cannot be embedded: {text!r}")
        with self._lock:
            if not use_cache:
                self.uncached.append(text)
            self.active += 1
            self.max_active = max(self.max_active, self.active)
            self.calls.append(text)
            self.threads.add(threading.current_thread().name)
        try:
            return list(self.vectors.get(text, self.default))
        finally:
            with self._lock:
                self.active -= 1


@pytest.fixture
def make_engine():
    """Factory for SimilarityEngine instances backed by FakeEmbedder."""
    engines = []

    def _make(vectors=None, default=None):
        embedder = FakeEmbedder(vectors, default)
        engine = SimilarityEngine(embedder)
        engines.append(engine)
        return engine, embedder

    yield _make

    for engine in engines:
        engine.close()


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """A throwaway home directory."""
    path = tmp_path / "home"
    path.mkdir()
    return path
