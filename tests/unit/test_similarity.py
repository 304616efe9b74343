import threading

import pytest

from autofile.models.exceptions import EmbeddingError
from domains.file_organizer.similarity import SimilarityEngine, cosine_similarity


@pytest.mark.parametrize("vector", [[1.0, 2.0, 3.0], [0.2, -0.7], [5.0]])
def test_self_similarity_is_one(vector):
    assert cosine_similarity(vector, vector) == pytest.approx(1.0)


def test_zero_vector_similarity_is_zero():
    assert cosine_similarity([1.0, 2.0], [0.0, 0.0]) == 0.0
    assert cosine_similarity([0.0, 0.0], [0.0, 0.0]) == 0.0


def test_orthogonal_and_opposite_vectors():
    assert cosine_similarity([1.0, 0.0], [0.0, 3.0]) == pytest.approx(0.0)
    assert cosine_similarity([1.0, 1.0], [-1.0, -1.0]) == pytest.approx(-1.0)


def test_length_mismatch_raises():
    with pytest.raises(EmbeddingError):
        cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])


def test_embed_runs_on_single_owner_thread(make_engine):
    engine, embedder = make_engine({"alpha": [1.0, 0.0]})
    results = []

    def worker():
        for _ in range(20):
            results.append(engine.embed("alpha"))

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 80
    assert all(result == [1.0, 0.0] for result in results)
    assert embedder.max_active == 1
    assert len(embedder.threads) == 1
    assert next(iter(embedder.threads)).startswith("embedding")


def test_model_failure_becomes_embedding_error():
    class Broken:
        def embed(self, text, use_cache=True):
            raise RuntimeError("model crashed")

    engine = SimilarityEngine(Broken())
    try:
        with pytest.raises(EmbeddingError, match="model crashed"):
            engine.embed("anything")
    finally:
        engine.close()
