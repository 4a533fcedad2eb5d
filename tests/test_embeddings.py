import numpy as np
import pytest

from docqa.config import Settings, reset_settings_cache
from docqa.embeddings import (
    HashingEmbeddingModel,
    create_embedding_model,
    get_embedding_model,
    reset_embedding_model_cache,
)


def test_hashing_embeddings_are_deterministic():
    model = HashingEmbeddingModel(dimension=64)

    first = model.embed_texts(["Contract termination clause", "Payment schedule"])
    second = model.embed_texts(["Contract termination clause", "Payment schedule"])

    assert first == second
    assert len(first) == 2
    assert all(len(vector) == 64 for vector in first)


def test_hashing_embeddings_reflect_shared_tokens():
    model = HashingEmbeddingModel(dimension=256)
    query, related, unrelated = (
        np.asarray(vector)
        for vector in model.embed_texts(["payment schedule", "the payment schedule is monthly", "zebra"])
    )

    def cosine(a, b):
        return float(a @ b / (np.linalg.norm(a) * np.linalg.norm(b)))

    assert cosine(query, related) > cosine(query, unrelated)


def test_hashing_is_case_insensitive():
    model = HashingEmbeddingModel(dimension=32)

    upper, lower = model.embed_texts(["HELLO World", "hello world"])

    assert upper == lower


def test_empty_batch_is_not_embedded():
    assert HashingEmbeddingModel().embed_texts([]) == []


def test_non_positive_dimension_is_rejected():
    with pytest.raises(ValueError):
        HashingEmbeddingModel(dimension=0)


def test_factory_selects_backend():
    model = create_embedding_model(Settings(embedding_backend="hashing", embedding_dimension=48))

    assert isinstance(model, HashingEmbeddingModel)
    assert model.dimension == 48


def test_factory_rejects_unknown_backend():
    with pytest.raises(ValueError, match="Unknown embedding backend"):
        create_embedding_model(Settings(embedding_backend="word2vec"))


def test_cached_model_is_reused(monkeypatch):
    monkeypatch.delenv("EMBEDDING_BACKEND", raising=False)
    reset_settings_cache()
    reset_embedding_model_cache()
    try:
        assert get_embedding_model() is get_embedding_model()
    finally:
        reset_embedding_model_cache()
        reset_settings_cache()
