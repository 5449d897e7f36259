"""
Unit tests for the ReferenceEmbedder module.
SentenceTransformer is replaced with a small deterministic fake so the
tests run without downloading a model.
"""

import logging

import numpy as np
import pytest
import torch
import reference_embedder
from extractor import extract
from reference_embedder import ReferenceEmbedder
from similarity import cosine_similarity

# Configure logger for test output
logger = logging.getLogger(__name__)

DIM = 8

class FakeSentenceTransformer:
    """Hashes characters into a fixed-size vector; token embeddings are one row per word."""

    def __init__(self, model_name: str, cache_folder: str = None) -> None:
        self.model_name = model_name
        self.cache_folder = cache_folder

    def get_sentence_embedding_dimension(self) -> int:
        return DIM

    def _vector(self, text: str) -> np.ndarray:
        vec = np.zeros(DIM, dtype=np.float32)
        for i, ch in enumerate(text):
            vec[(ord(ch) + i) % DIM] += 1.0
        return vec

    def encode(self, sentences, convert_to_numpy: bool = True, output_value: str = "sentence_embedding"):
        if output_value == "token_embeddings":
            return [torch.tensor(np.stack([self._vector(w) for w in ["[CLS]"] + s.split()])) for s in sentences]
        if isinstance(sentences, str):
            return self._vector(sentences)
        return np.stack([self._vector(s) for s in sentences])

@pytest.fixture
def embedder(tmp_path, monkeypatch) -> ReferenceEmbedder:
    monkeypatch.setattr(reference_embedder, "SentenceTransformer", FakeSentenceTransformer)
    return ReferenceEmbedder("fake/model", cache_folder=str(tmp_path / "cache"))

def test_cache_folder_is_created(tmp_path, embedder: ReferenceEmbedder) -> None:
    assert (tmp_path / "cache").is_dir()
    assert embedder.model_name == "fake/model"

def test_embedding_dimension(embedder: ReferenceEmbedder) -> None:
    assert embedder.get_dimension() == DIM
    emb: np.ndarray = embedder.embed("test")
    assert emb.shape == (DIM,)

def test_identical_texts(embedder: ReferenceEmbedder) -> None:
    sim: float = cosine_similarity(embedder.embed("apple pie"), embedder.embed("apple pie"))
    logger.info(f"Identical texts: similarity={sim:.4f}")
    assert sim == 1.0

def test_batch_embedding(embedder: ReferenceEmbedder) -> None:
    """
    Verifies that batch embedding produces the same results as individual embedding.
    """
    texts: list[str] = ["apple", "banana", "cherry"]
    embs: np.ndarray = embedder.embed_batch(texts)
    assert embs.shape == (len(texts), DIM)
    for i, text in enumerate(texts):
        assert np.allclose(embs[i], embedder.embed(text), atol=1e-5)

def test_token_embeddings_layout(embedder: ReferenceEmbedder) -> None:
    """
    Token embeddings come back as a [1, seq, hidden] output whose first
    position is the [CLS] row.
    """
    output = embedder.embed_tokens("hello big world")
    assert output.shape == (1, 4, DIM)
    assert len(output.data) == 4 * DIM

    cls_vector = extract(output)
    assert np.array_equal(cls_vector, embedder.model._vector("[CLS]"))
