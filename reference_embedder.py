"""
Module for producing reference embeddings with sentence-transformers.
These run the same model family off-device, so on-device vectors can be
checked against them with cosine similarity.
"""

import os
import numpy as np
import torch
from sentence_transformers import SentenceTransformer

import settings
from extractor import RawModelOutput

class ReferenceEmbedder:
    """
    A wrapper around SentenceTransformer that produces reference vectors.
    """

    def __init__(self, model_name: str = None, cache_folder: str = None) -> None:
        """
        Initializes the embedder with a specific pre-trained model and local cache.

        Args:
            model_name: The HuggingFace model ID to use for embedding.
            cache_folder: Local directory to store the downloaded model.
        """
        model_name = model_name or settings.REFERENCE_MODEL
        cache_folder = cache_folder or settings.CACHE_DIR
        if not os.path.exists(cache_folder):
            os.makedirs(cache_folder)

        self.model_name: str = model_name
        self.model: SentenceTransformer = SentenceTransformer(model_name, cache_folder=cache_folder)
        self.embedding_dim: int = self.model.get_sentence_embedding_dimension()

    def embed(self, text: str) -> np.ndarray:
        """
        Encodes a single text into a pooled dense vector.
        """
        embedding: np.ndarray = self.model.encode(text, convert_to_numpy=True)
        return embedding

    def embed_batch(self, texts: list[str]) -> np.ndarray:
        embeddings: np.ndarray = self.model.encode(texts, convert_to_numpy=True)
        return embeddings

    def embed_tokens(self, text: str) -> RawModelOutput:
        """
        Encodes a text and returns its per-token hidden states as a
        [1, seq, hidden] output, the same layout an ONNX export produces.
        """
        embeddings = self.model.encode([text], output_value='token_embeddings')[0]

        if isinstance(embeddings, torch.Tensor):
            embeddings = embeddings.detach().cpu().numpy()
        hidden_states = np.asarray(embeddings)[None, ...]
        return RawModelOutput(hidden_states.reshape(-1), tuple(hidden_states.shape))

    def get_dimension(self) -> int:
        """
        Returns the size of the embedding vector produced by the model.
        """
        return self.embedding_dim
