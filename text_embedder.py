"""
Module for generating sentence embeddings with an ONNX inference session.
Ties the tokenizer, the session and the embedding extractor together.
"""

import logging
import os
import time

import numpy as np
import onnxruntime as ort

from extractor import extract, select_output
from model_catalog import ModelOption, format_file_size
from model_store import ModelStore
from wordpiece import Tokenizer

logger = logging.getLogger(__name__)


class TextEmbedder:
    """
    Runs text through a tokenizer and an inference session to produce one
    embedding vector per input.

    The session only needs the onnxruntime.InferenceSession surface used here:
    get_outputs() and run(None, feeds).
    """

    def __init__(self, session, tokenizer: Tokenizer, max_length: int, needs_token_type_ids: bool = False) -> None:
        self.session = session
        self.tokenizer: Tokenizer = tokenizer
        self.max_length: int = max_length
        self.needs_token_type_ids: bool = needs_token_type_ids
        self.output_names: list[str] = [out.name for out in session.get_outputs()]
        self.last_inference_ms: float = None

    def embed(self, text: str) -> np.ndarray:
        """
        Encodes text into a dense vector.

        Raises:
            MissingOutputError: If the session returns no usable tensor.
            UnsupportedOutputShapeError: If the selected tensor has rank other than 2 or 3.
        """
        tokenized = self.tokenizer.tokenize(text, self.max_length, self.needs_token_type_ids)

        start = time.perf_counter()
        outputs = self.session.run(None, tokenized.to_feeds())
        self.last_inference_ms = (time.perf_counter() - start) * 1000
        logger.info(f"Inference completed in {self.last_inference_ms:.1f}ms")

        results = dict(zip(self.output_names, outputs))
        return extract(select_output(results))

    def embed_batch(self, texts: list[str]) -> np.ndarray:
        """Encodes each text on its own and stacks the vectors."""
        return np.vstack([self.embed(text) for text in texts])


def load_text_embedder(option: ModelOption, store: ModelStore = None) -> TextEmbedder:
    """
    Downloads (or reuses) the tokenizer and model files for a catalog entry
    and opens an inference session on the model.
    """
    store = store or ModelStore()
    logger.info(f"Loading model: {option.label}")

    vocabulary = store.fetch_tokenizer()
    model_path = store.fetch_model(option)

    start = time.perf_counter()
    session = ort.InferenceSession(model_path, providers=["CPUExecutionProvider"])
    load_ms = (time.perf_counter() - start) * 1000
    logger.info(f"Model loaded in {load_ms:.0f}ms ({format_file_size(os.path.getsize(model_path))})")

    return TextEmbedder(session, Tokenizer(vocabulary), option.token_padding, option.needs_token_type_ids)
