"""
Tests for the embed-text command line front end.
"""

import logging

import numpy as np
import pytest
import requests
import embed_cli
import model_store
import reference_embedder
from errors import DownloadError
from model_catalog import MODEL_OPTIONS

class StubEmbedder:
    def __init__(self) -> None:
        self.vectors = {
            "a cat": np.array([1.0, 0.0, 0.0, 0.0, 0.0, 0.0]),
            "a kitten": np.array([0.9, 0.1, 0.0, 0.0, 0.0, 0.0]),
            "taxes": np.array([0.0, 0.0, 1.0, 0.0, 0.0, 0.0]),
        }

    def embed(self, text: str) -> np.ndarray:
        return self.vectors[text]

    def embed_batch(self, texts: list[str]) -> np.ndarray:
        return np.vstack([self.embed(text) for text in texts])

@pytest.fixture
def stub_loader(monkeypatch):
    loaded = []

    def load(option, store):
        loaded.append((option, store.cache_dir))
        return StubEmbedder()

    monkeypatch.setattr(embed_cli, "load_text_embedder", load)
    return loaded

def test_list_models(capsys) -> None:
    assert embed_cli.main(["--list-models"]) == 0
    out = capsys.readouterr().out
    assert out.count("\n") == len(MODEL_OPTIONS)
    assert "Optimized Level 1" in out
    assert "[~470MB]" in out

def test_text_is_required() -> None:
    with pytest.raises(SystemExit) as excinfo:
        embed_cli.main([])
    assert excinfo.value.code == 2

def test_embed_and_compare(capsys, tmp_path, stub_loader) -> None:
    code = embed_cli.main([
        "a cat", "--model", "1", "--cache-dir", str(tmp_path),
        "--compare", "taxes", "--compare", "a kitten",
    ])
    assert code == 0
    assert stub_loader == [(MODEL_OPTIONS[1], str(tmp_path))]

    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == f"Model: {MODEL_OPTIONS[1].label}"
    assert lines[1] == "Dimensions: 6"
    assert lines[2] == "Preview: [1.0000, 0.0000, 0.0000, 0.0000, 0.0000, ...]"
    assert lines[3].endswith("(very high) - a kitten")
    assert lines[4] == "0.0000 (low) - taxes"

def test_coarse_bands(capsys, stub_loader) -> None:
    assert embed_cli.main(["a cat", "--compare", "taxes", "--coarse"]) == 0
    assert capsys.readouterr().out.splitlines()[-1] == "0.0000 (not similar) - taxes"

def test_errors_exit_non_zero(monkeypatch) -> None:
    def failing(option, store):
        raise DownloadError("https://huggingface.co/x", 500)

    monkeypatch.setattr(embed_cli, "load_text_embedder", failing)
    assert embed_cli.main(["a cat"]) == 1

def test_unknown_model_exits_non_zero(stub_loader) -> None:
    assert embed_cli.main(["a cat", "--model", "42"]) == 1
    assert stub_loader == []

def test_large_uncached_model_warns(caplog, tmp_path, stub_loader) -> None:
    with caplog.at_level(logging.WARNING, logger="embed_cli"):
        assert embed_cli.main(["a cat", "--model", "2", "--cache-dir", str(tmp_path)]) == 0
    assert any("470MB" in record.getMessage() for record in caplog.records)

def test_small_model_does_not_warn(caplog, tmp_path, stub_loader) -> None:
    with caplog.at_level(logging.WARNING, logger="embed_cli"):
        assert embed_cli.main(["a cat", "--model", "1", "--cache-dir", str(tmp_path)]) == 0
    assert not [record for record in caplog.records if record.levelno >= logging.WARNING]

def test_connection_failure_exits_non_zero(tmp_path, monkeypatch) -> None:
    def get(url, stream=False, timeout=None):
        raise requests.ConnectionError("network down")

    monkeypatch.setattr(model_store.requests, "get", get)
    assert embed_cli.main(["a cat", "--cache-dir", str(tmp_path)]) == 1

class FakeSentenceTransformer:
    def __init__(self, model_name: str, cache_folder: str = None) -> None:
        pass

    def get_sentence_embedding_dimension(self) -> int:
        return 6

    def encode(self, sentences, convert_to_numpy: bool = True, output_value: str = "sentence_embedding"):
        if output_value == "token_embeddings":
            return [np.array([[0.0, 0.0, 1.0, 0.0, 0.0, 0.0], [1.0, 0.0, 0.0, 0.0, 0.0, 0.0]])]
        return np.array([1.0, 0.0, 0.0, 0.0, 0.0, 0.0])

def test_reference_comparison(capsys, tmp_path, stub_loader, monkeypatch) -> None:
    monkeypatch.setattr(reference_embedder, "SentenceTransformer", FakeSentenceTransformer)
    assert embed_cli.main(["a cat", "--reference", "--cache-dir", str(tmp_path)]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert lines[-2].startswith("1.0000 (very high) - reference ")
    assert lines[-1].startswith("0.0000 (low) - reference ")
    assert lines[-1].endswith("[CLS]")
