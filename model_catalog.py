"""
Catalog of the selectable ONNX sentence-embedding models and helpers for
locating their files.
"""

import os
import platform
from dataclasses import dataclass
from typing import Union

from errors import ConfigurationError

HF_BASE_URL = "https://huggingface.co"

TOKENIZER_REPO = "sentence-transformers/paraphrase-multilingual-MiniLM-L12-v2"
TOKENIZER_FILES: tuple[str, ...] = (
    "tokenizer_config.json",
    "tokenizer.json",
    "special_tokens_map.json",
)

# Optimized levels 1-3 are around 470MB each.
LARGE_MODEL_FILES: tuple[str, ...] = ("model_O1", "model_O2", "model_O3")


@dataclass(frozen=True)
class ModelOption:
    label: str
    repo: str
    file_name: str
    token_padding: int
    description: str
    needs_token_type_ids: bool


def _quantized_option(machine: str) -> ModelOption:
    if machine.lower() in ("arm64", "aarch64"):
        return ModelOption(
            "Quantized for ARM64",
            TOKENIZER_REPO,
            "onnx/model_qint8_arm64.onnx",
            12,
            "8-bit quantized for ARM64 processors",
            True,
        )
    return ModelOption(
        "Quantized (General)",
        TOKENIZER_REPO,
        "onnx/model_quint8_avx2.onnx",
        12,
        "8-bit quantized for general use",
        True,
    )


def build_model_options(machine: str = None) -> list[ModelOption]:
    """
    Lists the available models, ending with the quantized build that suits
    the given (or current) machine architecture.
    """
    options = [
        ModelOption(
            "Custom ONNX (eldoon101/idk-parahrase-miniLM-onnxver)",
            "eldoon101/idk-parahrase-miniLM-onnxver",
            "paraphrase_multilingual_miniLM_L12_v2.onnx",
            128,
            "Custom implementation",
            False,
        ),
        ModelOption("Official onnx/model.onnx", TOKENIZER_REPO, "onnx/model.onnx", 12, "Standard ONNX version", True),
    ]
    for level in range(1, 5):
        description = f"Optimization level {level}"
        if level == 4:
            description += " (half precision)"
        options.append(
            ModelOption(f"Optimized Level {level}", TOKENIZER_REPO, f"onnx/model_O{level}.onnx", 12, description, True)
        )
    options.append(_quantized_option(machine if machine is not None else platform.machine()))
    return options


MODEL_OPTIONS: list[ModelOption] = build_model_options()


def get_model_option(key: Union[int, str], options: list[ModelOption] = None) -> ModelOption:
    """Looks up a model by catalog index (int or digit string) or by label."""
    options = MODEL_OPTIONS if options is None else options
    if isinstance(key, str) and key.isdigit():
        key = int(key)
    if isinstance(key, int):
        if 0 <= key < len(options):
            return options[key]
        raise ConfigurationError(f"Model index {key} out of range (0-{len(options) - 1})")
    for option in options:
        if option.label == key:
            return option
    raise ConfigurationError(f"Unknown model: {key!r}")


def resolve_url(repo: str, file_name: str) -> str:
    return f"{HF_BASE_URL}/{repo}/resolve/main/{file_name}"


def cache_path(cache_dir: str, repo: str, file_name: str) -> str:
    """Returns the local file path for a repo file, flattening nested names."""
    return os.path.join(cache_dir, "models", repo.replace("/", "_"), file_name.replace("/", "_"))


def is_large_model(option: ModelOption) -> bool:
    return any(marker in option.file_name for marker in LARGE_MODEL_FILES)


def format_file_size(num_bytes: int) -> str:
    """Formats a byte count with 1024-based units, e.g. 1536 -> '1.5 KB'."""
    if num_bytes <= 0:
        return "0 Bytes"
    sizes = ["Bytes", "KB", "MB", "GB"]
    i = 0
    while i < len(sizes) - 1 and num_bytes >= 1024 ** (i + 1):
        i += 1
    value = f"{num_bytes / (1024 ** i):.2f}".rstrip("0").rstrip(".")
    return f"{value} {sizes[i]}"
