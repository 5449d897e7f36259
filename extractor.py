"""
Module for turning raw inference outputs into a single embedding vector.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from errors import MissingOutputError, UnsupportedOutputShapeError

logger = logging.getLogger(__name__)

# Output names tried in order before falling back to the first output.
OUTPUT_PRIORITY: tuple[str, ...] = (
    "embeddings",
    "output",
    "last_hidden_state",
    "pooler_output",
    "sentence_embedding",
)


@dataclass(frozen=True)
class RawModelOutput:
    """A flat output buffer and its dimensions, e.g. [1, hidden] or [1, seq, hidden]."""
    data: Optional[Sequence[float]]
    shape: tuple[int, ...]

    @classmethod
    def from_tensor(cls, tensor: Any) -> Optional["RawModelOutput"]:
        """
        Wraps a tensor-like value: a numpy array, a mapping with data/dims
        keys, or an object with data/dims attributes. Returns None otherwise.
        """
        if tensor is None:
            return None
        if isinstance(tensor, np.ndarray):
            return cls(tensor.reshape(-1), tuple(tensor.shape))
        if isinstance(tensor, Mapping):
            data, dims = tensor.get("data"), tensor.get("dims")
        else:
            data, dims = getattr(tensor, "data", None), getattr(tensor, "dims", None)
        if data is None:
            return None
        if dims is None:
            dims = (1, len(data))
        return cls(data, tuple(int(d) for d in dims))


def select_output(results: Mapping[str, Any]) -> RawModelOutput:
    """
    Picks the embedding tensor out of a named inference result.

    Tries each name in OUTPUT_PRIORITY, then the first output of the mapping.

    Raises:
        MissingOutputError: If no candidate holds tensor data.
    """
    candidates = [results.get(name) for name in OUTPUT_PRIORITY]
    candidates.append(next(iter(results.values()), None))
    for candidate in candidates:
        output = RawModelOutput.from_tensor(candidate)
        if output is not None:
            return output
    raise MissingOutputError(f"No output data found in model results (outputs: {list(results)})")


def extract(output: RawModelOutput) -> np.ndarray:
    """
    Reduces a model output to one embedding vector.

    A [1, hidden] output is returned as-is. For [1, seq, hidden] only the
    hidden state at position 0 (the [CLS] token) is returned; positions are
    not pooled.
    """
    if output is None or output.data is None:
        raise MissingOutputError("Model output carries no data")

    data = np.asarray(output.data).reshape(-1)
    rank = len(output.shape)
    if rank == 2:
        return data
    if rank == 3:
        hidden = output.shape[2]
        return data[:hidden]
    raise UnsupportedOutputShapeError(output.shape)
