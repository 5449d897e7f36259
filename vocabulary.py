"""
Module for managing a tokenizer's vocabulary.
Provides an immutable mapping between token strings and integer ids together
with the special tokens and case-folding flag read from the tokenizer config.
"""

import json
import logging
from collections.abc import Mapping
from types import MappingProxyType

from errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_UNK_TOKEN = "[UNK]"
DEFAULT_PAD_TOKEN = "[PAD]"
DEFAULT_CLS_TOKEN = "[CLS]"
DEFAULT_SEP_TOKEN = "[SEP]"


def _special_token(config: Mapping, key: str, default: str) -> str:
    value = config.get(key)
    # Hugging Face configs may store added tokens as {"content": "<s>", ...}
    if isinstance(value, Mapping):
        value = value.get("content")
    if not value:
        return default
    if not isinstance(value, str):
        raise ConfigurationError(f"{key} must be a string, got {type(value).__name__}")
    return value


def _parse_flag(config: Mapping, key: str) -> bool:
    value = config.get(key)
    if value is None or isinstance(value, bool):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ConfigurationError(f"{key} must be a boolean, got {value!r}")


def _parse_vocab(raw) -> dict[str, int]:
    try:
        if isinstance(raw, Mapping):
            vocab = {str(token): int(idx) for token, idx in raw.items()}
        elif isinstance(raw, list):
            # Unigram models list [token, score] pairs; the id is the position.
            vocab = {str(entry[0] if isinstance(entry, (list, tuple)) else entry): i for i, entry in enumerate(raw)}
        else:
            raise ConfigurationError(f"Vocabulary must be a mapping or a list, got {type(raw).__name__}")
    except (TypeError, ValueError, IndexError) as e:
        raise ConfigurationError(f"Malformed vocabulary entry: {e}") from e
    if any(idx < 0 for idx in vocab.values()):
        raise ConfigurationError("Vocabulary ids must be non-negative")
    return vocab


class VocabularyStore:
    """
    A read-only token vocabulary for a single model/tokenizer pair.

    Instances are never mutated after construction, so one store can be shared
    by any number of concurrent tokenize calls.
    """

    def __init__(
        self,
        token_to_id: Mapping[str, int],
        unk_token: str = DEFAULT_UNK_TOKEN,
        pad_token: str = DEFAULT_PAD_TOKEN,
        cls_token: str = DEFAULT_CLS_TOKEN,
        sep_token: str = DEFAULT_SEP_TOKEN,
        lowercase: bool = False,
    ) -> None:
        if not token_to_id:
            raise ConfigurationError("Vocabulary is missing or empty")

        self._token_to_id: Mapping[str, int] = MappingProxyType(dict(token_to_id))
        self._id_to_token: dict[int, str] = {idx: token for token, idx in self._token_to_id.items()}
        self._max_token_length: int = max(len(token) for token in self._token_to_id)
        self._unk_token = unk_token
        self._pad_token = pad_token
        self._cls_token = cls_token
        self._sep_token = sep_token
        self._lowercase = bool(lowercase)

    @classmethod
    def load(cls, config: Mapping, data: Mapping) -> "VocabularyStore":
        """
        Builds a store from parsed tokenizer documents.

        Args:
            config: The tokenizer behaviour config (tokenizer_config.json).
            data: The tokenizer model data (tokenizer.json), read from model.vocab.
        """
        config = config or {}
        data = data or {}
        if not isinstance(config, Mapping):
            raise ConfigurationError(f"Tokenizer config must be an object, got {type(config).__name__}")
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Tokenizer data must be an object, got {type(data).__name__}")
        model = data.get("model") or {}
        if not isinstance(model, Mapping):
            raise ConfigurationError(f"Tokenizer data field 'model' must be an object, got {type(model).__name__}")
        raw_vocab = model.get("vocab")
        if not raw_vocab:
            raise ConfigurationError("Tokenizer data has no model.vocab entries")

        store = cls(
            _parse_vocab(raw_vocab),
            unk_token=_special_token(config, "unk_token", DEFAULT_UNK_TOKEN),
            pad_token=_special_token(config, "pad_token", DEFAULT_PAD_TOKEN),
            cls_token=_special_token(config, "cls_token", DEFAULT_CLS_TOKEN),
            sep_token=_special_token(config, "sep_token", DEFAULT_SEP_TOKEN),
            lowercase=_parse_flag(config, "do_lower_case"),
        )
        logger.info(f"Loaded vocabulary with {len(store)} tokens (lowercase={store.lowercase})")
        return store

    @classmethod
    def from_files(cls, config_path: str, data_path: str) -> "VocabularyStore":
        """Parses tokenizer_config.json and tokenizer.json from disk and loads them."""
        documents = []
        for path in (config_path, data_path):
            try:
                with open(path, encoding="utf-8") as f:
                    documents.append(json.load(f))
            except (OSError, json.JSONDecodeError) as e:
                raise ConfigurationError(f"Cannot read tokenizer file {path}: {e}") from e
        return cls.load(documents[0], documents[1])

    @property
    def token_to_id(self) -> Mapping[str, int]:
        return self._token_to_id

    @property
    def unk_token(self) -> str:
        return self._unk_token

    @property
    def pad_token(self) -> str:
        return self._pad_token

    @property
    def cls_token(self) -> str:
        return self._cls_token

    @property
    def sep_token(self) -> str:
        return self._sep_token

    @property
    def lowercase(self) -> bool:
        return self._lowercase

    @property
    def max_token_length(self) -> int:
        """Length in characters of the longest token in the vocabulary."""
        return self._max_token_length

    def __len__(self) -> int:
        return len(self._token_to_id)

    def __contains__(self, token: object) -> bool:
        return token in self._token_to_id

    def token_id(self, token: str) -> int:
        """Returns the id of a token, falling back to the unknown token's id, then 0."""
        idx = self._token_to_id.get(token)
        if idx is not None:
            return idx
        return self._token_to_id.get(self._unk_token, 0)

    def get_token(self, idx: int) -> str:
        return self._id_to_token.get(idx, self._unk_token)
