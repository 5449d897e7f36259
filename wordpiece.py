"""
Module for WordPiece-style subword tokenization.
Splits text into vocabulary-known pieces by greedy longest-prefix matching and
lays them out as a fixed-length sequence ready for an inference session.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from vocabulary import VocabularyStore

logger = logging.getLogger(__name__)

SPECIAL_TOKEN_COUNT = 2  # [CLS] and [SEP]


@dataclass(frozen=True)
class TokenizedInput:
    """
    A fixed-length tokenized sequence.

    Every present sequence has exactly max_length entries, whatever the input.
    """
    tokens: list[str]
    input_ids: list[int]
    attention_mask: list[int]
    token_type_ids: Optional[list[int]] = None

    @property
    def max_length(self) -> int:
        return len(self.input_ids)

    def to_feeds(self) -> dict[str, np.ndarray]:
        """
        Converts the sequence into inference session inputs.

        Returns:
            A mapping of input name to an int64 array of shape (1, max_length).
        """
        feeds: dict[str, np.ndarray] = {
            "input_ids": np.array([self.input_ids], dtype=np.int64),
            "attention_mask": np.array([self.attention_mask], dtype=np.int64),
        }
        if self.token_type_ids is not None:
            feeds["token_type_ids"] = np.array([self.token_type_ids], dtype=np.int64)
        return feeds


class Tokenizer:
    """
    Greedy longest-prefix subword tokenizer over a VocabularyStore.

    Continuation pieces are looked up as-is, without a "##" marker. The
    tokenizer holds no state besides the read-only vocabulary.
    """

    def __init__(self, vocabulary: VocabularyStore) -> None:
        self.vocabulary: VocabularyStore = vocabulary

    def split_word(self, word: str) -> list[str]:
        """
        Splits a single whitespace-free word into vocabulary pieces.

        Characters that start no known piece become one unknown token each,
        so the whole word is always consumed.
        """
        vocab = self.vocabulary
        if word in vocab:
            return [word]

        pieces: list[str] = []
        start = 0
        while start < len(word):
            end = min(len(word), start + vocab.max_token_length)
            while end > start and word[start:end] not in vocab:
                end -= 1
            if end == start:
                pieces.append(vocab.unk_token)
                start += 1
            else:
                pieces.append(word[start:end])
                start = end
        return pieces

    def split_words(self, text: str) -> list[str]:
        """Case-folds (when configured) and splits text into subword tokens."""
        if self.vocabulary.lowercase:
            text = text.lower()
        tokens: list[str] = []
        for word in text.split():
            tokens.extend(self.split_word(word))
        return tokens

    def tokenize(self, text: str, max_length: int, include_token_type_ids: bool = False) -> TokenizedInput:
        """
        Encodes text into a [CLS] tokens [SEP] [PAD]... sequence.

        Args:
            text: Free text to encode.
            max_length: Exact length of every produced sequence.
            include_token_type_ids: Whether the target model needs token_type_ids.

        Returns:
            A TokenizedInput whose sequences all have length max_length.
        """
        if max_length < 0:
            raise ValueError(f"max_length must be non-negative, got {max_length}")

        vocab = self.vocabulary
        words = self.split_words(text)
        max_regular = max(max_length - SPECIAL_TOKEN_COUNT, 0)

        tokens = [vocab.cls_token, *words[:max_regular], vocab.sep_token][:max_length]
        tokens.extend([vocab.pad_token] * (max_length - len(tokens)))

        input_ids = [vocab.token_id(token) for token in tokens]
        attention_mask = [0 if token == vocab.pad_token else 1 for token in tokens]
        token_type_ids = [0] * max_length if include_token_type_ids else None

        logger.debug(f"Tokenized {len(words)} tokens into a sequence of {max_length}")
        return TokenizedInput(tokens, input_ids, attention_mask, token_type_ids)
