"""WordPiece tokenizer compatible with BERT-style vocab files."""

from __future__ import annotations

import unicodedata
from pathlib import Path
from typing import List, NamedTuple

from qualia.nlp.vocabulary import CLS_TOKEN, SEP_TOKEN, UNK_TOKEN, Vocabulary, load_vocabulary

WORDPIECE_PREFIX = "##"
DEFAULT_MAX_LENGTH = 128


class TokenSequence(NamedTuple):
    """Fixed-length model input: token ids plus the matching attention mask."""

    input_ids: List[int]
    attention_mask: List[int]

    @property
    def token_type_ids(self) -> List[int]:
        return [0] * len(self.input_ids)

    @property
    def real_length(self) -> int:
        return sum(self.attention_mask)


def _is_separator(char: str) -> bool:
    return char.isspace() or unicodedata.category(char).startswith("P")


def basic_tokenize(text: str) -> list[str]:
    """Lowercase and split on whitespace and Unicode punctuation."""
    words: list[str] = []
    current: list[str] = []
    for char in text.lower():
        if _is_separator(char):
            if current:
                words.append("".join(current))
                current = []
            continue
        current.append(char)
    if current:
        words.append("".join(current))
    return words


class BertTokenizer:
    """Greedy longest-match-first WordPiece tokenizer."""

    def __init__(self, vocab: Vocabulary, max_length: int = DEFAULT_MAX_LENGTH) -> None:
        if max_length < 2:
            raise ValueError("max_length must leave room for [CLS] and [SEP].")
        self.vocab = vocab
        self.max_length = int(max_length)

    @classmethod
    def from_file(cls, vocab_path: str | Path, max_length: int = DEFAULT_MAX_LENGTH) -> "BertTokenizer":
        return cls(load_vocabulary(vocab_path), max_length=max_length)

    def wordpiece(self, word: str) -> list[str]:
        """Split one word into subword pieces.

        If any remainder of the word has no matching prefix, the whole word
        becomes a single ``[UNK]``; pieces found before that point are dropped.
        """
        if word in self.vocab:
            return [word]
        pieces: list[str] = []
        remainder = word
        while remainder:
            match = None
            for end in range(len(remainder), 0, -1):
                candidate = remainder[:end]
                if pieces:
                    candidate = WORDPIECE_PREFIX + candidate
                if candidate in self.vocab:
                    match = candidate
                    remainder = remainder[end:]
                    break
            if match is None:
                return [UNK_TOKEN]
            pieces.append(match)
        return pieces

    def tokens(self, text: str) -> list[str]:
        """Return the token strings including [CLS]/[SEP], truncated but unpadded."""
        tokens = [CLS_TOKEN]
        for word in basic_tokenize(text):
            tokens.extend(self.wordpiece(word))
        tokens.append(SEP_TOKEN)
        if len(tokens) > self.max_length:
            tokens = tokens[: self.max_length - 1]
            tokens.append(SEP_TOKEN)
        return tokens

    def tokenize(self, text: str) -> TokenSequence:
        ids = [self.vocab.id_for(token) for token in self.tokens(text)]
        real = len(ids)
        padding = self.max_length - real
        ids.extend([self.vocab.pad_id] * padding)
        mask = [1] * real + [0] * padding
        return TokenSequence(ids, mask)


__all__ = ["BertTokenizer", "TokenSequence", "basic_tokenize", "DEFAULT_MAX_LENGTH"]
