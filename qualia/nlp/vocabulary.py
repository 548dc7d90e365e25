"""Newline-delimited WordPiece vocabulary loading."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator, Mapping

logger = logging.getLogger("qualia.vocabulary")

PAD_TOKEN = "[PAD]"
UNK_TOKEN = "[UNK]"
CLS_TOKEN = "[CLS]"
SEP_TOKEN = "[SEP]"

DEFAULT_PAD_ID = 0
DEFAULT_UNK_ID = 100


class VocabularyError(ValueError):
    """Raised when a vocabulary source cannot be parsed."""


class Vocabulary(Mapping[str, int]):
    """Immutable token -> id mapping with resolved special-token ids.

    Ids follow the order of non-blank lines. When ``[UNK]`` or ``[PAD]`` are
    absent the fixed defaults (100 and 0) are used so partial vocab files
    stay usable.
    """

    def __init__(self, tokens: Iterable[str]) -> None:
        table: dict[str, int] = {}
        index = 0
        for token in tokens:
            if not token.strip():
                continue
            table[token] = index
            index += 1
        self._table = table
        self.unk_id = table.get(UNK_TOKEN, DEFAULT_UNK_ID)
        self.pad_id = table.get(PAD_TOKEN, DEFAULT_PAD_ID)

    @classmethod
    def from_text(cls, content: str) -> "Vocabulary":
        return cls(content.splitlines())

    def __getitem__(self, token: str) -> int:
        return self._table[token]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, token: object) -> bool:
        return token in self._table

    def id_for(self, token: str) -> int:
        """Return the id for ``token`` or the unknown-token id."""
        return self._table.get(token, self.unk_id)

    @property
    def cls_id(self) -> int:
        return self.id_for(CLS_TOKEN)

    @property
    def sep_id(self) -> int:
        return self.id_for(SEP_TOKEN)


def load_vocabulary(source: str | Path) -> Vocabulary:
    """Load a vocabulary file; unreadable or undecodable sources are fatal."""
    path = Path(source)
    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise VocabularyError(f"Vocabulary file {path} is not valid UTF-8: {exc}") from exc
    vocab = Vocabulary.from_text(content)
    if not len(vocab):
        raise VocabularyError(f"Vocabulary file {path} contains no tokens.")
    logger.info("Vocabulary loaded from %s with %s tokens.", path, len(vocab))
    return vocab


__all__ = [
    "CLS_TOKEN",
    "PAD_TOKEN",
    "SEP_TOKEN",
    "UNK_TOKEN",
    "Vocabulary",
    "VocabularyError",
    "load_vocabulary",
]
