"""Script-based language identification."""

from __future__ import annotations

import unicodedata
from collections import Counter
from typing import Mapping, Protocol, runtime_checkable

SCRIPT_LANGUAGES: Mapping[str, str] = {
    "CYRILLIC": "ru",
    "LATIN": "en",
}


@runtime_checkable
class LanguageDetector(Protocol):
    def detect(self, text: str) -> str | None:
        """Return a language code, or ``None`` when undecidable."""
        raise NotImplementedError


class ScriptLanguageDetector:
    """Picks the language of the dominant letter script in the text.

    Ties go to whichever script appears first in ``scripts``.
    """

    def __init__(self, scripts: Mapping[str, str] | None = None) -> None:
        self._scripts = dict(scripts or SCRIPT_LANGUAGES)

    def detect(self, text: str) -> str | None:
        counts: Counter[str] = Counter()
        for char in text:
            if not char.isalpha():
                continue
            name = unicodedata.name(char, "")
            script = name.split(" ", 1)[0]
            if script in self._scripts:
                counts[script] += 1
        if not counts:
            return None
        best = max(self._scripts, key=lambda script: counts.get(script, 0))
        return self._scripts[best]


__all__ = ["LanguageDetector", "ScriptLanguageDetector", "SCRIPT_LANGUAGES"]
