"""Client configuration, presets, and settings/keyword loading."""

from __future__ import annotations

import json
import logging
import math
import os
from dataclasses import dataclass, field, replace
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, NamedTuple

logger = logging.getLogger("qualia.settings")

CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"
DEFAULT_SETTINGS_FILE = "qualia.json"

FALLBACK_INTENSE_KEYWORDS: tuple[str, ...] = (
    "кровь",
    "уби",
    "смерт",
    "атак",
    "выстрел",
    "беги",
    "rage",
    "blood",
    "kill",
    "death",
    "run",
    "shoot",
    "attack",
)
FALLBACK_MYSTERIOUS_KEYWORDS: tuple[str, ...] = (
    "тайна",
    "шепот",
    "лес",
    "внезапно",
    "темнота",
    "mystery",
    "shadow",
    "secret",
)


class KeywordSet(NamedTuple):
    intense: tuple[str, ...]
    mysterious: tuple[str, ...]


# Environment variables consulted when the "haptics" settings section omits a key.
HAPTIC_ENV_VARS: Mapping[str, str] = {
    "auto_play": "QUALIA_AUTO_PLAY_HAPTICS",
    "heartbeat": "QUALIA_ENABLE_HEARTBEAT",
    "intensity": "QUALIA_HAPTIC_INTENSITY",
    "delay_seconds": "QUALIA_HAPTIC_DELAY",
}
SWITCH_ON = frozenset({"1", "true", "yes", "on"})
SWITCH_OFF = frozenset({"0", "false", "no", "off"})


def settings_path() -> Path:
    """``$QUALIA_SETTINGS_PATH``, else ``config/$QUALIA_SETTINGS_FILE`` beside the package."""
    override = os.getenv("QUALIA_SETTINGS_PATH")
    if override:
        return Path(override)
    return CONFIG_DIR / (os.getenv("QUALIA_SETTINGS_FILE") or DEFAULT_SETTINGS_FILE)


@lru_cache(maxsize=1)
def load_settings() -> Dict[str, Any]:
    """Parsed settings object; empty when the file is absent or unusable."""
    path = settings_path()
    if not path.is_file():
        return {}
    try:
        with path.open(encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring settings file %s: top level is %s, not an object.", path, type(data).__name__)
        return {}
    return data


def normalize_keywords(keywords: Iterable[str]) -> tuple[str, ...]:
    """Lowercase, strip, drop empties and duplicates (order kept)."""
    seen: dict[str, None] = {}
    for keyword in keywords:
        cleaned = str(keyword).strip().lower()
        if cleaned:
            seen.setdefault(cleaned, None)
    return tuple(seen)


def load_keywords(settings: Mapping[str, Any] | None = None) -> KeywordSet:
    """Read keyword lists from settings, falling back per list to the built-ins."""
    section = (settings or {}).get("keywords")
    if not isinstance(section, Mapping):
        section = {}

    def pick(key: str, fallback: tuple[str, ...]) -> tuple[str, ...]:
        values = section.get(key)
        if isinstance(values, list):
            cleaned = normalize_keywords(values)
            if cleaned:
                return cleaned
        return fallback

    return KeywordSet(
        intense=pick("intense", FALLBACK_INTENSE_KEYWORDS),
        mysterious=pick("mysterious", FALLBACK_MYSTERIOUS_KEYWORDS),
    )


def _haptic_option(section: Mapping[str, Any], key: str) -> Any:
    """Value from the settings section, else from its environment variable, else None."""
    value = section.get(key)
    if value is None or value == "":
        value = os.getenv(HAPTIC_ENV_VARS[key])
    return None if value == "" else value


def _switch(value: Any, default: bool) -> bool:
    if isinstance(value, (bool, int, float)):
        return bool(value)
    word = str(value).strip().lower() if value is not None else ""
    if word in SWITCH_ON:
        return True
    if word in SWITCH_OFF:
        return False
    return default


def _bounded(value: Any, default: float, low: float, high: float = math.inf) -> float:
    """Clamp a numeric option into [low, high]; unparseable or non-finite input gives the default."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return min(high, max(low, number))


@dataclass(frozen=True)
class QualiaConfiguration:
    """Immutable haptic behaviour settings owned by a client."""

    auto_play_haptics: bool = True
    enable_heartbeat: bool = True
    intensity: float = 1.0
    delay_seconds: float = 0.0
    intense_keywords: tuple[str, ...] = field(default=FALLBACK_INTENSE_KEYWORDS)
    mysterious_keywords: tuple[str, ...] = field(default=FALLBACK_MYSTERIOUS_KEYWORDS)

    def __post_init__(self) -> None:
        if not 0.0 <= float(self.intensity) <= 1.0:
            raise ValueError(f"intensity must be within [0, 1], got {self.intensity}")
        if float(self.delay_seconds) < 0.0:
            raise ValueError(f"delay_seconds must be >= 0, got {self.delay_seconds}")
        object.__setattr__(self, "intensity", float(self.intensity))
        object.__setattr__(self, "delay_seconds", float(self.delay_seconds))
        object.__setattr__(self, "intense_keywords", normalize_keywords(self.intense_keywords))
        object.__setattr__(self, "mysterious_keywords", normalize_keywords(self.mysterious_keywords))

    @classmethod
    def standard(cls) -> "QualiaConfiguration":
        return cls()

    @classmethod
    def silent(cls) -> "QualiaConfiguration":
        return cls(auto_play_haptics=False, enable_heartbeat=False)

    @classmethod
    def testing(cls) -> "QualiaConfiguration":
        return cls(auto_play_haptics=False, enable_heartbeat=False)

    @classmethod
    def accessibility(cls) -> "QualiaConfiguration":
        return cls(intensity=0.5)

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any] | None = None) -> "QualiaConfiguration":
        """Resolve each haptic option from settings, then environment, then defaults."""
        settings = settings if settings is not None else load_settings()
        haptics = settings.get("haptics")
        section: Mapping[str, Any] = haptics if isinstance(haptics, Mapping) else {}
        keywords = load_keywords(settings)
        return cls(
            auto_play_haptics=_switch(_haptic_option(section, "auto_play"), True),
            enable_heartbeat=_switch(_haptic_option(section, "heartbeat"), True),
            intensity=_bounded(_haptic_option(section, "intensity"), 1.0, 0.0, 1.0),
            delay_seconds=_bounded(_haptic_option(section, "delay_seconds"), 0.0, 0.0),
            intense_keywords=keywords.intense,
            mysterious_keywords=keywords.mysterious,
        )

    def with_changes(self, **changes: Any) -> "QualiaConfiguration":
        return replace(self, **changes)


__all__ = [
    "FALLBACK_INTENSE_KEYWORDS",
    "FALLBACK_MYSTERIOUS_KEYWORDS",
    "KeywordSet",
    "QualiaConfiguration",
    "load_keywords",
    "load_settings",
    "normalize_keywords",
    "settings_path",
]
