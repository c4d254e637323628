"""Keyword lexicon, emotion palettes and theme scenes.

The lexicon is plain configuration: a JSON document mapping every emotion and
theme label to its trigger phrases, every emotion to a palette and every theme
to a scene description. It is loaded and validated once, then shared
read-only by the detector, the style builder and the explanation synthesizer.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type

from daylens.error_handling import LexiconConfigurationError
from daylens.models import EmotionLabel, EmotionPalette, ThemeLabel

logger = logging.getLogger(__name__)

DEFAULT_LEXICON_PATH = Path(__file__).parent / "data" / "lexicon.json"

_PALETTE_FIELDS = ("colors", "mood", "lighting", "atmosphere")


def compile_phrase(phrase: str) -> re.Pattern[str]:
    """Case-insensitive whole-word (or whole-phrase) matcher for ``phrase``."""
    return re.compile(rf"\b{re.escape(phrase)}\b", re.IGNORECASE)


@dataclass(frozen=True)
class PhraseMatcher:
    """Precompiled matchers for the trigger phrases of one label."""
    phrases: Tuple[str, ...]
    patterns: Tuple[re.Pattern[str], ...] = field(repr=False, compare=False)

    @classmethod
    def from_phrases(cls, phrases: Tuple[str, ...]) -> "PhraseMatcher":
        return cls(phrases=phrases, patterns=tuple(compile_phrase(p) for p in phrases))

    def scan(self, text: str) -> Tuple[int, List[str]]:
        """Return the total match count and the distinct phrases that matched.

        Each phrase is counted independently, so overlapping phrases such as
        "health" and "mental health" both contribute.
        """
        score = 0
        matched: List[str] = []
        for phrase, pattern in zip(self.phrases, self.patterns):
            hits = len(pattern.findall(text))
            if hits:
                score += hits
                matched.append(phrase)
        return score, matched


@dataclass(frozen=True, eq=False)
class Lexicon:
    """Read-only keyword, palette and scene tables."""
    emotion_keywords: Mapping[EmotionLabel, Tuple[str, ...]]
    theme_keywords: Mapping[ThemeLabel, Tuple[str, ...]]
    palettes: Mapping[EmotionLabel, EmotionPalette]
    scenes: Mapping[ThemeLabel, str]
    source: Optional[str] = None
    emotion_matchers: Mapping[EmotionLabel, PhraseMatcher] = field(init=False, repr=False, compare=False)
    theme_matchers: Mapping[ThemeLabel, PhraseMatcher] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        # Validation happens before any matcher is compiled.
        problems = _completeness_problems(
            self.emotion_keywords, self.theme_keywords, self.palettes, self.scenes
        )
        if problems:
            raise LexiconConfigurationError(problems, source=self.source)

        object.__setattr__(self, "emotion_keywords", MappingProxyType(dict(self.emotion_keywords)))
        object.__setattr__(self, "theme_keywords", MappingProxyType(dict(self.theme_keywords)))
        object.__setattr__(self, "palettes", MappingProxyType(dict(self.palettes)))
        object.__setattr__(self, "scenes", MappingProxyType(dict(self.scenes)))
        object.__setattr__(
            self,
            "emotion_matchers",
            MappingProxyType({
                label: PhraseMatcher.from_phrases(self.emotion_keywords[label]) for label in EmotionLabel
            }),
        )
        object.__setattr__(
            self,
            "theme_matchers",
            MappingProxyType({
                label: PhraseMatcher.from_phrases(self.theme_keywords[label]) for label in ThemeLabel
            }),
        )

    def palette_for(self, emotion: EmotionLabel) -> EmotionPalette:
        return self.palettes[emotion]

    def scene_for(self, theme: ThemeLabel) -> str:
        return self.scenes[theme]

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[str] = None) -> "Lexicon":
        """Build a lexicon from the JSON document layout.

        Every problem found in the document is collected before raising, so
        a single run reports the whole list.
        """
        problems: List[str] = []

        for table in ("emotions", "themes", "palettes", "scenes"):
            if not isinstance(data.get(table), dict):
                problems.append(f"missing table '{table}'")
        if problems:
            raise LexiconConfigurationError(problems, source=source)

        emotion_keywords = _parse_keyword_table(data["emotions"], EmotionLabel, "emotions", problems)
        theme_keywords = _parse_keyword_table(data["themes"], ThemeLabel, "themes", problems)

        palettes: Dict[EmotionLabel, EmotionPalette] = {}
        for raw_label, entry in data["palettes"].items():
            label = _coerce_label(raw_label, EmotionLabel, "palettes", problems)
            if label is None:
                continue
            if not isinstance(entry, dict):
                problems.append(f"palette for '{raw_label}' must be an object")
                continue
            missing = [name for name in _PALETTE_FIELDS if not str(entry.get(name) or "").strip()]
            if missing:
                problems.append(f"palette for '{raw_label}' is missing {', '.join(missing)}")
                continue
            palettes[label] = EmotionPalette(**{name: str(entry[name]) for name in _PALETTE_FIELDS})

        scenes: Dict[ThemeLabel, str] = {}
        for raw_label, description in data["scenes"].items():
            label = _coerce_label(raw_label, ThemeLabel, "scenes", problems)
            if label is None:
                continue
            if not isinstance(description, str) or not description.strip():
                problems.append(f"scene for '{raw_label}' is empty")
                continue
            scenes[label] = description

        problems.extend(_completeness_problems(emotion_keywords, theme_keywords, palettes, scenes))
        if problems:
            raise LexiconConfigurationError(_dedupe(problems), source=source)

        return cls(
            emotion_keywords=emotion_keywords,
            theme_keywords=theme_keywords,
            palettes=palettes,
            scenes=scenes,
            source=source,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to the JSON document layout."""
        return {
            "emotions": {label.value: list(words) for label, words in self.emotion_keywords.items()},
            "themes": {label.value: list(words) for label, words in self.theme_keywords.items()},
            "palettes": {label.value: palette.model_dump() for label, palette in self.palettes.items()},
            "scenes": {label.value: scene for label, scene in self.scenes.items()},
        }


def _coerce_label(raw: str, enum_type: Type[Enum], table: str, problems: List[str]):
    try:
        return enum_type(str(raw).strip().lower())
    except ValueError:
        problems.append(f"unknown label '{raw}' in '{table}'")
        return None


def _parse_keyword_table(table: Dict[str, Any], enum_type: Type[Enum], name: str, problems: List[str]) -> Dict:
    parsed = {}
    for raw_label, words in table.items():
        label = _coerce_label(raw_label, enum_type, name, problems)
        if label is None:
            continue
        if not isinstance(words, list):
            problems.append(f"keywords for '{raw_label}' in '{name}' must be a list")
            continue
        cleaned = tuple(dict.fromkeys(str(w).strip().lower() for w in words if str(w).strip()))
        parsed[label] = cleaned
    return parsed


def _completeness_problems(
    emotion_keywords: Mapping[EmotionLabel, Tuple[str, ...]],
    theme_keywords: Mapping[ThemeLabel, Tuple[str, ...]],
    palettes: Mapping[EmotionLabel, EmotionPalette],
    scenes: Mapping[ThemeLabel, str],
) -> List[str]:
    problems = []
    for emotion in EmotionLabel:
        if not emotion_keywords.get(emotion):
            problems.append(f"emotion '{emotion.value}' has no keywords")
        if emotion not in palettes:
            problems.append(f"emotion '{emotion.value}' has no palette")
    for theme in ThemeLabel:
        if not theme_keywords.get(theme):
            problems.append(f"theme '{theme.value}' has no keywords")
        if not scenes.get(theme):
            problems.append(f"theme '{theme.value}' has no scene")
    return problems


def _dedupe(items: List[str]) -> List[str]:
    return list(dict.fromkeys(items))


def load_lexicon(path: str | Path | None = None) -> Lexicon:
    """Load and validate a lexicon document.

    Raises:
        LexiconConfigurationError: if the file is unreadable, is not valid
            JSON, or leaves any label without keywords, palette or scene.
    """
    lexicon_path = Path(path) if path else DEFAULT_LEXICON_PATH
    try:
        with open(lexicon_path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise LexiconConfigurationError([f"file not found: {e.filename}"], source=str(lexicon_path)) from e
    except json.JSONDecodeError as e:
        raise LexiconConfigurationError([f"invalid JSON: {e}"], source=str(lexicon_path)) from e

    if not isinstance(data, dict):
        raise LexiconConfigurationError(["top-level value must be an object"], source=str(lexicon_path))

    lexicon = Lexicon.from_dict(data, source=str(lexicon_path))
    logger.info(
        "Loaded lexicon from %s (%d emotions, %d themes)",
        lexicon_path,
        len(lexicon.emotion_keywords),
        len(lexicon.theme_keywords),
    )
    return lexicon


@lru_cache(maxsize=1)
def get_default_lexicon() -> Lexicon:
    """Return the packaged lexicon, loading it on first use."""
    return load_lexicon(DEFAULT_LEXICON_PATH)
