"""Keyword-based emotion and theme detection for daily reflections."""

import logging
from dataclasses import dataclass
from typing import Dict, Generic, List, Mapping, Optional, Tuple, TypeVar

from daylens.lexicon import Lexicon, PhraseMatcher, get_default_lexicon
from daylens.models import (
    DEFAULT_EMOTION,
    DEFAULT_THEME,
    DetectionInput,
    DetectionResult,
    EmotionLabel,
    ThemeLabel,
)

logger = logging.getLogger(__name__)

L = TypeVar("L", EmotionLabel, ThemeLabel)

MOOD_WEIGHT = 3
NO_SIGNAL_CONFIDENCE = 0.3


@dataclass
class LabelScore(Generic[L]):
    """Score accumulated by one label during a scan."""
    label: L
    score: int
    keywords: List[str]


def build_emotion_text(detection_input: DetectionInput) -> str:
    """Combined lowercase text for emotion scoring, mood weighted three times."""
    parts = [detection_input.mood] * MOOD_WEIGHT + [
        detection_input.activities,
        detection_input.challenges,
        detection_input.achievements,
    ]
    return " ".join(parts).lower()


def build_theme_text(detection_input: DetectionInput) -> str:
    """Combined lowercase text for theme scoring; mood is not a theme signal."""
    return " ".join([
        detection_input.activities,
        detection_input.challenges,
        detection_input.achievements,
    ]).lower()


def score_labels(text: str, matchers: Mapping[L, PhraseMatcher]) -> List[LabelScore[L]]:
    """Score every label and return them ranked by score, highest first.

    The sort is stable, so labels with equal scores keep the lexicon's
    declaration order.
    """
    scores = []
    for label, matcher in matchers.items():
        score, keywords = matcher.scan(text)
        scores.append(LabelScore(label=label, score=score, keywords=keywords))
    scores.sort(key=lambda s: s.score, reverse=True)
    return scores


class EmotionDetector:
    """Scores reflection text against a lexicon to pick an emotion and a theme."""

    def __init__(self, lexicon: Optional[Lexicon] = None):
        self.lexicon = lexicon or get_default_lexicon()

    def detect(self, detection_input: DetectionInput) -> DetectionResult:
        """Detect the primary emotion, secondary emotion and theme.

        Blank input degrades to the neutral emotion with the fixed
        no-signal confidence and the personal theme.
        """
        emotion_scores = score_labels(build_emotion_text(detection_input), self.lexicon.emotion_matchers)
        emotion, confidence, secondary, emotion_keywords = self._pick_emotion(emotion_scores)

        theme_scores = score_labels(build_theme_text(detection_input), self.lexicon.theme_matchers)
        theme, theme_keywords = self._pick_theme(theme_scores)

        logger.debug(
            "Detected emotion=%s (%.2f) secondary=%s theme=%s",
            emotion.value,
            confidence,
            secondary.value if secondary else None,
            theme.value,
        )

        return DetectionResult(
            emotion=emotion,
            confidence=confidence,
            secondary_emotion=secondary,
            theme=theme,
            emotion_keywords=emotion_keywords,
            theme_keywords=theme_keywords,
        )

    def emotion_scores(self, detection_input: DetectionInput) -> Dict[EmotionLabel, int]:
        """Raw per-emotion scores, mainly useful for inspection and tests."""
        ranked = score_labels(build_emotion_text(detection_input), self.lexicon.emotion_matchers)
        return {entry.label: entry.score for entry in ranked}

    @staticmethod
    def _pick_emotion(
        ranked: List[LabelScore[EmotionLabel]],
    ) -> Tuple[EmotionLabel, float, Optional[EmotionLabel], List[str]]:
        top = ranked[0]
        total = sum(entry.score for entry in ranked)

        if top.score == 0:
            return DEFAULT_EMOTION, NO_SIGNAL_CONFIDENCE, None, []

        confidence = round(min(max(top.score / total, 0.0), 1.0), 2)

        secondary = None
        if len(ranked) > 1 and ranked[1].score > 0:
            secondary = ranked[1].label

        return top.label, confidence, secondary, list(top.keywords)

    @staticmethod
    def _pick_theme(ranked: List[LabelScore[ThemeLabel]]) -> Tuple[ThemeLabel, List[str]]:
        top = ranked[0]
        if top.score == 0:
            return DEFAULT_THEME, []

        # A shared lead is not a signal for either theme.
        if len(ranked) > 1 and ranked[1].score == top.score:
            fallback = next(entry for entry in ranked if entry.label == DEFAULT_THEME)
            return DEFAULT_THEME, list(fallback.keywords)

        return top.label, list(top.keywords)


def detect_emotion(detection_input: DetectionInput, lexicon: Optional[Lexicon] = None) -> DetectionResult:
    """Convenience wrapper around :class:`EmotionDetector`."""
    return EmotionDetector(lexicon).detect(detection_input)
