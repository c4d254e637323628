"""Template-based explanations of how a reflection shaped its image."""

import logging
from typing import List, Optional, Sequence

from daylens.lexicon import Lexicon, get_default_lexicon
from daylens.models import (
    DetectionInput,
    DetectionResult,
    EmotionLabel,
    ExplanationResult,
    StyleUsage,
    ThemeLabel,
)

logger = logging.getLogger(__name__)

MAX_KEYWORDS_SHOWN = 5

ACTIVITIES_LIMIT = 120
MOOD_LIMIT = 60
CHALLENGES_LIMIT = 100
ACHIEVEMENTS_LIMIT = 100


def truncate_text(text: str, max_length: int) -> str:
    """Cut ``text`` at ``max_length`` characters and mark the cut with an ellipsis."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def _quoted_keywords(keywords: Sequence[str]) -> str:
    return '"' + '", "'.join(keywords[:MAX_KEYWORDS_SHOWN]) + '"'


class ExplanationSynthesizer:
    """Fills fixed sentence templates with detection and style data."""

    def __init__(self, lexicon: Optional[Lexicon] = None):
        self.lexicon = lexicon or get_default_lexicon()

    def explain(
        self,
        user_input: DetectionInput,
        emotion: EmotionLabel,
        confidence: float,
        secondary_emotion: Optional[EmotionLabel],
        theme: ThemeLabel,
        emotion_keywords: Sequence[str],
        theme_keywords: Sequence[str],
        final_prompt: str,
        visual_style: str,
        style_usage: Optional[StyleUsage] = None,
    ) -> ExplanationResult:
        """Fill the explanation templates.

        ``style_usage`` is the style the image was actually rendered with;
        without it the default palette for ``emotion`` is described.
        """
        if style_usage is None:
            palette = self.lexicon.palette_for(emotion)
            style_usage = StyleUsage(
                palette=palette.colors,
                mood=palette.mood,
                lighting=palette.lighting,
                atmosphere=palette.atmosphere,
            )
        confidence_pct = round(confidence * 100)

        if secondary_emotion is not None:
            emotion_text = (
                f"**{emotion.value}** ({confidence_pct}% confidence) "
                f"with undertones of **{secondary_emotion.value}**"
            )
        else:
            emotion_text = f"**{emotion.value}** ({confidence_pct}% confidence)"

        detected_emotion = " ".join([
            "Your reflection was analyzed for emotional tone.",
            f"Primary detected emotion: {emotion_text}.",
            f"Key signals: {_quoted_keywords(emotion_keywords)}."
            if emotion_keywords
            else "No strong keyword signals, so the emotion was defaulted from the overall tone.",
        ])

        detected_theme = " ".join([
            f"The main theme of your day was identified as **{theme.value}**.",
            f"This was inferred from mentions of: {_quoted_keywords(theme_keywords)}."
            if theme_keywords
            else "This was the most likely theme based on overall context.",
        ])

        prompt_reasoning = " ".join([
            f"The image prompt was crafted to visually represent your {theme.value}-focused day",
            f"with a {emotion.value} emotional undertone.",
            "The scene was designed to capture the essence of your activities",
            "while highlighting your achievements."
            if user_input.achievements.strip()
            else "while acknowledging your challenges.",
            f'Visual style "{visual_style}" was selected to match your chosen theme preference.',
        ])

        style_parts = [
            f"The **{visual_style}** visual style was applied because:",
            "1) You selected it as your preferred theme,",
            f'2) It complements the "{emotion.value}" emotional tone,',
            f'3) It creates the strongest visual impact for "{theme.value}" content.',
        ]
        if secondary_emotion is not None:
            style_parts.append(
                f'The secondary emotion "{secondary_emotion.value}" added subtle depth to the composition.'
            )
        style_reasoning = " ".join(style_parts)

        color_mood_reasoning = " ".join([
            f"Color palette: {style_usage.palette}.",
            f'This palette was chosen because "{emotion.value}" emotions are best expressed '
            f"through {style_usage.mood} tones.",
            f"Lighting: {style_usage.lighting}, creating an atmosphere that feels {style_usage.atmosphere}.",
            f'The overall mood targets a "{style_usage.mood}" feeling to mirror your emotional state.',
        ])

        composition_notes = " ".join([
            "The image was composed for vertical (9:16) wallpaper format.",
            "Subject placement follows the rule of thirds with atmospheric depth.",
            f'The scene includes environmental elements related to "{theme.value}"',
            f"wrapped in {style_usage.atmosphere} atmosphere.",
            "Quality enhancers: cinematic composition, 8K resolution, professional lighting.",
        ])

        logger.debug("Built explanation for %s/%s (prompt length %d)", emotion.value, theme.value, len(final_prompt))

        return ExplanationResult(
            input_summary=build_input_summary(user_input),
            detected_emotion=detected_emotion,
            detected_theme=detected_theme,
            prompt_reasoning=prompt_reasoning,
            style_reasoning=style_reasoning,
            color_mood_reasoning=color_mood_reasoning,
            composition_notes=composition_notes,
        )

    def explain_detection(
        self,
        user_input: DetectionInput,
        detection: DetectionResult,
        final_prompt: str,
        visual_style: str,
        style_usage: Optional[StyleUsage] = None,
    ) -> ExplanationResult:
        """Shortcut taking a whole :class:`DetectionResult`."""
        return self.explain(
            user_input=user_input,
            emotion=detection.emotion,
            confidence=detection.confidence,
            secondary_emotion=detection.secondary_emotion,
            theme=detection.theme,
            emotion_keywords=detection.emotion_keywords,
            theme_keywords=detection.theme_keywords,
            final_prompt=final_prompt,
            visual_style=visual_style,
            style_usage=style_usage,
        )


def build_input_summary(user_input: DetectionInput) -> str:
    """Concise, quoted summary of the non-empty reflection fields."""
    parts: List[str] = []
    if user_input.activities.strip():
        parts.append(f'You shared that your day involved: "{truncate_text(user_input.activities, ACTIVITIES_LIMIT)}".')
    if user_input.mood.strip():
        parts.append(f'You described your mood as: "{truncate_text(user_input.mood, MOOD_LIMIT)}".')
    if user_input.challenges.strip():
        parts.append(f'Challenges faced: "{truncate_text(user_input.challenges, CHALLENGES_LIMIT)}".')
    if user_input.achievements.strip():
        parts.append(f'Key achievements: "{truncate_text(user_input.achievements, ACHIEVEMENTS_LIMIT)}".')
    return " ".join(parts)
