"""Maps a detected emotion and theme onto visual style directives."""

import logging
from typing import Optional

from daylens.lexicon import Lexicon, get_default_lexicon
from daylens.models import EmotionLabel, FeedbackOverride, StyleModifiers, ThemeLabel

logger = logging.getLogger(__name__)

QUALITY_TAGS = (
    "highly detailed",
    "professional quality",
    "cinematic composition",
    "8k resolution",
    "masterpiece",
)

NEGATIVE_PROMPT_TERMS = (
    "blurry",
    "low quality",
    "distorted",
    "ugly",
    "deformed",
    "watermark",
    "text",
    "signature",
    "duplicate",
    "cropped",
)

NEGATIVE_PROMPT = ", ".join(NEGATIVE_PROMPT_TERMS)


class StyleModifierBuilder:
    """Builds prompt directives from the emotion palette and theme scene tables."""

    def __init__(self, lexicon: Optional[Lexicon] = None):
        self.lexicon = lexicon or get_default_lexicon()

    def build_style(
        self,
        emotion: EmotionLabel,
        theme: ThemeLabel,
        requested_visual_theme: str = "",
        feedback_override: Optional[FeedbackOverride] = None,
    ) -> StyleModifiers:
        """Return the style modifiers for one generation request.

        ``requested_visual_theme`` is the renderer style the user picked
        (anime, realistic, ...). It does not change the content guidance
        produced here; prompt construction uses it to pick the renderer.
        """
        palette = self.lexicon.palette_for(emotion)
        scene = self.lexicon.scene_for(theme)

        color_palette = palette.colors
        mood = palette.mood
        if feedback_override is not None:
            # The learned style is the mood descriptor the user rated well.
            if feedback_override.preferred_palette:
                color_palette = feedback_override.preferred_palette
            if feedback_override.preferred_style:
                mood = feedback_override.preferred_style
            logger.debug(
                "Applying learned preferences for %s: palette=%r style=%r",
                emotion.value,
                feedback_override.preferred_palette,
                feedback_override.preferred_style,
            )

        prompt_prefix = (
            f"[Emotion: {emotion.value}, Theme: {theme.value}] "
            f"A scene that feels {mood}, featuring {scene}, "
            f"rendered with {color_palette},"
        )
        prompt_suffix = ", ".join([palette.lighting, palette.atmosphere, *QUALITY_TAGS])

        return StyleModifiers(
            color_palette=color_palette,
            mood_descriptor=mood,
            lighting_style=palette.lighting,
            atmosphere_note=palette.atmosphere,
            prompt_prefix=prompt_prefix,
            prompt_suffix=prompt_suffix,
            negative_prompt=NEGATIVE_PROMPT,
        )


def build_style(
    emotion: EmotionLabel,
    theme: ThemeLabel,
    requested_visual_theme: str = "",
    feedback_override: Optional[FeedbackOverride] = None,
    lexicon: Optional[Lexicon] = None,
) -> StyleModifiers:
    return StyleModifierBuilder(lexicon).build_style(
        emotion, theme, requested_visual_theme, feedback_override
    )
