"""Unit tests for the emotion and theme to style mapping."""

import pytest

from daylens.models import EmotionLabel, FeedbackOverride, ThemeLabel
from daylens.style import NEGATIVE_PROMPT, QUALITY_TAGS, StyleModifierBuilder, build_style


class TestStyleModifierBuilder:
    """Test StyleModifierBuilder class."""

    @pytest.fixture
    def builder(self, lexicon):
        return StyleModifierBuilder(lexicon)

    def test_defaults_come_from_palette_and_scene(self, builder):
        style = builder.build_style(EmotionLabel.HAPPY, ThemeLabel.LEARNING, "anime")

        assert style.color_palette == "warm golds, sunlit yellows, vibrant oranges"
        assert style.mood_descriptor == "bright and uplifting"
        assert style.lighting_style == "golden hour sunlight, warm radiance"
        assert style.atmosphere_note == "celebratory and lively"
        assert style.prompt_prefix == (
            "[Emotion: happy, Theme: learning] A scene that feels bright and uplifting, "
            "featuring study desk, open books, notebooks, warm desk lamp, knowledge atmosphere, "
            "rendered with warm golds, sunlit yellows, vibrant oranges,"
        )
        assert style.prompt_suffix.startswith(
            "golden hour sunlight, warm radiance, celebratory and lively, highly detailed"
        )
        for tag in QUALITY_TAGS:
            assert tag in style.prompt_suffix

    def test_negative_prompt_is_constant(self, builder):
        calm = builder.build_style(EmotionLabel.CALM, ThemeLabel.WORK)
        sad = builder.build_style(EmotionLabel.SAD, ThemeLabel.SOCIAL)

        assert calm.negative_prompt == sad.negative_prompt == NEGATIVE_PROMPT
        for term in ("blurry", "low quality", "watermark", "text", "cropped"):
            assert term in NEGATIVE_PROMPT

    def test_visual_theme_does_not_change_content(self, builder):
        anime = builder.build_style(EmotionLabel.TIRED, ThemeLabel.PERSONAL, "anime")
        cyberpunk = builder.build_style(EmotionLabel.TIRED, ThemeLabel.PERSONAL, "cyberpunk")
        assert anime == cyberpunk

    def test_palette_override_only_replaces_palette(self, builder):
        default = builder.build_style(EmotionLabel.CALM, ThemeLabel.HEALTH)
        override = FeedbackOverride(preferred_palette="pastel mint, cream")

        style = builder.build_style(EmotionLabel.CALM, ThemeLabel.HEALTH, feedback_override=override)

        assert style.color_palette == "pastel mint, cream"
        assert "rendered with pastel mint, cream," in style.prompt_prefix
        assert style.mood_descriptor == default.mood_descriptor
        assert style.lighting_style == default.lighting_style
        assert style.atmosphere_note == default.atmosphere_note
        assert style.prompt_suffix == default.prompt_suffix

    def test_style_override_replaces_mood(self, builder):
        override = FeedbackOverride(preferred_style="dreamy and nostalgic")
        style = builder.build_style(EmotionLabel.SAD, ThemeLabel.SOCIAL, feedback_override=override)

        assert style.mood_descriptor == "dreamy and nostalgic"
        assert style.color_palette == "cool blues, soft grays, gentle purples"
        assert "A scene that feels dreamy and nostalgic," in style.prompt_prefix

    def test_empty_override_keeps_defaults(self, builder):
        default = builder.build_style(EmotionLabel.EXCITED, ThemeLabel.CREATIVE)
        style = builder.build_style(EmotionLabel.EXCITED, ThemeLabel.CREATIVE, feedback_override=FeedbackOverride())
        assert style == default

    def test_every_pair_produces_modifiers(self, builder):
        for emotion in EmotionLabel:
            for theme in ThemeLabel:
                style = builder.build_style(emotion, theme)
                assert style.prompt_prefix.startswith(f"[Emotion: {emotion.value}, Theme: {theme.value}]")


def test_build_style_wrapper_uses_default_lexicon():
    style = build_style(EmotionLabel.NEUTRAL, ThemeLabel.PERSONAL)
    assert style.color_palette == "balanced grays, soft whites, natural greens"
    assert "cozy home interior" in style.prompt_prefix
