"""Unit tests for explanation synthesis."""

import pytest

from daylens.explanation import (
    ACTIVITIES_LIMIT,
    ExplanationSynthesizer,
    build_input_summary,
    truncate_text,
)
from daylens.models import DetectionInput, DetectionResult, EmotionLabel, StyleUsage, ThemeLabel


class TestTruncateText:

    def test_short_text_is_unchanged(self):
        assert truncate_text("short", 10) == "short"
        assert truncate_text("exactly10!", 10) == "exactly10!"

    def test_long_text_is_cut_at_limit(self):
        assert truncate_text("abcdefghij", 4) == "abcd..."


class TestInputSummary:

    def test_long_activities_are_truncated(self):
        activities = "word " * 40
        summary = build_input_summary(DetectionInput(activities=activities))

        assert len(activities) == 200
        assert summary == f'You shared that your day involved: "{activities[:ACTIVITIES_LIMIT]}...".'

    def test_mood_limit(self):
        mood = "m" * 61
        summary = build_input_summary(DetectionInput(mood=mood))
        assert summary == f'You described your mood as: "{"m" * 60}...".'

    def test_empty_fields_are_omitted(self):
        summary = build_input_summary(DetectionInput(mood="calm", achievements="  "))
        assert summary == 'You described your mood as: "calm".'

    def test_all_fields_in_order(self):
        summary = build_input_summary(
            DetectionInput(activities="a", mood="b", challenges="c", achievements="d")
        )
        assert summary == (
            'You shared that your day involved: "a". '
            'You described your mood as: "b". '
            'Challenges faced: "c". '
            'Key achievements: "d".'
        )

    def test_blank_input_gives_empty_summary(self):
        assert build_input_summary(DetectionInput()) == ""


class TestExplanationSynthesizer:
    """Test ExplanationSynthesizer class."""

    @pytest.fixture
    def synthesizer(self, lexicon):
        return ExplanationSynthesizer(lexicon)

    @pytest.fixture
    def detection(self):
        return DetectionResult(
            emotion=EmotionLabel.MOTIVATED,
            confidence=0.57,
            secondary_emotion=EmotionLabel.CONFIDENT,
            theme=ThemeLabel.HEALTH,
            emotion_keywords=["motivated", "goal"],
            theme_keywords=["run"],
        )

    def test_emotion_section(self, synthesizer, run_reflection, detection):
        explanation = synthesizer.explain_detection(run_reflection, detection, "prompt", "anime")

        assert "**motivated** (57% confidence)" in explanation.detected_emotion
        assert "undertones of **confident**" in explanation.detected_emotion
        assert 'Key signals: "motivated", "goal".' in explanation.detected_emotion

    def test_theme_section(self, synthesizer, run_reflection, detection):
        explanation = synthesizer.explain_detection(run_reflection, detection, "prompt", "anime")

        assert "**health**" in explanation.detected_theme
        assert 'mentions of: "run"' in explanation.detected_theme

    def test_keywords_are_capped_at_five(self, synthesizer):
        keywords = ["one", "two", "three", "four", "five", "six", "seven"]
        explanation = synthesizer.explain(
            DetectionInput(mood="x"), EmotionLabel.HAPPY, 1.0, None, ThemeLabel.WORK,
            keywords, keywords, "prompt", "realistic",
        )
        assert '"five"' in explanation.detected_emotion
        assert '"six"' not in explanation.detected_emotion
        assert '"six"' not in explanation.detected_theme

    def test_no_keywords_fallback_sentences(self, synthesizer):
        explanation = synthesizer.explain(
            DetectionInput(), EmotionLabel.NEUTRAL, 0.3, None, ThemeLabel.PERSONAL,
            [], [], "prompt", "realistic",
        )
        assert "(30% confidence)" in explanation.detected_emotion
        assert "No strong keyword signals" in explanation.detected_emotion
        assert "undertones" not in explanation.detected_emotion
        assert "most likely theme based on overall context" in explanation.detected_theme
        assert explanation.input_summary == ""

    def test_prompt_reasoning_highlights_achievements(self, synthesizer, run_reflection, detection):
        explanation = synthesizer.explain_detection(run_reflection, detection, "prompt", "anime")
        assert "highlighting your achievements" in explanation.prompt_reasoning
        assert "health-focused day" in explanation.prompt_reasoning
        assert 'Visual style "anime"' in explanation.prompt_reasoning

    def test_prompt_reasoning_acknowledges_challenges(self, synthesizer, detection):
        reflection = DetectionInput(mood="motivated", challenges="hard hill")
        explanation = synthesizer.explain_detection(reflection, detection, "prompt", "anime")
        assert "acknowledging your challenges" in explanation.prompt_reasoning

    def test_style_reasoning_mentions_secondary_emotion(self, synthesizer, run_reflection, detection):
        with_secondary = synthesizer.explain_detection(run_reflection, detection, "prompt", "minimalist")
        without = synthesizer.explain_detection(
            run_reflection, detection.model_copy(update={"secondary_emotion": None}), "prompt", "minimalist"
        )

        assert "**minimalist**" in with_secondary.style_reasoning
        assert 'secondary emotion "confident"' in with_secondary.style_reasoning
        assert "secondary emotion" not in without.style_reasoning

    def test_color_and_composition_use_palette(self, synthesizer, run_reflection, detection):
        explanation = synthesizer.explain_detection(run_reflection, detection, "prompt", "anime")

        assert "bold reds, electric blues, bright whites" in explanation.color_mood_reasoning
        assert "dramatic spotlighting, sunrise beams" in explanation.color_mood_reasoning
        assert "9:16" in explanation.composition_notes
        assert '"health"' in explanation.composition_notes
        assert "charged and purposeful" in explanation.composition_notes

    def test_explanation_is_deterministic(self, synthesizer, run_reflection, detection):
        first = synthesizer.explain_detection(run_reflection, detection, "prompt", "anime")
        second = synthesizer.explain_detection(run_reflection, detection, "prompt", "anime")
        assert first == second


class TestStyleUsage:
    """The explanation describes the style the image was rendered with."""

    def test_used_style_replaces_default_palette(self, lexicon, run_reflection):
        usage = StyleUsage(
            palette="pastel mint",
            mood="gentle and airy",
            lighting="morning haze",
            atmosphere="light and open",
        )
        explanation = ExplanationSynthesizer(lexicon).explain(
            run_reflection, EmotionLabel.CALM, 0.8, None, ThemeLabel.HEALTH,
            ["calm"], ["run"], "prompt", "realistic", style_usage=usage,
        )

        assert explanation.color_mood_reasoning.startswith("Color palette: pastel mint.")
        assert "soft blues" not in explanation.color_mood_reasoning
        assert "Lighting: morning haze" in explanation.color_mood_reasoning
        assert "light and open atmosphere" in explanation.composition_notes
