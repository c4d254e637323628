"""Unit tests for feedback-driven preference learning."""

import pytest

from daylens.feedback import FEEDBACK_MESSAGES, apply_feedback, feedback_message, should_override
from daylens.models import EmotionLabel, FeedbackEvent, FeedbackRating, PreferenceRecord


def make_event(rating, emotion=EmotionLabel.CALM, user_id="user-1", **kwargs):
    return FeedbackEvent(
        user_id=user_id,
        image_id=kwargs.pop("image_id", "img-1"),
        rating=rating,
        emotion=emotion,
        **kwargs,
    )


class TestApplyFeedback:

    def test_first_positive_rating_creates_record(self):
        record = apply_feedback(
            None,
            make_event(FeedbackRating.YES, style_used="serene and soothing", palette_used="pastel blues"),
        )

        assert record.user_id == "user-1"
        assert record.emotion == EmotionLabel.CALM
        assert record.positive_count == 1
        assert record.negative_count == 0
        assert record.preferred_style == "serene and soothing"
        assert record.preferred_palette == "pastel blues"

    def test_negative_rating_increments_only_negative(self):
        record = apply_feedback(None, make_event(FeedbackRating.YES, palette_used="pastel blues"))
        record = apply_feedback(record, make_event(FeedbackRating.NO, palette_used="grey"))

        assert (record.positive_count, record.negative_count) == (1, 1)
        assert record.preferred_palette == "pastel blues"

    def test_partial_rating_changes_nothing(self):
        existing = PreferenceRecord(
            user_id="user-1", emotion=EmotionLabel.CALM, preferred_palette="teal", positive_count=2, negative_count=1
        )
        assert apply_feedback(existing, make_event(FeedbackRating.PARTIALLY, palette_used="red")) == existing

    def test_partial_rating_without_record_creates_empty_record(self):
        record = apply_feedback(None, make_event(FeedbackRating.PARTIALLY))
        assert (record.positive_count, record.negative_count) == (0, 0)
        assert record.preferred_palette is None

    def test_later_positive_rating_replaces_preference(self):
        record = apply_feedback(None, make_event(FeedbackRating.YES, palette_used="teal"))
        record = apply_feedback(record, make_event(FeedbackRating.YES, palette_used="coral"))
        assert record.positive_count == 2
        assert record.preferred_palette == "coral"

    def test_mismatched_emotion_is_rejected(self):
        record = apply_feedback(None, make_event(FeedbackRating.YES))
        with pytest.raises(ValueError):
            apply_feedback(record, make_event(FeedbackRating.YES, emotion=EmotionLabel.SAD))

    def test_mismatched_user_is_rejected(self):
        record = apply_feedback(None, make_event(FeedbackRating.YES))
        with pytest.raises(ValueError):
            apply_feedback(record, make_event(FeedbackRating.NO, user_id="user-2"))

    def test_input_record_is_not_mutated(self):
        record = apply_feedback(None, make_event(FeedbackRating.YES))
        apply_feedback(record, make_event(FeedbackRating.YES))
        assert record.positive_count == 1


class TestShouldOverride:

    def test_no_record(self):
        assert should_override(None) is None

    def test_positive_majority_overrides(self):
        record = PreferenceRecord(
            user_id="u", emotion=EmotionLabel.HAPPY, preferred_style="joyful", preferred_palette="gold",
            positive_count=2, negative_count=1,
        )
        override = should_override(record)
        assert override.preferred_style == "joyful"
        assert override.preferred_palette == "gold"

    def test_tie_keeps_defaults(self):
        record = apply_feedback(None, make_event(FeedbackRating.YES, palette_used="teal"))
        record = apply_feedback(record, make_event(FeedbackRating.NO))
        assert should_override(record) is None

    def test_negative_majority_keeps_defaults(self):
        record = PreferenceRecord(
            user_id="u", emotion=EmotionLabel.HAPPY, preferred_palette="gold", positive_count=1, negative_count=3
        )
        assert should_override(record) is None


@pytest.mark.parametrize("rating", list(FeedbackRating))
def test_every_rating_has_a_message(rating):
    assert feedback_message(rating) == FEEDBACK_MESSAGES[rating]
    assert feedback_message(rating)
