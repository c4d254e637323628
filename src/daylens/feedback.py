"""Feedback-driven style preferences per user and emotion.

Ratings on generated images accumulate into one preference record per
(user, emotion) pair. A record overrides the default palette and style once
positive ratings outnumber negative ones.
"""

import logging
from typing import Dict, Optional

from daylens.models import FeedbackEvent, FeedbackOverride, FeedbackRating, PreferenceRecord

logger = logging.getLogger(__name__)


FEEDBACK_MESSAGES: Dict[FeedbackRating, str] = {
    FeedbackRating.YES: "Thanks! Your preference has been learned for future generations.",
    FeedbackRating.PARTIALLY: "Got it, we'll refine the style next time.",
    FeedbackRating.NO: "Noted, we'll try a different approach next time.",
}


def should_override(record: Optional[PreferenceRecord]) -> Optional[FeedbackOverride]:
    """Return the learned override for a record, or None to keep the defaults.

    Simple majority rule: the override applies only while positive ratings
    strictly outnumber negative ones.
    """
    if record is None:
        return None
    if record.positive_count <= record.negative_count:
        return None
    return FeedbackOverride(
        preferred_style=record.preferred_style,
        preferred_palette=record.preferred_palette,
    )


def apply_feedback(record: Optional[PreferenceRecord], event: FeedbackEvent) -> PreferenceRecord:
    """Fold one rating into the preference record for its (user, emotion) pair.

    ``yes`` increments the positive count and remembers the style and palette
    the image used. ``no`` increments the negative count. ``partially``
    changes nothing beyond creating the record if it did not exist.
    """
    if record is not None and (record.user_id != event.user_id or record.emotion != event.emotion):
        raise ValueError(
            f"Feedback for ({event.user_id}, {event.emotion.value}) cannot update "
            f"record for ({record.user_id}, {record.emotion.value})"
        )

    if record is None:
        record = PreferenceRecord(user_id=event.user_id, emotion=event.emotion)

    if event.rating == FeedbackRating.YES:
        updated = record.model_copy(update={
            "positive_count": record.positive_count + 1,
            "preferred_style": event.style_used,
            "preferred_palette": event.palette_used,
        })
    elif event.rating == FeedbackRating.NO:
        updated = record.model_copy(update={"negative_count": record.negative_count + 1})
    else:
        updated = record

    logger.info(
        "Feedback %s for user=%s emotion=%s -> +%d/-%d",
        event.rating.value,
        event.user_id,
        event.emotion.value,
        updated.positive_count,
        updated.negative_count,
    )
    return updated


def feedback_message(rating: FeedbackRating) -> str:
    """Acknowledgement shown to the user after rating an image."""
    return FEEDBACK_MESSAGES[rating]
