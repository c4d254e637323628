"""Composes detection, preferences, style and explanation for one reflection."""

import logging
from dataclasses import dataclass
from typing import Optional

from daylens.detection import EmotionDetector
from daylens.error_handling import DaylensError, ImageNotFoundError
from daylens.explanation import ExplanationSynthesizer
from daylens.feedback import should_override
from daylens.lexicon import Lexicon, get_default_lexicon
from daylens.models import (
    DetectionResult,
    ExplanationResult,
    FeedbackEvent,
    FeedbackOverride,
    FeedbackRating,
    GeneratedImage,
    PreferenceRecord,
    ReflectionInput,
    StyleModifiers,
    StyleUsage,
)
from daylens.storage import PreferenceStore
from daylens.style import StyleModifierBuilder

logger = logging.getLogger(__name__)


@dataclass
class ReflectionAnalysis:
    """Everything prompt construction needs for one reflection."""
    detection: DetectionResult
    style: StyleModifiers
    override: Optional[FeedbackOverride]
    visual_theme: str
    image: Optional[GeneratedImage] = None

    @property
    def style_usage(self) -> StyleUsage:
        return self.style.usage()


class ReflectionPipeline:
    """Runs the reflection engine for the surrounding application.

    The pipeline itself is stateless; the only state it touches belongs to
    the optional preference store.
    """

    def __init__(self, lexicon: Optional[Lexicon] = None, store: Optional[PreferenceStore] = None):
        self.lexicon = lexicon or get_default_lexicon()
        self.store = store
        self.detector = EmotionDetector(self.lexicon)
        self.style_builder = StyleModifierBuilder(self.lexicon)
        self.synthesizer = ExplanationSynthesizer(self.lexicon)

    def analyze(
        self,
        reflection: ReflectionInput,
        user_id: Optional[str] = None,
        image_id: Optional[str] = None,
    ) -> ReflectionAnalysis:
        """Detect, apply learned preferences and build style modifiers.

        When ``image_id`` is given the image is recorded against ``user_id``
        with the style it will be rendered in, so later feedback can be
        traced back to it.
        """
        if image_id and not user_id:
            raise DaylensError("user_id is required when image_id is given")

        detection = self.detector.detect(reflection.detection_input())

        override = None
        if self.store is not None and user_id:
            record = self.store.get_preference(user_id, detection.emotion)
            override = should_override(record)
            if override is not None:
                logger.info("Applying learned style for user %s (%s)", user_id, detection.emotion.value)

        style = self.style_builder.build_style(
            detection.emotion,
            detection.theme,
            reflection.theme,
            override,
        )

        logger.info(
            "Analyzed reflection: emotion=%s confidence=%.2f theme=%s visual=%s",
            detection.emotion.value,
            detection.confidence,
            detection.theme.value,
            reflection.theme,
        )
        analysis = ReflectionAnalysis(
            detection=detection,
            style=style,
            override=override,
            visual_theme=reflection.theme,
        )
        if image_id:
            analysis.image = self.register_image(image_id, user_id, analysis)
        return analysis

    def register_image(self, image_id: str, user_id: str, analysis: ReflectionAnalysis) -> GeneratedImage:
        image = GeneratedImage(
            image_id=image_id,
            user_id=user_id,
            emotion=analysis.detection.emotion,
            theme=analysis.detection.theme,
            style_usage=analysis.style_usage,
        )
        self._require_store().save_image(image)
        logger.debug("Registered image %s for user %s", image_id, user_id)
        return image

    def explain(
        self,
        reflection: ReflectionInput,
        detection: DetectionResult,
        final_prompt: str,
        image_id: Optional[str] = None,
        style_usage: Optional[StyleUsage] = None,
    ) -> ExplanationResult:
        """Build the explanation and persist it when an image id is given.

        Without an explicit ``style_usage`` the style recorded for the image
        is used, falling back to the lexicon palette.
        """
        if style_usage is None and image_id and self.store is not None:
            image = self.store.get_image(image_id)
            if image is not None:
                style_usage = image.style_usage

        explanation = self.synthesizer.explain_detection(
            reflection.detection_input(),
            detection,
            final_prompt,
            reflection.theme,
            style_usage=style_usage,
        )
        if image_id and self.store is not None:
            self.store.save_explanation(image_id, explanation)
            logger.debug("Stored explanation for image %s", image_id)
        return explanation

    def record_feedback(
        self,
        image_id: str,
        rating: FeedbackRating,
        comment: Optional[str] = None,
        response_id: Optional[str] = None,
    ) -> PreferenceRecord:
        """Fold a rating into the preference of the image's user and emotion.

        Emotion, theme, style and palette come from the stored image, never
        from the caller.

        Raises:
            ImageNotFoundError: if no image with ``image_id`` was registered.
        """
        store = self._require_store()
        image = store.get_image(image_id)
        if image is None:
            raise ImageNotFoundError(image_id)

        event = FeedbackEvent(
            user_id=image.user_id,
            image_id=image_id,
            rating=rating,
            emotion=image.emotion,
            theme=image.theme,
            response_id=response_id,
            comment=comment,
            style_used=image.style_usage.mood,
            palette_used=image.style_usage.palette,
        )
        return store.record_feedback(event)

    def _require_store(self) -> PreferenceStore:
        if self.store is None:
            raise RuntimeError("ReflectionPipeline has no preference store configured")
        return self.store
