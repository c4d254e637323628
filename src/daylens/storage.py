"""Persistence for preference records, feedback events, generated images and explanations."""

from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol, Tuple

from sqlalchemy import JSON, DateTime, Integer, String, Text, UniqueConstraint, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Mapped, Session, mapped_column, sessionmaker

from daylens.db_config import Base, create_session_factory, create_tables, session_scope
from daylens.error_handling import PreferenceStoreError
from daylens.feedback import apply_feedback
from daylens.models import (
    EmotionLabel,
    ExplanationResult,
    FeedbackEvent,
    GeneratedImage,
    PreferenceRecord,
    StyleUsage,
    ThemeLabel,
)

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class PreferenceStore(Protocol):
    """What the reflection pipeline needs from persistence."""

    def get_preference(self, user_id: str, emotion: EmotionLabel) -> Optional[PreferenceRecord]: ...

    def record_feedback(self, event: FeedbackEvent) -> PreferenceRecord: ...

    def save_explanation(self, image_id: str, explanation: ExplanationResult) -> None: ...

    def get_explanation(self, image_id: str) -> Optional[ExplanationResult]: ...

    def save_image(self, image: GeneratedImage) -> None: ...

    def get_image(self, image_id: str) -> Optional[GeneratedImage]: ...


class InMemoryPreferenceStore:
    """Dict-backed store for tests and single-process use."""

    def __init__(self):
        self._lock = threading.Lock()
        self._preferences: Dict[Tuple[str, EmotionLabel], PreferenceRecord] = {}
        self._explanations: Dict[str, ExplanationResult] = {}
        self._images: Dict[str, GeneratedImage] = {}
        self.feedback_events: List[FeedbackEvent] = []

    def get_preference(self, user_id: str, emotion: EmotionLabel) -> Optional[PreferenceRecord]:
        with self._lock:
            return self._preferences.get((user_id, emotion))

    def record_feedback(self, event: FeedbackEvent) -> PreferenceRecord:
        with self._lock:
            self.feedback_events.append(event)
            key = (event.user_id, event.emotion)
            updated = apply_feedback(self._preferences.get(key), event)
            self._preferences[key] = updated
            return updated

    def save_explanation(self, image_id: str, explanation: ExplanationResult) -> None:
        with self._lock:
            self._explanations[image_id] = explanation

    def get_explanation(self, image_id: str) -> Optional[ExplanationResult]:
        with self._lock:
            return self._explanations.get(image_id)

    def save_image(self, image: GeneratedImage) -> None:
        with self._lock:
            self._images[image.image_id] = image

    def get_image(self, image_id: str) -> Optional[GeneratedImage]:
        with self._lock:
            return self._images.get(image_id)


class EmotionStylePreference(Base):
    __tablename__ = "emotion_style_prefs"
    __table_args__ = (UniqueConstraint("user_id", "emotion", name="uq_emotion_style_prefs_user_emotion"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    emotion: Mapped[str] = mapped_column(String(32))
    preferred_style: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    preferred_palette: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    positive_count: Mapped[int] = mapped_column(Integer, default=0)
    negative_count: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, onupdate=_now)

    def to_record(self) -> PreferenceRecord:
        return PreferenceRecord(
            user_id=self.user_id,
            emotion=EmotionLabel(self.emotion),
            preferred_style=self.preferred_style,
            preferred_palette=self.preferred_palette,
            positive_count=self.positive_count,
            negative_count=self.negative_count,
        )


class GeneratedImageRecord(Base):
    __tablename__ = "generated_images"

    image_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    emotion: Mapped[str] = mapped_column(String(32))
    theme: Mapped[str] = mapped_column(String(32))
    style_modifiers: Mapped[dict] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    def to_image(self) -> GeneratedImage:
        return GeneratedImage(
            image_id=self.image_id,
            user_id=self.user_id,
            emotion=EmotionLabel(self.emotion),
            theme=ThemeLabel(self.theme),
            style_usage=StyleUsage(**self.style_modifiers),
            created_at=self.created_at,
        )


class UserFeedback(Base):
    __tablename__ = "user_feedback"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    image_id: Mapped[str] = mapped_column(String(255), index=True)
    response_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    rating: Mapped[str] = mapped_column(String(16))
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    detected_emotion: Mapped[str] = mapped_column(String(32))
    detected_theme: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    style_used: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    palette_used: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)


class ImageExplanation(Base):
    __tablename__ = "image_explanations"

    image_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    explanation: Mapped[dict] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)


class SQLPreferenceStore:
    """SQLAlchemy-backed store.

    Each feedback event is written together with its preference update in a
    single transaction.
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        self.session_factory = session_factory

    @classmethod
    def from_engine(cls, engine, create: bool = True) -> "SQLPreferenceStore":
        if create:
            create_tables(engine)
        return cls(create_session_factory(engine))

    def get_preference(self, user_id: str, emotion: EmotionLabel) -> Optional[PreferenceRecord]:
        try:
            with session_scope(self.session_factory) as session:
                row = self._find_preference(session, user_id, emotion)
                return row.to_record() if row is not None else None
        except SQLAlchemyError as e:
            raise PreferenceStoreError(f"Failed to load preference: {e}") from e

    def record_feedback(self, event: FeedbackEvent) -> PreferenceRecord:
        try:
            with session_scope(self.session_factory) as session:
                session.add(UserFeedback(
                    user_id=event.user_id,
                    image_id=event.image_id,
                    response_id=event.response_id,
                    rating=event.rating.value,
                    comment=event.comment,
                    detected_emotion=event.emotion.value,
                    detected_theme=event.theme.value if event.theme else None,
                    style_used=event.style_used,
                    palette_used=event.palette_used,
                    created_at=event.created_at,
                ))

                row = self._find_preference(session, event.user_id, event.emotion)
                updated = apply_feedback(row.to_record() if row is not None else None, event)
                if row is None:
                    row = EmotionStylePreference(user_id=event.user_id, emotion=event.emotion.value)
                    session.add(row)
                row.preferred_style = updated.preferred_style
                row.preferred_palette = updated.preferred_palette
                row.positive_count = updated.positive_count
                row.negative_count = updated.negative_count
                return updated
        except SQLAlchemyError as e:
            logger.error("Failed to record feedback for image %s: %s", event.image_id, e)
            raise PreferenceStoreError(f"Failed to save feedback: {e}") from e

    def list_feedback(self, user_id: str) -> List[Dict[str, Optional[str]]]:
        """Audit trail of ratings for a user, oldest first."""
        try:
            with session_scope(self.session_factory) as session:
                rows = session.scalars(
                    select(UserFeedback)
                    .where(UserFeedback.user_id == user_id)
                    .order_by(UserFeedback.created_at)
                ).all()
                return [
                    {
                        "image_id": row.image_id,
                        "rating": row.rating,
                        "emotion": row.detected_emotion,
                        "theme": row.detected_theme,
                        "comment": row.comment,
                    }
                    for row in rows
                ]
        except SQLAlchemyError as e:
            raise PreferenceStoreError(f"Failed to load feedback: {e}") from e

    def save_explanation(self, image_id: str, explanation: ExplanationResult) -> None:
        try:
            with session_scope(self.session_factory) as session:
                session.merge(ImageExplanation(image_id=image_id, explanation=explanation.to_json()))
        except SQLAlchemyError as e:
            raise PreferenceStoreError(f"Failed to save explanation: {e}") from e

    def get_explanation(self, image_id: str) -> Optional[ExplanationResult]:
        try:
            with session_scope(self.session_factory) as session:
                row = session.get(ImageExplanation, image_id)
                return ExplanationResult(**row.explanation) if row is not None else None
        except SQLAlchemyError as e:
            raise PreferenceStoreError(f"Failed to load explanation: {e}") from e

    def save_image(self, image: GeneratedImage) -> None:
        try:
            with session_scope(self.session_factory) as session:
                session.merge(GeneratedImageRecord(
                    image_id=image.image_id,
                    user_id=image.user_id,
                    emotion=image.emotion.value,
                    theme=image.theme.value,
                    style_modifiers=image.style_usage.model_dump(),
                    created_at=image.created_at,
                ))
        except SQLAlchemyError as e:
            logger.error("Failed to save image %s: %s", image.image_id, e)
            raise PreferenceStoreError(f"Failed to save image: {e}") from e

    def get_image(self, image_id: str) -> Optional[GeneratedImage]:
        try:
            with session_scope(self.session_factory) as session:
                row = session.get(GeneratedImageRecord, image_id)
                return row.to_image() if row is not None else None
        except SQLAlchemyError as e:
            raise PreferenceStoreError(f"Failed to load image: {e}") from e

    @staticmethod
    def _find_preference(session: Session, user_id: str, emotion: EmotionLabel) -> Optional[EmotionStylePreference]:
        return session.scalars(
            select(EmotionStylePreference).where(
                EmotionStylePreference.user_id == user_id,
                EmotionStylePreference.emotion == emotion.value,
            )
        ).first()
