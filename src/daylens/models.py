"""Data models for reflection analysis, style mapping and explanations."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class EmotionLabel(str, Enum):
    """Emotional tones a reflection can be labelled with."""
    HAPPY = "happy"
    CALM = "calm"
    MOTIVATED = "motivated"
    GRATEFUL = "grateful"
    STRESSED = "stressed"
    ANXIOUS = "anxious"
    OVERWHELMED = "overwhelmed"
    TIRED = "tired"
    SAD = "sad"
    FRUSTRATED = "frustrated"
    NEUTRAL = "neutral"
    CONFIDENT = "confident"
    EXCITED = "excited"
    REFLECTIVE = "reflective"


class ThemeLabel(str, Enum):
    """Life domains a reflection can focus on."""
    WORK = "work"
    LEARNING = "learning"
    HEALTH = "health"
    PERSONAL = "personal"
    SOCIAL = "social"
    CREATIVE = "creative"
    FINANCE = "finance"
    SPIRITUAL = "spiritual"


DEFAULT_EMOTION = EmotionLabel.NEUTRAL
DEFAULT_THEME = ThemeLabel.PERSONAL


class FeedbackRating(str, Enum):
    """User answer to "does this image match your day?"."""
    YES = "yes"
    PARTIALLY = "partially"
    NO = "no"


class DetectionInput(BaseModel):
    """The four free-text fields of a daily reflection."""
    model_config = ConfigDict(frozen=True)

    activities: str = Field(default="", description="What the user did today")
    mood: str = Field(default="", description="How the user felt")
    challenges: str = Field(default="", description="What was difficult")
    achievements: str = Field(default="", description="What went well")

    def is_blank(self) -> bool:
        return not any(
            value.strip() for value in (self.activities, self.mood, self.challenges, self.achievements)
        )


class ReflectionInput(DetectionInput):
    """A full reflection submission including the chosen visual theme."""
    theme: str = Field(default="realistic", description="Visual art style chosen by the user")
    email: str | None = Field(default=None, description="Optional contact address")

    def detection_input(self) -> DetectionInput:
        return DetectionInput(
            activities=self.activities,
            mood=self.mood,
            challenges=self.challenges,
            achievements=self.achievements,
        )


class DetectionResult(BaseModel):
    """Outcome of scoring a reflection against the lexicon."""
    model_config = ConfigDict(frozen=True)

    emotion: EmotionLabel = Field(description="Primary detected emotion")
    confidence: float = Field(ge=0.0, le=1.0, description="Share of the primary emotion in the total score")
    secondary_emotion: EmotionLabel | None = Field(default=None, description="Runner-up emotion, if it matched")
    theme: ThemeLabel = Field(description="Detected life domain")
    emotion_keywords: List[str] = Field(default_factory=list, description="Keywords behind the primary emotion")
    theme_keywords: List[str] = Field(default_factory=list, description="Keywords behind the theme")


class EmotionPalette(BaseModel):
    """Visual descriptors associated with one emotion."""
    model_config = ConfigDict(frozen=True)

    colors: str
    mood: str
    lighting: str
    atmosphere: str


class FeedbackOverride(BaseModel):
    """Learned style preferences that replace the defaults for an emotion.

    ``None`` means "keep the default" for that field.
    """
    model_config = ConfigDict(frozen=True)

    preferred_style: str | None = None
    preferred_palette: str | None = None


class StyleModifiers(BaseModel):
    """Content guidance handed to prompt construction."""
    model_config = ConfigDict(frozen=True)

    color_palette: str
    mood_descriptor: str
    lighting_style: str
    atmosphere_note: str
    prompt_prefix: str
    prompt_suffix: str
    negative_prompt: str

    def usage(self) -> "StyleUsage":
        """Descriptors worth recording against the generated image."""
        return StyleUsage(
            palette=self.color_palette,
            mood=self.mood_descriptor,
            lighting=self.lighting_style,
            atmosphere=self.atmosphere_note,
        )


class StyleUsage(BaseModel):
    """Palette, mood, lighting and atmosphere actually used for an image."""
    model_config = ConfigDict(frozen=True)

    palette: str
    mood: str
    lighting: str
    atmosphere: str


class GeneratedImage(BaseModel):
    """An image produced for a reflection and the style it was rendered with."""
    model_config = ConfigDict(frozen=True)

    image_id: str
    user_id: str
    emotion: EmotionLabel
    theme: ThemeLabel
    style_usage: StyleUsage
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class PreferenceRecord(BaseModel):
    """Accumulated feedback for one (user, emotion) pair."""
    model_config = ConfigDict(frozen=True)

    user_id: str
    emotion: EmotionLabel
    preferred_style: str | None = None
    preferred_palette: str | None = None
    positive_count: int = Field(default=0, ge=0)
    negative_count: int = Field(default=0, ge=0)


class FeedbackEvent(BaseModel):
    """A single rating submitted for a generated image."""
    model_config = ConfigDict(frozen=True)

    user_id: str
    image_id: str
    rating: FeedbackRating
    emotion: EmotionLabel
    theme: ThemeLabel | None = None
    response_id: str | None = None
    comment: str | None = None
    style_used: str | None = Field(default=None, description="Mood descriptor the image was rendered with")
    palette_used: str | None = Field(default=None, description="Color palette the image was rendered with")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ExplanationResult(BaseModel):
    """Human-readable rationale for one generated image."""
    model_config = ConfigDict(frozen=True)

    input_summary: str
    detected_emotion: str
    detected_theme: str
    prompt_reasoning: str
    style_reasoning: str
    color_mood_reasoning: str
    composition_notes: str

    def to_json(self) -> Dict[str, str]:
        """Plain dict suitable for a JSON column."""
        return self.model_dump(mode="json")
