"""Web-specific Pydantic models for the FastAPI application."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from daylens.models import (
    DetectionResult,
    ExplanationResult,
    FeedbackOverride,
    PreferenceRecord,
    ReflectionInput,
    StyleModifiers,
    StyleUsage,
)


class AnalyzeRequest(ReflectionInput):
    """Request model for analyzing a reflection.

    Giving an ``image_id`` registers the image the result will be rendered
    into, which is what later feedback refers to.
    """
    user_id: Optional[str] = Field(default=None, max_length=255)
    image_id: Optional[str] = Field(default=None, max_length=255)


class AnalyzeResponse(BaseModel):
    """Detection and style guidance for a reflection."""
    detection: DetectionResult
    style: StyleModifiers
    style_usage: StyleUsage
    learned_override: Optional[FeedbackOverride] = None
    image_id: Optional[str] = None


class ExplainRequest(BaseModel):
    """Request model for building an explanation."""
    reflection: ReflectionInput
    detection: DetectionResult
    final_prompt: str = Field(min_length=1)
    image_id: Optional[str] = None
    style_usage: Optional[StyleUsage] = None


class ExplanationResponse(BaseModel):
    image_id: Optional[str] = None
    explanation: Dict[str, str]


class FeedbackRequest(BaseModel):
    """Rating submitted for a generated image.

    User, emotion and style are taken from the registered image.
    """
    image_id: str = Field(min_length=1)
    # Validated in the route so that unknown ratings produce a 400.
    rating: str
    response_id: Optional[str] = None
    comment: Optional[str] = Field(default=None, max_length=2000)


class FeedbackResponse(BaseModel):
    success: bool = True
    message: str
    preference: PreferenceRecord


class PreferenceResponse(BaseModel):
    preference: PreferenceRecord
    override: Optional[FeedbackOverride] = None


class ModerationRequest(BaseModel):
    prompt: str


class ModerationResponse(BaseModel):
    is_safe: bool
    flagged_terms: List[str]
    categories: List[str]
    original_prompt: str


class ValidatedPromptResponse(BaseModel):
    cleaned_prompt: str
    was_cleaned: bool
    original_prompt: str


class ErrorResponse(BaseModel):
    """Standard error response model."""
    error: str
    type: Optional[str] = None
    categories: Optional[List[str]] = None


def explanation_payload(explanation: ExplanationResult, image_id: Optional[str] = None) -> ExplanationResponse:
    return ExplanationResponse(image_id=image_id, explanation=explanation.to_json())
