"""API routes for image feedback and learned style preferences."""

from fastapi import APIRouter, Depends

from daylens.error_handling import DaylensError, PreferenceNotFoundError
from daylens.feedback import feedback_message, should_override
from daylens.models import EmotionLabel, FeedbackRating
from daylens.pipeline import ReflectionPipeline
from daylens.web.dependencies import get_pipeline
from daylens.web.models.web_models import (
    ErrorResponse,
    FeedbackRequest,
    FeedbackResponse,
    PreferenceResponse,
)

router = APIRouter()


@router.post(
    "/feedback",
    response_model=FeedbackResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def submit_feedback(
    request: FeedbackRequest,
    pipeline: ReflectionPipeline = Depends(get_pipeline),
) -> FeedbackResponse:
    """Store a rating and update the image owner's style preference for its emotion."""
    try:
        rating = FeedbackRating(request.rating.strip().lower())
    except ValueError:
        raise DaylensError("Rating must be 'yes', 'partially', or 'no'")

    preference = pipeline.record_feedback(
        request.image_id,
        rating,
        comment=request.comment,
        response_id=request.response_id,
    )
    return FeedbackResponse(message=feedback_message(rating), preference=preference)


@router.get(
    "/preferences/{user_id}/{emotion}",
    response_model=PreferenceResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_preference(
    user_id: str,
    emotion: EmotionLabel,
    pipeline: ReflectionPipeline = Depends(get_pipeline),
) -> PreferenceResponse:
    record = pipeline.store.get_preference(user_id, emotion) if pipeline.store is not None else None
    if record is None:
        raise PreferenceNotFoundError(user_id, emotion.value)
    return PreferenceResponse(preference=record, override=should_override(record))
