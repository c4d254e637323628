"""API routes for reflection analysis, explanations and prompt moderation."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from daylens.error_handling import ExplanationNotFoundError
from daylens.moderation import PromptCleaner, moderate_prompt, validate_prompt
from daylens.pipeline import ReflectionPipeline
from daylens.web.dependencies import get_pipeline, get_prompt_cleaner
from daylens.web.models.web_models import (
    AnalyzeRequest,
    AnalyzeResponse,
    ErrorResponse,
    ExplainRequest,
    ExplanationResponse,
    ModerationRequest,
    ModerationResponse,
    ValidatedPromptResponse,
    explanation_payload,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/reflections/analyze",
    response_model=AnalyzeResponse,
    responses={400: {"model": ErrorResponse}},
)
async def analyze_reflection(
    request: AnalyzeRequest,
    pipeline: ReflectionPipeline = Depends(get_pipeline),
) -> AnalyzeResponse:
    """Detect emotion and theme and return the style guidance for prompt construction."""
    analysis = pipeline.analyze(request, user_id=request.user_id, image_id=request.image_id)
    return AnalyzeResponse(
        detection=analysis.detection,
        style=analysis.style,
        style_usage=analysis.style_usage,
        learned_override=analysis.override,
        image_id=analysis.image.image_id if analysis.image else None,
    )


@router.post("/reflections/explain", response_model=ExplanationResponse)
async def explain_reflection(
    request: ExplainRequest,
    pipeline: ReflectionPipeline = Depends(get_pipeline),
) -> ExplanationResponse:
    explanation = pipeline.explain(
        request.reflection,
        request.detection,
        request.final_prompt,
        image_id=request.image_id,
        style_usage=request.style_usage,
    )
    return explanation_payload(explanation, request.image_id)


@router.get(
    "/explanations/{image_id}",
    response_model=ExplanationResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_explanation(
    image_id: str,
    pipeline: ReflectionPipeline = Depends(get_pipeline),
) -> ExplanationResponse:
    explanation = pipeline.store.get_explanation(image_id) if pipeline.store is not None else None
    if explanation is None:
        raise ExplanationNotFoundError(image_id)
    return explanation_payload(explanation, image_id)


@router.post("/prompts/moderate", response_model=ModerationResponse)
async def moderate(request: ModerationRequest) -> ModerationResponse:
    result = moderate_prompt(request.prompt)
    if not result.is_safe:
        logger.info("Prompt flagged for %s", ", ".join(result.categories))
    return ModerationResponse(**result.to_dict())


@router.post(
    "/prompts/validate",
    response_model=ValidatedPromptResponse,
    responses={400: {"model": ErrorResponse}},
)
async def validate(
    request: ModerationRequest,
    cleaner: Optional[PromptCleaner] = Depends(get_prompt_cleaner),
) -> ValidatedPromptResponse:
    """Return a prompt that passes moderation, cleaning it once if needed."""
    cleaned = validate_prompt(request.prompt, cleaner=cleaner)
    return ValidatedPromptResponse(
        cleaned_prompt=cleaned.cleaned_prompt,
        was_cleaned=cleaned.was_cleaned,
        original_prompt=cleaned.original_prompt,
    )
