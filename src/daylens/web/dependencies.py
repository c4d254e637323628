"""FastAPI dependencies."""

from typing import Optional

from fastapi import Request

from daylens.moderation import PromptCleaner
from daylens.pipeline import ReflectionPipeline


def get_pipeline(request: Request) -> ReflectionPipeline:
    return request.app.state.pipeline


def get_prompt_cleaner(request: Request) -> Optional[PromptCleaner]:
    """The cleaner configured on the app, or None when prompts cannot be rewritten."""
    return getattr(request.app.state, "prompt_cleaner", None)
