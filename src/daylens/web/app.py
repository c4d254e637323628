"""FastAPI web application for daylens."""

import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from daylens import __version__
from daylens.context import DaylensContext, get_default_context
from daylens.db_config import create_db_engine
from daylens.error_handling import DaylensError, http_status_for
from daylens.lexicon import load_lexicon
from daylens.moderation import PromptCleaner
from daylens.pipeline import ReflectionPipeline
from daylens.storage import SQLPreferenceStore
from daylens.web.routes import feedback, reflections

logger = logging.getLogger(__name__)


def build_pipeline(context: DaylensContext) -> ReflectionPipeline:
    """Load the lexicon and open the database described by ``context``.

    A broken lexicon raises here, before the server accepts requests.
    """
    lexicon = load_lexicon(context.lexicon_path)
    store = SQLPreferenceStore.from_engine(create_db_engine(context.database_url))
    return ReflectionPipeline(lexicon=lexicon, store=store)


def create_app(
    context: Optional[DaylensContext] = None,
    pipeline: Optional[ReflectionPipeline] = None,
    prompt_cleaner: Optional[PromptCleaner] = None,
) -> FastAPI:
    """Application factory.

    ``prompt_cleaner`` rewrites unsafe prompts for `/api/prompts/validate`;
    without one, unsafe prompts are rejected.
    """
    if pipeline is None:
        pipeline = build_pipeline(context or get_default_context())

    app = FastAPI(
        title="Daylens",
        description="Turns daily reflections into emotion-aware image guidance",
        version=__version__,
    )
    app.state.pipeline = pipeline
    app.state.prompt_cleaner = prompt_cleaner

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DaylensError)
    async def _daylens_error_handler(request: Request, exc: DaylensError) -> JSONResponse:
        status_code = http_status_for(exc.category)
        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        else:
            logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=status_code, content=exc.to_dict())

    @app.get("/api/health")
    async def health():
        return {"status": "ok", "version": __version__}

    app.include_router(reflections.router, prefix="/api", tags=["reflections"])
    app.include_router(feedback.router, prefix="/api", tags=["feedback"])

    return app


def run_server(host: str = "127.0.0.1", port: int = 8000, reload: bool = False):
    """Run the FastAPI server."""
    uvicorn.run(
        "daylens.web.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


if __name__ == "__main__":
    run_server()
