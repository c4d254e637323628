"""Runtime configuration for daylens."""

import logging
import os

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

from daylens.db_config import DEFAULT_SQLITE_URL


class DaylensContext(BaseModel):
    """Runtime configuration shared by the CLI and the web application."""

    lexicon_path: str | None = Field(default=None, description="Custom lexicon JSON file; packaged lexicon if unset")
    database_url: str = Field(default=DEFAULT_SQLITE_URL, description="SQLAlchemy database URL")
    log_level: str = Field(default="INFO", description="Root log level")
    host: str = Field(default="127.0.0.1", description="Web server bind address")
    port: int = Field(default=8000, description="Web server port")
    default_visual_theme: str = Field(default="realistic", description="Visual style used when none is given")

    model_config = {"extra": "ignore"}

    @property
    def numeric_log_level(self) -> int:
        level = getattr(logging, self.log_level.upper(), None)
        return level if isinstance(level, int) else logging.INFO


def get_default_context() -> DaylensContext:
    """Get default context with environment variables."""
    load_dotenv(find_dotenv(usecwd=True), override=False)

    values = {
        "lexicon_path": os.getenv("DAYLENS_LEXICON_PATH") or None,
        "database_url": os.getenv("DATABASE_URL"),
        "log_level": os.getenv("DAYLENS_LOG_LEVEL"),
        "host": os.getenv("DAYLENS_HOST"),
        "port": os.getenv("DAYLENS_PORT"),
        "default_visual_theme": os.getenv("DAYLENS_DEFAULT_VISUAL_THEME"),
    }
    return DaylensContext(**{key: value for key, value in values.items() if value is not None})
