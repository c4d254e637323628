"""Error types raised by the reflection engine and its collaborators."""

from enum import Enum
from typing import Dict, Iterable, List, Optional


class ErrorCategory(str, Enum):
    """Error category types."""
    CONFIGURATION_ERROR = "configuration_error"
    VALIDATION_ERROR = "validation_error"
    MODERATION_ERROR = "moderation_error"
    NOT_FOUND = "not_found"
    STORAGE_ERROR = "storage_error"


_HTTP_STATUS: Dict[ErrorCategory, int] = {
    ErrorCategory.CONFIGURATION_ERROR: 500,
    ErrorCategory.VALIDATION_ERROR: 400,
    ErrorCategory.MODERATION_ERROR: 400,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.STORAGE_ERROR: 503,
}


def http_status_for(category: ErrorCategory) -> int:
    """Map an error category onto the HTTP status the web layer returns."""
    return _HTTP_STATUS.get(category, 500)


class DaylensError(Exception):
    """Base class for all errors raised by daylens."""

    category: ErrorCategory = ErrorCategory.VALIDATION_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, object]:
        return {"error": self.message, "type": self.category.value}


class LexiconConfigurationError(DaylensError):
    """A label exists without its keywords, palette or scene entry.

    Raised while loading the lexicon so that a broken configuration stops
    the process at startup instead of surfacing during detection.
    """

    category = ErrorCategory.CONFIGURATION_ERROR

    def __init__(self, problems: Iterable[str], source: Optional[str] = None):
        self.problems: List[str] = list(problems)
        self.source = source
        where = f" in {source}" if source else ""
        summary = "; ".join(self.problems)
        super().__init__(f"Incomplete lexicon configuration{where}: {summary}")


class PromptModerationError(DaylensError):
    """A prompt still contains blocked terms after cleaning."""

    category = ErrorCategory.MODERATION_ERROR

    def __init__(self, flagged_terms: Iterable[str], categories: Iterable[str]):
        self.flagged_terms = list(flagged_terms)
        self.categories = list(categories)
        super().__init__("Unable to generate safe prompt. Please revise your reflection.")

    def to_dict(self) -> Dict[str, object]:
        data = super().to_dict()
        data["categories"] = self.categories
        return data


class PreferenceNotFoundError(DaylensError):
    category = ErrorCategory.NOT_FOUND

    def __init__(self, user_id: str, emotion: str):
        self.user_id = user_id
        self.emotion = emotion
        super().__init__(f"No preference recorded for user {user_id} and emotion {emotion}")


class ExplanationNotFoundError(DaylensError):
    category = ErrorCategory.NOT_FOUND

    def __init__(self, image_id: str):
        self.image_id = image_id
        super().__init__("Explanation not found")


class PreferenceStoreError(DaylensError):
    """The persistence collaborator failed to read or write."""

    category = ErrorCategory.STORAGE_ERROR


class ImageNotFoundError(DaylensError):
    category = ErrorCategory.NOT_FOUND

    def __init__(self, image_id: str):
        self.image_id = image_id
        super().__init__("Image not found")
