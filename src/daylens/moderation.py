"""Blocked-term screening for image prompts before they leave the system."""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from daylens.error_handling import PromptModerationError
from daylens.lexicon import PhraseMatcher

logger = logging.getLogger(__name__)

# A cleaner receives the unsafe prompt and its flagged terms and returns a
# rewritten prompt, usually by asking an external language model.
PromptCleaner = Callable[[str, List[str]], str]


BLOCKED_TERMS: Dict[str, Tuple[str, ...]] = {
    "public_figures": (
        "trump", "biden", "obama", "putin", "xi jinping", "modi", "macron", "trudeau",
        "taylor swift", "beyonce", "kardashian", "elon musk", "bill gates", "jeff bezos",
        "kanye", "drake", "rihanna", "ariana grande", "selena gomez",
        "hitler", "stalin", "mao", "mussolini",
    ),
    "explicit_content": (
        "nude", "naked", "porn", "sex", "xxx", "nsfw", "explicit", "erotic",
        "sexual", "provocative", "seductive", "topless", "underwear", "lingerie",
    ),
    "violent_content": (
        "blood", "gore", "violent", "murder", "kill", "dead", "death", "weapon",
        "gun", "knife", "sword", "torture", "brutal", "attack", "war", "bomb",
        "explosion", "shooting", "stabbing", "assault",
    ),
    "hateful_content": (
        "racist", "nazi", "kkk", "hate", "supremacy", "slur", "offensive",
    ),
}

_MATCHERS: Dict[str, PhraseMatcher] = {
    category: PhraseMatcher.from_phrases(terms) for category, terms in BLOCKED_TERMS.items()
}


@dataclass
class ModerationResult:
    """Outcome of screening one prompt."""
    is_safe: bool
    original_prompt: str
    flagged_terms: List[str] = field(default_factory=list)
    categories: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "is_safe": self.is_safe,
            "flagged_terms": list(self.flagged_terms),
            "categories": list(self.categories),
            "original_prompt": self.original_prompt,
        }


@dataclass
class CleanedPrompt:
    cleaned_prompt: str
    was_cleaned: bool
    original_prompt: str


def moderate_prompt(prompt: str, matchers: Optional[Dict[str, PhraseMatcher]] = None) -> ModerationResult:
    """Flag blocked terms in ``prompt``, matched as whole words or phrases."""
    flagged: List[str] = []
    categories: List[str] = []
    for category, matcher in (matchers or _MATCHERS).items():
        _, terms = matcher.scan(prompt)
        if terms:
            flagged.extend(terms)
            categories.append(category)
    return ModerationResult(
        is_safe=not flagged,
        original_prompt=prompt,
        flagged_terms=flagged,
        categories=categories,
    )


def validate_prompt(prompt: str, cleaner: Optional[PromptCleaner] = None) -> CleanedPrompt:
    """Return a prompt that passes moderation.

    Unsafe prompts go through ``cleaner`` once and are screened again.

    Raises:
        PromptModerationError: if the prompt is unsafe and there is no
            cleaner, or the cleaned prompt is still unsafe.
    """
    result = moderate_prompt(prompt)
    if result.is_safe:
        return CleanedPrompt(cleaned_prompt=prompt, was_cleaned=False, original_prompt=prompt)

    logger.warning(
        "Prompt flagged for %s: %s",
        ", ".join(result.categories),
        ", ".join(result.flagged_terms),
    )
    if cleaner is None:
        raise PromptModerationError(result.flagged_terms, result.categories)

    cleaned = cleaner(prompt, list(result.flagged_terms))
    recheck = moderate_prompt(cleaned)
    if not recheck.is_safe:
        raise PromptModerationError(recheck.flagged_terms, recheck.categories)

    logger.info("Prompt cleaned after moderation")
    return CleanedPrompt(cleaned_prompt=cleaned, was_cleaned=True, original_prompt=prompt)

