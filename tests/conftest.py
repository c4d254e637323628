"""Shared fixtures.

Ensures the `src` directory is on sys.path so the `daylens` package can be
imported without installing the project in editable mode.
"""

import copy
import json
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from daylens.lexicon import DEFAULT_LEXICON_PATH, Lexicon, get_default_lexicon  # noqa: E402
from daylens.models import DetectionInput  # noqa: E402
from daylens.storage import InMemoryPreferenceStore  # noqa: E402


@pytest.fixture(scope="session")
def default_lexicon_data():
    """The packaged lexicon document as a dict."""
    with open(DEFAULT_LEXICON_PATH, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def lexicon_data(default_lexicon_data):
    """A private copy of the packaged lexicon document, safe to mutate."""
    return copy.deepcopy(default_lexicon_data)


@pytest.fixture
def make_lexicon(lexicon_data):
    """Build a lexicon from the packaged document with some tables replaced."""

    def _make(emotions=None, themes=None):
        data = copy.deepcopy(lexicon_data)
        data["emotions"].update(emotions or {})
        data["themes"].update(themes or {})
        return Lexicon.from_dict(data, source="test")

    return _make


@pytest.fixture
def lexicon():
    return get_default_lexicon()


@pytest.fixture
def store():
    return InMemoryPreferenceStore()


@pytest.fixture
def run_reflection():
    """The long-run reflection used across workflow tests."""
    return DetectionInput(
        activities="I went for a long run in the park and finished my 10k goal",
        mood="motivated and proud",
        challenges="my legs were sore halfway through",
        achievements="finished the run in under an hour",
    )
