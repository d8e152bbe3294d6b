"""
Shared pytest fixtures for the Sentry Academy test suite.
All fixtures use mock mode — no OpenAI credentials required.
Factory helpers live in tests/factories.py so they can be imported
directly by test modules as well as being used here.
"""
import sys
import os

_tests_dir = os.path.dirname(__file__)
_src_dir   = os.path.join(_tests_dir, "..", "src")
for _p in (_tests_dir, _src_dir):
    if _p not in sys.path:
        sys.path.insert(0, _p)

# Force mock mode — never call OpenAI during tests
os.environ["FORCE_MOCK_MODE"] = "true"
os.environ.setdefault("OPENAI_API_KEY", "<placeholder>")
os.environ["GENERATION_DELAY_SECONDS"] = "0.01"


import pytest

from factories import make_course, make_request

from sentry_academy.config import get_settings
from sentry_academy.generation_store import GenerationStore
from sentry_academy.models import EngineerRole, GenerationStatus
from sentry_academy.progress_store import ProgressStore
from sentry_academy.storage import InMemoryStorage


# ─── pytest fixtures ──────────────────────────────────────────────────────────

@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def store():
    return GenerationStore()


@pytest.fixture
def memory_storage():
    return InMemoryStorage()


@pytest.fixture
def progress_store(memory_storage):
    return ProgressStore(memory_storage)


@pytest.fixture
def backend_store(progress_store):
    progress_store.set_user_role(EngineerRole.BACKEND)
    return progress_store


@pytest.fixture
def reviewable_course(store):
    """A stored course whose request has finished generating."""
    request = make_request(request_id="req-c1")
    course = make_course("c1", request=request)
    store.add_generation_request(request)
    store.update_generation_progress(request.id, status=GenerationStatus.REVIEW_NEEDED, progress=100)
    store.add_course(course)
    return course
