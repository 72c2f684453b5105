"""Shared fixtures for MaxMovies assistant tests."""

import os

import pytest
from fastapi.testclient import TestClient

# Keep module-level settings away from real credentials and storage
os.environ.setdefault("DEEPSEEK_API_KEY", "test-key")
os.environ.setdefault("MEMORY_DIR", "/tmp/maxmovies-test-memory")

from app.main import app, get_chat_client, get_memory_store  # noqa: E402
from assistant.core.memory import MemoryStore  # noqa: E402
from config.settings import Settings, get_settings  # noqa: E402
from tests.fakes import FakeChatClient  # noqa: E402


@pytest.fixture
def settings(tmp_path):
    s = Settings()
    s.app_env = "production"
    s.deepseek_api_key = "test-key"
    s.upstream_failure_mode = "error"
    s.memory_dir = str(tmp_path)
    s.memory_max_turns = 20
    return s


@pytest.fixture
def store(tmp_path):
    memory_store = MemoryStore(tmp_path)
    memory_store.init()
    return memory_store


@pytest.fixture
def fake_llm():
    return FakeChatClient()


@pytest.fixture
def client(settings, store, fake_llm):
    """FastAPI test client wired to a temp memory store and the fake upstream."""
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_memory_store] = lambda: store
    app.dependency_overrides[get_chat_client] = lambda: fake_llm
    yield TestClient(app)
    app.dependency_overrides.clear()
