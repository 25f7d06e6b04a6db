"""
Test Configuration and Fixtures

Shared fixtures, fakes and environment for the test suite.
"""

import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

# Set test environment variables before importing the app.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("API_KEY", "test-api-key")
os.environ.setdefault("VIKUNJA_BASE_URL", "http://vikunja.test")
os.environ.setdefault("VIKUNJA_API_TOKEN", "vikunja-test-token")
os.environ.setdefault("TOGETHER_API_KEY", "test-key")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_FORMAT", "text")

from task_intake.vikunja.models import Label, Project  # noqa: E402
from tests.support.llm import FakeCompletionClient  # noqa: E402
from tests.support.task_store import FakeTaskStore  # noqa: E402

TEST_API_KEY = os.environ["API_KEY"]


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "api: API endpoint tests")


def pytest_collection_modifyitems(config, items):
    """
    Auto-assign tier markers:
    - tests/api/** => api
    - everything else => unit
    """
    for item in items:
        path = str(getattr(item, "fspath", ""))
        if item.get_closest_marker("api") or item.get_closest_marker("unit"):
            continue
        if "/tests/api/" in path or "\\tests\\api\\" in path:
            item.add_marker(pytest.mark.api)
        else:
            item.add_marker(pytest.mark.unit)


# =============================================================================
# FAKES
# =============================================================================


@pytest.fixture
def fake_store() -> FakeTaskStore:
    """Task store with two projects and three labels."""
    return FakeTaskStore(
        projects=[Project(id=1, title="Work"), Project(id=2, title="Home")],
        labels=[
            Label(id=10, title="urgent"),
            Label(id=11, title="errand"),
            Label(id=12, title="phone"),
        ],
    )


@pytest.fixture
def fake_completion() -> FakeCompletionClient:
    return FakeCompletionClient()


# =============================================================================
# APPLICATION FIXTURES
# =============================================================================


@pytest.fixture
def app(fake_store, fake_completion):
    """FastAPI application with the task store and completion client faked."""
    from task_intake.api.main import app as fastapi_app
    from task_intake.llm.service import get_completion_client
    from task_intake.vikunja.client import get_vikunja_client

    fastapi_app.dependency_overrides[get_vikunja_client] = lambda: fake_store
    fastapi_app.dependency_overrides[get_completion_client] = lambda: fake_completion

    yield fastapi_app

    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"X-Api-Key": TEST_API_KEY}


@pytest.fixture
def client(app) -> TestClient:
    """Synchronous test client; server errors become 500 responses."""
    return TestClient(app, raise_server_exceptions=False)


@pytest_asyncio.fixture
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
