# tests/conftest.py
import os
from typing import Generator
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

# Configuration is read at import time, so set it before importing the app.
os.environ.update(
    {
        "ADMIN_API_KEY": "test-admin-key",
        "RATE_LIMIT_MAX_REQUESTS": "5",
        "RATE_LIMIT_WINDOW_MS": "60000",
        "GENERAL_RATE_LIMIT_MAX_REQUESTS": "1000",
        "MDPDF_SHARE_ENABLED": "true",
        "LOG_LEVEL": "WARNING",
    }
)
os.environ.pop("SENTRY_DSN", None)

import server  # noqa: E402

FAKE_PDF = b"%PDF-1.7\n1 0 obj << /Type /Catalog >> endobj\ntrailer << /Root 1 0 R >>\n%%EOF\n"
ADMIN_KEY = "test-admin-key"


class FakeClock:
    """Manually advanced replacement for time.time."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def reset_state():
    """Every test starts with empty stores and fresh rate-limit windows."""
    server.share_store.clear()
    server.feedback_store.clear()
    server.conversion_limiter.reset()
    server.api_limiter.reset()
    yield
    server.share_store.clear()
    server.feedback_store.clear()


@pytest.fixture(autouse=True)
def mock_renderer():
    """Replace Chromium with a canned PDF so API tests never launch a browser."""
    with patch.object(server.renderer, "render", new=AsyncMock(return_value=FAKE_PDF)) as render:
        yield render


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    with TestClient(server.app) as test_client:
        yield test_client
