"""
Base Example Site — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Route tests run the real app (dispatcher, middleware, templates,
       session cookie) against a mocked Base API client, so no Base API
       instance is needed.
How:   create_app(client=...) injects the mock; httpx's ASGITransport
       drives the app in-process. The cookie jar of the AsyncClient
       carries the signed session between requests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_base_client: MagicMock shaped like BaseClient, AsyncMock calls
    ├── test_client:      HTTPX AsyncClient talking to a fresh app
    ├── sample_user:      A User as the Base API would return it
    └── page_of:          Builds a Page[...] for list endpoints
"""

import os
import tempfile

# Override settings BEFORE any basesite import reads them
os.environ["BASE_API_URL"] = "http://base.test"
os.environ["BASE_ACCESS_TOKEN"] = "test-token-not-real"
os.environ["SESSION_SECRET_KEY"] = "test-session-secret"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="basesite_test_")
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from basesite.schemas.resources import Page, PageMetadata, User

# Async methods per endpoint; everything else on the mock stays a MagicMock
CLIENT_METHODS = {
    "users": ("create", "list", "get", "update", "delete"),
    "sessions": ("authenticate",),
    "files": ("create", "list", "get", "delete"),
    "images": ("create", "list", "get", "delete"),
    "emails": ("send",),
    "mailing_lists": ("list", "get", "subscribe", "unsubscribe", "send"),
}


@pytest.fixture
def mock_base_client():
    """
    A stand-in for BaseClient.

    Usage:
        async def test_x(test_client, mock_base_client):
            mock_base_client.users.get.return_value = user
            mock_base_client.users.get.side_effect = UnauthorizedError()
    """
    client = MagicMock()
    client.url = "http://base.test"
    for endpoint, methods in CLIENT_METHODS.items():
        for method in methods:
            setattr(getattr(client, endpoint), method, AsyncMock())
    client.health_check = AsyncMock(return_value=True)
    client.files.download_url.return_value = "http://base.test/v1/files/f-1/download"
    client.images.image_url.return_value = "http://base.test/v1/images/i-1/version"
    client.mailing_lists.unsubscribe_url.return_value = "http://base.test/v1/unsubscribe"
    return client


@pytest_asyncio.fixture
async def test_client(mock_base_client):
    """
    HTTPX AsyncClient configured to talk to a fresh app instance.

    Redirects are NOT followed, so tests can assert on 303 + Location.
    """
    from basesite.main import create_app

    app = create_app(client=mock_base_client)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture
def sample_user():
    return User(id="u-1", email="a@b.com", custom_data={"plan": "free"})


@pytest.fixture
def page_of():
    """Build a Page the way a list endpoint returns it."""
    def build(items, page=1, per_page=10, count=None):
        return Page(
            items=list(items),
            metadata=PageMetadata(
                page=page,
                per_page=per_page,
                count=len(items) if count is None else count,
            ),
        )
    return build
