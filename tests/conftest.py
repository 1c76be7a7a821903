"""Shared test fixtures.

Settings are read at import time, so the environment is prepared before any
application module is imported.
"""

import os

os.environ.setdefault("JWT_SECRET", "test-secret-do-not-use-in-production")
os.environ["BOARD_STORE"] = "memory"

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.main import app  # noqa: E402
from src.sq_gateway.auth.jwt_handler import create_access_token  # noqa: E402


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def alice_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token('user-alice', 'Alice')}"}


@pytest.fixture
def bob_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token('user-bob', 'Bob')}"}
