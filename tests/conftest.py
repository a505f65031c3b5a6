"""
pytest configuration and fixtures for the user API test suite
The app runs in-process over httpx's ASGI transport; no server or database is needed.
"""

import os

# Settings are read at import time, so the store must be chosen before the app loads
os.environ.setdefault("USER_STORE", "memory")

import pytest
import pytest_asyncio
import httpx
from unittest.mock import AsyncMock

from app import app
from models.user import User
from services.user_repository import UserRepository, InMemoryUserRepository, get_user_repository


@pytest.fixture
def john() -> User:
    """The stored user most tests start from"""
    return User(id=1, name="John Doe", email="john.doe@example.com")


@pytest.fixture
def user_repository() -> AsyncMock:
    """Mocked persistence gateway; every lookup misses unless a test says otherwise"""
    repository = AsyncMock(spec=UserRepository)
    repository.find_all.return_value = []
    repository.find_by_id.return_value = None
    repository.find_by_email.return_value = None
    return repository


@pytest.fixture
def memory_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


async def _client_for(repository):
    app.dependency_overrides[get_user_repository] = lambda: repository
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(user_repository):
    """HTTP client wired to the mocked repository"""
    async for http_client in _client_for(user_repository):
        yield http_client


@pytest_asyncio.fixture
async def memory_client(memory_repository):
    """HTTP client wired to a fresh in-memory repository"""
    async for http_client in _client_for(memory_repository):
        yield http_client
