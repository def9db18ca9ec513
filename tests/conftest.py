"""
pytest configuration for the apirouter test suite.

Pins the environment defaults the router reads at construction time and
exposes a `make_client` fixture serving any ASGI app through httpx.
"""

import os

os.environ.setdefault('ENV', 'test')
os.environ.setdefault('LOG_LEVEL', 'INFO')
os.environ.setdefault('LOG_FORMAT', 'plain')

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from apirouter import VersionRouter


@pytest.fixture
def router():
    return VersionRouter()


@pytest.fixture
def make_client():
    def _make(app):
        return AsyncClient(transport=ASGITransport(app=app), base_url='http://testserver')
    return _make


@pytest_asyncio.fixture
async def client(router, make_client):
    async with make_client(router) as c:
        yield c


@pytest.fixture
def development(monkeypatch):
    monkeypatch.setenv('ENV', 'development')
    yield
