"""Fixtures for the web application tests."""

from collections.abc import Generator
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from licita_brasil.providers.config import Config
from licita_brasil.web.dependencies import ServiceContainer, build_container
from licita_brasil.web.main import create_app
from licita_brasil.web.rate_limit import limiter

VALID_CNPJ = "11222333000181"
PASSWORD = "Segura@123"


@pytest.fixture
def container(config: Config) -> ServiceContainer:
    """A container with real auth and mocked upstream collaborators."""
    built = build_container(config)
    built.search_service = MagicMock()
    built.company_repo = MagicMock()
    built.municipality_repo = MagicMock()
    return built


@pytest.fixture(autouse=True)
def reset_limiter() -> Generator[None, None, None]:
    """Forgets every counted request once a test is over."""
    yield
    limiter.reset()
    limiter.enabled = False


@pytest.fixture
def app(config: Config, container: ServiceContainer) -> FastAPI:
    """The application under test, without rate limiting."""
    return create_app(config=config, container=container)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """A test client for the application."""
    return TestClient(app)


@pytest.fixture
def auth_headers(client: TestClient) -> dict[str, str]:
    """Registers a user and returns its bearer header."""
    response = client.post("/api/auth/register", json={"cnpj": VALID_CNPJ, "password": PASSWORD})
    return {"Authorization": f"Bearer {response.json()['token']}"}
