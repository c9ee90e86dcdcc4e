"""Pytest fixtures for API tests.

Provides a TestClient whose database, configuration and GraphQL client
factory are replaced with in-memory fakes.
"""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from quotebridge.api.main import app
from quotebridge.api.routes.quotes import get_client_factory
from quotebridge.config import AppConfig, get_app_config
from quotebridge.db.connection import get_db
from tests.helpers import FakeGraphQLClient


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(
        api_key="test-key",
        api_secret="test-secret",
        app_url="https://quotes.example.com",
        allowed_origins=["*"],
    )


@pytest.fixture
def fake_graphql() -> FakeGraphQLClient:
    return FakeGraphQLClient()


@pytest.fixture
def client(
    db_session: Session,
    app_config: AppConfig,
    fake_graphql: FakeGraphQLClient,
) -> Generator[TestClient, None, None]:
    """Create a TestClient with overridden dependencies.

    Args:
        db_session: Test database session fixture.
        app_config: Configuration served to routes.
        fake_graphql: Stand-in for every Shopify GraphQL client.

    Yields:
        TestClient configured for testing.
    """

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_app_config] = lambda: app_config
    app.dependency_overrides[get_client_factory] = lambda: fake_graphql.factory
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
