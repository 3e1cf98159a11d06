import os
from collections.abc import AsyncGenerator, Generator

import httpx
import pytest
from fastapi import FastAPI

from variant_beacon.integrations.bigquery.sessions import (
    BearerTokenSession,
    ServiceAccountSession,
    SessionProvider,
)
from variant_beacon.platform.config import BeaconConfig
from variant_beacon.tests.fixtures.fake_bigquery import (
    FakeBigQueryClient,
    FakeClientFactory,
    Row,
)

TEST_PROJECT = "test-project"
TEST_TABLE = "test-project.genomes.variants"


@pytest.fixture(scope="session", autouse=True)
def _test_env_defaults() -> None:
    # Keep tests deterministic and independent of the developer's environment.
    os.environ.setdefault("GOOGLE_CLOUD_PROJECT", TEST_PROJECT)
    os.environ.setdefault("GOOGLE_BIGQUERY_TABLE", TEST_TABLE)
    os.environ.setdefault("BEACON_AUTH_MODE", "open")
    os.environ.setdefault("BEACON_CONFIG_FILE", "/nonexistent/config.toml")
    os.environ.setdefault("LOG_FORMAT", "console")


@pytest.fixture(autouse=True)
def _clear_config_caches() -> Generator[None]:
    from variant_beacon.platform.config import get_beacon_config, get_settings

    get_settings.cache_clear()
    get_beacon_config.cache_clear()
    yield
    get_settings.cache_clear()
    get_beacon_config.cache_clear()


@pytest.fixture
def beacon_config() -> BeaconConfig:
    return BeaconConfig(project_id=TEST_PROJECT, table_id=TEST_TABLE)


@pytest.fixture
def variant_rows() -> list[Row]:
    return [
        {
            "reference_name": "chr17",
            "reference_bases": "A",
            "start": 41196407,
            "end": 41196408,
        },
        {
            "reference_name": "chr13",
            "reference_bases": "GT",
            "start": 32315507,
            "end": 32315509,
        },
        {
            "reference_name": "chr1",
            "reference_bases": "C",
            "start": 120,
            "end": 180,
        },
    ]


@pytest.fixture
def fake_client(variant_rows: list[Row]) -> FakeBigQueryClient:
    return FakeBigQueryClient(rows=variant_rows)


@pytest.fixture
def client_factory(fake_client: FakeBigQueryClient) -> FakeClientFactory:
    return FakeClientFactory(fake_client)


@pytest.fixture
def service_account_session(
    client_factory: FakeClientFactory,
) -> ServiceAccountSession:
    return ServiceAccountSession(TEST_PROJECT, client_factory=client_factory)


@pytest.fixture
def bearer_token_session(client_factory: FakeClientFactory) -> BearerTokenSession:
    return BearerTokenSession(TEST_PROJECT, client_factory=client_factory)


def _make_app(sessions: SessionProvider) -> FastAPI:
    from variant_beacon.main import create_app
    from variant_beacon.transport.http.deps import get_session_provider

    app = create_app()
    app.dependency_overrides[get_session_provider] = lambda: sessions
    return app


@pytest.fixture
def app(service_account_session: ServiceAccountSession) -> FastAPI:
    return _make_app(service_account_session)


@pytest.fixture
def auth_app(bearer_token_session: BearerTokenSession) -> FastAPI:
    return _make_app(bearer_token_session)


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def auth_client(auth_app: FastAPI) -> AsyncGenerator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=auth_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
