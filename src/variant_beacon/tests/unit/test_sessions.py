import google.auth.exceptions
import pytest
from google.oauth2.credentials import Credentials

from variant_beacon.integrations.bigquery.sessions import (
    BearerTokenSession,
    ServiceAccountSession,
    bearer_token,
    session_provider_for,
)
from variant_beacon.platform.config import BeaconConfig
from variant_beacon.platform.errors import (
    BackendConnectionError,
    ErrorCode,
    UnauthorizedError,
)
from variant_beacon.tests.fixtures.fake_bigquery import (
    FakeBigQueryClient,
    FakeClientFactory,
)


class TestBearerToken:
    def test_extracts_token(self) -> None:
        assert bearer_token("Bearer ya29.token") == "ya29.token"
        assert bearer_token("bearer   ya29.token ") == "ya29.token"

    @pytest.mark.parametrize(
        "header", [None, "", "Basic dXNlcjpwYXNz", "Bearer", "Bearer   ", "ya29.token"]
    )
    def test_rejects_missing_or_malformed(self, header: str | None) -> None:
        with pytest.raises(UnauthorizedError) as excinfo:
            bearer_token(header)
        assert excinfo.value.status == 401
        assert excinfo.value.code == ErrorCode.UNAUTHORIZED


def test_service_account_session_uses_default_credentials(
    service_account_session: ServiceAccountSession,
    client_factory: FakeClientFactory,
    fake_client: FakeBigQueryClient,
) -> None:
    with service_account_session.open("Bearer ignored") as client:
        assert client is fake_client
        assert not fake_client.closed
    assert client_factory.calls == [{"project": "test-project"}]
    assert fake_client.closed


def test_bearer_session_forwards_token(
    bearer_token_session: BearerTokenSession,
    client_factory: FakeClientFactory,
    fake_client: FakeBigQueryClient,
) -> None:
    with bearer_token_session.open("Bearer caller-token"):
        pass
    (call,) = client_factory.calls
    assert call["project"] == "test-project"
    credentials = call["credentials"]
    assert isinstance(credentials, Credentials)
    assert credentials.token == "caller-token"
    assert fake_client.closed


def test_bearer_session_rejects_before_building_client(
    bearer_token_session: BearerTokenSession, client_factory: FakeClientFactory
) -> None:
    with pytest.raises(UnauthorizedError):
        bearer_token_session.open(None)
    assert client_factory.calls == []


def test_client_construction_failure_is_connection_error(
    service_account_session: ServiceAccountSession, client_factory: FakeClientFactory
) -> None:
    client_factory.error = google.auth.exceptions.DefaultCredentialsError("nope")
    with pytest.raises(BackendConnectionError) as excinfo:
        with service_account_session.open():
            pass
    assert excinfo.value.context == "creating bigquery client"


def test_client_closed_when_body_raises(
    service_account_session: ServiceAccountSession, fake_client: FakeBigQueryClient
) -> None:
    with pytest.raises(RuntimeError):
        with service_account_session.open():
            raise RuntimeError("boom")
    assert fake_client.closed


@pytest.mark.parametrize(
    ("auth_mode", "expected"),
    [("open", ServiceAccountSession), ("auth", BearerTokenSession)],
)
def test_session_provider_for_auth_mode(auth_mode: str, expected: type) -> None:
    config = BeaconConfig(
        project_id="p", table_id="p.d.t", auth_mode=auth_mode  # type: ignore[arg-type]
    )
    provider = session_provider_for(config)
    assert isinstance(provider, expected)
    assert provider.project_id == "p"  # type: ignore[attr-defined]
