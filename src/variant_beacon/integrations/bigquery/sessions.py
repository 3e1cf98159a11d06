"""BigQuery client construction for open and authenticated beacons."""

from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import Protocol

import google.auth.exceptions
from google.api_core import exceptions as api_exceptions
from google.cloud import bigquery
from google.oauth2.credentials import Credentials

from variant_beacon.platform.config import BeaconConfig
from variant_beacon.platform.errors import BackendConnectionError, UnauthorizedError

ClientFactory = Callable[..., bigquery.Client]

# Failures while building a client: missing default credentials, bad token, etc.
_CLIENT_ERRORS = (google.auth.exceptions.GoogleAuthError, api_exceptions.GoogleAPIError)


class SessionProvider(Protocol):
    """Supplies a request-scoped BigQuery client."""

    def open(
        self, authorization: str | None = None
    ) -> AbstractContextManager[bigquery.Client]:
        """Open a client for one request; the client is closed on exit.

        :param authorization: The inbound ``Authorization`` header, if any.
        """
        ...


@contextmanager
def _client_session(
    factory: ClientFactory, project_id: str, **kwargs: object
) -> Iterator[bigquery.Client]:
    try:
        client = factory(project=project_id, **kwargs)
    except _CLIENT_ERRORS as exc:
        raise BackendConnectionError("creating bigquery client", exc) from exc
    try:
        yield client
    finally:
        client.close()


class ServiceAccountSession:
    """Queries with the process credentials (Application Default Credentials)."""

    def __init__(
        self, project_id: str, client_factory: ClientFactory = bigquery.Client
    ) -> None:
        self.project_id = project_id
        self._client_factory = client_factory

    def open(
        self, authorization: str | None = None
    ) -> AbstractContextManager[bigquery.Client]:
        del authorization
        return _client_session(self._client_factory, self.project_id)


class BearerTokenSession:
    """Queries on behalf of the caller with their forwarded OAuth2 token."""

    def __init__(
        self, project_id: str, client_factory: ClientFactory = bigquery.Client
    ) -> None:
        self.project_id = project_id
        self._client_factory = client_factory

    def open(
        self, authorization: str | None = None
    ) -> AbstractContextManager[bigquery.Client]:
        token = bearer_token(authorization)
        return _client_session(
            self._client_factory,
            self.project_id,
            credentials=Credentials(token=token),
        )


def bearer_token(authorization: str | None) -> str:
    """Extract the token from a ``Bearer <token>`` header value.

    :param authorization: Raw ``Authorization`` header.
    :returns: The token.
    :raises UnauthorizedError: If the header is missing, not Bearer, or empty.
    """
    if not authorization:
        raise UnauthorizedError(detail="missing Authorization header")
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        raise UnauthorizedError(detail="Authorization header must use the Bearer scheme")
    token = token.strip()
    if not token:
        raise UnauthorizedError(detail="empty bearer token")
    return token


def session_provider_for(config: BeaconConfig) -> SessionProvider:
    """Pick the session strategy for the configured auth mode."""
    if config.auth_mode == "auth":
        return BearerTokenSession(config.project_id)
    return ServiceAccountSession(config.project_id)
