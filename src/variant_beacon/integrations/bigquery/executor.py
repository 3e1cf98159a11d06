"""Existence lookups against the BigQuery allele table."""

import concurrent.futures

import google.auth.exceptions
import requests
from google.api_core import exceptions as api_exceptions
from google.cloud import bigquery

from variant_beacon.domain.variants.predicate import Predicate
from variant_beacon.integrations.bigquery.sessions import SessionProvider
from variant_beacon.platform.config import TABLE_ID_RE, BeaconConfig
from variant_beacon.platform.errors import (
    BackendConnectionError,
    QueryError,
    ResultDecodeError,
)
from variant_beacon.platform.logging import get_logger
from variant_beacon.platform.types import SQLScalar

logger = get_logger(__name__)

# The backend could not be reached or refused our credentials, as opposed to
# rejecting the query. With API retries off, raw transport errors surface too.
_UNAVAILABLE = (
    google.auth.exceptions.TransportError,
    google.auth.exceptions.RefreshError,
    api_exceptions.Unauthorized,
    api_exceptions.ServiceUnavailable,
    api_exceptions.RetryError,
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
    concurrent.futures.TimeoutError,
)


def quote_table_id(table_id: str) -> str:
    """Backtick-quote a ``project.dataset.table`` identifier.

    :raises QueryError: If the identifier is not of that form.
    """
    if not TABLE_ID_RE.match(table_id):
        raise QueryError(
            "validating table id", f"{table_id!r} is not project.dataset.table"
        )
    return f"`{table_id}`"


def build_count_sql(predicate: Predicate, table_id: str) -> str:
    """Render the single-row count query for a predicate."""
    return (
        "SELECT COUNT(v.reference_name) AS count\n"
        f"FROM {quote_table_id(table_id)} AS v\n"
        f"WHERE {predicate.to_sql()}\n"
        "LIMIT 1"
    )


def query_parameter(name: str, value: SQLScalar) -> bigquery.ScalarQueryParameter:
    """Bind a predicate value with its BigQuery type."""
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise QueryError("binding query parameters", f"unsupported value for @{name}")
    type_ = "INT64" if isinstance(value, int) else "STRING"
    return bigquery.ScalarQueryParameter(name, type_, value)


class Executor:
    """Runs rendered predicates against the configured allele table."""

    def __init__(self, config: BeaconConfig, sessions: SessionProvider) -> None:
        self.config = config
        self.sessions = sessions

    def execute(
        self,
        predicate: Predicate,
        table_id: str | None = None,
        *,
        authorization: str | None = None,
    ) -> bool:
        """Check whether any row of the table satisfies the predicate.

        Issues exactly one query; API and job retries are both disabled, and
        the configured timeout bounds each HTTP call.

        :param predicate: Rendered predicate of a validated query.
        :param table_id: ``project.dataset.table``; defaults to the configured table.
        :param authorization: Inbound ``Authorization`` header, for bearer sessions.
        :returns: True if at least one row matches.
        :raises BackendConnectionError: If the backend cannot be reached.
        :raises QueryError: If the backend rejects the query.
        :raises ResultDecodeError: If the result is not a single count row.
        """
        sql = build_count_sql(predicate, table_id or self.config.table_id)
        job_config = bigquery.QueryJobConfig(
            query_parameters=[
                query_parameter(name, value)
                for name, value in predicate.parameters.items()
            ]
        )

        timeout = self.config.query_timeout_seconds
        with self.sessions.open(authorization) as client:
            try:
                job = client.query(
                    sql,
                    job_config=job_config,
                    retry=None,
                    job_retry=None,
                    timeout=timeout,
                )
                rows = list(job.result(retry=None, job_retry=None, timeout=timeout))
            except _UNAVAILABLE as exc:
                raise BackendConnectionError("querying database", exc) from exc
            except api_exceptions.GoogleAPIError as exc:
                raise QueryError("querying database", exc) from exc

        count = _decode_count(rows)
        logger.debug(
            "Count query finished", count=count, conditions=len(predicate.conditions)
        )
        return count > 0


def _decode_count(rows: list[object]) -> int:
    if len(rows) != 1:
        raise ResultDecodeError(
            "reading query result", f"expected 1 row, got {len(rows)}"
        )
    row = rows[0]
    try:
        count = row["count"]  # type: ignore[index]
    except (KeyError, IndexError, TypeError) as exc:
        raise ResultDecodeError("reading query result", "missing count column") from exc
    if isinstance(count, bool) or not isinstance(count, int):
        raise ResultDecodeError(
            "reading query result", f"count is {type(count).__name__}, not an integer"
        )
    return count
