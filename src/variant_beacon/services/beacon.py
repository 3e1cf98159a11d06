"""Beacon lookups: validate, render, execute."""

from variant_beacon.domain.variants.query import VariantQuery
from variant_beacon.integrations.bigquery.executor import Executor
from variant_beacon.platform.config import BeaconConfig
from variant_beacon.platform.errors import DataAccessError
from variant_beacon.platform.logging import get_logger

logger = get_logger(__name__)


class BeaconService:
    """Answers whether a variant exists in the configured table."""

    def __init__(self, config: BeaconConfig, executor: Executor) -> None:
        self.config = config
        self.executor = executor

    def exists(self, query: VariantQuery, *, authorization: str | None = None) -> bool:
        """Validate the query, then look it up.

        Validation errors are raised before the backend is contacted.

        :param query: Parsed request parameters.
        :param authorization: Inbound ``Authorization`` header, forwarded to the session.
        :returns: Whether at least one matching variant exists.
        """
        query.validate(require_coordinate=self.config.require_coordinate)
        predicate = query.render_predicate()

        try:
            exists = self.executor.execute(
                predicate, self.config.table_id, authorization=authorization
            )
        except DataAccessError as exc:
            logger.error(
                "Variant lookup failed",
                code=exc.code.value,
                context=exc.context,
                error=str(exc),
            )
            raise

        logger.info(
            "Variant lookup",
            reference_name=query.reference_name,
            mode=query.mode.value,
            exists=exists,
        )
        return exists
