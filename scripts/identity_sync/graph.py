"""Neo4j access: the User upsert and ingestion-run tracking.

A GraphStore owns one driver and one session for its whole lifetime.
Every write runs in its own managed transaction, so a failure partway
through a provider leaves the earlier records committed.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Optional

from neo4j import Driver, GraphDatabase, ManagedTransaction

from scripts.identity_sync.config import GraphStoreConfig
from scripts.identity_sync.models import IdentityRecord

logger = logging.getLogger("identity_sync.graph")

MERGE_USER = "MERGE (u:User {identifier: $identifier}) SET u.source = $source"

CREATE_RUN = """
CREATE (r:IngestionRun {
    id: $run_id,
    provider: $provider,
    source: $source,
    status: 'RUNNING',
    started_at: datetime()
})
"""

FINISH_RUN = """
MATCH (r:IngestionRun {id: $run_id})
SET r.status = $status,
    r.finished_at = datetime(),
    r.records_upserted = $records_upserted,
    r.records_skipped = $records_skipped,
    r.error_message = $error_message
"""

RECENT_RUNS = """
MATCH (r:IngestionRun)
WHERE $provider IS NULL OR r.provider = $provider
RETURN r.id AS id, r.provider AS provider, r.source AS source,
       r.status AS status, r.started_at AS started_at,
       r.finished_at AS finished_at, r.records_upserted AS records_upserted,
       r.records_skipped AS records_skipped, r.error_message AS error_message
ORDER BY r.started_at DESC
LIMIT $limit
"""


def _merge_user(tx: ManagedTransaction, identifier: str, source: str) -> None:
    tx.run(MERGE_USER, identifier=identifier, source=source).consume()


def _write(tx: ManagedTransaction, query: str, params: dict[str, Any]) -> None:
    tx.run(query, params).consume()


def _read_recent_runs(
    tx: ManagedTransaction, provider: Optional[str], limit: int
) -> list[dict[str, Any]]:
    result = tx.run(RECENT_RUNS, provider=provider, limit=limit)
    return [record.data() for record in result]


class GraphStore:
    """Driver plus a single session, released together by close()."""

    def __init__(self, config: GraphStoreConfig, driver: Optional[Driver] = None) -> None:
        self._driver = driver or GraphDatabase.driver(
            config.uri, auth=(config.user, config.password)
        )
        try:
            if config.database:
                self._session = self._driver.session(database=config.database)
            else:
                self._session = self._driver.session()
        except Exception:
            self._driver.close()
            raise
        self._closed = False

    def __enter__(self) -> GraphStore:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._session.close()
        finally:
            self._driver.close()
        logger.debug("Graph store connection closed")

    def verify_connectivity(self) -> None:
        """Fail fast if the server is unreachable or rejects the credentials."""
        self._driver.verify_connectivity()

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def upsert_user(self, record: IdentityRecord) -> None:
        """Merge the User keyed by identifier and overwrite its source."""
        self._session.execute_write(_merge_user, record.identifier, record.source)

    # ------------------------------------------------------------------
    # Ingestion run tracking
    # ------------------------------------------------------------------

    def record_run_start(self, provider: str, source: str) -> str:
        """Create an IngestionRun node with status RUNNING. Returns the run id."""
        run_id = str(uuid.uuid4())
        self._session.execute_write(
            _write,
            CREATE_RUN,
            {"run_id": run_id, "provider": provider, "source": source},
        )
        return run_id

    def record_run_end(
        self,
        run_id: str,
        status: str,
        records_upserted: int = 0,
        records_skipped: int = 0,
        error_message: Optional[str] = None,
    ) -> None:
        self._session.execute_write(
            _write,
            FINISH_RUN,
            {
                "run_id": run_id,
                "status": status,
                "records_upserted": records_upserted,
                "records_skipped": records_skipped,
                "error_message": error_message,
            },
        )

    def get_recent_runs(
        self, provider: Optional[str] = None, limit: int = 10
    ) -> list[dict[str, Any]]:
        """Most recent runs first, optionally for a single provider."""
        return self._session.execute_read(_read_recent_runs, provider, limit)
