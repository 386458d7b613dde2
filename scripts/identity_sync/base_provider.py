"""Abstract base class for identity providers."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Optional

import requests

from scripts.identity_sync.config import SyncConfig
from scripts.identity_sync.graph import GraphStore
from scripts.identity_sync.models import IdentityRecord
from scripts.identity_sync.normalizer import extract_identifier

logger = logging.getLogger("identity_sync.provider")


class BaseProvider(ABC):
    """Each provider implements fetch_users() and declares its name and source tag."""

    PROVIDER_NAME: str = ""
    SOURCE: str = ""

    def __init__(
        self,
        config: SyncConfig,
        store: GraphStore,
        http: Optional[requests.Session] = None,
    ) -> None:
        self.config = config
        self.store = store
        self.http = http
        self.timeout = config.http_timeout

    @abstractmethod
    def fetch_users(self) -> list[Any]:
        """Call the provider once and return its raw user entries in response order."""

    def sync(self) -> dict[str, int]:
        """Fetch, normalize and upsert. Returns {"users": upserted, "skipped": skipped}."""
        entries = self.fetch_users()
        logger.info(
            "Fetched %d entries from %s", len(entries), self.PROVIDER_NAME,
            extra={"provider": self.PROVIDER_NAME, "records": len(entries)},
        )

        upserted = 0
        skipped = 0
        for position, entry in enumerate(entries):
            identifier = extract_identifier(entry)
            if identifier is None:
                skipped += 1
                logger.warning(
                    "Skipping %s entry %d: no usable identifier",
                    self.PROVIDER_NAME, position,
                    extra={"provider": self.PROVIDER_NAME},
                )
                continue
            self.store.upsert_user(IdentityRecord(identifier, self.SOURCE))
            upserted += 1
        return {"users": upserted, "skipped": skipped}

    def sync_with_tracking(self) -> dict[str, int]:
        """Wrap sync() with an IngestionRun node. Failures are recorded, then re-raised."""
        run_id = self.store.record_run_start(self.PROVIDER_NAME, self.SOURCE)
        started = time.monotonic()
        try:
            results = self.sync()
        except Exception as exc:
            # the sync error propagates even when the tracking write fails
            try:
                self.store.record_run_end(
                    run_id=run_id,
                    status="FAILED",
                    error_message=str(exc)[:1000],
                )
            except Exception:
                logger.warning(
                    "Could not record failed run %s",
                    run_id,
                    exc_info=True,
                    extra={"provider": self.PROVIDER_NAME, "run_id": run_id},
                )
            logger.warning(
                "Sync failed: %s",
                exc,
                extra={"provider": self.PROVIDER_NAME, "run_id": run_id},
            )
            raise

        self.store.record_run_end(
            run_id=run_id,
            status="SUCCESS",
            records_upserted=results["users"],
            records_skipped=results["skipped"],
        )
        logger.info(
            "Sync complete",
            extra={
                "provider": self.PROVIDER_NAME,
                "source": self.SOURCE,
                "records": results["users"],
                "skipped": results["skipped"],
                "duration_s": round(time.monotonic() - started, 3),
                "run_id": run_id,
            },
        )
        return results

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    def _get_json(
        self,
        url: str,
        token: str,
        params: Optional[dict[str, str]] = None,
    ) -> Any:
        """Single bearer-authenticated GET. Non-2xx and bad JSON raise."""
        if self.http is None:
            raise RuntimeError(f"{self.PROVIDER_NAME} requires an HTTP session")
        resp = self.http.get(
            url,
            params=params,
            headers={"Authorization": f"Bearer {token}"},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()
