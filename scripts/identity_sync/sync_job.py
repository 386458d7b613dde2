"""The batch job: every provider in turn, over one graph-store session."""

from __future__ import annotations

import importlib
import logging
from enum import Enum
from typing import Callable, Optional, Sequence

import requests

from scripts.identity_sync.base_provider import BaseProvider
from scripts.identity_sync.config import GraphStoreConfig, SyncConfig
from scripts.identity_sync.graph import GraphStore

logger = logging.getLogger("identity_sync.job")

# Run order matters: a provider finishes all of its writes before the next starts
PROVIDER_ORDER = ["aws_iam", "google_workspace", "azure_entra"]

PROVIDER_REGISTRY: dict[str, tuple[str, str]] = {
    # name -> (module_path, class_name)
    "aws_iam": ("scripts.identity_sync.providers.aws_iam", "AwsIamProvider"),
    "google_workspace": ("scripts.identity_sync.providers.google_workspace", "GoogleWorkspaceProvider"),
    "azure_entra": ("scripts.identity_sync.providers.azure_entra", "AzureEntraProvider"),
}


class JobState(str, Enum):
    INIT = "INIT"
    CONNECTING = "CONNECTING"
    RUNNING_AWS_IAM = "RUNNING_AWS_IAM"
    RUNNING_GOOGLE_WORKSPACE = "RUNNING_GOOGLE_WORKSPACE"
    RUNNING_AZURE_ENTRA = "RUNNING_AZURE_ENTRA"
    DONE = "DONE"
    FAILED = "FAILED"

    @classmethod
    def running(cls, provider: str) -> JobState:
        return cls(f"RUNNING_{provider.upper()}")


def get_provider(
    name: str,
    config: SyncConfig,
    store: GraphStore,
    http: requests.Session,
) -> BaseProvider:
    """Instantiate a provider by registry name."""
    entry = PROVIDER_REGISTRY.get(name)
    if not entry:
        raise ValueError(f"Unknown provider: {name}")

    module_path, class_name = entry
    module = importlib.import_module(module_path)
    cls = getattr(module, class_name)
    return cls(config, store, http=http)


ProviderFactory = Callable[[str, SyncConfig, GraphStore, requests.Session], BaseProvider]


class IdentitySyncJob:
    """Runs providers sequentially; the first failure aborts the rest.

    Writes committed before a failure stay committed. The graph store and
    the shared HTTP session are released on every exit path.
    """

    def __init__(
        self,
        config: SyncConfig,
        providers: Optional[Sequence[str]] = None,
        store_factory: Callable[[GraphStoreConfig], GraphStore] = GraphStore,
        provider_factory: ProviderFactory = get_provider,
        http_factory: Callable[[], requests.Session] = requests.Session,
    ) -> None:
        self.config = config
        self.providers = list(providers) if providers is not None else list(PROVIDER_ORDER)
        for name in self.providers:
            if name not in PROVIDER_REGISTRY:
                raise ValueError(f"Unknown provider: {name}")
        self._store_factory = store_factory
        self._provider_factory = provider_factory
        self._http_factory = http_factory
        self.state = JobState.INIT

    def run(self) -> dict[str, dict[str, int]]:
        """Sync every configured provider. Returns {provider: {"users": n, "skipped": n}}."""
        results: dict[str, dict[str, int]] = {}
        try:
            self.state = JobState.CONNECTING
            with self._store_factory(self.config.graph_store) as store, self._http_factory() as http:
                store.verify_connectivity()
                for name in self.providers:
                    self.state = JobState.running(name)
                    provider = self._provider_factory(name, self.config, store, http)
                    logger.info("Starting sync for %s", name, extra={"provider": name})
                    results[name] = provider.sync_with_tracking()
        except Exception:
            self.state = JobState.FAILED
            raise

        self.state = JobState.DONE
        return results
