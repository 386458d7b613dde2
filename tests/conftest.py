from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional

import pytest
import requests

from scripts.identity_sync.config import (
    AwsIamConfig,
    AzureEntraConfig,
    GoogleWorkspaceConfig,
    GraphStoreConfig,
    SchedulerConfig,
    SyncConfig,
)
from scripts.identity_sync.graph import CREATE_RUN, FINISH_RUN, MERGE_USER, RECENT_RUNS, GraphStore

GOOGLE_URL = "https://workspace.test/admin/directory/v1/users"
ENTRA_URL = "https://graph.test/v1.0/users"


# ----------------------------------------------------------------------
# In-memory Neo4j driver
# ----------------------------------------------------------------------


class FakeGraph:
    """Server-side state: User nodes keyed by identifier, IngestionRun nodes by id."""

    def __init__(self) -> None:
        self.users: dict[str, dict[str, Any]] = {}
        self.runs: dict[str, dict[str, Any]] = {}
        self.queries: list[tuple[str, dict[str, Any]]] = []
        self.transactions = 0
        self.unreachable = False
        self.fail_on_identifier: Optional[str] = None
        # when set, the failed write also takes the store down for every later write
        self.stay_down_after_failure = False
        self.down = False

    def user_sources(self) -> dict[str, str]:
        return {identifier: node["source"] for identifier, node in self.users.items()}


class FakeRecord:
    def __init__(self, values: dict[str, Any]) -> None:
        self._values = values

    def data(self) -> dict[str, Any]:
        return dict(self._values)


class FakeResult:
    def __init__(self, records: Optional[list[FakeRecord]] = None) -> None:
        self._records = records or []

    def __iter__(self):
        return iter(self._records)

    def consume(self) -> None:
        return None


class FakeTransaction:
    def __init__(self, graph: FakeGraph) -> None:
        self._graph = graph

    def run(self, query: str, parameters: Optional[dict[str, Any]] = None, **kwargs: Any) -> FakeResult:
        params = {**(parameters or {}), **kwargs}
        graph = self._graph
        graph.queries.append((query, params))

        if query == MERGE_USER:
            if params["identifier"] == graph.fail_on_identifier:
                graph.down = graph.stay_down_after_failure
                raise RuntimeError(f"write rejected for {params['identifier']}")
            node = graph.users.setdefault(params["identifier"], {})
            node["source"] = params["source"]
        elif query == CREATE_RUN:
            graph.runs[params["run_id"]] = {
                "id": params["run_id"],
                "provider": params["provider"],
                "source": params["source"],
                "status": "RUNNING",
                "started_at": f"2026-10-19T00:00:{len(graph.runs):02d}",
            }
        elif query == FINISH_RUN:
            run = graph.runs[params["run_id"]]
            run.update({k: v for k, v in params.items() if k != "run_id"})
            run["finished_at"] = "2026-10-19T00:01:00"
        elif query == RECENT_RUNS:
            runs = [
                r for r in graph.runs.values()
                if params["provider"] is None or r["provider"] == params["provider"]
            ]
            runs.sort(key=lambda r: r["started_at"], reverse=True)
            return FakeResult([FakeRecord(r) for r in runs[: params["limit"]]])
        return FakeResult()


class FakeSession:
    def __init__(self, graph: FakeGraph, database: Optional[str] = None) -> None:
        self._graph = graph
        self.database = database
        self.closed = False

    def execute_write(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        if self._graph.down:
            raise ConnectionError("session expired")
        self._graph.transactions += 1
        return fn(FakeTransaction(self._graph), *args, **kwargs)

    def execute_read(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        return fn(FakeTransaction(self._graph), *args, **kwargs)

    def close(self) -> None:
        self.closed = True


class FakeDriver:
    def __init__(self, graph: FakeGraph) -> None:
        self._graph = graph
        self.sessions: list[FakeSession] = []
        self.closed = False

    def session(self, **kwargs: Any) -> FakeSession:
        session = FakeSession(self._graph, **kwargs)
        self.sessions.append(session)
        return session

    def verify_connectivity(self) -> None:
        if self._graph.unreachable:
            raise ConnectionError("graph store unreachable")

    def close(self) -> None:
        self.closed = True


# ----------------------------------------------------------------------
# requests.Session stand-in
# ----------------------------------------------------------------------


class FakeResponse:
    def __init__(self, body: Any, status_code: int = 200) -> None:
        self.text = body if isinstance(body, str) else json.dumps(body)
        self.status_code = status_code

    def json(self) -> Any:
        return json.loads(self.text)

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeHttpSession:
    def __init__(self, routes: Optional[dict[str, Any]] = None) -> None:
        # url -> FakeResponse or an exception instance to raise
        self.routes = routes or {}
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def get(self, url: str, params=None, headers=None, timeout=None) -> FakeResponse:
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        outcome = self.routes[url]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> FakeHttpSession:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


# ----------------------------------------------------------------------
# Fixtures
# ----------------------------------------------------------------------


@pytest.fixture
def graph() -> FakeGraph:
    return FakeGraph()


@pytest.fixture
def driver(graph: FakeGraph) -> FakeDriver:
    return FakeDriver(graph)


@pytest.fixture
def store_config() -> GraphStoreConfig:
    return GraphStoreConfig(uri="neo4j://localhost:7687", user="neo4j", password="secret")


@pytest.fixture
def graph_store(store_config: GraphStoreConfig, driver: FakeDriver) -> GraphStore:
    return GraphStore(store_config, driver=driver)


@pytest.fixture
def sync_config(store_config: GraphStoreConfig) -> SyncConfig:
    return SyncConfig(
        graph_store=store_config,
        aws_iam=AwsIamConfig(access_key="AKIDEXAMPLE", secret_key="wJalrXUtnFEMI"),
        google_workspace=GoogleWorkspaceConfig(api_key="g-key", api_url=GOOGLE_URL),
        azure_entra=AzureEntraConfig(access_token="az-token", api_url=ENTRA_URL),
        scheduler=SchedulerConfig(interval_min=15, misfire_grace_time=60),
        http_timeout=5.0,
    )


@pytest.fixture
def make_response() -> Callable[..., FakeResponse]:
    return FakeResponse


@pytest.fixture
def make_http() -> Callable[..., FakeHttpSession]:
    return FakeHttpSession


@pytest.fixture(autouse=True)
def reset_identity_sync_logger():
    yield
    root = logging.getLogger("identity_sync")
    root.handlers.clear()
    root.setLevel(logging.NOTSET)
    root.propagate = True
