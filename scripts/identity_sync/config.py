"""Configuration from environment variables (and an optional .env file).

Every provider credential is required: the job always syncs all three
providers. Credential values may be secret references, see secrets.py.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from scripts.identity_sync.secrets import resolve_credential

GOOGLE_WORKSPACE_API = "https://admin.googleapis.com/admin/directory/v1/users"
AZURE_ENTRA_API = "https://graph.microsoft.com/v1.0/users"


@dataclass(frozen=True)
class GraphStoreConfig:
    uri: str
    user: str
    password: str
    database: Optional[str] = None  # None = server default database


@dataclass(frozen=True)
class AwsIamConfig:
    access_key: str
    secret_key: str
    region: str = "us-east-1"


@dataclass(frozen=True)
class GoogleWorkspaceConfig:
    api_key: str  # also sent as the bearer token
    api_url: str = GOOGLE_WORKSPACE_API


@dataclass(frozen=True)
class AzureEntraConfig:
    access_token: str
    api_url: str = AZURE_ENTRA_API


@dataclass(frozen=True)
class SchedulerConfig:
    interval_min: int = 60
    misfire_grace_time: int = 300


@dataclass(frozen=True)
class SyncConfig:
    graph_store: GraphStoreConfig
    aws_iam: AwsIamConfig
    google_workspace: GoogleWorkspaceConfig
    azure_entra: AzureEntraConfig
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    http_timeout: Optional[float] = 30.0


def _require(*names: str) -> dict[str, str]:
    values = {name: os.environ.get(name, "") for name in names}
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ValueError(
            "Missing required environment variable(s): " + ", ".join(missing)
        )
    return values


def _http_timeout() -> Optional[float]:
    timeout = float(os.environ.get("HTTP_TIMEOUT_SECONDS", "30"))
    return timeout if timeout > 0 else None


def load_graph_store_config() -> GraphStoreConfig:
    """Load only the Neo4j connection settings."""
    load_dotenv()

    env = _require("NEO4J_URI", "NEO4J_USER", "NEO4J_PASSWORD")
    return GraphStoreConfig(
        uri=env["NEO4J_URI"],
        user=env["NEO4J_USER"],
        password=resolve_credential("NEO4J_PASSWORD", env["NEO4J_PASSWORD"]),
        database=os.environ.get("NEO4J_DATABASE") or None,
    )


def load_config() -> SyncConfig:
    """Load the full sync configuration.

    Raises ValueError naming every required variable that is unset or empty.
    """
    load_dotenv()

    env = _require(
        "NEO4J_URI",
        "NEO4J_USER",
        "NEO4J_PASSWORD",
        "AWS_ACCESS_KEY",
        "AWS_SECRET_KEY",
        "GOOGLE_API_KEY",
        "AZURE_ACCESS_TOKEN",
    )

    aws_iam = AwsIamConfig(
        access_key=resolve_credential("AWS_ACCESS_KEY", env["AWS_ACCESS_KEY"]),
        secret_key=resolve_credential("AWS_SECRET_KEY", env["AWS_SECRET_KEY"]),
        region=os.environ.get("AWS_REGION", "us-east-1"),
    )

    google_workspace = GoogleWorkspaceConfig(
        api_key=resolve_credential("GOOGLE_API_KEY", env["GOOGLE_API_KEY"]),
        api_url=os.environ.get("GOOGLE_WORKSPACE_API_URL", GOOGLE_WORKSPACE_API),
    )

    azure_entra = AzureEntraConfig(
        access_token=resolve_credential("AZURE_ACCESS_TOKEN", env["AZURE_ACCESS_TOKEN"]),
        api_url=os.environ.get("AZURE_ENTRA_API_URL", AZURE_ENTRA_API),
    )

    scheduler = SchedulerConfig(
        interval_min=int(os.environ.get("SYNC_INTERVAL_MIN", "60")),
        misfire_grace_time=int(os.environ.get("SCHEDULER_MISFIRE_GRACE_S", "300")),
    )

    return SyncConfig(
        graph_store=load_graph_store_config(),
        aws_iam=aws_iam,
        google_workspace=google_workspace,
        azure_entra=azure_entra,
        scheduler=scheduler,
        http_timeout=_http_timeout(),
    )
