"""The normalized identity record handed from providers to the graph store."""

from __future__ import annotations

from dataclasses import dataclass

# Source tags written onto User nodes
AWS_IDENTITY = "AWSIdentity"
GOOGLE_WORKSPACE = "GoogleWorkspace"
AZURE_ENTRA = "AzureEntra"

SOURCE_TAGS = frozenset({AWS_IDENTITY, GOOGLE_WORKSPACE, AZURE_ENTRA})


@dataclass(frozen=True)
class IdentityRecord:
    identifier: str
    source: str

    def __post_init__(self) -> None:
        if not self.identifier:
            raise ValueError("IdentityRecord.identifier must be non-empty")
        if not self.source:
            raise ValueError("IdentityRecord.source must be non-empty")
