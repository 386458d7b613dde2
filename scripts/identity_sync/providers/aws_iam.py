"""AWS IAM provider: user names from a single ListUsers call."""

from __future__ import annotations

import logging
from typing import Any, Optional

import boto3
import requests

from scripts.identity_sync.base_provider import BaseProvider
from scripts.identity_sync.config import SyncConfig
from scripts.identity_sync.graph import GraphStore
from scripts.identity_sync.models import AWS_IDENTITY

logger = logging.getLogger("identity_sync.aws_iam")


class AwsIamProvider(BaseProvider):
    PROVIDER_NAME = "aws_iam"
    SOURCE = AWS_IDENTITY

    def __init__(
        self,
        config: SyncConfig,
        store: GraphStore,
        http: Optional[requests.Session] = None,
        client: Any = None,
    ) -> None:
        super().__init__(config, store, http)
        iam = config.aws_iam
        self._client = client or boto3.client(
            "iam",
            aws_access_key_id=iam.access_key,
            aws_secret_access_key=iam.secret_key,
            region_name=iam.region,
        )

    def fetch_users(self) -> list[Any]:
        # First page only; IsTruncated/Marker are not followed
        logger.info("Listing AWS IAM users")
        response = self._client.list_users()
        return [{"userName": user["UserName"]} for user in response.get("Users", [])]
