"""Google Workspace provider: primaryEmail values from the Admin SDK users list."""

from __future__ import annotations

import logging
from typing import Any

from scripts.identity_sync.base_provider import BaseProvider
from scripts.identity_sync.json_scan import find_container_values
from scripts.identity_sync.models import GOOGLE_WORKSPACE

logger = logging.getLogger("identity_sync.google_workspace")


class GoogleWorkspaceProvider(BaseProvider):
    PROVIDER_NAME = "google_workspace"
    SOURCE = GOOGLE_WORKSPACE

    def fetch_users(self) -> list[Any]:
        gw = self.config.google_workspace
        logger.info("Listing Google Workspace users")
        # The API key is sent both as the key parameter and as the bearer token
        document = self._get_json(gw.api_url, gw.api_key, params={"key": gw.api_key})
        return find_container_values(
            document, "users", "primaryEmail", provider=self.PROVIDER_NAME
        )
