"""Azure Entra ID provider: userPrincipalName values from Microsoft Graph /users."""

from __future__ import annotations

import logging
from typing import Any

from scripts.identity_sync.base_provider import BaseProvider
from scripts.identity_sync.json_scan import find_container_values
from scripts.identity_sync.models import AZURE_ENTRA

logger = logging.getLogger("identity_sync.azure_entra")


class AzureEntraProvider(BaseProvider):
    PROVIDER_NAME = "azure_entra"
    SOURCE = AZURE_ENTRA

    def fetch_users(self) -> list[Any]:
        entra = self.config.azure_entra
        logger.info("Listing Azure Entra ID users")
        document = self._get_json(entra.api_url, entra.access_token)
        return find_container_values(
            document, "value", "userPrincipalName", provider=self.PROVIDER_NAME
        )
