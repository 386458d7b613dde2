"""Errors raised by the sync itself (library errors propagate unchanged)."""

from __future__ import annotations


class IdentitySyncError(Exception):
    """Base class for identity sync failures."""


class MalformedResponseError(IdentitySyncError, ValueError):
    """A provider returned a document without the expected structure."""

    def __init__(self, provider: str, detail: str) -> None:
        super().__init__(f"{provider}: {detail}")
        self.provider = provider
