"""Key scans over parsed JSON documents.

Works on the plain structures ``json.loads`` produces: dicts, lists,
strings, numbers, booleans and ``None``.
"""

from __future__ import annotations

from typing import Any

from scripts.identity_sync.errors import MalformedResponseError


def find_values(node: Any, key: str) -> list[Any]:
    """Collect every value stored under ``key`` anywhere inside ``node``.

    Members are visited in document order. A matching member's value is
    collected as-is and not scanned further; non-matching members are
    descended into.
    """
    found: list[Any] = []
    _collect(node, key, found)
    return found


def _collect(node: Any, key: str, found: list[Any]) -> None:
    if isinstance(node, dict):
        for name, value in node.items():
            if name == key:
                found.append(value)
            else:
                _collect(value, key, found)
    elif isinstance(node, list):
        for item in node:
            _collect(item, key, found)


def find_container_values(
    document: Any, container: str, key: str, provider: str = "response"
) -> list[Any]:
    """Scan the top-level ``container`` field of ``document`` for ``key``.

    Raises MalformedResponseError if the document is not an object or has
    no ``container`` member. A ``null`` container yields nothing.
    """
    if not isinstance(document, dict):
        raise MalformedResponseError(
            provider, f"expected a JSON object, got {type(document).__name__}"
        )
    if container not in document:
        raise MalformedResponseError(provider, f"missing '{container}' field")
    return find_values(document[container], key)
