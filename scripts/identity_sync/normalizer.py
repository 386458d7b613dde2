"""Reduce provider-shaped entries to a single identifier string."""

from __future__ import annotations

from typing import Any, Optional

USER_NAME_FIELD = "userName"


def text_value(node: Any) -> str:
    """Text of a JSON scalar. Containers and null have none."""
    if isinstance(node, str):
        return node
    if isinstance(node, bool):
        return "true" if node else "false"
    if isinstance(node, (int, float)):
        return str(node)
    return ""


def extract_identifier(entry: Any) -> Optional[str]:
    """Return the identifier for ``entry``, or None when it has no usable one.

    Objects carrying ``userName`` use that field; anything else is taken
    by its own text. No trimming or case folding is applied.
    """
    if isinstance(entry, dict) and USER_NAME_FIELD in entry:
        identifier = text_value(entry[USER_NAME_FIELD])
    else:
        identifier = text_value(entry)
    return identifier or None
