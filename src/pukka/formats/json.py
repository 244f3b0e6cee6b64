"""JSON format adapter."""

from __future__ import annotations

import json
from typing import Any

from pukka.codecs import to_builtins

__all__ = ["to_builtins", "to_json"]


def to_json(obj: Any, *, indent: int | None = 2) -> str:
    """Serialize a parsed-input tree, an issue list or parsed data to JSON.

    Args:
        obj: The object to serialize
        indent: JSON indentation level (default 2, None for compact)

    Returns:
        JSON string representation

    """
    return json.dumps(to_builtins(obj), indent=indent)
