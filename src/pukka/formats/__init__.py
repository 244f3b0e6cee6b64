"""Format adapters for parse results.

Each format module provides to_<format> built on the core to_builtins conversion.
"""

from pukka.formats.json import to_json

__all__ = ["to_json"]
