"""Shared values and helpers: the MISSING sentinel, parsed-input trees, form keys."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final, final

from pukka.issues import IssueDetail

if TYPE_CHECKING:
    from pukka.issues import Issue, Key, Path


@final
class _Missing:
    """Type of the MISSING sentinel."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"

    def __reduce__(self) -> str:
        return "MISSING"


MISSING: Final = _Missing()
"""An absent value: a key not present in an object, or no input at all."""


def is_nullish(value: Any) -> bool:
    """Return True for None and MISSING."""
    return value is None or value is MISSING


# =============================================================================
# Parsed-input trees
# =============================================================================


@dataclass
class ParsedInputValue:
    """Leaf of a parsed-input tree.

    Attributes:
        value: Raw input found at this path (MISSING if there was none)
        parsed: Parsed value, or None if parsing failed at this path
        issues: Issues raised at exactly this path

    """

    value: Any
    parsed: Any
    issues: list[IssueDetail] = field(default_factory=list)


class ParsedInputDict(dict[str, Any]):
    """Object branch of a parsed-input tree; `issues` holds the branch's own issues."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.issues: list[IssueDetail] = []


class ParsedInputList(list[Any]):
    """Array branch of a parsed-input tree; `issues` holds the branch's own issues."""

    def __init__(self, *args: Any) -> None:
        super().__init__(*args)
        self.issues: list[IssueDetail] = []


type ParsedInput = ParsedInputDict | ParsedInputList | ParsedInputValue


@dataclass(frozen=True)
class FieldInput:
    """What was recorded for one path during a parse."""

    value: Any
    parsed: bool
    issues: Sequence[Issue] = ()


def to_parsed_input(
    data: Any,
    get_input: Callable[[Path], FieldInput] | None = None,
) -> ParsedInput:
    """Build a parsed-input tree shaped like `data`.

    Args:
        data: Parsed value (dicts and lists become branches)
        get_input: Lookup of raw value, parse status and issues by path. When
            omitted every leaf reports its own value as cleanly parsed.

    Returns:
        The tree root

    """

    def build(path: Path, value: Any) -> ParsedInput:
        record = get_input(path) if get_input else FieldInput(value, parsed=True)

        node: ParsedInput
        if isinstance(value, dict):
            node = ParsedInputDict(
                {key: build((*path, key), item) for key, item in value.items()},
            )
        elif isinstance(value, list):
            node = ParsedInputList(
                build((*path, index), item) for index, item in enumerate(value)
            )
        else:
            node = ParsedInputValue(
                value=record.value,
                parsed=value if record.parsed else None,
            )

        node.issues = [IssueDetail(issue.code, issue.message) for issue in record.issues]
        return node

    return build((), data)


def reshape_parsed_input(tree: ParsedInput | None, shape: Any) -> ParsedInput:
    """Rebuild a parsed-input tree in the shape of `shape`.

    `shape` is usually a schema's default value. Fields present in both keep
    their recorded values and issues, fields only in `shape` report MISSING,
    and fields only in `tree` are dropped. Array items are kept as recorded.
    """
    node: ParsedInput
    if isinstance(shape, dict):
        source = tree if isinstance(tree, dict) else {}
        node = ParsedInputDict(
            {key: reshape_parsed_input(source.get(key), item) for key, item in shape.items()},
        )
    elif isinstance(shape, list):
        node = ParsedInputList(tree if isinstance(tree, list) else ())
    elif isinstance(tree, ParsedInputValue):
        return tree
    else:
        node = ParsedInputValue(MISSING, None)

    if isinstance(tree, ParsedInputDict | ParsedInputList):
        node.issues = list(tree.issues)
    return node


def get_display_name(path: Sequence[Key]) -> str:
    """Turn the last string key of a path into a title.

    Example:
        get_display_name(["orders", 0, "orderNumber"]) == "Order Number"

    """
    for key in reversed(path):
        if isinstance(key, str):
            spaced = re.sub(r"([a-z])([A-Z])", r"\1 \2", key[1:])
            return key[:1].upper() + spaced
    return ""


# =============================================================================
# Nested objects from flat form keys
# =============================================================================

_INDEX = re.compile(r"^\d+$")


def split_path(path: str) -> list[Key]:
    """Split `addresses[0].city` into ['addresses', 0, 'city'].

    `[]` is kept as a token meaning "append". Only non-negative integers
    become indexes, so `a[-1]` names the key '-1'.
    """
    path = path.strip()
    path = re.sub(r"\[\s*\]", ".[]", path)
    path = re.sub(r"\[\s*(-?\w+)\s*\]", r".\1", path)
    path = re.sub(r"^\.|\.$", "", path, count=1)
    return [int(token) if _INDEX.match(token) else token for token in path.split(".")]


def _accepts(container: Any, key: Key) -> bool:
    if isinstance(container, list):
        return isinstance(key, int) and key >= 0
    return isinstance(container, dict)


def _has(container: Any, key: Key) -> bool:
    if isinstance(container, list):
        return (
            isinstance(key, int)
            and 0 <= key < len(container)
            and container[key] is not MISSING
        )
    return isinstance(container, dict) and key in container


def _assign(container: dict[Any, Any] | list[Any], key: Key, value: Any) -> None:
    if isinstance(container, list):
        container.extend([MISSING] * (key + 1 - len(container)))
    container[key] = value


def _set_path(target: dict[str, Any], path: str, value: Any) -> None:
    """Store `value` under `path`; entries that clash with earlier ones are dropped."""
    tokens = split_path(path)

    container: Any = target
    key = tokens[0]

    for token in tokens[1:]:
        if not _accepts(container, key):
            return
        if not _has(container, key):
            is_array = isinstance(token, int) or token == "[]"
            _assign(container, key, [] if is_array else {})
        container = container[key]
        key = len(container) if token == "[]" and isinstance(container, list) else token

    if not _accepts(container, key):
        return

    # a=1&a=2
    if _has(container, key):
        if not isinstance(container[key], list):
            container[key] = [container[key]]
        container = container[key]
        key = len(container)

    _assign(container, key, value)


def from_entries[V](
    entries: Iterable[tuple[str, V]] | Mapping[str, V],
) -> dict[str, Any]:
    """Build a nested object from query-string style keys.

    Example:
        from_entries([("homer.addresses[0].city", "Springfield")])
        == {"homer": {"addresses": [{"city": "Springfield"}]}}

    Repeated keys collect into a list, `key[]` appends. A key that would
    nest inside an earlier scalar, or name a list slot with a string, is
    ignored so untrusted form data never raises.
    """
    pairs = entries.items() if isinstance(entries, Mapping) else entries
    result: dict[str, Any] = {}
    for key, value in pairs:
        _set_path(result, key, value)
    return result
