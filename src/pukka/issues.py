"""Validation issues and the registry of issue message factories."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

type Key = str | int
type Path = tuple[Key, ...]

CUSTOM = "custom"


@dataclass(frozen=True)
class Issue:
    """A validation issue raised at a field path.

    Equality compares content; the parse context deduplicates by identity,
    so two equal issues raised separately are both kept.
    """

    path: Path
    code: str
    message: str

    def __str__(self) -> str:
        location = ".".join(str(key) for key in self.path) or "<root>"
        return f"{location}: {self.message}"


@dataclass(frozen=True)
class IssueDetail:
    """Code and message of an issue that has not been placed at a path yet."""

    code: str
    message: str


def is_issue(value: Any) -> bool:
    """Return True if a refinement result entry is an Issue."""
    return isinstance(value, Issue)


class IssueFactory:
    """Callable producing an IssueDetail for one registered code."""

    def __init__(self, registry: IssueRegistry, code: str) -> None:
        self._registry = registry
        self.code = code

    def __call__(self, *args: Any) -> IssueDetail:
        return IssueDetail(self.code, self._registry.message(self.code, *args))

    def __repr__(self) -> str:
        return f"IssueFactory({self.code!r})"


class IssueRegistry:
    """Named message functions, one per issue code.

    Usage:
        STRING_ISSUES = register_issues(
            min_length=lambda length, path=(): f"At least {length} characters",
        )
        ctx.issue(STRING_ISSUES.min_length(5))

    Message functions can be swapped at runtime with customize() (for
    localization) and restored with reset().
    """

    def __init__(self, messages: Mapping[str, Callable[..., str]]) -> None:
        self._defaults = dict(messages)
        self._messages = dict(messages)
        self._factories = {code: IssueFactory(self, code) for code in messages}

    def __getattr__(self, code: str) -> IssueFactory:
        if code.startswith("_"):
            raise AttributeError(code)
        try:
            return self._factories[code]
        except KeyError:
            available = list(self._factories)
            msg = f"Unknown issue code '{code}'. Registered codes: {available}"
            raise AttributeError(msg) from None

    def __contains__(self, code: object) -> bool:
        return code in self._factories

    def message(self, code: str, *args: Any) -> str:
        """Render the message for a registered code."""
        return self._messages[code](*args)

    def customize(self, **overrides: Callable[..., str]) -> None:
        """Replace message functions for the given codes."""
        unknown = set(overrides) - set(self._defaults)
        if unknown:
            msg = f"Cannot customize unregistered issue codes: {sorted(unknown)}"
            raise KeyError(msg)
        self._messages.update(overrides)

    def reset(self) -> None:
        """Restore the message functions the registry was created with."""
        self._messages = dict(self._defaults)


def register_issues(**messages: Callable[..., str]) -> IssueRegistry:
    """Create an IssueRegistry from code=message_function pairs."""
    return IssueRegistry(messages)


def _received(value: Any) -> str:
    if isinstance(value, list | tuple):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return str(value)


CORE_ISSUES = register_issues(
    invalid_type=lambda expected, value, path=(): (
        f"Expected: {expected}, Received: {_received(value)}"
    ),
    required=lambda value, path=(): f"Value is required, Received '{value}'",
    exception=lambda error, path=(): f"Exception: {error}",
)

INVALID_TYPE = CORE_ISSUES.invalid_type.code
REQUIRED = CORE_ISSUES.required.code
EXCEPTION = CORE_ISSUES.exception.code
