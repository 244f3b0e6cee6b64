"""Per-call parse state: current path, recorded inputs and the issue store."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypedDict

from pukka.errors import ContextKeyError
from pukka.issues import CUSTOM, Issue, IssueDetail
from pukka.proxy import PathTracker, path_of
from pukka.util import MISSING, FieldInput, is_nullish, to_parsed_input

if TYPE_CHECKING:
    from pukka.base import Type
    from pukka.issues import Key, Path
    from pukka.util import ParsedInput

type Message = str | Callable[[], str]


class StringOptions(TypedDict, total=False):
    """String parsing policy, used when a StringType leaves a setting unset."""

    coerce: bool  # default False
    trim: bool  # default True
    empty: bool  # default True; False raises `required` for blank strings


class NumberOptions(TypedDict, total=False):
    """Number parsing policy."""

    coerce: bool  # default False


class BooleanOptions(TypedDict, total=False):
    """Boolean parsing policy."""

    coerce: bool  # default False


class ParseOptions(TypedDict, total=False):
    """Options bag for one parse call.

    Keys other than the three scalar namespaces are runtime dependencies that
    refinements read with `ctx.get(key)`.
    """

    string: StringOptions
    number: NumberOptions
    boolean: BooleanOptions


@dataclass(frozen=True)
class InputRecord:
    """Raw value seen at a path, whether it parsed, and the node that parsed it."""

    value: Any
    parsed: bool
    type: Type[Any]


def _message(message: Message) -> str:
    return message() if callable(message) else message


def _field(source: Any, name: str) -> Any:
    if isinstance(source, Mapping):
        return source.get(name)
    return getattr(source, name, None)


class ParseContext:
    """Mutable state scoped to a single parse call.

    Refinements see the public part of this API (`path`, `options`,
    `path_for`, `issue`, `is_defined`, `get`) through an IssueTrackingContext.
    The remaining methods are used by node types while parsing.
    """

    def __init__(self, options: Mapping[str, Any] | None = None) -> None:
        self._options: Mapping[str, Any] = options if options is not None else {}
        self._path: Path = ()
        self._inputs: dict[Path, InputRecord] = {}
        # keyed by id() so that equal issues raised separately are kept apart
        self._issues: dict[int, Issue] = {}

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    @property
    def path(self) -> Path:
        """Path of the field currently being parsed or last read."""
        return self._path

    @property
    def options(self) -> Mapping[str, Any]:
        return self._options

    def path_for(self, value: Any) -> Path:
        """Return the path of a tracked view, or () for any other value."""
        return path_of(value)

    def is_defined(self, value: Any = None) -> bool:  # noqa: ARG002
        """Return True if the raw input at the current path was neither None nor missing.

        Call it with the field expression itself, e.g. `ctx.is_defined(data["age"])`:
        reading the field moves the current path there first. Parsed values
        cannot answer this because missing optional fields are replaced with
        their default value.
        """
        record = self._inputs.get(self._path)
        return record is not None and not is_nullish(record.value)

    def issue(self, *args: Any, path: Sequence[Key] | None = None) -> Issue | None:
        """Raise an issue and return it.

        Accepted forms:
            issue(message)                  code "custom" at the current path
            issue(message, path)
            issue(code, message[, path])
            issue(detail)                   IssueDetail, Issue or mapping with
                                            code, message and optional path
            issue(condition, ...)           any of the above, only if condition
                                            is True; returns None otherwise

        Messages are strings or zero-argument callables returning a string.
        """
        if args and isinstance(args[0], bool):
            if not args[0]:
                return None
            args = args[1:]
        if not args:
            msg = "issue() requires a message"
            raise TypeError(msg)

        first, rest = args[0], args[1:]
        issue_path: Sequence[Key] | None

        if isinstance(first, Issue) and id(first) in self._issues:
            return first

        if isinstance(first, Issue | IssueDetail | Mapping):
            code = _field(first, "code") or CUSTOM
            message = _message(_field(first, "message"))
            issue_path = _field(first, "path")
            if rest:
                issue_path = rest[0]
        elif rest and (isinstance(rest[0], str) or callable(rest[0])):
            code = first
            message = _message(rest[0])
            issue_path = rest[1] if len(rest) > 1 else None
        else:
            code = CUSTOM
            message = _message(first)
            issue_path = rest[0] if rest else None

        if path is not None:
            issue_path = path

        issue = Issue(
            path=tuple(issue_path) if issue_path is not None else self._path,
            code=code,
            message=message,
        )
        self._issues[id(issue)] = issue
        return issue

    def get(self, key: str) -> Any:
        """Return a runtime dependency passed in the options bag.

        Raises:
            ContextKeyError: If the key is absent or None

        """
        value = self._options.get(key)
        if value is None:
            raise ContextKeyError(key)
        return value

    # -------------------------------------------------------------------------
    # Issue store
    # -------------------------------------------------------------------------

    @property
    def issue_count(self) -> int:
        return len(self._issues)

    def get_issues(self) -> list[Issue]:
        return list(self._issues.values())

    def add_issues(self, issues: Sequence[Issue]) -> None:
        for issue in issues:
            self._issues[id(issue)] = issue

    def remove_issues(self, issues: Sequence[Issue]) -> None:
        for issue in issues:
            self._issues.pop(id(issue), None)

    # -------------------------------------------------------------------------
    # Recorded inputs
    # -------------------------------------------------------------------------

    def set_input(self, value: Any, parsed: bool, type_: Type[Any]) -> None:  # noqa: FBT001
        """Record what was seen at the current path."""
        self._inputs[self._path] = InputRecord(value, parsed, type_)

    def input_at(self, path: Path | None = None) -> InputRecord | None:
        return self._inputs.get(self._path if path is None else path)

    @property
    def path_has_errors(self) -> bool:
        """True unless the input at the current path parsed cleanly."""
        record = self._inputs.get(self._path)
        return record is None or not record.parsed

    # -------------------------------------------------------------------------
    # Path management
    # -------------------------------------------------------------------------

    def _set_path(self, path: Path) -> None:
        self._path = path

    @contextmanager
    def child_path(self, key: Key) -> Iterator[Path]:
        """Extend the current path by `key` for the duration of the block."""
        path = self._path
        self._path = (*path, key)
        try:
            yield self._path
        finally:
            self._path = path

    @contextmanager
    def tracking(self, value: Any) -> Iterator[tuple[Any, Callable[[], None]]]:
        """Wrap `value` in path-tracking views for the duration of the block.

        Yields the view and a callable that moves the current path back to
        where it was when the block started. The path is restored on exit.
        """
        path = self._path

        def reset_path() -> None:
            self._path = path

        tracker = PathTracker(self._set_path)
        try:
            yield tracker.wrap(value, path), reset_path
        finally:
            reset_path()

    # -------------------------------------------------------------------------
    # Trials and results
    # -------------------------------------------------------------------------

    def fork(self) -> ParseContext:
        """Copy of this context for trial parses that must not leak state."""
        clone = ParseContext(self._options)
        clone._path = self._path
        clone._inputs = dict(self._inputs)
        clone._issues = dict(self._issues)
        return clone

    def parsed_input(self, data: Any) -> ParsedInput:
        """Build the parsed-input tree for `data` from recorded inputs and issues."""
        issues_by_path: dict[Path, list[Issue]] = {}
        for issue in self._issues.values():
            issues_by_path.setdefault(issue.path, []).append(issue)

        def get_input(path: Path) -> FieldInput:
            record = self._inputs.get(path)
            return FieldInput(
                value=record.value if record is not None else MISSING,
                parsed=record.parsed if record is not None else False,
                issues=issues_by_path.get(path, ()),
            )

        return to_parsed_input(data, get_input)


class IssueTrackingContext:
    """Context handed to refinements; records the issues each refinement raises.

    Issues raised here are added to the underlying context immediately. The
    record lets a message override replace everything one refinement raised.
    """

    def __init__(self, ctx: ParseContext) -> None:
        self._ctx = ctx
        self.new_issues: list[Issue] = []

    @property
    def path(self) -> Path:
        return self._ctx.path

    @property
    def options(self) -> Mapping[str, Any]:
        return self._ctx.options

    def path_for(self, value: Any) -> Path:
        return self._ctx.path_for(value)

    def issue(self, *args: Any, path: Sequence[Key] | None = None) -> Issue | None:
        issue = self._ctx.issue(*args, path=path)
        if issue is not None and all(issue is not seen for seen in self.new_issues):
            self.new_issues.append(issue)
        return issue

    def is_defined(self, value: Any = None) -> bool:
        return self._ctx.is_defined(value)

    def get(self, key: str) -> Any:
        return self._ctx.get(key)
