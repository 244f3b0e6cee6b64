"""Type nodes: structural parsing, refinements and the parse entry points.

Parsing runs in two phases. The structural phase walks the schema and the
input together (check, coerce, clean, recurse into children) and records what
it saw at every path. The refinement phase then runs user validators depth
first, children before parents: all synchronous refinements across the whole
tree, then, for the async entry points, all asynchronous ones one at a time.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import (
    TYPE_CHECKING,
    Any,
    ClassVar,
    Literal,
    Self,
    dataclass_transform,
)

from pukka.context import IssueTrackingContext, ParseContext
from pukka.errors import AsyncRefinementError, ContextKeyError, ParseError
from pukka.issues import CORE_ISSUES, CUSTOM, INVALID_TYPE, REQUIRED, Issue, is_issue
from pukka.util import MISSING, is_nullish

if TYPE_CHECKING:
    from pukka.extend import Extension
    from pukka.issues import Key
    from pukka.util import ParsedInput

logger = logging.getLogger(__name__)

type Validator[T] = Callable[[IssueTrackingContext, T], object]
type AsyncValidator[T] = Callable[[IssueTrackingContext, T], Awaitable[object]]
type OverrideFn = Callable[[ParseContext, Any], str | Issue]
type Override = str | OverrideFn


@dataclass(frozen=True)
class CoreIssueOverrides:
    """Field-level replacements for the structural `invalid_type` and `required` issues.

    Each override is a message string, or a callable `(ctx, raw_value)` that
    returns a message or an Issue.
    """

    invalid_type_error: Override | None = None
    required_error: Override | None = None

    def for_code(self, code: str) -> Override | None:
        if code == INVALID_TYPE:
            return self.invalid_type_error
        if code == REQUIRED:
            return self.required_error
        return None


@dataclass(frozen=True)
class ValidatorEntry:
    """A refinement registered on a node.

    Entries added by extensions carry the extension name and the arguments
    the extension was called with.
    """

    validator: Callable[..., Any]
    name: str | None = None
    params: tuple[Any, ...] | None = None
    override: OverrideFn | None = None


@dataclass(frozen=True)
class ParseSuccess[T]:
    """Result of a parse that raised no issues."""

    data: T

    success: ClassVar[Literal[True]] = True
    issues: ClassVar[None] = None
    input: ClassVar[None] = None

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class ParseFailure:
    """Result of a parse that raised issues."""

    issues: list[Issue]
    input: ParsedInput

    success: ClassVar[Literal[False]] = False
    data: ClassVar[None] = None

    def __bool__(self) -> bool:
        return False

    def __str__(self) -> str:
        lines = "\n  ".join(str(issue) for issue in self.issues)
        return f"ParseFailure: {len(self.issues)} issue(s)\n  {lines}"


type ParseResult[T] = ParseSuccess[T] | ParseFailure


def _as_override(message: Override | None) -> OverrideFn | None:
    if message is None or callable(message):
        return message
    return lambda ctx, value: message  # noqa: ARG005


def _issues_in(result: object) -> list[Issue]:
    """Issues returned by a refinement: a single Issue or any in a list/tuple."""
    if isinstance(result, list | tuple):
        return [item for item in result if is_issue(item)]
    return [result] if is_issue(result) else []  # type: ignore[list-item]


def _item(container: Any, key: Key) -> Any:
    if isinstance(container, Mapping):
        return container.get(key, MISSING)
    return container[key]


@dataclass(frozen=True, eq=False, kw_only=True)
@dataclass_transform(frozen_default=True)
class Type[T](ABC):
    """Base for schema nodes. T is the parsed value type.

    Subclasses become frozen dataclasses automatically; pass `kind=` to name
    the node in type errors:

        class UrlType(Type[str], kind="url"):
            schemes: tuple[str, ...] = ("https",)

    Nodes are never mutated. Every configuration method returns a copy that
    shares child nodes and owns a fresh validator list, so a schema can be
    reused and extended freely.
    """

    kind: ClassVar[str] = "type"
    _extensions: ClassVar[dict[str, Extension]] = {}

    is_optional: bool = False
    is_nullable: bool = False
    overrides: CoreIssueOverrides = field(default_factory=CoreIssueOverrides)
    validators: tuple[ValidatorEntry, ...] = ()
    async_validators: tuple[ValidatorEntry, ...] = ()

    def __init_subclass__(cls, kind: str | None = None, **kwargs: Any) -> None:
        """Turn the subclass into a frozen dataclass with its own extension registry."""
        super().__init_subclass__(**kwargs)
        dataclass(frozen=True, eq=False)(cls)
        if kind is not None:
            cls.kind = kind
        cls._extensions = {}

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def optional(self) -> Self:
        """Accept a missing value (parsed as the default value)."""
        return replace(self, is_optional=True)

    def nullable(self) -> Self:
        """Accept None (parsed as the default value)."""
        return replace(self, is_nullable=True)

    def issues(
        self,
        overrides: CoreIssueOverrides | None = None,
        /,
        *,
        invalid_type_error: Override | None = None,
        required_error: Override | None = None,
    ) -> Self:
        """Replace the messages of the structural issues raised by this node."""
        if overrides is None:
            overrides = CoreIssueOverrides(invalid_type_error, required_error)
        return replace(self, overrides=overrides)

    def refine(self, validator: Validator[T], *, message: Override | None = None) -> Self:
        """Add a synchronous refinement.

        The validator is called as `validator(ctx, value)` with a
        path-tracking view of the parsed value. It may raise issues with
        `ctx.issue(...)` and/or return an Issue or a list containing issues.
        With `message`, whatever the refinement raised is replaced by a single
        issue at this node's path.
        """
        entry = ValidatorEntry(validator, override=_as_override(message))
        return replace(self, validators=(*self.validators, entry))

    def refine_async(
        self,
        validator: AsyncValidator[T],
        *,
        message: Override | None = None,
    ) -> Self:
        """Add an asynchronous refinement, run after every synchronous one."""
        entry = ValidatorEntry(validator, override=_as_override(message))
        return replace(self, async_validators=(*self.async_validators, entry))

    def with_extension(
        self,
        name: str,
        params: tuple[Any, ...],
        message: Override | None,
        validator: Callable[..., Any],
        *,
        is_async: bool = False,
    ) -> Self:
        """Register `validator` under `name`, replacing an earlier entry of that name."""
        entry = ValidatorEntry(
            validator,
            name=name,
            params=params,
            override=_as_override(message),
        )
        entries = list(self.async_validators if is_async else self.validators)
        index = next(
            (i for i, existing in enumerate(entries) if existing.name == name),
            len(entries),
        )
        entries[index : index + 1] = [entry]
        if is_async:
            return replace(self, async_validators=tuple(entries))
        return replace(self, validators=tuple(entries))

    def extension_params(self, name: str) -> tuple[Any, ...] | None:
        """Arguments the named extension was applied with, or None."""
        for entry in (*self.validators, *self.async_validators):
            if entry.name == name:
                return entry.params
        return None

    def __getattr__(self, name: str) -> Any:
        if not name.startswith("_"):
            for klass in type(self).__mro__:
                registry = klass.__dict__.get("_extensions")
                if registry and name in registry:
                    return self._extension_method(registry[name])
        msg = f"'{type(self).__name__}' object has no attribute '{name}'"
        raise AttributeError(msg)

    def _extension_method(self, extension: Extension) -> Callable[..., Self]:
        def method(*args: Any, message: Override | None = None) -> Self:
            validator = extension.factory(*args)
            return self.with_extension(
                extension.name,
                args,
                message,
                validator,
                is_async=extension.is_async,
            )

        method.__name__ = extension.name
        method.__qualname__ = f"{type(self).__name__}.{extension.name}"
        return method

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    def safe_parse(
        self,
        value: Any,
        options: Mapping[str, Any] | None = None,
    ) -> ParseResult[T]:
        """Parse and validate `value`, returning a result instead of raising.

        Raises:
            AsyncRefinementError: If any node in the schema has async refinements
            ContextKeyError: If a refinement reads a key missing from `options`

        """
        if self.has_async_validators:
            msg = "Asynchronous validators present, call parse_async or safe_parse_async"
            raise AsyncRefinementError(msg)
        ctx = ParseContext(options)
        data = self._parse_input(ctx, value)
        self._validate(ctx, data)
        return self._result(ctx, data)

    async def safe_parse_async(
        self,
        value: Any,
        options: Mapping[str, Any] | None = None,
    ) -> ParseResult[T]:
        """Parse and validate `value`, running async refinements after sync ones."""
        ctx = ParseContext(options)
        data = self._parse_input(ctx, value)
        self._validate(ctx, data)
        await self._validate_async(ctx, data)
        return self._result(ctx, data)

    def parse(self, value: Any, options: Mapping[str, Any] | None = None) -> T:
        """Parse and validate `value`.

        Raises:
            ParseError: If any issue was raised

        """
        result = self.safe_parse(value, options)
        if isinstance(result, ParseFailure):
            raise ParseError(result.issues, result.input)
        return result.data

    async def parse_async(
        self,
        value: Any,
        options: Mapping[str, Any] | None = None,
    ) -> T:
        """Async counterpart of parse()."""
        result = await self.safe_parse_async(value, options)
        if isinstance(result, ParseFailure):
            raise ParseError(result.issues, result.input)
        return result.data

    def _result(self, ctx: ParseContext, data: T) -> ParseResult[T]:
        issues = ctx.get_issues()
        logger.debug("Parsed %s with %d issue(s)", type(self).__name__, len(issues))
        if not issues:
            return ParseSuccess(data)
        return ParseFailure(issues, ctx.parsed_input(data))

    # -------------------------------------------------------------------------
    # Structural phase
    # -------------------------------------------------------------------------

    def _parse_input(self, ctx: ParseContext, value: Any) -> Any:
        actual = self if is_nullish(value) else (self._resolve(ctx, value) or self)

        parsed: Any = None
        issue: Issue | None = None

        if (value is MISSING and not self.is_optional) or (
            value is None and not self.is_nullable
        ):
            issue = ctx.issue(CORE_ISSUES.required(value, ctx.path))
        elif not is_nullish(value):
            failure = actual._check(ctx, value)
            if failure is None:
                parsed = value
            else:
                parsed = actual._coerce(ctx, value)
                if parsed is None:
                    issue = failure
                else:
                    ctx.remove_issues([failure])

        ctx.set_input(value, issue is None, actual)

        is_default = parsed is None
        if is_default:
            parsed = actual._default_value()
        else:
            parsed = actual._clean(ctx, parsed)

        # children are written back into a copy, never into the caller's input
        if isinstance(parsed, dict):
            parsed = dict(parsed)
        elif isinstance(parsed, list):
            parsed = list(parsed)

        # overrides belong to the declared node, not the resolved one
        override = self._core_issue_override(ctx, value, issue)
        if override is not None:
            if issue is not None:
                ctx.remove_issues([issue])
            issue = override

        if issue is not None:
            ctx.add_issues([issue])

        if not is_default:
            for key, child in actual._child_keys(parsed):
                with ctx.child_path(key):
                    parsed[key] = child._parse_input(ctx, _item(parsed, key))

        return parsed

    def _core_issue_override(
        self,
        ctx: ParseContext,
        value: Any,
        issue: Issue | None,
    ) -> Issue | None:
        if issue is None:
            return None
        override = self.overrides.for_code(issue.code)
        if override is None:
            return None
        result = override if isinstance(override, str) else override(ctx, value)
        if isinstance(result, str):
            return ctx.issue(issue.code, result)
        return result

    # -------------------------------------------------------------------------
    # Refinement phase
    # -------------------------------------------------------------------------

    def _resolved_type(self, ctx: ParseContext) -> Type[Any]:
        record = ctx.input_at()
        return record.type if record is not None else self

    def _validate(self, ctx: ParseContext, value: Any) -> None:
        if ctx.path_has_errors:
            return

        resolved = self._resolved_type(ctx)
        if resolved is not self:
            resolved._validate(ctx, value)
        else:
            for key, child in self._child_keys(value):
                with ctx.child_path(key):
                    child._validate(ctx, value[key])

        if not self.validators:
            return

        with ctx.tracking(value) as (view, reset_path):
            path = ctx.path
            for entry in self.validators:
                reset_path()
                tracking = IssueTrackingContext(ctx)
                try:
                    result = entry.validator(tracking, view)
                    self._apply_result(ctx, tracking, view, result, entry, path, reset_path)
                except ContextKeyError:
                    raise
                except Exception as exc:  # noqa: BLE001
                    self._record_exception(ctx, exc, reset_path)

    async def _validate_async(self, ctx: ParseContext, value: Any) -> None:
        if ctx.path_has_errors:
            return

        resolved = self._resolved_type(ctx)
        if resolved is not self:
            await resolved._validate_async(ctx, value)
        else:
            for key, child in self._child_keys(value):
                with ctx.child_path(key):
                    await child._validate_async(ctx, value[key])

        if not self.async_validators:
            return

        with ctx.tracking(value) as (view, reset_path):
            path = ctx.path
            for entry in self.async_validators:
                reset_path()
                tracking = IssueTrackingContext(ctx)
                try:
                    result = await entry.validator(tracking, view)
                    self._apply_result(ctx, tracking, view, result, entry, path, reset_path)
                except ContextKeyError:
                    raise
                except Exception as exc:  # noqa: BLE001
                    self._record_exception(ctx, exc, reset_path)

    def _apply_result(  # noqa: PLR0913
        self,
        ctx: ParseContext,
        tracking: IssueTrackingContext,
        view: Any,
        result: object,
        entry: ValidatorEntry,
        path: Sequence[Key],
        reset_path: Callable[[], None],
    ) -> None:
        issues = _issues_in(result)
        if entry.override is None:
            ctx.add_issues(issues)
            return

        raised = [*issues, *tracking.new_issues]
        if not raised:
            return
        ctx.remove_issues(raised)
        reset_path()
        replacement = entry.override(ctx, view)
        if isinstance(replacement, str):
            replacement = ctx.issue(CUSTOM, replacement, path)
        ctx.add_issues([replacement])

    def _record_exception(
        self,
        ctx: ParseContext,
        exc: Exception,
        reset_path: Callable[[], None],
    ) -> None:
        reset_path()
        logger.debug(
            "Refinement on %s raised at path %s",
            type(self).__name__,
            ctx.path,
            exc_info=exc,
        )
        ctx.issue(CORE_ISSUES.exception(exc, ctx.path))

    @property
    def has_async_validators(self) -> bool:
        """True if this node or any node below it has async refinements."""
        return bool(self.async_validators) or any(
            child.has_async_validators for child in self._child_types()
        )

    # -------------------------------------------------------------------------
    # Hooks for node types
    # -------------------------------------------------------------------------

    @abstractmethod
    def _check(self, ctx: ParseContext, value: Any) -> Issue | None:
        """Return None if `value` has the right shape, else the issue raised."""
        ...

    def _coerce(self, ctx: ParseContext, value: Any) -> T | None:  # noqa: ARG002
        """Convert a value that failed _check, or return None."""
        return None

    def _clean(self, ctx: ParseContext, value: T) -> T:  # noqa: ARG002
        return value

    @abstractmethod
    def _default_value(self) -> T:
        """Fresh value used when input is missing or could not be parsed."""
        ...

    def _child_keys(self, value: T) -> list[tuple[Key, Type[Any]]]:  # noqa: ARG002
        """Children present in a parsed value, as (key, node) pairs."""
        return []

    def _child_types(self) -> tuple[Type[Any], ...]:
        """Every node directly below this one in the schema."""
        return ()

    def _child_type(self, key: Key) -> Type[Any] | None:  # noqa: ARG002
        """Node used for the child at `key`, if any."""
        return None

    def _resolve(self, ctx: ParseContext, value: Any) -> Type[Any] | None:  # noqa: ARG002
        """Concrete node to parse `value` with, for nodes that delegate."""
        return None

    @property
    def is_literal(self) -> bool:
        return False

    @property
    def literal_value(self) -> str | int | bool:
        msg = "Not a literal type"
        raise TypeError(msg)

    def _literal_keys(self) -> tuple[tuple[str, str | int | bool], ...]:
        """(key, literal value) pairs that discriminate this node in a union."""
        return ()


def get_path_type(schema: Type[Any], path: Sequence[Key]) -> Type[Any] | None:
    """Return the node that parses the value at `path`, or None.

    Enables partial validation, e.g. re-checking one form field on blur:

        street = get_path_type(Customers, [0, "addresses", 1, "street"])
        street.safe_parse(field_value)
    """
    node: Type[Any] | None = schema
    for key in path:
        if node is None:
            return None
        node = node._child_type(key)  # noqa: SLF001
    return node
