"""Concrete schema nodes: scalars, literals, objects, records, arrays and unions."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import field
from typing import TYPE_CHECKING, Any

from pukka.base import Type
from pukka.issues import CORE_ISSUES
from pukka.util import MISSING, is_nullish

if TYPE_CHECKING:
    from pukka.context import ParseContext
    from pukka.issues import Issue, Key

logger = logging.getLogger(__name__)


def _setting(
    ctx: ParseContext,
    namespace: str,
    name: str,
    value: bool | None,
    *,
    default: bool,
) -> bool:
    """Resolve a scalar setting: node config, then the options bag, then `default`."""
    if value is not None:
        return value
    options = ctx.options.get(namespace) or {}
    return bool(options.get(name, default))


def _is_container(value: Any) -> bool:
    return isinstance(value, Mapping | list | tuple | set | frozenset)


# =============================================================================
# Scalars
# =============================================================================


class StringType(Type[str], kind="string"):
    """A string, trimmed by default.

    Attributes:
        trim: Strip surrounding whitespace (default True)
        coerce: Convert non-string scalars with str() (default False)
        empty: Accept empty strings (default True). When False an empty
            string, after trimming, raises `required`.

    Unset settings fall back to the `string` namespace of the parse options.
    """

    trim: bool | None = None
    coerce: bool | None = None
    empty: bool | None = None

    def _check(self, ctx: ParseContext, value: Any) -> Issue | None:
        if not isinstance(value, str):
            return ctx.issue(CORE_ISSUES.invalid_type(self.kind, value, ctx.path))
        allow_empty = _setting(ctx, "string", "empty", self.empty, default=True)
        if not allow_empty and not self._trimmed(ctx, value):
            return ctx.issue(CORE_ISSUES.required(value, ctx.path))
        return None

    def _coerce(self, ctx: ParseContext, value: Any) -> str | None:
        # strings only get here when they failed the empty check
        if isinstance(value, str) or _is_container(value):
            return None
        if _setting(ctx, "string", "coerce", self.coerce, default=False):
            return str(value)
        return None

    def _clean(self, ctx: ParseContext, value: str) -> str:
        return self._trimmed(ctx, value)

    def _trimmed(self, ctx: ParseContext, value: str) -> str:
        trim = _setting(ctx, "string", "trim", self.trim, default=True)
        return value.strip() if trim else value

    def _default_value(self) -> str:
        return ""


class NumberType(Type[int | float], kind="number"):
    """An int or float. Booleans are not numbers unless coerced."""

    coerce: bool | None = None

    def _check(self, ctx: ParseContext, value: Any) -> Issue | None:
        if isinstance(value, int | float) and not isinstance(value, bool):
            return None
        return ctx.issue(CORE_ISSUES.invalid_type(self.kind, value, ctx.path))

    def _coerce(self, ctx: ParseContext, value: Any) -> int | float | None:
        if not _setting(ctx, "number", "coerce", self.coerce, default=False):
            return None
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, str):
            text = value.strip()
            try:
                return int(text)
            except ValueError:
                pass
            try:
                number = float(text)
            except ValueError:
                return None
            return None if math.isnan(number) else number
        return None

    def _default_value(self) -> int:
        return 0


class BooleanType(Type[bool], kind="boolean"):
    """A bool; with coercion any non-null value converts by truthiness."""

    coerce: bool | None = None

    def _check(self, ctx: ParseContext, value: Any) -> Issue | None:
        if isinstance(value, bool):
            return None
        return ctx.issue(CORE_ISSUES.invalid_type(self.kind, value, ctx.path))

    def _coerce(self, ctx: ParseContext, value: Any) -> bool | None:
        if _setting(ctx, "boolean", "coerce", self.coerce, default=False):
            return bool(value)
        return None

    def _default_value(self) -> bool:
        return False


class EnumType(Type[str], kind="enum"):
    """One of a fixed set of strings."""

    values: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))

    def _check(self, ctx: ParseContext, value: Any) -> Issue | None:
        if isinstance(value, str) and value in self.values:
            return None
        expected = f"One of [{','.join(self.values)}]"
        return ctx.issue(CORE_ISSUES.invalid_type(expected, value, ctx.path))

    def _default_value(self) -> str:
        return ""


class LiteralType(Type[str | int | float | bool], kind="literal"):
    """Exactly one string, number or boolean value.

    Matching is type-strict: `True` does not match `1`.
    """

    value: str | int | float | bool

    def _check(self, ctx: ParseContext, value: Any) -> Issue | None:
        if type(value) is type(self.value) and value == self.value:
            return None
        return ctx.issue(CORE_ISSUES.invalid_type(f"{self.value}", value, ctx.path))

    def _default_value(self) -> str | int | float | bool:
        return self.value

    @property
    def is_literal(self) -> bool:
        return True

    @property
    def literal_value(self) -> str | int | float | bool:
        return self.value


# =============================================================================
# Composites
# =============================================================================


class ObjectType(Type[dict[str, Any]], kind="object"):
    """A mapping with a fixed set of keys; unknown keys are dropped."""

    properties: Mapping[str, Type[Any]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", dict(self.properties))

    def _check(self, ctx: ParseContext, value: Any) -> Issue | None:
        if isinstance(value, Mapping):
            return None
        return ctx.issue(CORE_ISSUES.invalid_type(self.kind, value, ctx.path))

    def _clean(self, ctx: ParseContext, value: Mapping[str, Any]) -> dict[str, Any]:  # noqa: ARG002
        return {key: item for key, item in value.items() if key in self.properties}

    def _default_value(self) -> dict[str, Any]:
        return {key: child._default_value() for key, child in self.properties.items()}  # noqa: SLF001

    def _child_keys(self, value: dict[str, Any]) -> list[tuple[Key, Type[Any]]]:  # noqa: ARG002
        return list(self.properties.items())

    def _child_types(self) -> tuple[Type[Any], ...]:
        return tuple(self.properties.values())

    def _child_type(self, key: Key) -> Type[Any] | None:
        return self.properties.get(key) if isinstance(key, str) else None

    def _literal_keys(self) -> tuple[tuple[str, str | int | bool], ...]:
        return tuple(
            (key, child.literal_value)
            for key, child in self.properties.items()
            if child.is_literal
        )


class RecordType[V](Type[dict[str, V]], kind="record"):
    """A mapping of arbitrary string keys to values of one type."""

    value_type: Type[V]

    def _check(self, ctx: ParseContext, value: Any) -> Issue | None:
        if isinstance(value, Mapping):
            return None
        return ctx.issue(CORE_ISSUES.invalid_type(self.kind, value, ctx.path))

    def _clean(self, ctx: ParseContext, value: Mapping[str, V]) -> dict[str, V]:  # noqa: ARG002
        return dict(value)

    def _default_value(self) -> dict[str, V]:
        return {}

    def _child_keys(self, value: dict[str, V]) -> list[tuple[Key, Type[Any]]]:
        return [(key, self.value_type) for key in value]

    def _child_types(self) -> tuple[Type[Any], ...]:
        return (self.value_type,)

    def _child_type(self, key: Key) -> Type[Any] | None:
        return self.value_type if isinstance(key, str) else None


class ArrayType[I](Type[list[I]], kind="array"):
    """A list of items of one type.

    With `coerce`, a single non-null value is wrapped in a one-item list.
    Slots holding MISSING are holes: they are kept as is and never parsed.
    """

    item_type: Type[I]
    coerce: bool = False

    def _check(self, ctx: ParseContext, value: Any) -> Issue | None:
        if isinstance(value, list | tuple):
            return None
        return ctx.issue(CORE_ISSUES.invalid_type(self.kind, value, ctx.path))

    def _coerce(self, ctx: ParseContext, value: Any) -> list[I] | None:  # noqa: ARG002
        if self.coerce and not is_nullish(value):
            return [value]
        return None

    def _clean(self, ctx: ParseContext, value: list[I] | tuple[I, ...]) -> list[I]:  # noqa: ARG002
        return list(value)

    def _default_value(self) -> list[I]:
        return []

    def _child_keys(self, value: list[I]) -> list[tuple[Key, Type[Any]]]:
        return [(index, self.item_type) for index, item in enumerate(value) if item is not MISSING]

    def _child_types(self) -> tuple[Type[Any], ...]:
        return (self.item_type,)

    def _child_type(self, key: Key) -> Type[Any] | None:
        return self.item_type if isinstance(key, int) else None


class UnionType(Type[Any], kind="union"):
    """A value matching one of several member types.

    The member used for a value is chosen once, during structural parsing:

    1. Members that are objects with literal-valued properties are
       discriminated: the first whose literal keys all equal the input's is
       the only candidate.
    2. Without a match, if every member is discriminated the first member is
       the only candidate; otherwise every member is.
    3. Candidates are trial-parsed in order on a forked context; the first
       that raises no issue wins. If none does, the first candidate is used,
       so its issues are reported.

    Refinements of the chosen member run as part of the union's own
    refinement phase.
    """

    types: tuple[Type[Any], ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "types", tuple(self.types))
        if not self.types:
            msg = "UnionType options cannot be empty"
            raise ValueError(msg)

    def _discriminated(self) -> list[tuple[Type[Any], tuple[tuple[str, Any], ...]]]:
        pairs = [(member, member._literal_keys()) for member in self.types]  # noqa: SLF001
        return [(member, keys) for member, keys in pairs if keys]

    def _discriminated_match(self, value: Any) -> Type[Any] | None:
        if not isinstance(value, Mapping):
            return None
        for member, keys in self._discriminated():
            if all(
                key in value
                and type(value[key]) is type(literal)
                and value[key] == literal
                for key, literal in keys
            ):
                return member
        return None

    def _resolve(self, ctx: ParseContext, value: Any) -> Type[Any] | None:
        match = self._discriminated_match(value)
        if match is not None:
            candidates: tuple[Type[Any], ...] = (match,)
        elif len(self._discriminated()) == len(self.types):
            candidates = (self.types[0],)
        else:
            candidates = self.types

        chosen = candidates[0]
        for member in candidates:
            trial = ctx.fork()
            member._parse_input(trial, value)  # noqa: SLF001
            if trial.issue_count == ctx.issue_count:
                chosen = member
                break

        logger.debug(
            "Union at path %s resolved to %s (%d candidate(s))",
            ctx.path,
            type(chosen).__name__,
            len(candidates),
        )
        # nested unions resolve all the way down to a concrete member
        return chosen._resolve(ctx, value) or chosen  # noqa: SLF001

    def _check(self, ctx: ParseContext, value: Any) -> Issue | None:
        # _parse_input swaps in the resolved member before checking
        msg = f"{type(self).__name__} values are checked by the resolved member"
        raise TypeError(msg)

    def _default_value(self) -> Any:
        return self.types[0]._default_value()  # noqa: SLF001

    def _child_types(self) -> tuple[Type[Any], ...]:
        return self.types
