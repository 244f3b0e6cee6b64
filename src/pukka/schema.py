"""Schema builder: short factory functions for configured nodes.

Example:
    from pukka import z

    Signup = z.object(
        {
            "email": z.string(empty=False, required_error="Email is required"),
            "age": z.number(coerce=True).optional(),
            "interests": z.array(z.enum(["coding", "music"])),
        },
    )
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from pukka.extend import register_type
from pukka.types import (
    ArrayType,
    BooleanType,
    EnumType,
    LiteralType,
    NumberType,
    ObjectType,
    RecordType,
    StringType,
    UnionType,
)

if TYPE_CHECKING:
    from pukka.base import Override, Type

string = register_type(StringType)
number = register_type(NumberType)
boolean = register_type(BooleanType)


def _with_overrides[N: Type[Any]](
    node: N,
    invalid_type_error: Override | None,
    required_error: Override | None,
) -> N:
    if invalid_type_error is None and required_error is None:
        return node
    return node.issues(invalid_type_error=invalid_type_error, required_error=required_error)


def enum(
    values: Sequence[str],
    *,
    invalid_type_error: Override | None = None,
    required_error: Override | None = None,
) -> EnumType:
    return _with_overrides(EnumType(tuple(values)), invalid_type_error, required_error)


def literal(
    value: str | int | float | bool,
    *,
    invalid_type_error: Override | None = None,
    required_error: Override | None = None,
) -> LiteralType:
    return _with_overrides(LiteralType(value), invalid_type_error, required_error)


def record[V](
    value_type: Type[V],
    *,
    invalid_type_error: Override | None = None,
    required_error: Override | None = None,
) -> RecordType[V]:
    return _with_overrides(RecordType(value_type), invalid_type_error, required_error)


def object(  # noqa: A001
    properties: Mapping[str, Type[Any]],
    *,
    invalid_type_error: Override | None = None,
    required_error: Override | None = None,
) -> ObjectType:
    return _with_overrides(ObjectType(properties), invalid_type_error, required_error)


def array[I](
    item_type: Type[I],
    *,
    coerce: bool = False,
    invalid_type_error: Override | None = None,
    required_error: Override | None = None,
) -> ArrayType[I]:
    """Array of `item_type`; with `coerce`, a single value becomes a one-item list."""
    return _with_overrides(
        ArrayType(item_type, coerce=coerce),
        invalid_type_error,
        required_error,
    )


def union(
    types: Sequence[Type[Any]],
    *,
    invalid_type_error: Override | None = None,
    required_error: Override | None = None,
) -> UnionType:
    return _with_overrides(UnionType(tuple(types)), invalid_type_error, required_error)


class SchemaBuilder:
    """Namespace of schema factories, exposed as attributes.

    extend() returns a new builder with some factories replaced or added,
    e.g. after registering a custom node class:

        zx = z.extend(url=register_type(UrlType))
        zx.url(schemes=("https",))
    """

    def __init__(self, **factories: Callable[..., Type[Any]]) -> None:
        self._factories = dict(factories)

    def __getattr__(self, name: str) -> Callable[..., Type[Any]]:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._factories[name]
        except KeyError:
            msg = f"No schema factory named '{name}'. Available: {sorted(self._factories)}"
            raise AttributeError(msg) from None

    def __dir__(self) -> list[str]:
        return sorted({*super().__dir__(), *self._factories})

    def extend(self, **factories: Callable[..., Type[Any]]) -> SchemaBuilder:
        return SchemaBuilder(**{**self._factories, **factories})


z = SchemaBuilder(
    string=string,
    number=number,
    boolean=boolean,
    enum=enum,
    literal=literal,
    record=record,
    object=object,
    array=array,
    union=union,
)
