"""Extensions: named, parameterized refinements attached to node classes.

Usage:
    STRING_ISSUES = register_issues(
        min_length=lambda length, path=(): f"At least {length} characters",
    )

    StringExtensions = Extensions.define(
        StringType,
        min=lambda length: lambda ctx, value: (
            len(value) >= length or ctx.issue(STRING_ISSUES.min_length(length))
        ),
    )
    apply_extensions(StringType, StringExtensions)

    name = z.string().min(2)
    get_extension_params(name, StringExtensions, "min")  # (2,)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any

from pukka.base import Type
from pukka.errors import ExtensionError

if TYPE_CHECKING:
    from pukka.base import Override

logger = logging.getLogger(__name__)

type ValidatorFactory = Callable[..., Callable[..., Any]]

_OVERRIDE_KEYWORDS = ("invalid_type_error", "required_error")


@dataclass(frozen=True)
class Extension:
    """A refinement factory registered under a method name.

    Attributes:
        name: Method name on node instances
        factory: Called with the method's arguments, returns the validator
        target: Node class (or base class) the extension is written for
        is_async: Register the validator as an async refinement

    """

    name: str
    factory: ValidatorFactory
    target: type[Type[Any]]
    is_async: bool = False


class Extensions(Mapping[str, Extension]):
    """Immutable set of extensions keyed by name. Sets merge with `|`."""

    def __init__(self, extensions: Mapping[str, Extension] | None = None) -> None:
        self._extensions: dict[str, Extension] = dict(extensions or {})

    @classmethod
    def define(cls, target: type[Type[Any]], **factories: ValidatorFactory) -> Extensions:
        """Create synchronous extensions for `target` and its subclasses."""
        return cls(
            {name: Extension(name, factory, target) for name, factory in factories.items()},
        )

    @classmethod
    def define_async(
        cls,
        target: type[Type[Any]],
        **factories: ValidatorFactory,
    ) -> Extensions:
        """Create asynchronous extensions for `target` and its subclasses."""
        return cls(
            {
                name: Extension(name, factory, target, is_async=True)
                for name, factory in factories.items()
            },
        )

    def __getitem__(self, name: str) -> Extension:
        return self._extensions[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._extensions)

    def __len__(self) -> int:
        return len(self._extensions)

    def __or__(self, other: Mapping[str, Extension]) -> Extensions:
        if not isinstance(other, Mapping):
            return NotImplemented
        return Extensions({**self._extensions, **other})

    def __repr__(self) -> str:
        return f"Extensions({sorted(self._extensions)})"


def _registered(node_cls: type[Type[Any]], name: str) -> Extension | None:
    for klass in node_cls.__mro__:
        registry = klass.__dict__.get("_extensions")
        if registry and name in registry:
            return registry[name]
    return None


def apply_extensions[N: Type[Any]](
    node_cls: type[N],
    *extension_sets: Mapping[str, Extension],
) -> type[N]:
    """Attach extensions to `node_cls` (and so to all of its subclasses).

    Applying the same extension twice is a no-op.

    Raises:
        TypeError: If `node_cls` is not a subclass of an extension's target
        ExtensionError: If the name is already an attribute of `node_cls` or
            is registered to a different extension

    """
    registry = node_cls.__dict__.get("_extensions")
    if registry is None:
        msg = f"{node_cls.__name__} is not a schema node class"
        raise TypeError(msg)

    field_names = {f.name for f in fields(node_cls)}

    for extensions in extension_sets:
        for name, extension in extensions.items():
            if not issubclass(node_cls, extension.target):
                msg = (
                    f"Extension '{name}' targets {extension.target.__name__}, "
                    f"not {node_cls.__name__}"
                )
                raise TypeError(msg)

            existing = _registered(node_cls, name)
            if existing is extension:
                continue
            if existing is not None:
                msg = f"Extension '{name}' is already registered on {node_cls.__name__}"
                raise ExtensionError(msg)
            if name.startswith("_") or name in field_names or hasattr(node_cls, name):
                msg = f"Cannot register extension '{name}': {node_cls.__name__} already defines it"
                raise ExtensionError(msg)

            registry[name] = extension
            logger.debug(
                "Registered %s extension '%s' on %s",
                "async" if extension.is_async else "sync",
                name,
                node_cls.__name__,
            )

    return node_cls


def get_extension_params(
    node: Type[Any],
    extensions: Mapping[str, Extension],
    name: str,
) -> tuple[Any, ...] | None:
    """Return the arguments extension `name` was applied with on `node`.

    Meant for tooling that derives other artifacts (docs, OpenAPI) from a
    schema. Returns None if the extension was not applied to this node.

    Raises:
        KeyError: If `name` is not in `extensions`

    """
    if name not in extensions:
        msg = f"Unknown extension '{name}'. Available: {sorted(extensions)}"
        raise KeyError(msg)
    return node.extension_params(name)


def register_type[N: Type[Any]](node_cls: type[N]) -> Callable[..., N]:
    """Build a schema factory for a node class configured by keyword arguments.

    The factory accepts the class's fields plus `invalid_type_error` and
    `required_error`, which become the node's core issue overrides:

        url = register_type(UrlType)
        url(schemes=("https",), invalid_type_error="Enter a URL")
    """

    def factory(
        *,
        invalid_type_error: Override | None = None,
        required_error: Override | None = None,
        **config: Any,
    ) -> N:
        node = node_cls(**config)
        if invalid_type_error is None and required_error is None:
            return node
        return node.issues(
            invalid_type_error=invalid_type_error,
            required_error=required_error,
        )

    factory.__name__ = node_cls.kind
    factory.__qualname__ = node_cls.kind
    factory.__doc__ = f"Create a {node_cls.__name__}. Accepts {', '.join(_OVERRIDE_KEYWORDS)}."
    return factory
