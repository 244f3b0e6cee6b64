"""Path-tracking views over parsed values.

Refinements receive parsed data wrapped in these views. Every item read moves
the parse context's current path to the item that was read, so an issue raised
without an explicit path lands on the field the refinement looked at last:

    def check_city(ctx, customer):
        if not customer["addresses"][0]["city"]:
            ctx.issue("City is required")  # path: ("addresses", 0, "city")
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping, Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pukka.issues import Key, Path


class PathTracker:
    """Creates views for one refinement scope and keeps them stable per path."""

    def __init__(self, move: Callable[[Path], None]) -> None:
        self._move = move
        self._views: dict[Path, TrackedMapping | TrackedSequence] = {}

    def wrap(self, value: Any, path: Path) -> Any:
        """Return a view of dicts and lists, other values unchanged."""
        if not isinstance(value, dict | list):
            return value
        if (view := self._views.get(path)) is not None:
            return view
        view = (
            TrackedMapping(value, path, self)
            if isinstance(value, dict)
            else TrackedSequence(value, path, self)
        )
        self._views[path] = view
        return view

    def visit(self, value: Any, path: Path) -> Any:
        """Move the current path to `path` and return the wrapped value."""
        self._move(path)
        return self.wrap(value, path)

    def move(self, path: Path) -> None:
        self._move(path)


class TrackedMapping(Mapping[str, Any]):
    """Read-only view of a parsed object.

    Keys can be read by item (`view["city"]`) or attribute (`view.city`);
    attribute reads do not reach keys shadowed by Mapping methods such as
    `items` or `get`.
    """

    __slots__ = ("_path", "_target", "_tracker")

    def __init__(self, target: dict[str, Any], path: Path, tracker: PathTracker) -> None:
        self._target = target
        self._path = path
        self._tracker = tracker

    def __getitem__(self, key: str) -> Any:
        value = self._target[key]
        return self._tracker.visit(value, (*self._path, key))

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self[name]
        except KeyError:
            msg = f"{type(self).__name__} has no key '{name}'"
            raise AttributeError(msg) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._target)

    def __len__(self) -> int:
        return len(self._target)

    def __contains__(self, key: object) -> bool:
        return key in self._target

    def __eq__(self, other: object) -> bool:
        return self._target == unwrap(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._target!r})"


class TrackedSequence(Sequence[Any]):
    """Read-only view of a parsed array.

    Iteration reads items one index at a time, so the current path follows
    the loop. Taking the length moves the path to the array itself.
    """

    __slots__ = ("_path", "_target", "_tracker")

    def __init__(self, target: list[Any], path: Path, tracker: PathTracker) -> None:
        self._target = target
        self._path = path
        self._tracker = tracker

    def __getitem__(self, index: int | slice) -> Any:  # type: ignore[override]
        if isinstance(index, slice):
            return [self[i] for i in range(*index.indices(len(self._target)))]
        value = self._target[index]
        key: Key = index if index >= 0 else len(self._target) + index
        return self._tracker.visit(value, (*self._path, key))

    def __iter__(self) -> Iterator[Any]:
        for index in range(len(self._target)):
            yield self[index]

    def __len__(self) -> int:
        self._tracker.move(self._path)
        return len(self._target)

    def __contains__(self, value: object) -> bool:
        return unwrap(value) in self._target

    def __eq__(self, other: object) -> bool:
        return self._target == unwrap(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._target!r})"


def path_of(value: Any) -> Path:
    """Return the path a view was created for, or () for any other value."""
    if isinstance(value, TrackedMapping | TrackedSequence):
        return value._path  # noqa: SLF001
    return ()


def unwrap(value: Any) -> Any:
    """Return the value underneath a view (other values are returned as is)."""
    if isinstance(value, TrackedMapping | TrackedSequence):
        return value._target  # noqa: SLF001
    return value
