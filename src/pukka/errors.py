"""Exception hierarchy raised by the validation engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pukka.util import reshape_parsed_input

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pukka.base import Type
    from pukka.issues import Issue
    from pukka.util import ParsedInput

# Maximum number of issues listed in a ParseError message
_MAX_ISSUES_IN_MESSAGE = 10


class PukkaError(Exception):
    """Base class for all errors raised by pukka."""


class ContextKeyError(PukkaError, LookupError):
    """A refinement asked the parse context for a key the caller never supplied.

    This signals a configuration bug in the caller, so it is never converted
    into an `exception` issue and always propagates out of parse calls.
    """

    def __init__(self, key: str) -> None:
        super().__init__(f"Context key missing: {key}")
        self.key = key


class AsyncRefinementError(PukkaError, RuntimeError):
    """A synchronous entry point was used on a schema with async refinements."""


class ExtensionError(PukkaError, ValueError):
    """An extension could not be attached to a node type."""


class ParseError(PukkaError):
    """Raised by parse() and parse_async() when validation produced issues.

    Attributes:
        issues: Flat list of every issue raised during the parse
        input: Parsed-input tree mirroring the schema, with raw and parsed
            values and the issues raised at each field

    """

    def __init__(self, issues: Sequence[Issue], input: ParsedInput) -> None:  # noqa: A002
        self.issues = list(issues)
        self.input = input
        super().__init__(self._summary())

    def input_for(self, schema: Type[Any]) -> ParsedInput:
        """Rebuild the parsed-input tree in the shape of a compatible `schema`.

        Fields the failed parse never saw are reported as MISSING, so a form
        rendered from a different but compatible schema still finds every field.
        """
        return reshape_parsed_input(self.input, schema._default_value())  # noqa: SLF001

    def _summary(self) -> str:
        lines = [str(issue) for issue in self.issues[:_MAX_ISSUES_IN_MESSAGE]]
        if len(self.issues) > _MAX_ISSUES_IN_MESSAGE:
            lines.append("...")
        details = "\n  ".join(lines)
        return f"Validation failed with {len(self.issues)} issue(s)\n  {details}"
