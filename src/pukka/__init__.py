"""pukka - Schema-driven validation with field-level issues for Python 3.12+."""

from pukka.base import (
    CoreIssueOverrides,
    ParseFailure,
    ParseResult,
    ParseSuccess,
    Type,
    ValidatorEntry,
    get_path_type,
)
from pukka.codecs import to_builtins
from pukka.context import (
    BooleanOptions,
    IssueTrackingContext,
    NumberOptions,
    ParseContext,
    ParseOptions,
    StringOptions,
)
from pukka.errors import (
    AsyncRefinementError,
    ContextKeyError,
    ExtensionError,
    ParseError,
    PukkaError,
)
from pukka.extend import (
    Extension,
    Extensions,
    apply_extensions,
    get_extension_params,
    register_type,
)
from pukka.formats.json import to_json
from pukka.issues import (
    CORE_ISSUES,
    Issue,
    IssueDetail,
    IssueRegistry,
    is_issue,
    register_issues,
)
from pukka.proxy import (
    TrackedMapping,
    TrackedSequence,
    path_of,
    unwrap,
)
from pukka.schema import SchemaBuilder, z
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
from pukka.util import (
    MISSING,
    ParsedInput,
    ParsedInputDict,
    ParsedInputList,
    ParsedInputValue,
    from_entries,
    get_display_name,
    reshape_parsed_input,
    to_parsed_input,
)

__all__ = [
    # Issues
    "CORE_ISSUES",
    # Values
    "MISSING",
    # Node types
    "ArrayType",
    # Errors
    "AsyncRefinementError",
    # Options
    "BooleanOptions",
    "ContextKeyError",
    "CoreIssueOverrides",
    "EnumType",
    # Extensions
    "Extension",
    "ExtensionError",
    "Extensions",
    "Issue",
    "IssueDetail",
    "IssueRegistry",
    # Context
    "IssueTrackingContext",
    "LiteralType",
    "NumberOptions",
    "NumberType",
    "ObjectType",
    "ParseContext",
    "ParseError",
    # Results
    "ParseFailure",
    "ParseOptions",
    "ParseResult",
    "ParseSuccess",
    "ParsedInput",
    "ParsedInputDict",
    "ParsedInputList",
    "ParsedInputValue",
    "PukkaError",
    "RecordType",
    # Schema building
    "SchemaBuilder",
    "StringOptions",
    "StringType",
    # Path tracking
    "TrackedMapping",
    "TrackedSequence",
    "Type",
    "UnionType",
    "ValidatorEntry",
    "apply_extensions",
    # Form helpers
    "from_entries",
    "get_display_name",
    "get_extension_params",
    "get_path_type",
    "is_issue",
    "path_of",
    "register_issues",
    "register_type",
    "reshape_parsed_input",
    # Serialization
    "to_builtins",
    "to_json",
    "to_parsed_input",
    "unwrap",
    "z",
]
