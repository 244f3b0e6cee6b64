"""Conversion of parse results to JSON-compatible builtins."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pukka.issues import Issue, IssueDetail
from pukka.util import MISSING, ParsedInputDict, ParsedInputList, ParsedInputValue

_ISSUES_KEY = "issues"


def _issue_details(issues: Sequence[IssueDetail]) -> list[dict[str, str]]:
    return [{"code": issue.code, "message": issue.message} for issue in issues]


def to_builtins(obj: Any) -> Any:
    """Convert parse results to JSON-compatible Python builtins.

    Handles parsed-input trees, issues and plain parsed data:
        - ParsedInputDict: its fields plus an "issues" key
        - ParsedInputList: its items followed by a trailing {"issues": [...]}
        - ParsedInputValue: {"value", "parsed", "issues"}
        - Issue: {"path", "code", "message"}
        - MISSING: None

    Returns:
        JSON-compatible Python value (dict, list, str, int, float, bool, None)

    """
    # 1. Parsed-input branches and leaves
    if isinstance(obj, ParsedInputDict):
        result = {key: to_builtins(value) for key, value in obj.items()}
        result[_ISSUES_KEY] = _issue_details(obj.issues)
        return result
    if isinstance(obj, ParsedInputList):
        return [*(to_builtins(item) for item in obj), {_ISSUES_KEY: _issue_details(obj.issues)}]
    if isinstance(obj, ParsedInputValue):
        return {
            "value": to_builtins(obj.value),
            "parsed": to_builtins(obj.parsed),
            _ISSUES_KEY: _issue_details(obj.issues),
        }

    # 2. Issues
    if isinstance(obj, Issue):
        return {"path": list(obj.path), "code": obj.code, "message": obj.message}
    if isinstance(obj, IssueDetail):
        return {"code": obj.code, "message": obj.message}

    # 3. Absent values
    if obj is MISSING:
        return None

    # 4. Containers
    if isinstance(obj, Mapping):
        return {str(key): to_builtins(value) for key, value in obj.items()}
    if isinstance(obj, Sequence) and not isinstance(obj, str | bytes):
        return [to_builtins(item) for item in obj]

    # 5. Primitives pass through
    return obj
