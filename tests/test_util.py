"""Tests for the MISSING sentinel, parsed-input trees and form helpers."""

from __future__ import annotations

import copy
import pickle

from pukka.issues import Issue, IssueDetail
from pukka.util import (
    MISSING,
    FieldInput,
    ParsedInputDict,
    ParsedInputList,
    ParsedInputValue,
    from_entries,
    get_display_name,
    is_nullish,
    split_path,
    to_parsed_input,
)


class TestMissing:
    """Test the MISSING sentinel."""

    def test_falsy_singleton(self) -> None:
        """Test truthiness, repr and identity."""
        assert not MISSING
        assert repr(MISSING) == "MISSING"
        assert type(MISSING)() is MISSING

    def test_survives_copy_and_pickle(self) -> None:
        """Test that copies are the same object."""
        assert copy.deepcopy(MISSING) is MISSING
        assert pickle.loads(pickle.dumps(MISSING)) is MISSING  # noqa: S301

    def test_is_nullish(self) -> None:
        """Test None and MISSING against falsy values."""
        assert is_nullish(None)
        assert is_nullish(MISSING)
        assert not is_nullish(0)
        assert not is_nullish("")


class TestToParsedInput:
    """Test building parsed-input trees."""

    def test_without_lookup(self) -> None:
        """Test that every leaf is reported as cleanly parsed."""
        tree = to_parsed_input({"a": [1, 2], "b": "x"})
        assert isinstance(tree, ParsedInputDict)
        assert isinstance(tree["a"], ParsedInputList)
        assert tree["a"][1] == ParsedInputValue(2, 2)
        assert tree["b"] == ParsedInputValue("x", "x")
        assert tree.issues == []
        assert tree["a"].issues == []

    def test_with_lookup(self) -> None:
        """Test raw values, parse status and issues from a lookup."""
        records = {
            (): FieldInput({"age": "x"}, parsed=True),
            ("age",): FieldInput(
                "x",
                parsed=False,
                issues=[Issue(("age",), "invalid_type", "Expected: number, Received: x")],
            ),
        }
        tree = to_parsed_input({"age": 0}, lambda path: records[path])
        assert tree["age"] == ParsedInputValue(
            value="x",
            parsed=None,
            issues=[IssueDetail("invalid_type", "Expected: number, Received: x")],
        )


class TestDisplayName:
    """Test get_display_name()."""

    def test_camel_case(self) -> None:
        """Test splitting camel case and capitalizing."""
        assert get_display_name(["orders", 0, "orderNumber"]) == "Order Number"

    def test_uses_last_string_key(self) -> None:
        """Test skipping trailing indexes."""
        assert get_display_name(["addresses", 1]) == "Addresses"

    def test_no_string_key(self) -> None:
        """Test paths without names."""
        assert get_display_name([0, 1]) == ""
        assert get_display_name([]) == ""


class TestFromEntries:
    """Test building nested objects from form keys."""

    def test_split_path(self) -> None:
        """Test tokenizing dotted and bracketed keys."""
        assert split_path("addresses[0].city") == ["addresses", 0, "city"]
        assert split_path(" tags[] ") == ["tags", "[]"]
        assert split_path("a[b].c") == ["a", "b", "c"]

    def test_nested(self) -> None:
        """Test objects and arrays."""
        assert from_entries([("homer.addresses[0].city", "Springfield")]) == {
            "homer": {"addresses": [{"city": "Springfield"}]},
        }

    def test_repeated_keys(self) -> None:
        """Test that repeated keys collect into a list."""
        assert from_entries([("a", 1), ("a", 2), ("a", 3)]) == {"a": [1, 2, 3]}

    def test_append(self) -> None:
        """Test the [] suffix."""
        assert from_entries([("tags[]", "a"), ("tags[]", "b")]) == {"tags": ["a", "b"]}

    def test_out_of_order_indexes(self) -> None:
        """Test filling list slots in any order."""
        assert from_entries([("a[1]", "y"), ("a[0]", "x")]) == {"a": ["x", "y"]}

    def test_unfilled_slots_are_missing(self) -> None:
        """Test that skipped indexes hold MISSING."""
        assert from_entries([("a[1]", "y")]) == {"a": [MISSING, "y"]}

    def test_mapping(self) -> None:
        """Test a mapping of entries."""
        assert from_entries({"a.b": 1, "a.c": 2}) == {"a": {"b": 1, "c": 2}}

    def test_key_inside_scalar_ignored(self) -> None:
        """Test that a key nesting inside an earlier scalar is dropped."""
        assert from_entries([("a", "x"), ("a.b", "y")]) == {"a": "x"}
        assert from_entries([("a[0]", "x"), ("a[0].b", "y")]) == {"a": ["x"]}

    def test_string_key_on_list_ignored(self) -> None:
        """Test that a named key cannot be set on an array."""
        assert from_entries([("a[0]", "x"), ("a.b", "y")]) == {"a": ["x"]}

    def test_negative_index_is_a_key(self) -> None:
        """Test that negative indexes are treated as object keys."""
        assert split_path("a[-1]") == ["a", "-1"]
        assert from_entries([("a[-1]", "x")]) == {"a": {"-1": "x"}}
        assert from_entries([("a[0]", "x"), ("a[-1]", "y")]) == {"a": ["x"]}
