"""Tests for the concrete node types."""

from __future__ import annotations

from types import MappingProxyType

import pytest

from pukka.base import ParseFailure
from pukka.context import ParseContext
from pukka.issues import Issue
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
from pukka.util import MISSING


def issues_of(result: object) -> list[Issue]:
    assert isinstance(result, ParseFailure)
    return result.issues


# =============================================================================
# Scalars
# =============================================================================


class TestStringType:
    """Test StringType parsing, trimming and coercion."""

    def test_trims_by_default(self) -> None:
        """Test that surrounding whitespace is stripped."""
        assert StringType().parse("  hi  ") == "hi"

    def test_trim_disabled(self) -> None:
        """Test trim=False on the node."""
        assert StringType(trim=False).parse("  hi ") == "  hi "

    def test_trim_from_options(self) -> None:
        """Test that the options bag is used when the node leaves trim unset."""
        assert StringType().parse(" hi ", {"string": {"trim": False}}) == " hi "

    def test_node_config_wins_over_options(self) -> None:
        """Test that node configuration takes precedence."""
        assert StringType(trim=True).parse(" hi ", {"string": {"trim": False}}) == "hi"

    def test_invalid_type(self) -> None:
        """Test the issue raised for a non-string."""
        assert issues_of(StringType().safe_parse(5)) == [
            Issue((), "invalid_type", "Expected: string, Received: 5"),
        ]

    def test_coerce(self) -> None:
        """Test converting scalars with str()."""
        assert StringType(coerce=True).parse(5) == "5"
        assert StringType(coerce=True).parse(True) == "True"  # noqa: FBT003
        assert StringType().parse(5, {"string": {"coerce": True}}) == "5"

    def test_coerce_skips_containers(self) -> None:
        """Test that lists and dicts are never coerced."""
        assert issues_of(StringType(coerce=True).safe_parse([1]))[0].message == (
            "Expected: string, Received: array"
        )

    def test_empty_disallowed(self) -> None:
        """Test that blank strings raise required when empty=False."""
        assert issues_of(StringType(empty=False).safe_parse("   ")) == [
            Issue((), "required", "Value is required, Received '   '"),
        ]
        assert not StringType(empty=False, coerce=True).safe_parse("").success

    def test_empty_from_options(self) -> None:
        """Test the empty setting in the options bag."""
        assert not StringType().safe_parse("", {"string": {"empty": False}}).success
        assert StringType().parse("") == ""

    def test_missing_and_none(self) -> None:
        """Test required, optional and nullable handling."""
        assert issues_of(StringType().safe_parse(MISSING)) == [
            Issue((), "required", "Value is required, Received 'MISSING'"),
        ]
        assert StringType().optional().parse(MISSING) == ""
        assert StringType().nullable().parse(None) == ""
        assert not StringType().optional().safe_parse(None).success
        assert not StringType().nullable().safe_parse(MISSING).success


class TestNumberType:
    """Test NumberType parsing and coercion."""

    def test_numbers(self) -> None:
        """Test ints and floats."""
        assert NumberType().parse(3) == 3
        assert NumberType().parse(2.5) == 2.5

    def test_bool_is_not_a_number(self) -> None:
        """Test that booleans are rejected without coercion."""
        assert issues_of(NumberType().safe_parse(True)) == [  # noqa: FBT003
            Issue((), "invalid_type", "Expected: number, Received: True"),
        ]

    def test_strings_rejected(self) -> None:
        """Test that numeric strings need coercion."""
        assert not NumberType().safe_parse("5").success

    def test_coerce(self) -> None:
        """Test coercing strings and booleans."""
        node = NumberType(coerce=True)
        assert node.parse("5") == 5
        assert isinstance(node.parse("5"), int)
        assert node.parse(" 2.5 ") == 2.5
        assert node.parse(True) == 1  # noqa: FBT003

    def test_coerce_failures(self) -> None:
        """Test values that cannot be coerced."""
        node = NumberType(coerce=True)
        for value in ("abc", "nan", "", [1]):
            assert not node.safe_parse(value).success

    def test_coerce_from_options(self) -> None:
        """Test the number namespace of the options bag."""
        assert NumberType().parse("7", {"number": {"coerce": True}}) == 7

    def test_default(self) -> None:
        """Test the default value."""
        assert NumberType().optional().parse(MISSING) == 0


class TestBooleanType:
    """Test BooleanType parsing and coercion."""

    def test_booleans(self) -> None:
        """Test plain booleans."""
        assert BooleanType().parse(False) is False  # noqa: FBT003

    def test_invalid(self) -> None:
        """Test that other values are rejected."""
        assert not BooleanType().safe_parse("yes").success

    def test_coerce(self) -> None:
        """Test coercion by truthiness."""
        node = BooleanType(coerce=True)
        assert node.parse("yes") is True
        assert node.parse(0) is False
        assert node.parse("") is False
        assert BooleanType().parse(1, {"boolean": {"coerce": True}}) is True


class TestEnumType:
    """Test EnumType."""

    def test_member(self) -> None:
        """Test accepted values."""
        assert EnumType(("email", "phone")).parse("phone") == "phone"

    def test_non_member(self) -> None:
        """Test the issue for other values."""
        assert issues_of(EnumType(["email", "phone"]).safe_parse("fax")) == [
            Issue((), "invalid_type", "Expected: One of [email,phone], Received: fax"),
        ]

    def test_values_are_stored_as_tuple(self) -> None:
        """Test that list input is frozen."""
        assert EnumType(["a"]).values == ("a",)


class TestLiteralType:
    """Test LiteralType."""

    def test_match(self) -> None:
        """Test the literal value itself."""
        assert LiteralType("text").parse("text") == "text"
        assert LiteralType(3).parse(3) == 3

    def test_type_strict(self) -> None:
        """Test that bool and int literals do not match each other."""
        assert not LiteralType(1).safe_parse(True).success  # noqa: FBT003
        assert not LiteralType(True).safe_parse(1).success  # noqa: FBT003

    def test_message(self) -> None:
        """Test the expected value in the message."""
        assert issues_of(LiteralType("call").safe_parse("fax"))[0].message == (
            "Expected: call, Received: fax"
        )

    def test_literal_value(self) -> None:
        """Test literal introspection."""
        node = LiteralType("call")
        assert node.is_literal
        assert node.literal_value == "call"
        assert not StringType().is_literal
        with pytest.raises(TypeError, match="Not a literal type"):
            StringType().literal_value  # noqa: B018


# =============================================================================
# Composites
# =============================================================================


class TestObjectType:
    """Test ObjectType."""

    def person(self) -> ObjectType:
        return ObjectType({"name": StringType(), "age": NumberType()})

    def test_drops_unknown_keys(self) -> None:
        """Test that keys outside the properties are removed silently."""
        result = self.person().safe_parse({"name": "a", "age": 1, "extra": "x"})
        assert result.success
        assert result.data == {"name": "a", "age": 1}

    def test_missing_child(self) -> None:
        """Test that a missing property raises required at its path."""
        assert issues_of(self.person().safe_parse({"name": "a"})) == [
            Issue(("age",), "required", "Value is required, Received 'MISSING'"),
        ]

    def test_input_is_not_mutated(self) -> None:
        """Test that parsed children are written into a copy."""
        data = {"name": " a ", "age": 1, "extra": True}
        assert self.person().parse(data) == {"name": "a", "age": 1}
        assert data == {"name": " a ", "age": 1, "extra": True}

    def test_invalid_type_skips_children(self) -> None:
        """Test that children are not parsed when the object itself fails."""
        assert issues_of(self.person().safe_parse("x")) == [
            Issue((), "invalid_type", "Expected: object, Received: x"),
        ]

    def test_default(self) -> None:
        """Test that the default is built from the children's defaults."""
        node = self.person().optional()
        assert node.parse(MISSING) == {"name": "", "age": 0}
        assert node.parse(MISSING) is not node.parse(MISSING)

    def test_any_mapping(self) -> None:
        """Test that read-only mappings are accepted and copied to a dict."""
        parsed = self.person().parse(MappingProxyType({"name": "a", "age": 1}))
        assert parsed == {"name": "a", "age": 1}
        assert isinstance(parsed, dict)

    def test_nested_paths(self) -> None:
        """Test issue paths through nested objects and arrays."""
        node = ObjectType({"addresses": ArrayType(ObjectType({"city": StringType()}))})
        result = node.safe_parse({"addresses": [{"city": "a"}, {"city": 5}]})
        assert [issue.path for issue in issues_of(result)] == [("addresses", 1, "city")]


class TestRecordType:
    """Test RecordType."""

    def test_values(self) -> None:
        """Test parsing every value with the value type."""
        assert RecordType(NumberType()).parse({"a": 1, "b": 2}) == {"a": 1, "b": 2}

    def test_value_issue_path(self) -> None:
        """Test that value issues are raised at their key."""
        assert [i.path for i in issues_of(RecordType(NumberType()).safe_parse({"a": "x"}))] == [
            ("a",),
        ]

    def test_invalid(self) -> None:
        """Test the issue for non-mappings."""
        assert issues_of(RecordType(NumberType()).safe_parse([1]))[0].message == (
            "Expected: record, Received: array"
        )


class TestArrayType:
    """Test ArrayType."""

    def test_items(self) -> None:
        """Test parsing every item; tuples become lists."""
        assert ArrayType(StringType()).parse([" a ", "b"]) == ["a", "b"]
        assert ArrayType(StringType()).parse(("a",)) == ["a"]

    def test_item_issue_path(self) -> None:
        """Test that item issues are raised at their index."""
        result = ArrayType(StringType()).safe_parse(["a", 5])
        assert [issue.path for issue in issues_of(result)] == [(1,)]

    def test_coerce_wraps_single_value(self) -> None:
        """Test wrapping a scalar in a one-item list."""
        assert ArrayType(StringType(), coerce=True).parse(" x ") == ["x"]
        assert not ArrayType(StringType()).safe_parse("x").success

    def test_holes_are_skipped(self) -> None:
        """Test that MISSING slots are neither parsed nor defaulted."""
        assert ArrayType(StringType()).parse(["a", MISSING, "b"]) == ["a", MISSING, "b"]

    def test_none_item_is_required(self) -> None:
        """Test that None items are parsed and rejected."""
        result = ArrayType(StringType()).safe_parse(["a", None])
        assert issues_of(result) == [
            Issue((1,), "required", "Value is required, Received 'None'"),
        ]


class TestUnionType:
    """Test union member resolution."""

    def phone_prefs(self) -> UnionType:
        call = ObjectType({"type": LiteralType("call"), "landline": StringType()})
        text = ObjectType({"type": LiteralType("text"), "mobile": StringType()})
        return UnionType((call, text))

    def test_empty(self) -> None:
        """Test that a union needs members."""
        with pytest.raises(ValueError, match="cannot be empty"):
            UnionType(())

    def test_check_needs_resolved_member(self) -> None:
        """Test that the union itself never checks values."""
        with pytest.raises(TypeError, match="checked by the resolved member"):
            UnionType((StringType(),))._check(ParseContext(), "a")  # noqa: SLF001

    def test_first_passing_member(self) -> None:
        """Test trial parsing in declared order."""
        node = UnionType((StringType(), NumberType()))
        assert node.parse(5) == 5
        assert node.parse(" a ") == "a"

    def test_fallback_to_first_member(self) -> None:
        """Test that the first member reports issues when none passes."""
        result = UnionType((StringType(), NumberType())).safe_parse(True)  # noqa: FBT003
        assert issues_of(result) == [
            Issue((), "invalid_type", "Expected: string, Received: True"),
        ]

    def test_discriminated_match(self) -> None:
        """Test choosing a member by its literal keys."""
        parsed = self.phone_prefs().parse({"type": "text", "mobile": "555", "x": 1})
        assert parsed == {"type": "text", "mobile": "555"}

    def test_discriminated_no_match(self) -> None:
        """Test that an unmatched discriminated union uses its first member."""
        result = self.phone_prefs().safe_parse({"type": "fax"})
        assert issues_of(result) == [
            Issue(("type",), "invalid_type", "Expected: call, Received: fax"),
            Issue(("landline",), "required", "Value is required, Received 'MISSING'"),
        ]

    def test_trials_do_not_leak(self) -> None:
        """Test that rejected trials leave no issues behind."""
        node = UnionType((NumberType(), ObjectType({"a": NumberType()}), StringType()))
        assert node.parse("x") == "x"

    def test_member_refinements_run(self) -> None:
        """Test that the resolved member's refinements are applied."""
        text = ObjectType({"type": LiteralType("text"), "mobile": StringType()}).refine(
            lambda ctx, v: ctx.issue(v["mobile"] == "0", "Invalid mobile"),
        )
        call = ObjectType({"type": LiteralType("call")})
        result = UnionType((call, text)).safe_parse({"type": "text", "mobile": "0"})
        assert issues_of(result) == [Issue(("mobile",), "custom", "Invalid mobile")]

    def test_nested_union(self) -> None:
        """Test that nested unions resolve to a concrete member."""
        inner = UnionType((LiteralType("a"), LiteralType("b")))
        node = UnionType((inner, NumberType()))
        assert node.parse("b") == "b"
        assert node.parse(3) == 3

    def test_default(self) -> None:
        """Test that the default comes from the first member."""
        assert self.phone_prefs().optional().parse(MISSING) == {"type": "call", "landline": ""}
