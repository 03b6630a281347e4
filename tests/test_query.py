"""Tests for the encoded query compilers and builders."""

from __future__ import annotations

import pytest

from nowquery import many, single
from nowquery.exceptions import (
    ConflictingModeError,
    InvalidDirectionError,
    MissingSortError,
    MissingValueError,
    QueryBuildError,
    TooManyItemsError,
    TrailingJoinError,
    UnknownOperatorError,
    UnsupportedJoinError,
)
from nowquery.operators import DEFAULT_OPERATORS, Operator, OperatorTable
from nowquery.query import (
    SortDirection,
    build_advanced_query,
    build_basic_query,
    build_query,
    compile_filter,
    compile_sort,
    query_params,
)

# =============================================================================
# Filter compiler
# =============================================================================


class TestCompileFilter:
    """Tests for compile_filter."""

    @pytest.mark.req("QUERY-FILTER-001")
    def test_single_comparison(self) -> None:
        """A single comparison emits the comparison plus the section separator."""
        assert compile_filter([("state", "-eq", "1")]) == ["state=1", "^"]

    @pytest.mark.parametrize("name", list(DEFAULT_OPERATORS))
    def test_three_item_clause_uses_table_token_verbatim(self, name: str) -> None:
        """Field, token and value are concatenated with no escaping."""
        token = DEFAULT_OPERATORS[name].query_operator
        fragments = compile_filter([("short_description", name, "a b^c")])
        assert fragments[0] == f"short_description{token}a b^c"

    def test_or_join(self) -> None:
        """Join tokens sit between comparisons."""
        fragments = compile_filter(
            [("state", "-eq", "1"), "or", ("short_description", "-like", "powershell")]
        )
        assert "".join(fragments) == "state=1^ORshort_descriptionLIKEpowershell^"

    def test_and_and_group_joins(self) -> None:
        """`and` maps to ^ and `group` to ^NQ."""
        fragments = compile_filter(
            [
                ("active", "-eq", "true"),
                ("and",),
                ("priority", "-le", "2"),
                "group",
                ("state", "-ne", "7"),
            ]
        )
        assert "".join(fragments) == "active=true^priority<=2^NQstate!=7^"

    def test_two_item_clause_for_no_value_operator(self) -> None:
        """No-value operators are written without a value."""
        assert compile_filter([("assigned_to", "-isempty")]) == ["assigned_toISEMPTY", "^"]

    def test_three_item_clause_with_no_value_operator_is_accepted(self) -> None:
        """The value requirement is only checked for two-item clauses."""
        assert compile_filter([("assigned_to", "-isempty", "x")]) == ["assigned_toISEMPTYx", "^"]

    def test_value_is_converted_with_str(self) -> None:
        """Non-string values are formatted with str()."""
        assert compile_filter([("priority", "-lt", 3)]) == ["priority<3", "^"]

    def test_empty_clauses_are_skipped(self) -> None:
        """Zero-item clauses emit nothing."""
        assert compile_filter([(), ("state", "-eq", "1"), []]) == ["state=1", "^"]

    def test_no_fragments_means_no_separator(self) -> None:
        """An empty filter yields no fragments at all."""
        assert compile_filter([]) == []
        assert compile_filter(None) == []
        assert compile_filter([(), ()]) == []

    def test_join_followed_only_by_empty_clause_is_not_trailing(self) -> None:
        """A join is trailing only when it is the last clause, empty or not."""
        assert compile_filter([("a", "-eq", "1"), "or", ()]) == ["a=1", "^OR", "^"]
        assert "".join(compile_filter([("a", "-eq", "1"), "or", ()])) == "a=1^OR^"

    def test_single_clause_is_normalized(self) -> None:
        """A bare clause equals a one-item list of clauses."""
        assert compile_filter(("state", "-eq", "1")) == compile_filter([("state", "-eq", "1")])

    def test_explicit_clause_lists(self) -> None:
        """single()/many() produce the same output as the inferred shapes."""
        assert compile_filter(single("state", "-eq", "1")) == ["state=1", "^"]
        assert compile_filter(many(("a", "-eq", "1"), "or", ("b", "-eq", "2"))) == [
            "a=1",
            "^OR",
            "b=2",
            "^",
        ]

    def test_custom_operator_table(self) -> None:
        """A supplied table replaces the default lookup."""
        table = OperatorTable([Operator(name="-has", query_operator="CONTAINS")])
        assert compile_filter([("tags", "-has", "vip")], operators=table) == [
            "tagsCONTAINSvip",
            "^",
        ]
        with pytest.raises(UnknownOperatorError):
            compile_filter([("state", "-eq", "1")], operators=table)


class TestCompileFilterErrors:
    """Invalid filter clauses abort the build."""

    @pytest.mark.req("QUERY-FILTER-ERR-001")
    @pytest.mark.parametrize("join", ["and", "or", "group"])
    def test_trailing_join(self, join: str) -> None:
        with pytest.raises(TrailingJoinError) as exc_info:
            compile_filter([("state", "-eq", "1"), join])
        assert exc_info.value.index == 1

    def test_join_alone_is_trailing(self) -> None:
        with pytest.raises(TrailingJoinError):
            compile_filter(["or"])

    @pytest.mark.parametrize("join", ["xor", "AND", "Or", "not"])
    def test_unsupported_join(self, join: str) -> None:
        with pytest.raises(UnsupportedJoinError, match="Unsupported join"):
            compile_filter([("state", "-eq", "1"), join, ("state", "-eq", "2")])

    def test_unsupported_join_checked_before_trailing(self) -> None:
        with pytest.raises(UnsupportedJoinError):
            compile_filter([("state", "-eq", "1"), "xor"])

    def test_unknown_operator(self) -> None:
        with pytest.raises(UnknownOperatorError, match="-equals"):
            compile_filter([("state", "-equals", "1")])

    def test_unknown_operator_in_two_item_clause(self) -> None:
        with pytest.raises(UnknownOperatorError):
            compile_filter([("state", "-nothing")])

    @pytest.mark.parametrize("name", ["-eq", "-like", "-between"])
    def test_missing_value(self, name: str) -> None:
        with pytest.raises(MissingValueError, match="requires a value"):
            compile_filter([("state", name)])

    def test_too_many_items(self) -> None:
        with pytest.raises(TooManyItemsError) as exc_info:
            compile_filter([("state", "-eq", "1"), "and", ("state", "-eq", "1", "2")])
        assert exc_info.value.index == 2
        assert exc_info.value.clause == ("state", "-eq", "1", "2")

    def test_errors_are_value_errors(self) -> None:
        """Build errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            compile_filter([("state", "-eq", "1"), "and"])
        assert issubclass(TrailingJoinError, QueryBuildError)


# =============================================================================
# Sort compiler
# =============================================================================


class TestCompileSort:
    """Tests for compile_sort."""

    def test_single_descending(self) -> None:
        assert compile_sort([("opened_at", "desc")]) == ["ORDERBYDESCopened_at"]

    def test_multiple_keys_are_caret_joined(self) -> None:
        fragments = compile_sort([("opened_at", "desc"), ("state",), ("number", "asc")])
        assert fragments == ["ORDERBYDESCopened_at", "^", "ORDERBYstate", "^", "ORDERBYnumber"]

    def test_default_direction_is_ascending(self) -> None:
        assert compile_sort([("state",)]) == compile_sort([("state", "asc")])

    def test_bare_field_name(self) -> None:
        assert compile_sort("state") == ["ORDERBYstate"]
        assert compile_sort([("opened_at", "desc"), "state"]) == [
            "ORDERBYDESCopened_at",
            "^",
            "ORDERBYstate",
        ]

    def test_single_clause_is_normalized(self) -> None:
        assert compile_sort(("opened_at", "desc")) == compile_sort([("opened_at", "desc")])

    def test_empty(self) -> None:
        assert compile_sort([]) == []
        assert compile_sort([()]) == []

    def test_key_after_empty_first_clause_keeps_separator(self) -> None:
        """Separators follow clause position, so a skipped first clause still counts."""
        assert compile_sort([(), ("b",)]) == ["^", "ORDERBYb"]

    @pytest.mark.parametrize("direction", ["DESC", "descending", "up", ""])
    def test_invalid_direction(self, direction: str) -> None:
        with pytest.raises(InvalidDirectionError):
            compile_sort([("opened_at", direction)])

    def test_too_many_items(self) -> None:
        with pytest.raises(TooManyItemsError):
            compile_sort([("opened_at", "desc", "extra")])


# =============================================================================
# Advanced builder
# =============================================================================


class TestBuildAdvancedQuery:
    """Tests for build_advanced_query."""

    def test_filter_and_sort(self) -> None:
        query = build_advanced_query(
            [("state", "-eq", "1")],
            [("opened_at", "desc"), ("state",)],
        )
        assert query == "state=1^ORDERBYDESCopened_at^ORDERBYstate"

    def test_empty_sort_list_leaves_filter_section(self) -> None:
        assert build_advanced_query([("state", "-eq", "1")], []) == "state=1^"

    def test_empty_first_sort_clause_doubles_separator(self) -> None:
        assert build_advanced_query([("a", "-eq", "1")], [(), ("b",)]) == "a=1^^ORDERBYb"

    def test_sort_only(self) -> None:
        assert build_advanced_query(None, [("number",)]) == "ORDERBYnumber"

    def test_missing_sort(self) -> None:
        with pytest.raises(MissingSortError):
            build_advanced_query([("state", "-eq", "1")], None)

    def test_trailing_join_returns_nothing(self) -> None:
        with pytest.raises(TrailingJoinError):
            build_advanced_query([("state", "-eq", "1"), "and"], [("opened_at", "desc")])

    def test_sort_error_aborts_after_valid_filter(self) -> None:
        with pytest.raises(InvalidDirectionError):
            build_advanced_query([("state", "-eq", "1")], [("opened_at", "down")])


# =============================================================================
# Basic builder
# =============================================================================


class TestBuildBasicQuery:
    """Tests for build_basic_query."""

    @pytest.mark.req("QUERY-BASIC-001")
    def test_exact_match_with_defaults(self) -> None:
        assert build_basic_query(match_exact={"state": "1"}) == "ORDERBYDESCopened_at^state=1"

    def test_defaults_only(self) -> None:
        assert build_basic_query() == "ORDERBYDESCopened_at"

    def test_ascending(self) -> None:
        query = build_basic_query(order_by="number", order_direction=SortDirection.ASC)
        assert query == "ORDERBYnumber"

    @pytest.mark.parametrize("direction", ["asc", "Asc", "ASC"])
    def test_direction_strings(self, direction: str) -> None:
        assert build_basic_query(order_direction=direction) == "ORDERBYopened_at"

    def test_invalid_direction(self) -> None:
        with pytest.raises(InvalidDirectionError):
            build_basic_query(order_direction="sideways")

    def test_exact_then_contains_with_lowercased_fields(self) -> None:
        query = build_basic_query(
            match_exact={"State": 1, "Priority": "2"},
            match_contains={"Short_Description": "vpn"},
        )
        assert query == "ORDERBYDESCopened_at^state=1^priority=2^short_descriptionLIKEvpn"

    def test_pairs_keep_their_order(self) -> None:
        query = build_basic_query(
            match_exact=[("b", "2"), ("a", "1")],
            match_contains=[("z", "x")],
        )
        assert query == "ORDERBYDESCopened_at^b=2^a=1^zLIKEx"

    def test_values_are_not_escaped(self) -> None:
        query = build_basic_query(match_contains={"short_description": "a^b=c"})
        assert query == "ORDERBYDESCopened_at^short_descriptionLIKEa^b=c"


# =============================================================================
# Mode dispatch
# =============================================================================


class TestBuildQuery:
    """Tests for build_query."""

    def test_basic_mode_by_default(self) -> None:
        assert build_query(match_exact={"state": "1"}) == "ORDERBYDESCopened_at^state=1"
        assert build_query() == "ORDERBYDESCopened_at"

    def test_advanced_mode(self) -> None:
        query = build_query(
            filter=[("state", "-eq", "1"), "or", ("short_description", "-like", "powershell")],
            sort=[("opened_at", "desc")],
        )
        assert query == "state=1^ORshort_descriptionLIKEpowershell^ORDERBYDESCopened_at"

    def test_filter_without_sort(self) -> None:
        with pytest.raises(MissingSortError):
            build_query(filter=[("state", "-eq", "1")])

    def test_conflicting_modes(self) -> None:
        with pytest.raises(ConflictingModeError, match="match_exact"):
            build_query(
                filter=[("state", "-eq", "1")],
                sort=[("opened_at", "desc")],
                match_exact={"state": "1"},
            )

    def test_query_params(self) -> None:
        assert query_params("state=1^") == {"sysparm_query": "state=1^"}
