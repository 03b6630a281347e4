"""
Fluent builder for advanced filter and sort clauses.

Provides a Pythonic way to produce the clause lists accepted by
`nowquery.query.build_advanced_query`.

Example:
    from nowquery.builder import F, Sort

    filter = F.field("state").eq(1) | F.field("short_description").like("vpn")
    query = build_advanced_query(filter.clauses(), [Sort.desc("opened_at")])

    # Start a new query group (^NQ)
    filter = F.field("active").eq("true").new_query(F.field("priority").le(2))

Expressions are flat: clauses are emitted in the order they were combined and
the remote API applies its own precedence, so no parentheses are implied.

Precedence differs from Python's. In Python `&` binds tighter than `|`, but
in the encoded query ``^OR`` binds tighter than ``^``, so

    a | b & c

reads as ``a OR (b AND c)`` yet encodes as ``a^ORb^c``, which the API
evaluates as ``(a OR b) AND c``. Write such filters left to right, or split
alternatives with `new_query`.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from .operators import OperatorTable
from .query import compile_filter


def format_value(value: Any) -> str:
    """Format a Python value for use in an encoded query."""
    if value is None:
        raise ValueError("None is not a valid query value; use is_empty()/is_not_empty().")
    if isinstance(value, bool):
        return "true" if value else "false"
    # Handle datetime before date (datetime is subclass of date)
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


@dataclass(frozen=True)
class FilterExpression:
    """An ordered run of filter clauses."""

    items: tuple[tuple[str, ...], ...]

    def clauses(self) -> list[tuple[str, ...]]:
        """Return the clause list for the advanced builder."""
        return list(self.items)

    def to_string(self, *, operators: OperatorTable | None = None) -> str:
        """Compile the expression to its encoded filter section."""
        return "".join(compile_filter(self.clauses(), operators=operators))

    def _join(self, token: str, other: FilterExpression) -> FilterExpression:
        return FilterExpression((*self.items, (token,), *other.items))

    def __and__(self, other: FilterExpression) -> FilterExpression:
        """Combine two expressions with `and` (``^``)."""
        return self._join("and", other)

    def __or__(self, other: FilterExpression) -> FilterExpression:
        """Combine two expressions with `or` (``^OR``)."""
        return self._join("or", other)

    def new_query(self, other: FilterExpression) -> FilterExpression:
        """Start a new query group with `other` (``^NQ``)."""
        return self._join("group", other)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Filter({self.to_string()!r})"


class FieldBuilder:
    """Builder for field-based filter clauses."""

    def __init__(self, field_name: str):
        self._field_name = field_name

    def _cmp(self, op: str, value: Any) -> FilterExpression:
        return FilterExpression(((self._field_name, op, format_value(value)),))

    def _unary(self, op: str) -> FilterExpression:
        return FilterExpression(((self._field_name, op),))

    def eq(self, value: Any) -> FilterExpression:
        """Field equals value."""
        return self._cmp("-eq", value)

    def ne(self, value: Any) -> FilterExpression:
        """Field does not equal value."""
        return self._cmp("-ne", value)

    def like(self, value: str) -> FilterExpression:
        """Field contains substring."""
        return self._cmp("-like", value)

    def not_like(self, value: str) -> FilterExpression:
        """Field does not contain substring."""
        return self._cmp("-notlike", value)

    def in_list(self, values: Iterable[Any]) -> FilterExpression:
        """Field value is one of `values`."""
        return self._cmp("-in", self._join_values(values, "in_list"))

    def not_in(self, values: Iterable[Any]) -> FilterExpression:
        """Field value is none of `values`."""
        return self._cmp("-notin", self._join_values(values, "not_in"))

    def gt(self, value: Any) -> FilterExpression:
        return self._cmp("-gt", value)

    def ge(self, value: Any) -> FilterExpression:
        return self._cmp("-ge", value)

    def lt(self, value: Any) -> FilterExpression:
        return self._cmp("-lt", value)

    def le(self, value: Any) -> FilterExpression:
        return self._cmp("-le", value)

    def starts_with(self, value: str) -> FilterExpression:
        """Field starts with prefix."""
        return self._cmp("-startswith", value)

    def ends_with(self, value: str) -> FilterExpression:
        """Field ends with suffix."""
        return self._cmp("-endswith", value)

    def between(self, low: Any, high: Any) -> FilterExpression:
        """Field lies in the inclusive range ``low..high``."""
        return self._cmp("-between", f"{format_value(low)}@{format_value(high)}")

    def same_as(self, other_field: str) -> FilterExpression:
        """Field has the same value as `other_field`."""
        return self._cmp("-sameas", other_field)

    def not_same_as(self, other_field: str) -> FilterExpression:
        """Field differs from `other_field`."""
        return self._cmp("-notsameas", other_field)

    def is_empty(self) -> FilterExpression:
        return self._unary("-isempty")

    def is_not_empty(self) -> FilterExpression:
        return self._unary("-isnotempty")

    def anything(self) -> FilterExpression:
        return self._unary("-anything")

    @staticmethod
    def _join_values(values: Iterable[Any], method: str) -> str:
        formatted = [format_value(v) for v in values]
        if not formatted:
            raise ValueError(f"{method}() requires at least one value")
        return ",".join(formatted)


class Filter:
    """
    Factory for building filter expressions.

    Example:
        Filter.field("state").eq(1) & Filter.field("priority").le(2)
    """

    @staticmethod
    def field(name: str) -> FieldBuilder:
        """Start building a clause on a field."""
        return FieldBuilder(name)

    @staticmethod
    def and_(*expressions: FilterExpression) -> FilterExpression:
        """Combine multiple expressions with `and`."""
        if not expressions:
            raise ValueError("and_() requires at least one expression")
        result = expressions[0]
        for expr in expressions[1:]:
            result = result & expr
        return result

    @staticmethod
    def or_(*expressions: FilterExpression) -> FilterExpression:
        """Combine multiple expressions with `or`."""
        if not expressions:
            raise ValueError("or_() requires at least one expression")
        result = expressions[0]
        for expr in expressions[1:]:
            result = result | expr
        return result


# Shorthand alias for convenience
F = Filter


class Sort:
    """Factory for sort clauses."""

    @staticmethod
    def asc(field: str) -> tuple[str, str]:
        return (field, "asc")

    @staticmethod
    def desc(field: str) -> tuple[str, str]:
        return (field, "desc")
