"""
Encoded query builder.

Builds the caret-joined query strings accepted by ServiceNow-style table APIs
(the ``sysparm_query`` parameter). Two mutually exclusive modes are supported.

Basic mode matches fields exactly or by substring and sorts on one field:

    build_basic_query(match_exact={"state": "1"})
    # "ORDERBYDESCopened_at^state=1"

Advanced mode compiles ordered filter clauses and join tokens plus any number
of sort keys:

    build_advanced_query(
        [("state", "-eq", "1"), "or", ("short_description", "-like", "vpn")],
        [("opened_at", "desc"), ("number",)],
    )
    # "state=1^ORshort_descriptionLIKEvpn^ORDERBYDESCopened_at^ORDERBYnumber"

Nothing here is escaped or URL-encoded; that is left to the HTTP layer.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any, Union

from .clauses import ClauseInput, clause_items, normalize_clauses
from .exceptions import (
    ConflictingModeError,
    InvalidDirectionError,
    MissingSortError,
    MissingValueError,
    TooManyItemsError,
    TrailingJoinError,
    UnknownOperatorError,
    UnsupportedJoinError,
)
from .operators import DEFAULT_OPERATORS, OperatorTable

logger = logging.getLogger(__name__)

QUERY_PARAM = "sysparm_query"
SEPARATOR = "^"
DEFAULT_ORDER_BY = "opened_at"

JOIN_TOKENS: dict[str, str] = {
    "and": "^",
    "or": "^OR",
    "group": "^NQ",
}

SORT_DIRECTIONS: dict[str, str] = {
    "asc": "ORDERBY",
    "desc": "ORDERBYDESC",
}

MAX_FILTER_ITEMS = 3
MAX_SORT_ITEMS = 2

FieldValues = Union[Mapping[str, Any], Iterable[tuple[str, Any]]]


class SortDirection(str, Enum):
    """Sort direction for basic mode."""

    ASC = "Asc"
    DESC = "Desc"

    @classmethod
    def coerce(cls, value: SortDirection | str) -> SortDirection:
        if isinstance(value, SortDirection):
            return value
        for member in cls:
            if member.value.lower() == str(value).lower():
                return member
        raise InvalidDirectionError(
            f"Invalid order direction {value!r}; expected 'Asc' or 'Desc'.",
            clause=value,
        )


# =============================================================================
# Advanced mode
# =============================================================================


def compile_filter(
    filter: ClauseInput,
    *,
    operators: OperatorTable | None = None,
) -> list[str]:
    """
    Compile filter clauses into encoded fragments.

    Each clause is classified by its number of items:

    - 0 items: skipped
    - 1 item: join token (``and``, ``or``, ``group``)
    - 2 items: ``(field, operator)`` for operators that take no value
    - 3 items: ``(field, operator, value)``

    A trailing ``^`` fragment is appended when anything was emitted, so the
    sort section can follow directly.

    Raises:
        UnsupportedJoinError, TrailingJoinError, UnknownOperatorError,
        MissingValueError, TooManyItemsError
    """
    table = DEFAULT_OPERATORS if operators is None else operators
    clauses = normalize_clauses(filter)
    last = len(clauses) - 1
    fragments: list[str] = []

    for index, clause in enumerate(clauses):
        items = clause_items(clause)
        count = len(items)

        if count == 0:
            continue

        if count == 1:
            join = items[0]
            token = JOIN_TOKENS.get(join) if isinstance(join, str) else None
            if token is None:
                raise UnsupportedJoinError(
                    f"Unsupported join operator {join!r}; expected one of: "
                    f"{', '.join(JOIN_TOKENS)}",
                    clause=clause,
                    index=index,
                )
            if index == last:
                raise TrailingJoinError(
                    f"Filter cannot end with a join operator ({join!r})",
                    clause=clause,
                    index=index,
                )
            fragments.append(token)
            continue

        if count > MAX_FILTER_ITEMS:
            raise TooManyItemsError(
                f"Filter clause has {count} items; at most {MAX_FILTER_ITEMS} are allowed",
                clause=clause,
                index=index,
            )

        field, op_name = items[0], items[1]
        op = table.get(op_name) if isinstance(op_name, str) else None
        if op is None:
            raise UnknownOperatorError(
                f"Unknown operator {op_name!r} in filter clause for field {field!r}",
                clause=clause,
                index=index,
            )

        if count == 2:
            if op.requires_value:
                raise MissingValueError(
                    f"Operator {op.name!r} requires a value (field {field!r})",
                    clause=clause,
                    index=index,
                )
            fragments.append(f"{field}{op.query_operator}")
        else:
            fragments.append(f"{field}{op.query_operator}{items[2]}")

    if fragments:
        fragments.append(SEPARATOR)
    return fragments


def compile_sort(sort: ClauseInput) -> list[str]:
    """
    Compile sort clauses into encoded fragments.

    ``(field,)`` sorts ascending, ``(field, "desc")`` descending. Keys after
    the first are separated by ``^``.

    Raises:
        InvalidDirectionError, TooManyItemsError
    """
    clauses = normalize_clauses(sort)
    fragments: list[str] = []

    for index, clause in enumerate(clauses):
        items = clause_items(clause)
        count = len(items)

        if count > MAX_SORT_ITEMS:
            raise TooManyItemsError(
                f"Sort clause has {count} items; at most {MAX_SORT_ITEMS} are allowed",
                clause=clause,
                index=index,
            )
        if count == 0:
            continue

        direction = items[1] if count == 2 else "asc"
        prefix = SORT_DIRECTIONS.get(direction) if isinstance(direction, str) else None
        if prefix is None:
            raise InvalidDirectionError(
                f"Invalid sort direction {direction!r} for field {items[0]!r}; "
                "expected 'asc' or 'desc'",
                clause=clause,
                index=index,
            )

        if index > 0:
            fragments.append(SEPARATOR)
        fragments.append(f"{prefix}{items[0]}")

    return fragments


def build_advanced_query(
    filter: ClauseInput,
    sort: ClauseInput,
    *,
    operators: OperatorTable | None = None,
) -> str:
    """
    Build an encoded query from filter and sort clauses.

    `sort` must be supplied; an explicitly empty sort list leaves only the
    filter section, which still ends with ``^``.
    """
    if sort is None:
        raise MissingSortError("Advanced queries require sort input; pass [] for no ordering")

    fragments = compile_filter(filter, operators=operators)
    fragments.extend(compile_sort(sort))
    query = "".join(fragments)
    logger.debug("built advanced query: %s", query)
    return query


# =============================================================================
# Basic mode
# =============================================================================


def _pairs(values: FieldValues | None) -> list[tuple[str, Any]]:
    if values is None:
        return []
    if isinstance(values, Mapping):
        return list(values.items())
    return [(field, value) for field, value in values]


def build_basic_query(
    *,
    order_by: str = DEFAULT_ORDER_BY,
    order_direction: SortDirection | str = SortDirection.DESC,
    match_exact: FieldValues | None = None,
    match_contains: FieldValues | None = None,
) -> str:
    """
    Build an encoded query from exact and substring matches.

    Matches are always AND-combined, exact matches first. Field names are
    lowercased; values are converted with `str()`.
    """
    direction = SortDirection.coerce(order_direction)
    parts = ["ORDERBYDESC" if direction is SortDirection.DESC else "ORDERBY", order_by]

    for field, value in _pairs(match_exact):
        parts.append(f"{SEPARATOR}{field.lower()}={value}")
    for field, value in _pairs(match_contains):
        parts.append(f"{SEPARATOR}{field.lower()}LIKE{value}")

    query = "".join(parts)
    logger.debug("built basic query: %s", query)
    return query


# =============================================================================
# Entry point
# =============================================================================


def build_query(
    *,
    filter: ClauseInput = None,
    sort: ClauseInput = None,
    order_by: str | None = None,
    order_direction: SortDirection | str | None = None,
    match_exact: FieldValues | None = None,
    match_contains: FieldValues | None = None,
    operators: OperatorTable | None = None,
) -> str:
    """
    Build an encoded query in basic or advanced mode.

    Advanced mode is selected when `filter` or `sort` is given; basic mode
    otherwise. Mixing inputs of both modes raises `ConflictingModeError`.
    """
    advanced = filter is not None or sort is not None
    basic_inputs = {
        "order_by": order_by,
        "order_direction": order_direction,
        "match_exact": match_exact,
        "match_contains": match_contains,
    }
    if advanced:
        conflicting = [name for name, value in basic_inputs.items() if value is not None]
        if conflicting:
            raise ConflictingModeError(
                "filter/sort cannot be combined with basic-mode options: "
                + ", ".join(conflicting)
            )
        return build_advanced_query(filter, sort, operators=operators)

    return build_basic_query(
        order_by=order_by or DEFAULT_ORDER_BY,
        order_direction=order_direction or SortDirection.DESC,
        match_exact=match_exact,
        match_contains=match_contains,
    )


def query_params(query: str) -> dict[str, str]:
    """Return the request parameters carrying `query`."""
    return {QUERY_PARAM: query}
