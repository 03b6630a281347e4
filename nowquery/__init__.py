"""
nowquery: build encoded queries for ServiceNow-style table APIs.

Example:
    from nowquery import build_query

    build_query(match_exact={"state": "1"})
    # "ORDERBYDESCopened_at^state=1"

    build_query(
        filter=[("state", "-eq", "1"), "or", ("short_description", "-like", "vpn")],
        sort=[("opened_at", "desc")],
    )
    # "state=1^ORshort_descriptionLIKEvpn^ORDERBYDESCopened_at"
"""

from __future__ import annotations

from .builder import F, FieldBuilder, Filter, FilterExpression, Sort
from .clauses import ClauseList, many, normalize_clauses, single
from .exceptions import (
    ConflictingModeError,
    InvalidDirectionError,
    MissingSortError,
    MissingValueError,
    NowQueryError,
    OperatorConfigError,
    QueryBuildError,
    TooManyItemsError,
    TrailingJoinError,
    UnknownOperatorError,
    UnsupportedJoinError,
)
from .operators import DEFAULT_OPERATORS, Operator, OperatorTable
from .query import (
    QUERY_PARAM,
    SortDirection,
    build_advanced_query,
    build_basic_query,
    build_query,
    compile_filter,
    compile_sort,
    query_params,
)

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_OPERATORS",
    "QUERY_PARAM",
    "ClauseList",
    "ConflictingModeError",
    "F",
    "FieldBuilder",
    "Filter",
    "FilterExpression",
    "InvalidDirectionError",
    "MissingSortError",
    "MissingValueError",
    "NowQueryError",
    "Operator",
    "OperatorConfigError",
    "OperatorTable",
    "QueryBuildError",
    "Sort",
    "SortDirection",
    "TooManyItemsError",
    "TrailingJoinError",
    "UnknownOperatorError",
    "UnsupportedJoinError",
    "__version__",
    "build_advanced_query",
    "build_basic_query",
    "build_query",
    "compile_filter",
    "compile_sort",
    "many",
    "normalize_clauses",
    "query_params",
    "single",
]
