"""
Exceptions raised while building encoded queries.

All build errors derive from `QueryBuildError`, which is also a `ValueError`:
they signal bad filter or sort input supplied by the caller and are
never worth retrying.
"""

from __future__ import annotations

from typing import Any


class NowQueryError(Exception):
    """Base class for all nowquery errors."""


class QueryBuildError(NowQueryError, ValueError):
    """
    Filter or sort input could not be encoded.

    Attributes:
        clause: The offending clause, when one can be identified.
        index: Position of the clause in the normalized clause list.
    """

    def __init__(self, message: str, *, clause: Any = None, index: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.clause = clause
        self.index = index

    def __str__(self) -> str:
        return self.message


class UnsupportedJoinError(QueryBuildError):
    """A join clause is not one of `and`, `or` or `group`."""


class TrailingJoinError(QueryBuildError):
    """The filter ends with a join clause."""


class UnknownOperatorError(QueryBuildError):
    """The operator name is not present in the operator table."""


class MissingValueError(QueryBuildError):
    """A two-item clause uses an operator that requires a value."""


class TooManyItemsError(QueryBuildError):
    """A clause has more items than its kind allows."""


class InvalidDirectionError(QueryBuildError):
    """A sort direction is neither `asc` nor `desc`."""


class MissingSortError(QueryBuildError):
    """Advanced mode was requested without any sort clause."""


class ConflictingModeError(QueryBuildError):
    """Basic and advanced inputs were supplied to the same build."""


class OperatorConfigError(NowQueryError):
    """The operator table configuration is invalid."""
