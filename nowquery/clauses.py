"""
Clause shapes accepted by the advanced query builder.

Filter and sort input may be given either as one clause or as a list of
clauses. `normalize_clauses` turns both into a list of clauses:

    normalize_clauses(("state", "-eq", "1"))      # [("state", "-eq", "1")]
    normalize_clauses([("state", "-eq", "1")])    # [("state", "-eq", "1")]

Callers that prefer not to rely on shape detection can build an explicit
`ClauseList` with `single(...)` or `many(...)`.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Union

Clause = Union[str, Sequence[Any]]
ClauseInput = Union["ClauseList", Clause, Sequence[Clause], None]


@dataclass(frozen=True, slots=True)
class ClauseList:
    """An explicitly constructed list of clauses; never reshaped."""

    clauses: tuple[Clause, ...]

    def __iter__(self):
        return iter(self.clauses)

    def __len__(self) -> int:
        return len(self.clauses)


def single(*items: Any) -> ClauseList:
    """Wrap one clause given as its items, e.g. ``single("state", "-eq", "1")``."""
    return ClauseList((tuple(items),))


def many(*clauses: Clause) -> ClauseList:
    """Wrap several clauses, e.g. ``many(("a", "-eq", 1), "or", ("b", "-eq", 2))``."""
    return ClauseList(tuple(clauses))


def normalize_clauses(value: ClauseInput) -> list[Clause]:
    """
    Return `value` as a list of clauses.

    A bare string is a one-item clause. Otherwise the first element decides:
    a string there means `value` is a single clause and gets wrapped, anything
    else means `value` already is a list of clauses. Empty input is returned
    as an empty list.
    """
    if value is None:
        return []
    if isinstance(value, ClauseList):
        return list(value.clauses)
    if isinstance(value, str) or not isinstance(value, Iterable):
        return [value]
    items = list(value)
    if not items:
        return []
    if isinstance(items[0], str):
        return [tuple(items)]
    return items


def clause_items(clause: Clause) -> tuple[Any, ...]:
    """Return the items of a single clause; a bare scalar is a one-item clause."""
    if isinstance(clause, str) or not isinstance(clause, Iterable):
        return (clause,)
    return tuple(clause)
