"""
Comparison operators understood by the encoded query language.

Each operator maps a symbolic name (as written in filter clauses, e.g. ``-eq``)
to the token placed in the encoded query (e.g. ``=``), and records whether the
comparison takes a value.

Example:
    from nowquery.operators import DEFAULT_OPERATORS

    DEFAULT_OPERATORS["-like"].query_operator  # "LIKE"
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import OperatorConfigError


class Operator(BaseModel):
    """A single operator table entry."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    name: str = Field(..., alias="Name", min_length=1)
    query_operator: str = Field(..., alias="QueryOperator", min_length=1)
    requires_value: bool = Field(True, alias="RequiresValue")
    description: str | None = Field(None, alias="Description")


class OperatorTable(Mapping[str, Operator]):
    """
    Read-only, ordered lookup of operators by name.

    Names must be unique; a duplicate raises `OperatorConfigError`.
    """

    __slots__ = ("_by_name",)

    def __init__(self, operators: Iterable[Operator]):
        by_name: dict[str, Operator] = {}
        for op in operators:
            if op.name in by_name:
                raise OperatorConfigError(f"Duplicate operator name: {op.name!r}")
            by_name[op.name] = op
        self._by_name = by_name

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> OperatorTable:
        """Build a table from plain dicts (``Name``/``QueryOperator``/... keys)."""
        operators: list[Operator] = []
        for i, record in enumerate(records):
            try:
                operators.append(Operator.model_validate(record))
            except ValidationError as exc:
                raise OperatorConfigError(f"Invalid operator entry #{i}: {exc}") from exc
        return cls(operators)

    def __getitem__(self, name: str) -> Operator:
        return self._by_name[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_name)

    def __len__(self) -> int:
        return len(self._by_name)

    def __repr__(self) -> str:
        return f"OperatorTable({list(self._by_name)!r})"

    def merged(self, operators: Iterable[Operator]) -> OperatorTable:
        """Return a new table with `operators` added; same-named entries are replaced."""
        by_name = dict(self._by_name)
        incoming: set[str] = set()
        for op in operators:
            if op.name in incoming:
                raise OperatorConfigError(f"Duplicate operator name: {op.name!r}")
            incoming.add(op.name)
            by_name[op.name] = op
        return OperatorTable(by_name.values())


def _op(name: str, token: str, description: str, *, requires_value: bool = True) -> Operator:
    return Operator(
        name=name,
        query_operator=token,
        requires_value=requires_value,
        description=description,
    )


DEFAULT_OPERATORS = OperatorTable(
    [
        _op("-eq", "=", "is equal to"),
        _op("-ne", "!=", "is not equal to"),
        _op("-like", "LIKE", "contains"),
        _op("-notlike", "NOT LIKE", "does not contain"),
        _op("-in", "IN", "is one of"),
        _op("-notin", "NOT IN", "is not one of"),
        _op("-gt", ">", "is greater than"),
        _op("-ge", ">=", "is greater than or equal to"),
        _op("-lt", "<", "is less than"),
        _op("-le", "<=", "is less than or equal to"),
        _op("-startswith", "STARTSWITH", "starts with"),
        _op("-endswith", "ENDSWITH", "ends with"),
        _op("-between", "BETWEEN", "is between"),
        _op("-isempty", "ISEMPTY", "is empty", requires_value=False),
        _op("-isnotempty", "ISNOTEMPTY", "is not empty", requires_value=False),
        _op("-anything", "ANYTHING", "is anything", requires_value=False),
        _op("-sameas", "SAMEAS", "is the same as another field"),
        _op("-notsameas", "NSAMEAS", "is different from another field"),
    ]
)
