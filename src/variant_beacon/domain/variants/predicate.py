"""Parameterized filter predicates over the variants table.

A predicate is an ordered AND of column comparisons. Values never appear in the
rendered SQL text; each comparison refers to a named parameter that the
executor binds with its type.
"""

import operator
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum

from variant_beacon.platform.types import SQLScalar

TABLE_ALIAS = "v"


class Column(StrEnum):
    """Columns of the variants table referenced by predicates."""

    REFERENCE_NAME = "reference_name"
    REFERENCE_BASES = "reference_bases"
    START = "start"
    END = "end"


class Op(StrEnum):
    """Comparison operators."""

    EQ = "="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="


_OPERATORS: dict[Op, Callable[[object, object], bool]] = {
    Op.EQ: operator.eq,
    Op.LT: operator.lt,
    Op.LE: operator.le,
    Op.GT: operator.gt,
    Op.GE: operator.ge,
}


@dataclass(frozen=True)
class Condition:
    """``<column> <op> @<parameter>``, with ``value`` bound to the parameter.

    Column names are backtick-quoted; ``end`` is a reserved word in BigQuery.
    """

    column: Column
    op: Op
    parameter: str
    value: SQLScalar

    def to_sql(self) -> str:
        return f"{TABLE_ALIAS}.`{self.column.value}` {self.op.value} @{self.parameter}"

    def matches(self, row: Mapping[str, object]) -> bool:
        """Evaluate the condition against a single row.

        A row missing the column (or holding NULL) never matches, as in SQL.
        """
        cell = row.get(self.column.value)
        if cell is None:
            return False
        try:
            return _OPERATORS[self.op](cell, self.value)
        except TypeError:
            return False


@dataclass(frozen=True)
class Predicate:
    """Ordered conjunction of conditions."""

    conditions: tuple[Condition, ...] = ()

    def to_sql(self) -> str:
        if not self.conditions:
            return "TRUE"
        return " AND ".join(c.to_sql() for c in self.conditions)

    @property
    def parameters(self) -> dict[str, SQLScalar]:
        """Parameter names mapped to their values, in condition order."""
        params: dict[str, SQLScalar] = {}
        for condition in self.conditions:
            params.setdefault(condition.parameter, condition.value)
        return params

    def matches(self, row: Mapping[str, object]) -> bool:
        return all(c.matches(row) for c in self.conditions)
