"""Immutable view of the SQL constructs the rules inspect.

The adapter builds these from sqlglot's expression tree so rules
pattern-match over a small closed set of variants instead of probing
parser-specific attributes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class JoinKind(StrEnum):
    JOIN = "JOIN"
    INNER = "INNER JOIN"
    LEFT = "LEFT JOIN"
    RIGHT = "RIGHT JOIN"
    FULL = "FULL JOIN"
    OUTER = "OUTER JOIN"
    CROSS = "CROSS JOIN"
    NATURAL = "NATURAL JOIN"
    COMMA = ","  # FROM a, b

    @property
    def needs_condition(self) -> bool:
        return self not in (JoinKind.CROSS, JoinKind.NATURAL, JoinKind.COMMA)


# -- projections ---------------------------------------------------------------


@dataclass(frozen=True)
class StarColumn:
    """SELECT * or table.*"""

    table: str | None = None


@dataclass(frozen=True)
class ColumnRef:
    """Reference to a column, optionally qualified by table/alias."""

    name: str
    table: str | None = None


@dataclass(frozen=True)
class AggregateCall:
    """COUNT/SUM/AVG/MIN/MAX/... call in the select list."""

    name: str
    is_count_star: bool = False


@dataclass(frozen=True)
class OtherColumn:
    """Any other projection (literal, scalar function, arithmetic, CASE)."""

    sql: str


Column = StarColumn | ColumnRef | AggregateCall | OtherColumn


# -- sources -------------------------------------------------------------------


@dataclass(frozen=True)
class FromItem:
    table: str | None = None
    alias: str | None = None
    subquery: SelectStatement | None = None

    @property
    def binding(self) -> str | None:
        """Name the item is referenced by in the rest of the query."""
        return self.alias or self.table


@dataclass(frozen=True)
class JoinItem:
    kind: JoinKind
    table: str | None = None
    alias: str | None = None
    has_condition: bool = False
    subquery: SelectStatement | None = None

    @property
    def binding(self) -> str | None:
        return self.alias or self.table


# -- statements ----------------------------------------------------------------


@dataclass(frozen=True)
class SelectStatement:
    columns: tuple[Column, ...] = ()
    from_items: tuple[FromItem, ...] = ()
    joins: tuple[JoinItem, ...] = ()
    has_group_by: bool = False
    aliases: tuple[str, ...] = ()  # projection aliases, in select-list order

    def iter_joins(self) -> list[JoinItem]:
        """Joins of this statement and of every FROM/JOIN subquery, depth first."""
        found: list[JoinItem] = []
        for item in self.from_items:
            if item.subquery is not None:
                found.extend(item.subquery.iter_joins())
        for join in self.joins:
            found.append(join)
            if join.subquery is not None:
                found.extend(join.subquery.iter_joins())
        return found

    def iter_sources(self) -> list[FromItem | JoinItem]:
        """FROM items and joins of this statement plus nested subqueries."""
        found: list[FromItem | JoinItem] = []
        for item in (*self.from_items, *self.joins):
            found.append(item)
            if item.subquery is not None:
                found.extend(item.subquery.iter_sources())
        return found

    @property
    def has_star(self) -> bool:
        return any(isinstance(col, StarColumn) and col.table is None for col in self.columns)


@dataclass(frozen=True)
class OtherStatement:
    """A parsed statement that is not a plain SELECT (INSERT, UPDATE, UNION, ...)."""

    kind: str


Statement = SelectStatement | OtherStatement


@dataclass(frozen=True)
class ParseFailure:
    """The parser rejected the text. ``line`` is zero-based when known."""

    message: str
    line: int | None = None
    column: int | None = None
    details: tuple[str, ...] = field(default_factory=tuple)


ParseOutcome = SelectStatement | OtherStatement | ParseFailure
