"""sqlglot wrapper returning either a statement view or a ``ParseFailure``.

Parse errors are an expected routing signal for the rules (templated or
incomplete SQL is the norm while editing), so nothing here raises.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from functools import lru_cache
from typing import Any, Literal

from sqlglot import exp
from sqlglot.dialects.dialect import Dialect
from sqlglot.errors import SqlglotError
from sqlglot.parser import Parser

from batonsql.ast.nodes import (
    AggregateCall,
    Column,
    ColumnRef,
    FromItem,
    JoinItem,
    JoinKind,
    OtherColumn,
    OtherStatement,
    ParseFailure,
    ParseOutcome,
    SelectStatement,
    StarColumn,
)

logger = logging.getLogger("batonsql.ast")

Strategy = Literal["ast", "fallback"]

DEFAULT_DIALECT = "postgres"

# Scoped per validation pass so engines with different dialects do not interfere.
_active_dialect: ContextVar[str] = ContextVar("batonsql_sql_dialect", default=DEFAULT_DIALECT)


class SqlParser:
    """A sqlglot tokenizer/parser pair bound to one dialect."""

    def __init__(self, dialect: str) -> None:
        self.dialect_name = dialect
        self._dialect = Dialect.get_or_raise(dialect)
        self._parser: Parser = self._dialect.parser()

    def parse(self, sql: str) -> exp.Expression | None:
        """Return the first parsed statement, or None for empty input."""
        tokens = self._dialect.tokenize(sql)
        for expression in self._parser.parse(tokens, sql):
            if expression is not None:
                return expression
        return None


@lru_cache(maxsize=8)
def get_parser(dialect: str = DEFAULT_DIALECT) -> SqlParser:
    """Process-wide parser per dialect, built on first use."""
    logger.debug("Creating SQL parser for dialect %s", dialect)
    return SqlParser(dialect)


@contextmanager
def using_dialect(dialect: str) -> Iterator[None]:
    """Parse with ``dialect`` inside the block. Raises ValueError if unknown."""
    get_parser(dialect)
    token = _active_dialect.set(dialect)
    try:
        yield
    finally:
        _active_dialect.reset(token)


def active_dialect() -> str:
    return _active_dialect.get()


def parse_sql(sql: str) -> ParseOutcome:
    """Parse normalized SQL into a statement view or a ``ParseFailure``."""
    return _parse_cached(sql, _active_dialect.get())


def resolve_strategy(outcome: ParseOutcome) -> Strategy:
    """Whether a rule should inspect the AST or run its lexical fallback."""
    return "fallback" if isinstance(outcome, ParseFailure) else "ast"


# Rules parse the same normalized text repeatedly within one validation pass.
@lru_cache(maxsize=256)
def _parse_cached(sql: str, dialect: str) -> ParseOutcome:
    try:
        root = get_parser(dialect).parse(sql)
    except SqlglotError as exc:
        return _failure_from(exc, sql)
    except Exception as exc:  # noqa: BLE001 - third-party parser internals
        logger.debug("Unexpected parser failure: %s", exc)
        return ParseFailure(message=str(exc) or type(exc).__name__)
    if root is None:
        return ParseFailure(message="No SQL statement found")
    return _build_statement(root, sql)


def _failure_from(exc: SqlglotError, sql: str) -> ParseFailure:
    errors: list[dict[str, Any]] = getattr(exc, "errors", None) or []
    if not errors:
        return ParseFailure(message=str(exc))
    first = errors[0]
    line = first.get("line")
    column = first.get("col")
    last_line = sql.count("\n")
    return ParseFailure(
        message=str(first.get("description") or exc),
        line=min(max(line - 1, 0), last_line) if isinstance(line, int) else None,
        column=column if isinstance(column, int) else None,
        details=tuple(str(error.get("description", "")) for error in errors),
    )


# ---------------------------------------------------------------------------
# sqlglot expression -> statement view
# ---------------------------------------------------------------------------


def _build_statement(root: exp.Expression, sql: str) -> SelectStatement | OtherStatement:
    if isinstance(root, exp.Subquery) and isinstance(root.this, exp.Select):
        root = root.this
    if isinstance(root, exp.Select):
        return _build_select(root, sql)
    return OtherStatement(kind=root.key)


def _build_select(select: exp.Select, sql: str) -> SelectStatement:
    columns: list[Column] = []
    aliases: list[str] = []
    for projection in select.expressions:
        if isinstance(projection, exp.Alias):
            aliases.append(projection.alias)
            projection = projection.this
        columns.append(_build_column(projection))

    from_items: list[FromItem] = []
    from_clause = select.args.get("from") or select.args.get("from_")
    if from_clause is not None:
        sources = [from_clause.this] if from_clause.this is not None else []
        sources.extend(from_clause.expressions or [])
        from_items = [_build_from_item(source, sql) for source in sources]

    joins = tuple(_build_join(join, sql) for join in select.args.get("joins") or [])

    return SelectStatement(
        columns=tuple(columns),
        from_items=tuple(from_items),
        joins=joins,
        has_group_by=select.args.get("group") is not None,
        aliases=tuple(aliases),
    )


def _build_column(node: exp.Expression) -> Column:
    if isinstance(node, exp.Star):
        return StarColumn()
    if isinstance(node, exp.Column):
        if isinstance(node.this, exp.Star):
            return StarColumn(table=node.table or None)
        return ColumnRef(name=node.name, table=node.table or None)
    if isinstance(node, exp.AggFunc):
        is_count_star = isinstance(node, exp.Count) and isinstance(node.this, exp.Star)
        return AggregateCall(name=node.key.upper(), is_count_star=is_count_star)
    return OtherColumn(sql=node.sql())


def _source_parts(
    node: exp.Expression | None, sql: str
) -> tuple[str | None, str | None, SelectStatement | None]:
    if isinstance(node, exp.Table):
        return node.name or None, node.alias or None, None
    if isinstance(node, exp.Subquery):
        inner = node.this
        subquery = _build_select(inner, sql) if isinstance(inner, exp.Select) else None
        return None, node.alias or None, subquery
    if node is None:
        return None, None, None
    return None, node.alias_or_name or None, None


def _build_from_item(node: exp.Expression, sql: str) -> FromItem:
    table, alias, subquery = _source_parts(node, sql)
    return FromItem(table=table, alias=alias, subquery=subquery)


def _build_join(join: exp.Join, sql: str) -> JoinItem:
    table, alias, subquery = _source_parts(join.this, sql)
    has_condition = join.args.get("on") is not None or bool(join.args.get("using"))
    return JoinItem(
        kind=_join_kind(join, table, sql),
        table=table,
        alias=alias,
        has_condition=has_condition,
        subquery=subquery,
    )


def _join_kind(join: exp.Join, table: str | None, sql: str) -> JoinKind:
    method = (join.args.get("method") or "").upper()
    side = (join.side or "").upper()
    kind = (join.kind or "").upper()
    if method == "NATURAL":
        return JoinKind.NATURAL
    if kind == "CROSS":
        return JoinKind.CROSS
    if side in ("LEFT", "RIGHT", "FULL"):
        return JoinKind(f"{side} JOIN")
    if kind == "INNER":
        return JoinKind.INNER
    if kind == "OUTER":
        return JoinKind.OUTER
    # sqlglot represents both "a JOIN b" and "a, b" as a bare Join.
    if _has_join_keyword(sql, table):
        return JoinKind.JOIN
    return JoinKind.COMMA


def _has_join_keyword(sql: str, table: str | None) -> bool:
    target = re.escape(table) if table else r"\("
    boundary = r"\b" if table else ""
    pattern = rf"\bjoin\s+(?:\w+\.)*[\"`]?{target}{boundary}"
    return re.search(pattern, sql, re.IGNORECASE) is not None
