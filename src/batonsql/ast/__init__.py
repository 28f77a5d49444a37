"""Parser adapter and the statement view the rules inspect."""

from batonsql.ast.adapter import active_dialect, parse_sql, resolve_strategy, using_dialect
from batonsql.ast.nodes import (
    AggregateCall,
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

__all__ = [
    "AggregateCall",
    "ColumnRef",
    "FromItem",
    "JoinItem",
    "JoinKind",
    "OtherColumn",
    "OtherStatement",
    "ParseFailure",
    "ParseOutcome",
    "SelectStatement",
    "StarColumn",
    "active_dialect",
    "parse_sql",
    "resolve_strategy",
    "using_dialect",
]
