"""Tests for the sqlglot adapter and the statement view."""

from __future__ import annotations

import pytest

from batonsql.ast import (
    AggregateCall,
    ColumnRef,
    JoinKind,
    OtherStatement,
    ParseFailure,
    SelectStatement,
    StarColumn,
    active_dialect,
    parse_sql,
    resolve_strategy,
    using_dialect,
)


class TestParseOutcome:
    def test_simple_select(self) -> None:
        outcome = parse_sql("SELECT id, name FROM users")
        assert isinstance(outcome, SelectStatement)
        assert outcome.columns == (ColumnRef(name="id"), ColumnRef(name="name"))
        assert [item.table for item in outcome.from_items] == ["users"]
        assert resolve_strategy(outcome) == "ast"

    def test_failure_is_a_value(self) -> None:
        outcome = parse_sql("SELECT COUNT(id FROM users")
        assert isinstance(outcome, ParseFailure)
        assert outcome.message
        assert resolve_strategy(outcome) == "fallback"

    def test_failure_line_is_zero_based(self) -> None:
        outcome = parse_sql("SELECT id\nFROM users\nWHERE (a = 1")
        assert isinstance(outcome, ParseFailure)
        assert outcome.line is not None
        assert 0 <= outcome.line <= 2

    def test_empty_input(self) -> None:
        outcome = parse_sql("")
        assert isinstance(outcome, ParseFailure)

    def test_non_select_statement(self) -> None:
        outcome = parse_sql("UPDATE users SET name = 'x' WHERE id = 1")
        assert isinstance(outcome, OtherStatement)
        assert outcome.kind == "update"

    def test_placeholders_parse(self) -> None:
        outcome = parse_sql("SELECT id FROM users WHERE id = ?")
        assert isinstance(outcome, SelectStatement)

    def test_unknown_dialect_rejected(self) -> None:
        with pytest.raises(ValueError):
            with using_dialect("not-a-dialect"):
                pass
        assert active_dialect() == "postgres"

    def test_dialect_scoped_to_block(self) -> None:
        with using_dialect("mysql"):
            assert active_dialect() == "mysql"
        assert active_dialect() == "postgres"


class TestColumns:
    def test_star(self) -> None:
        outcome = parse_sql("SELECT * FROM users")
        assert isinstance(outcome, SelectStatement)
        assert outcome.columns == (StarColumn(),)
        assert outcome.has_star

    def test_qualified_star_is_not_bare_star(self) -> None:
        outcome = parse_sql("SELECT u.* FROM users u JOIN roles r ON r.id = u.role_id")
        assert isinstance(outcome, SelectStatement)
        assert outcome.columns == (StarColumn(table="u"),)
        assert not outcome.has_star

    def test_aggregates(self) -> None:
        outcome = parse_sql("SELECT COUNT(*), SUM(amount) FROM orders")
        assert isinstance(outcome, SelectStatement)
        first, second = outcome.columns
        assert isinstance(first, AggregateCall) and first.is_count_star
        assert isinstance(second, AggregateCall) and not second.is_count_star

    def test_aliases_recorded(self) -> None:
        outcome = parse_sql("SELECT id AS user_id, name\nemail FROM users")
        assert isinstance(outcome, SelectStatement)
        assert outcome.aliases == ("user_id", "email")


class TestSources:
    def test_join_kinds(self) -> None:
        outcome = parse_sql(
            "SELECT a.id FROM a "
            "LEFT JOIN b ON b.id = a.id "
            "CROSS JOIN c "
            "JOIN d ON d.id = a.id"
        )
        assert isinstance(outcome, SelectStatement)
        kinds = [join.kind for join in outcome.joins]
        assert kinds == [JoinKind.LEFT, JoinKind.CROSS, JoinKind.JOIN]
        assert [join.has_condition for join in outcome.joins] == [True, False, True]

    def test_join_without_condition(self) -> None:
        outcome = parse_sql("SELECT * FROM a JOIN b")
        assert isinstance(outcome, SelectStatement)
        (join,) = outcome.joins
        assert join.kind is JoinKind.JOIN
        assert not join.has_condition
        assert join.kind.needs_condition

    def test_comma_join_needs_no_condition(self) -> None:
        outcome = parse_sql("SELECT * FROM a, b WHERE a.id = b.id")
        assert isinstance(outcome, SelectStatement)
        sources = outcome.iter_sources()
        assert {source.binding for source in sources} == {"a", "b"}
        assert all(not join.kind.needs_condition for join in outcome.joins)

    def test_table_aliases(self) -> None:
        outcome = parse_sql("SELECT * FROM users u JOIN orders o ON o.user_id = u.id")
        assert isinstance(outcome, SelectStatement)
        assert outcome.from_items[0].alias == "u"
        assert outcome.joins[0].alias == "o"
        assert outcome.joins[0].binding == "o"

    def test_subquery_joins_are_visited(self) -> None:
        outcome = parse_sql("SELECT s.id FROM (SELECT a.id FROM a JOIN b) s")
        assert isinstance(outcome, SelectStatement)
        assert outcome.from_items[0].subquery is not None
        assert [join.table for join in outcome.iter_joins()] == ["b"]
