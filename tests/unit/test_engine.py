"""Tests for ValidationEngine: query validation, caching and document passes."""

from __future__ import annotations

import threading
import time

import pytest

from batonsql.ast import active_dialect
from batonsql.models.results import ValidationResult
from batonsql.rules import ALL_RULES, RuleRegistry, UnknownRuleError
from batonsql.rules.missing_from import missing_from
from batonsql.rules.registry import ValidationRule
from batonsql.service.engine import DocumentReport, ValidationEngine
from batonsql.settings import Settings
from batonsql.sql.normalizer import normalize_sql
from tests.conftest import (
    CREDENTIALS_YAML,
    JOIN_YAML,
    MISSING_COMMA_YAML,
    PROPERTY_TYPO_YAML,
    SAMPLE_BATON_YAML,
    SAMPLE_URI,
    TRAILING_COMMA_YAML,
)


def _boom(sql: str, original_query: str) -> ValidationResult:
    raise RuntimeError("rule bug")


def _silent_failure(sql: str, original_query: str) -> ValidationResult:
    return ValidationResult(is_valid=False)


class TestRuleSet:
    def test_fifteen_rules_in_order(self) -> None:
        names = [rule.name for rule in ALL_RULES]
        assert len(names) == 15
        assert names[0] == "missing-comma"
        assert names[-1] == "unconventional-sql-syntax"
        assert len(set(names)) == 15

    def test_registry_lookup(self) -> None:
        assert RuleRegistry.get("missing-from") is missing_from
        assert "trailing-comma" in RuleRegistry.available()

    def test_unknown_rule(self) -> None:
        with pytest.raises(UnknownRuleError, match="Unknown rule 'nope'"):
            RuleRegistry.get("nope")

    def test_duplicate_registration_rejected(self) -> None:
        clash = ValidationRule(name="missing-from", description="", check=_boom)
        with pytest.raises(ValueError, match="already registered"):
            RuleRegistry.register(clash)


class TestValidate:
    def test_missing_comma_concrete_case(self, engine: ValidationEngine) -> None:
        query = "SELECT\n  id,\n  name\n  email\nFROM users"
        results = engine.validate(query, query)
        assert [r.rule for r in results] == ["missing-comma"]
        assert results[0].line_number == 2

    def test_trailing_comma_concrete_case(self, engine: ValidationEngine) -> None:
        results = engine.validate("SELECT id, name,\nFROM users")
        trailing = [r for r in results if r.rule == "trailing-comma"]
        assert len(trailing) == 1
        assert trailing[0].line_number == 0

    def test_results_in_rule_order(self, engine: ValidationEngine) -> None:
        results = engine.validate("SELECT *\nFROM a\nJOIN b")
        assert [r.rule for r in results] == ["invalid-join", "ambiguous-columns"]

    def test_parameters_normalized_for_parsing(self, engine: ValidationEngine) -> None:
        query = "SELECT id FROM users WHERE id = ?<user_id>"
        assert engine.validate(query, query) == []

    def test_original_defaults_to_sql(self, engine: ValidationEngine) -> None:
        assert engine.validate("SELECT id") == engine.validate("SELECT id", "SELECT id")

    @pytest.mark.parametrize(
        "garbage",
        ["", "   ", "\n\n", "%%% )(", "SELECT (((", "\udcff", "SELECT \udcff FROM t", None, 42],
    )
    def test_never_raises(self, engine: ValidationEngine, garbage: object) -> None:
        assert isinstance(engine.validate(garbage), list)

    def test_rule_exception_is_absorbed(self) -> None:
        boom = ValidationRule(name="boom", description="raises", check=_boom)
        engine = ValidationEngine(settings=Settings(), rules=[boom, missing_from])
        results = engine.validate("SELECT id")
        assert [r.rule for r in results] == ["missing-from"]

    def test_default_message(self) -> None:
        silent = ValidationRule(name="silent", description="", check=_silent_failure)
        engine = ValidationEngine(settings=Settings(), rules=[silent])
        (result,) = engine.validate("SELECT 1")
        assert result.error_message == "Validation failed for rule: silent"

    def test_disabled_rules(self) -> None:
        engine = ValidationEngine(settings=Settings(disabled_rules=["missing-from"]))
        assert all(r.rule != "missing-from" for r in engine.validate("SELECT id"))
        assert "missing-from" not in [rule.name for rule in engine.rules]

    def test_unknown_disabled_rule(self) -> None:
        with pytest.raises(UnknownRuleError):
            ValidationEngine(settings=Settings(disabled_rules=["missing-fromm"]))

    def test_unknown_dialect(self) -> None:
        with pytest.raises(ValueError):
            ValidationEngine(settings=Settings(sql_dialect="not-a-dialect"))


class TestNormalizationTransparency:
    @pytest.mark.parametrize(
        "query",
        [
            "SELECT\n  id,\n  name\n  email\nFROM users\nWHERE org = ?<org_id>",
            "SELECT *\nFROM a\nJOIN b\nWHERE a.id = ?<user_id>",
            "SELECT id, name,\nFROM users\nWHERE id = ?<user_id>",
            "SELECT id\nFORM users\nWHERE id = ?<user_id>",
            "SELECT id FROM users ORDER BY 1 LIMIT ?<page_size>",
        ],
    )
    def test_parameters_do_not_change_findings(
        self, engine: ValidationEngine, query: str
    ) -> None:
        parameter_rules = {"baton-parameter-validation", "vars-query-mismatch"}
        normalized = normalize_sql(query)
        with_parameters = [
            r for r in engine.validate(query, query) if r.rule not in parameter_rules
        ]
        without_parameters = [
            r for r in engine.validate(normalized, normalized) if r.rule not in parameter_rules
        ]
        assert with_parameters
        assert with_parameters == without_parameters


def _echo_dialect(sql: str, original_query: str) -> ValidationResult:
    return ValidationResult.fail(active_dialect())


class TestDialectIsolation:
    def test_engines_keep_their_own_dialect(self) -> None:
        echo = ValidationRule(name="dialect-echo", description="", check=_echo_dialect)
        postgres = ValidationEngine(settings=Settings(), rules=[echo])
        mysql = ValidationEngine(settings=Settings(sql_dialect="mysql"), rules=[echo])
        assert postgres.validate("SELECT 1")[0].error_message == "postgres"
        assert mysql.validate("SELECT 1")[0].error_message == "mysql"
        assert active_dialect() == "postgres"


class TestCache:
    def test_idempotent(self, engine: ValidationEngine) -> None:
        query = "SELECT *\nFROM a\nJOIN b"
        first = engine.validate(query, query)
        assert engine.cache_size == 1
        second = engine.validate(query, query)
        assert engine.cache_size == 1
        assert first == second

    def test_cached_matches_uncached(self, engine: ValidationEngine) -> None:
        query = "SELECT id, name,\nFROM users"
        cached = engine.validate(query)
        engine.clear_cache()
        assert engine.cache_size == 0
        assert engine.validate(query) == cached

    def test_original_query_is_part_of_key(self, engine: ValidationEngine) -> None:
        engine.validate("SELECT id FROM t WHERE a = ?", "SELECT id FROM t WHERE a = ?<aa>")
        engine.validate("SELECT id FROM t WHERE a = ?", "SELECT id FROM t WHERE a = ?<bb>")
        assert engine.cache_size == 2

    def test_returned_list_is_a_copy(self, engine: ValidationEngine) -> None:
        engine.validate("SELECT id").clear()
        assert engine.validate("SELECT id")


class TestValidateDocument:
    def test_clean_document(self, engine: ValidationEngine) -> None:
        report = engine.validate_document(SAMPLE_URI, SAMPLE_BATON_YAML)
        assert isinstance(report, DocumentReport)
        assert not report.skipped
        assert report.errors == []
        assert report.diagnostics == []

    def test_missing_comma_positioned_in_document(self, engine: ValidationEngine) -> None:
        report = engine.validate_document(SAMPLE_URI, MISSING_COMMA_YAML)
        (diagnostic,) = report.diagnostics
        assert diagnostic.rule == "missing-comma"
        assert diagnostic.source == "baton-sql"
        assert diagnostic.severity == "error"
        assert diagnostic.range.start.line == 6
        assert diagnostic.range.start.character == 0
        assert diagnostic.range.end.character == len("          name")
        assert diagnostic.fix is not None
        assert diagnostic.fix.range.start.line == 6
        assert diagnostic.fix.range.start.character == len("          name")

    def test_join_without_condition(self, engine: ValidationEngine) -> None:
        report = engine.validate_document(SAMPLE_URI, JOIN_YAML)
        (diagnostic,) = report.diagnostics
        assert diagnostic.rule == "invalid-join"
        assert diagnostic.range.start.line == 6

    def test_document_scope_rules_see_whole_text(self, engine: ValidationEngine) -> None:
        report = engine.validate_document(SAMPLE_URI, CREDENTIALS_YAML)
        (diagnostic,) = report.diagnostics
        assert diagnostic.rule == "credential-mutual-exclusion"
        assert diagnostic.range.start.line == 6

    def test_property_typo_fix_in_document_coordinates(self, engine: ValidationEngine) -> None:
        report = engine.validate_document(SAMPLE_URI, PROPERTY_TYPO_YAML)
        (diagnostic,) = report.diagnostics
        assert diagnostic.rule == "property-name-typos"
        assert diagnostic.fix is not None
        assert diagnostic.fix.range.start.line == 2
        assert diagnostic.fix.range.start.character == 4
        assert diagnostic.fix.new_text == "static_entitlements"

    def test_same_query_twice(self, engine: ValidationEngine) -> None:
        text = TRAILING_COMMA_YAML + "  role:\n    list:\n      query: \"SELECT id, name, FROM users\"\n"
        report = engine.validate_document(SAMPLE_URI, text)
        keys = [
            (d.message, d.range.start.line, d.range.start.character)
            for d in report.diagnostics
            if d.rule == "trailing-comma"
        ]
        assert len(keys) == 2
        assert len(set(keys)) == len(keys)

    def test_non_matching_file_skipped(self, engine: ValidationEngine) -> None:
        report = engine.validate_document("file:///tmp/config.yaml", MISSING_COMMA_YAML)
        assert report.skipped
        assert report.diagnostics == []

    def test_force_ignores_file_pattern(self, engine: ValidationEngine) -> None:
        report = engine.validate_document("config.yaml", MISSING_COMMA_YAML, force=True)
        assert not report.skipped
        assert len(report.diagnostics) == 1

    def test_unchanged_document_skipped(self, engine: ValidationEngine) -> None:
        first = engine.validate_document(SAMPLE_URI, MISSING_COMMA_YAML)
        second = engine.validate_document(SAMPLE_URI, MISSING_COMMA_YAML)
        assert not first.skipped
        assert second.skipped
        assert second.diagnostics == first.diagnostics

    def test_changed_document_revalidated(self, engine: ValidationEngine) -> None:
        engine.validate_document(SAMPLE_URI, MISSING_COMMA_YAML)
        report = engine.validate_document(SAMPLE_URI, SAMPLE_BATON_YAML)
        assert not report.skipped
        assert report.diagnostics == []

    def test_yaml_parse_error(self, engine: ValidationEngine) -> None:
        report = engine.validate_document(SAMPLE_URI, "resource_types:\n  user: [unclosed\n")
        assert report.diagnostics == []
        (error,) = report.errors
        assert error.code == "YAML_PARSE_ERROR"
        assert error.span is not None
        assert error.span.file == SAMPLE_URI

    def test_lone_surrogate_does_not_raise(self, engine: ValidationEngine) -> None:
        report = engine.validate_document(SAMPLE_URI, "query: \"SELECT \udcff FROM t\"\n")
        assert isinstance(report, DocumentReport)
        assert not report.skipped

    def test_yaml_safety_error(self, engine: ValidationEngine) -> None:
        content = "".join(f"{'  ' * depth}k{depth}:\n" for depth in range(45)) + "  " * 45 + "x"
        report = engine.validate_document(SAMPLE_URI, content)
        (error,) = report.errors
        assert error.code == "YAML_SAFETY_ERROR"

    def test_close_document(self, engine: ValidationEngine) -> None:
        engine.validate_document(SAMPLE_URI, MISSING_COMMA_YAML)
        assert len(engine.fixes) == 1
        assert engine.symbols.find("users")
        engine.close_document(SAMPLE_URI)
        assert len(engine.fixes) == 0
        assert engine.symbols.find("users") == []
        assert not engine.validate_document(SAMPLE_URI, MISSING_COMMA_YAML).skipped

    def test_configuration_change_clears_caches(self, engine: ValidationEngine) -> None:
        engine.validate_document(SAMPLE_URI, MISSING_COMMA_YAML)
        assert engine.cache_size > 0
        engine.on_configuration_change(Settings(disabled_rules=["missing-comma"]))
        assert engine.cache_size == 0
        report = engine.validate_document(SAMPLE_URI, MISSING_COMMA_YAML)
        assert not report.skipped
        assert report.diagnostics == []

    def test_code_actions_for_stored_fix(self, engine: ValidationEngine) -> None:
        report = engine.validate_document(SAMPLE_URI, MISSING_COMMA_YAML)
        (action,) = engine.code_actions(SAMPLE_URI, report.diagnostics)
        assert action.title == "Add missing comma"
        assert action.kind == "quickfix"
        assert action.edits[SAMPLE_URI][0].new_text == ","

    def test_definition_lookup(self, engine: ValidationEngine) -> None:
        engine.validate_document(SAMPLE_URI, SAMPLE_BATON_YAML)
        lines = SAMPLE_BATON_YAML.split("\n")
        line = next(i for i, text in enumerate(lines) if "FROM roles" in text)
        character = lines[line].index("roles") + 2
        (symbol,) = engine.definition(SAMPLE_URI, SAMPLE_BATON_YAML, line, character)
        assert symbol.name == "roles"
        assert symbol.range.start.line == line


class TestScheduledValidation:
    def test_rapid_edits_coalesce(self, engine: ValidationEngine) -> None:
        reports: list[DocumentReport] = []
        done = threading.Event()

        def on_report(report: DocumentReport) -> None:
            reports.append(report)
            done.set()

        engine.schedule_document(SAMPLE_URI, SAMPLE_BATON_YAML, on_report)
        engine.schedule_document(SAMPLE_URI, MISSING_COMMA_YAML, on_report)
        assert done.wait(timeout=5)
        time.sleep(0.1)
        assert len(reports) == 1
        assert len(reports[0].diagnostics) == 1

    def test_close_cancels_pending(self, engine: ValidationEngine) -> None:
        reports: list[DocumentReport] = []
        engine.schedule_document(SAMPLE_URI, MISSING_COMMA_YAML, reports.append)
        engine.close_document(SAMPLE_URI)
        time.sleep(0.1)
        assert reports == []
