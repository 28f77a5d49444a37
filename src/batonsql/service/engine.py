"""Validation engine: runs the rule set over queries and Baton YAML documents.

The engine is the error boundary of the linter: a rule that raises is logged
and contributes no result, so ``validate`` never raises. Results are cached
by a digest of the normalized SQL and the original text; documents are
skipped when their content digest has not changed since the last pass.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from batonsql.ast.adapter import get_parser, using_dialect
from batonsql.models.errors import DocumentError, SourceSpan
from batonsql.models.results import CodeAction, Diagnostic, ValidationResult
from batonsql.parser.discovery import find_sql_queries
from batonsql.parser.loader import TrackedLoader, YAMLSafetyError
from batonsql.rules import ALL_RULES, RuleRegistry, RuleScope, ValidationRule
from batonsql.service.debounce import Debouncer
from batonsql.service.fixes import FixStore, is_baton_sql_file
from batonsql.service.positioning import LineIndex, dedupe, document_diagnostic, to_diagnostic
from batonsql.service.symbol_index import SymbolIndex, SymbolInfo
from batonsql.settings import Settings
from batonsql.sql.normalizer import normalize_sql

logger = logging.getLogger("batonsql.service")

_ALL_SCOPES = "all"


@dataclass
class DocumentReport:
    """Outcome of one document pass."""

    uri: str
    diagnostics: list[Diagnostic] = field(default_factory=list)
    errors: list[DocumentError] = field(default_factory=list)
    skipped: bool = False


def _digest(*parts: str) -> str:
    return hashlib.md5("\x00".join(parts).encode("utf-8", "surrogatepass")).hexdigest()


def _yaml_error_span(uri: str, exc: Exception) -> SourceSpan | None:
    mark = getattr(exc, "problem_mark", None) or getattr(exc, "context_mark", None)
    if mark is None:
        return None
    return SourceSpan(file=uri, line=mark.line + 1, column=mark.column + 1)


class ValidationEngine:
    """Ordered rule battery with a result cache and per-document state."""

    def __init__(
        self,
        settings: Settings | None = None,
        rules: Iterable[ValidationRule] | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._selected: tuple[ValidationRule, ...] = (
            tuple(rules) if rules is not None else ALL_RULES
        )
        self._loader = TrackedLoader()
        self._cache: dict[str, list[ValidationResult]] = {}
        self._digests: dict[str, str] = {}
        self._reports: dict[str, DocumentReport] = {}
        self.symbols = SymbolIndex()
        self.fixes = FixStore()
        self._debouncer = Debouncer(self._settings.debounce_ms)
        self._configure()

    def _configure(self) -> None:
        for name in self._settings.disabled_rules:
            RuleRegistry.get(name)  # UnknownRuleError for typos in configuration
        disabled = set(self._settings.disabled_rules)
        self._rules = tuple(r for r in self._selected if r.name not in disabled)
        get_parser(self._settings.sql_dialect)  # ValueError for unknown dialects

    # -- properties ----------------------------------------------------------

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def rules(self) -> tuple[ValidationRule, ...]:
        """Active rules in evaluation order."""
        return self._rules

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    # -- query validation ----------------------------------------------------

    def validate(self, sql: Any, original_query: Any = None) -> list[ValidationResult]:
        """Run every active rule and return the failures in rule order.

        ``original_query`` defaults to ``sql``. Never raises.
        """
        text = "" if sql is None else str(sql)
        original = text if original_query is None else str(original_query)
        return self._run(text, original, self._rules, _ALL_SCOPES)

    def _run(
        self,
        sql: str,
        original_query: str,
        rules: Iterable[ValidationRule],
        scope: str,
    ) -> list[ValidationResult]:
        normalized = normalize_sql(sql)
        key = _digest(scope, normalized, original_query)
        cached = self._cache.get(key)
        if cached is not None:
            return list(cached)

        logger.debug("Validation cache miss (%s scope)", scope)
        results: list[ValidationResult] = []
        with using_dialect(self._settings.sql_dialect):
            for rule in rules:
                try:
                    result = rule.validate(normalized, original_query)
                except Exception as exc:  # noqa: BLE001
                    logger.debug("Rule %s failed: %s", rule.name, exc)
                    continue
                if result.is_valid:
                    continue
                results.append(
                    result.model_copy(
                        update={
                            "rule": rule.name,
                            "error_message": result.error_message
                            or f"Validation failed for rule: {rule.name}",
                        }
                    )
                )
        self._cache[key] = results
        return list(results)

    def clear_cache(self) -> None:
        self._cache.clear()

    # -- document validation -------------------------------------------------

    def validate_document(self, uri: str, text: str, *, force: bool = False) -> DocumentReport:
        """Lint every SQL string in a Baton YAML document.

        Non-matching file names and unchanged content are skipped unless
        ``force`` is set.
        """
        if not force and not is_baton_sql_file(uri, self._settings.file_pattern):
            logger.debug("Skipping %s: not a Baton SQL file", uri)
            return DocumentReport(uri=uri, skipped=True)

        digest = _digest(text)
        previous = self._reports.get(uri)
        if not force and previous is not None and self._digests.get(uri) == digest:
            return DocumentReport(
                uri=uri,
                diagnostics=list(previous.diagnostics),
                errors=list(previous.errors),
                skipped=True,
            )

        report = self._lint_document(uri, text)
        self._digests[uri] = digest
        self._reports[uri] = report
        return report

    def _lint_document(self, uri: str, text: str) -> DocumentReport:
        try:
            document = self._loader.load_string(text, filename=uri)
        except YAMLSafetyError as exc:
            logger.warning("Rejected %s: %s", uri, exc)
            self.fixes.clear(uri)
            return DocumentReport(
                uri=uri, errors=[DocumentError(code="YAML_SAFETY_ERROR", message=str(exc))]
            )
        except Exception as exc:
            logger.warning("Could not parse %s: %s", uri, exc)
            self.fixes.clear(uri)
            return DocumentReport(
                uri=uri,
                errors=[
                    DocumentError(
                        code="YAML_PARSE_ERROR",
                        message=str(exc),
                        span=_yaml_error_span(uri, exc),
                    )
                ],
            )

        index = LineIndex(text)
        queries = find_sql_queries(text, document, self._settings.sql_field_names)
        query_rules = [r for r in self._rules if r.scope is RuleScope.QUERY]
        document_rules = [r for r in self._rules if r.scope is RuleScope.DOCUMENT]

        diagnostics: list[Diagnostic] = []
        for info in queries:
            for result in self._run(info.query, info.query, query_rules, RuleScope.QUERY):
                diagnostics.append(to_diagnostic(result, info, index))
        for result in self._run(text, text, document_rules, RuleScope.DOCUMENT):
            diagnostics.append(document_diagnostic(result, index))
        diagnostics = dedupe(diagnostics)

        self.fixes.clear(uri)
        for diagnostic in diagnostics:
            if diagnostic.fix is not None:
                self.fixes.store(uri, diagnostic, diagnostic.fix)
        self.symbols.index_document(uri, text, document.data, queries)

        logger.info(
            "Validated %s: %d queries, %d diagnostics", uri, len(queries), len(diagnostics)
        )
        return DocumentReport(uri=uri, diagnostics=diagnostics)

    def schedule_document(
        self, uri: str, text: str, on_report: Callable[[DocumentReport], Any]
    ) -> None:
        """Validate ``text`` once edits to ``uri`` pause, then call ``on_report``."""
        self._debouncer.schedule(uri, self._validate_and_report, uri, text, on_report)

    def _validate_and_report(
        self, uri: str, text: str, on_report: Callable[[DocumentReport], Any]
    ) -> None:
        on_report(self.validate_document(uri, text))

    def close_document(self, uri: str) -> None:
        """Forget everything recorded for ``uri``."""
        self._debouncer.cancel(uri)
        self._digests.pop(uri, None)
        self._reports.pop(uri, None)
        self.symbols.clear_document(uri)
        self.fixes.clear(uri)

    def on_configuration_change(self, settings: Settings | None = None) -> None:
        """Apply new settings and drop every cache, forcing re-validation."""
        if settings is not None:
            self._settings = settings
            self._debouncer.cancel_all()
            self._debouncer = Debouncer(settings.debounce_ms)
            self._configure()
        self._cache.clear()
        self._digests.clear()
        self._reports.clear()
        logger.info("Configuration changed; validation caches cleared")

    # -- editor helpers ------------------------------------------------------

    def code_actions(self, uri: str, diagnostics: Iterable[Diagnostic]) -> list[CodeAction]:
        return self.fixes.code_actions(uri, diagnostics)

    def definition(self, uri: str, text: str, line: int, character: int) -> list[SymbolInfo]:
        return self.symbols.definition_at(uri, text, line, character)

    def shutdown(self) -> None:
        self._debouncer.cancel_all()
