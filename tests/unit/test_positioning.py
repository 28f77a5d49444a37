"""Tests for mapping rule results onto document coordinates."""

from __future__ import annotations

from batonsql.models.results import Diagnostic, Range, SQLQueryInfo, TextEdit, ValidationResult
from batonsql.service.positioning import LineIndex, dedupe, document_diagnostic, to_diagnostic

BLOCK_TEXT = "query: |\n  SELECT id\n  FROM t\n"
BLOCK_QUERY = "SELECT id\nFROM t\n"


def _block_info() -> SQLQueryInfo:
    start = BLOCK_TEXT.index("SELECT")
    return SQLQueryInfo(
        query=BLOCK_QUERY,
        yaml_path=["query"],
        start_position=start,
        end_position=BLOCK_TEXT.rindex("t") + 1,
    )


class TestLineIndex:
    def test_lines(self) -> None:
        index = LineIndex("ab\ncd\n")
        assert index.lines == ["ab", "cd", ""]
        assert index.last_line == 2

    def test_offsets_and_positions(self) -> None:
        index = LineIndex("ab\ncd\n")
        position = index.position_at(3)
        assert (position.line, position.character) == (1, 0)
        assert index.offset_at(position) == 3
        assert index.line_of(100) == 2
        assert index.line_of(-5) == 0

    def test_line_range_clamped(self) -> None:
        index = LineIndex("ab\ncd")
        assert index.line_range(0) == Range.at(0, 0, 2)
        assert index.line_range(9) == Range.at(1, 0, 2)


class TestToDiagnostic:
    def test_line_number_highlights_whole_line(self) -> None:
        result = ValidationResult.fail("bad", line_number=1).model_copy(update={"rule": "r"})
        diagnostic = to_diagnostic(result, _block_info(), LineIndex(BLOCK_TEXT))
        assert diagnostic.range == Range.at(2, 0, len("  FROM t"))
        assert diagnostic.rule == "r"

    def test_position_is_translated_through_query_lines(self) -> None:
        result = ValidationResult.fail("bad", position=BLOCK_QUERY.index("FROM"))
        diagnostic = to_diagnostic(result, _block_info(), LineIndex(BLOCK_TEXT))
        assert (diagnostic.range.start.line, diagnostic.range.start.character) == (2, 2)
        assert diagnostic.range.end.line >= 2

    def test_line_number_wins_over_position(self) -> None:
        result = ValidationResult.fail("bad", line_number=0, position=BLOCK_QUERY.index("FROM"))
        diagnostic = to_diagnostic(result, _block_info(), LineIndex(BLOCK_TEXT))
        assert diagnostic.range.start.line == 1

    def test_whole_query_span_without_location(self) -> None:
        result = ValidationResult.fail("bad")
        diagnostic = to_diagnostic(result, _block_info(), LineIndex(BLOCK_TEXT))
        assert (diagnostic.range.start.line, diagnostic.range.start.character) == (1, 2)
        assert diagnostic.range.end.line == 2

    def test_default_message(self) -> None:
        result = ValidationResult(is_valid=False, rule="custom")
        diagnostic = to_diagnostic(result, _block_info(), LineIndex(BLOCK_TEXT))
        assert diagnostic.message == "Validation failed for rule: custom"

    def test_fix_shifted_by_block_indentation(self) -> None:
        fix = TextEdit(range=Range.at(1, 6), new_text=",")
        result = ValidationResult.fail("bad", line_number=1, suggested_fix=fix)
        diagnostic = to_diagnostic(result, _block_info(), LineIndex(BLOCK_TEXT))
        assert diagnostic.fix is not None
        assert diagnostic.fix.range == Range.at(2, 8)
        assert diagnostic.fix.new_text == ","

    def test_single_line_value_shifted_by_start_column(self) -> None:
        text = 'query: "SELECT id, FROM t"\n'
        query = "SELECT id, FROM t"
        start = text.index(query)
        info = SQLQueryInfo(query=query, start_position=start, end_position=start + len(query))
        fix = TextEdit(range=Range.at(0, 9, 10), new_text="")
        result = ValidationResult.fail("bad", line_number=0, suggested_fix=fix)
        diagnostic = to_diagnostic(result, info, LineIndex(text))
        assert diagnostic.fix is not None
        assert diagnostic.fix.range == Range.at(0, start + 9, start + 10)

    def test_document_diagnostic(self) -> None:
        text = "a: 1\nb: 2\n"
        result = ValidationResult.fail("bad", line_number=1)
        diagnostic = document_diagnostic(result, LineIndex(text))
        assert diagnostic.range == Range.at(1, 0, 4)


class TestDedupe:
    def test_first_occurrence_kept(self) -> None:
        first = Diagnostic(message="m", range=Range.at(1, 0, 4), rule="a")
        second = Diagnostic(message="m", range=Range.at(1, 0, 9), rule="b")
        other_line = Diagnostic(message="m", range=Range.at(2, 0, 4))
        assert dedupe([first, second, other_line]) == [first, other_line]
