"""Pure string helpers shared by the rules: edit distance and line scans."""

from __future__ import annotations

import re
from collections.abc import Sequence

_WHITESPACE_RE = re.compile(r"\s+")


def levenshtein(a: str, b: str) -> int:
    """Classic edit distance (insert, delete, substitute all cost 1)."""
    if not a:
        return len(b)
    if not b:
        return len(a)
    previous = list(range(len(a) + 1))
    for j, char_b in enumerate(b, start=1):
        current = [j]
        for i, char_a in enumerate(a, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(min(current[i - 1] + 1, previous[i] + 1, previous[i - 1] + cost))
        previous = current
    return previous[-1]


def words_similar(first: str, second: str, threshold: int = 2) -> bool:
    """Case-insensitive check that two words are within ``threshold`` edits."""
    return levenshtein(first.lower(), second.lower()) <= threshold


def closest_word(word: str, candidates: Sequence[str]) -> str | None:
    """Return the candidate with the smallest edit distance (first wins ties)."""
    best: str | None = None
    best_distance = -1
    for candidate in candidates:
        distance = levenshtein(word, candidate)
        if best is None or distance < best_distance:
            best, best_distance = candidate, distance
    return best


def find_line_with_pattern(
    text: str,
    pattern: str,
    *,
    ignore_case: bool = False,
    ignore_whitespace: bool = False,
    fuzzy: bool = False,
) -> int | None:
    """Zero-based index of the first line of ``text`` containing ``pattern``.

    ``fuzzy`` also accepts a line that is itself contained in the pattern.
    """
    needle = pattern.lower() if ignore_case else pattern
    if ignore_whitespace:
        needle = _WHITESPACE_RE.sub(" ", needle).strip()
    for index, raw in enumerate(text.split("\n")):
        line = raw.lower() if ignore_case else raw
        if ignore_whitespace:
            line = _WHITESPACE_RE.sub(" ", line).strip()
        if needle in line:
            return index
        if fuzzy and line.strip() and line.strip() in needle:
            return index
    return None


def offset_to_line(text: str, offset: int) -> int:
    """Translate a character offset into a zero-based line index (clamped)."""
    consumed = 0
    lines = text.split("\n")
    for index, line in enumerate(lines):
        consumed += len(line) + 1
        if consumed > offset:
            return index
    return len(lines) - 1


def is_comment(stripped: str) -> bool:
    return stripped.startswith(("--", "#"))


def next_non_empty(
    lines: Sequence[str], start: int, *, skip_comments: bool = False
) -> tuple[int, str] | None:
    """First ``(index, stripped_line)`` at or after ``start`` with content."""
    for index in range(max(start, 0), len(lines)):
        stripped = lines[index].strip()
        if stripped and not (skip_comments and is_comment(stripped)):
            return index, stripped
    return None


def previous_non_empty(
    lines: Sequence[str], start: int, *, skip_comments: bool = False
) -> tuple[int, str] | None:
    """Last ``(index, stripped_line)`` at or before ``start`` with content."""
    for index in range(min(start, len(lines) - 1), -1, -1):
        stripped = lines[index].strip()
        if stripped and not (skip_comments and is_comment(stripped)):
            return index, stripped
    return None


def split_top_level(text: str, separator: str = ",") -> list[str]:
    """Split on ``separator`` outside parentheses and single-quoted strings."""
    parts: list[str] = []
    depth = 0
    in_string = False
    current: list[str] = []
    for char in text:
        if char == "'":
            in_string = not in_string
        elif not in_string:
            if char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
            elif char == separator and depth == 0:
                parts.append("".join(current))
                current = []
                continue
        current.append(char)
    parts.append("".join(current))
    return parts


def call_arguments(text: str, open_paren: int) -> list[str] | None:
    """Top-level arguments of the call whose ``(`` is at ``open_paren``.

    Returns None when the parenthesis is never closed.
    """
    depth = 0
    in_string = False
    for index in range(open_paren, len(text)):
        char = text[index]
        if char == "'":
            in_string = not in_string
        elif in_string:
            continue
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                inner = text[open_paren + 1 : index]
                return [arg.strip() for arg in split_top_level(inner) if arg.strip()]
    return None


def indentation(line: str) -> int:
    return len(line) - len(line.lstrip())


def first_word(line: str) -> str:
    parts = line.split()
    return parts[0] if parts else ""
