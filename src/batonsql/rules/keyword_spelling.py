"""keyword-spelling: misspelled SQL clause keywords in multi-line queries."""

from __future__ import annotations

import re

from batonsql.models.results import Range, TextEdit, ValidationResult
from batonsql.rules.registry import rule
from batonsql.sql.keywords import KEYWORD_HEADS, KEYWORD_TYPOS, PRIMARY_KEYWORDS
from batonsql.sql.lexical import closest_word, first_word, levenshtein

# Maximum edit distance for the fuzzy pass against PRIMARY_KEYWORDS.
PRIMARY_KEYWORD_MAX_DISTANCE = 1

_TYPO_PATTERNS = [
    (typo, correction, re.compile(rf"\b{typo}\b", re.IGNORECASE))
    for typo, correction in KEYWORD_TYPOS.items()
]


def _message(typo: str, correction: str) -> str:
    return f'Possible typo in SQL keyword: "{typo}" - Did you mean "{correction}"?'


def _replacement(written: str, correction: str) -> str:
    return correction.lower() if written.islower() else correction


def _dictionary_hit(line: str, index: int) -> ValidationResult | None:
    for typo, correction, pattern in _TYPO_PATTERNS:
        match = pattern.search(line)
        if match is None:
            continue
        return ValidationResult.fail(
            _message(typo, correction),
            line_number=index,
            suggested_fix=TextEdit(
                range=Range.at(index, match.start(), match.end()),
                new_text=_replacement(match.group(0), correction),
            ),
        )
    return None


def _fuzzy_hit(line: str, index: int) -> ValidationResult | None:
    written = first_word(line.strip())
    word = written.upper()
    if len(word) < 3 or not word.isalpha() or word in KEYWORD_HEADS:
        return None
    candidates = [
        keyword
        for keyword in PRIMARY_KEYWORDS
        if levenshtein(word, keyword) <= PRIMARY_KEYWORD_MAX_DISTANCE
        and word != f"{keyword}S"  # ORDERS, GROUPS and JOINS are usually table names
    ]
    suggestion = closest_word(word, candidates)
    if suggestion is None:
        return None
    start = line.index(written)
    return ValidationResult.fail(
        _message(word, suggestion),
        line_number=index,
        suggested_fix=TextEdit(
            range=Range.at(index, start, start + len(written)),
            new_text=_replacement(written, suggestion),
        ),
    )


@rule("keyword-spelling", "Check for misspelled SQL keywords")
def keyword_spelling(sql: str, original_query: str) -> ValidationResult:
    if "\n" not in original_query:
        return ValidationResult.ok()

    for index, line in enumerate(original_query.split("\n")):
        if not line.strip():
            continue
        result = _dictionary_hit(line, index) or _fuzzy_hit(line, index)
        if result is not None:
            return result
    return ValidationResult.ok()
