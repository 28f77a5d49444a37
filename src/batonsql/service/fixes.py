"""Quick-fix storage and code actions for reported diagnostics."""

from __future__ import annotations

import re
import threading
from collections.abc import Iterable
from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse

from batonsql.models.results import CodeAction, Diagnostic, TextEdit

DEFAULT_FILE_PATTERN = r"^baton-sql-.*\.(yaml|yml)$"

_SUGGESTION_RE = re.compile(r"""Did you mean ["']([^"']+)["']""")

_TITLES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("Missing comma",), "Add missing comma"),
    (("unclosed parenthes", "missing closing parenthes", "opening parentheses"),
     "Add closing parenthesis"),
    (("missing ON clause",), "Add ON clause to JOIN"),
    (("missing ON keyword",), "Add ON keyword"),
    (("Missing FROM clause",), "Add FROM clause"),
    (("Trailing comma",), "Remove trailing comma"),
)

FixKey = tuple[str, str, int, int]


def fix_title(message: str) -> str:
    """Human-readable title for the quick fix attached to ``message``."""
    match = _SUGGESTION_RE.search(message)
    if match:
        return f'Change to "{match.group(1)}"'
    for needles, title in _TITLES:
        if any(needle in message for needle in needles):
            return title
    return "Apply suggested fix"


def is_baton_sql_file(path_or_uri: str, pattern: str = DEFAULT_FILE_PATTERN) -> bool:
    """True when the file name (not the directory) matches ``pattern``."""
    path = unquote(urlparse(path_or_uri).path) if "://" in path_or_uri else path_or_uri
    name = PurePosixPath(path.replace("\\", "/")).name
    return re.match(pattern, name) is not None


class FixStore:
    """Suggested fixes keyed by (uri, message, start line, start character).

    Thread-safe via ``threading.Lock``.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._fixes: dict[FixKey, TextEdit] = {}

    @staticmethod
    def _key(uri: str, diagnostic: Diagnostic) -> FixKey:
        start = diagnostic.range.start
        return (uri, diagnostic.message, start.line, start.character)

    def store(self, uri: str, diagnostic: Diagnostic, fix: TextEdit) -> None:
        with self._lock:
            self._fixes[self._key(uri, diagnostic)] = fix

    def get(self, uri: str, diagnostic: Diagnostic) -> TextEdit | None:
        with self._lock:
            return self._fixes.get(self._key(uri, diagnostic))

    def clear(self, uri: str) -> None:
        """Drop every fix stored for ``uri``."""
        with self._lock:
            for key in [key for key in self._fixes if key[0] == uri]:
                del self._fixes[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._fixes)

    def code_actions(self, uri: str, diagnostics: Iterable[Diagnostic]) -> list[CodeAction]:
        """One quick fix per diagnostic that has a stored fix."""
        actions: list[CodeAction] = []
        for diagnostic in diagnostics:
            fix = self.get(uri, diagnostic)
            if fix is None:
                continue
            actions.append(
                CodeAction(
                    title=fix_title(diagnostic.message),
                    diagnostic=diagnostic,
                    edits={uri: [fix]},
                )
            )
        return actions
