"""Per-document index of resource types and referenced tables."""

from __future__ import annotations

import re
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from batonsql.models.results import Range, SQLQueryInfo
from batonsql.service.positioning import LineIndex, query_position

_TABLE_PATTERNS = (
    re.compile(r"FROM\s+([a-zA-Z_][a-zA-Z0-9_]*)", re.IGNORECASE),
    re.compile(r"JOIN\s+([a-zA-Z_][a-zA-Z0-9_]*)", re.IGNORECASE),
)
_WORD_CHAR_RE = re.compile(r"[a-zA-Z0-9_]")


class SymbolKind(StrEnum):
    TABLE = "table"
    ALIAS = "alias"
    RESOURCE_TYPE = "resource_type"
    ENTITLEMENT = "entitlement"


@dataclass(frozen=True)
class SymbolInfo:
    name: str
    kind: SymbolKind
    range: Range
    uri: str


def word_at(text: str, line: int, character: int) -> str | None:
    """Identifier under the cursor, or None when the cursor is not on one."""
    lines = text.split("\n")
    if not 0 <= line < len(lines):
        return None
    current = lines[line]
    if not 0 <= character <= len(current):
        return None
    start = character
    while start > 0 and _WORD_CHAR_RE.match(current[start - 1]):
        start -= 1
    end = character
    while end < len(current) and _WORD_CHAR_RE.match(current[end]):
        end += 1
    return current[start:end] or None


class SymbolIndex:
    """Symbols by name across open documents. Thread-safe."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._symbols: dict[str, list[SymbolInfo]] = {}

    def index_document(
        self, uri: str, text: str, data: Any, queries: Iterable[SQLQueryInfo]
    ) -> None:
        """Replace the symbols recorded for ``uri``."""
        self.clear_document(uri)
        index = LineIndex(text)
        found: list[SymbolInfo] = []
        resource_types = data.get("resource_types") if isinstance(data, dict) else None
        if isinstance(resource_types, dict):
            found.extend(self._resource_types(uri, index, resource_types))
        for info in queries:
            found.extend(self._tables(uri, index, info))
        with self._lock:
            for symbol in found:
                self._symbols.setdefault(symbol.name, []).append(symbol)

    @staticmethod
    def _resource_types(
        uri: str, index: LineIndex, resource_types: dict[str, Any]
    ) -> list[SymbolInfo]:
        symbols = []
        for key in resource_types:
            name = str(key)
            for number, line in enumerate(index.lines):
                if line.strip().startswith(f"{name}:"):
                    column = line.index(name)
                    symbols.append(
                        SymbolInfo(
                            name=name,
                            kind=SymbolKind.RESOURCE_TYPE,
                            range=Range.at(number, column, column + len(name)),
                            uri=uri,
                        )
                    )
                    break
        return symbols

    @staticmethod
    def _tables(uri: str, index: LineIndex, info: SQLQueryInfo) -> list[SymbolInfo]:
        symbols = []
        offset = 0
        for line in info.query.split("\n"):
            for pattern in _TABLE_PATTERNS:
                for match in pattern.finditer(line):
                    start = query_position(info, index, offset + match.start(1))
                    name = match.group(1)
                    symbols.append(
                        SymbolInfo(
                            name=name,
                            kind=SymbolKind.TABLE,
                            range=Range.at(
                                start.line, start.character, start.character + len(name)
                            ),
                            uri=uri,
                        )
                    )
            offset += len(line) + 1
        return symbols

    def find(self, name: str) -> list[SymbolInfo]:
        with self._lock:
            return list(self._symbols.get(name, []))

    def definition_at(self, uri: str, text: str, line: int, character: int) -> list[SymbolInfo]:
        """Symbols named by the word at ``(line, character)``; those in ``uri`` come first."""
        word = word_at(text, line, character)
        if word is None:
            return []
        return sorted(self.find(word), key=lambda symbol: symbol.uri != uri)

    def clear_document(self, uri: str) -> None:
        with self._lock:
            for name in list(self._symbols):
                kept = [symbol for symbol in self._symbols[name] if symbol.uri != uri]
                if kept:
                    self._symbols[name] = kept
                else:
                    del self._symbols[name]

    def clear(self) -> None:
        with self._lock:
            self._symbols.clear()

    def __len__(self) -> int:
        with self._lock:
            return sum(len(symbols) for symbols in self._symbols.values())
