"""Validation engine and the document-level services around it."""

from batonsql.service.debounce import Debouncer
from batonsql.service.engine import DocumentReport, ValidationEngine
from batonsql.service.fixes import FixStore, fix_title, is_baton_sql_file
from batonsql.service.positioning import POSITION_HIGHLIGHT_WIDTH, dedupe, to_diagnostic
from batonsql.service.symbol_index import SymbolIndex, SymbolInfo, SymbolKind

__all__ = [
    "POSITION_HIGHLIGHT_WIDTH",
    "Debouncer",
    "DocumentReport",
    "FixStore",
    "SymbolIndex",
    "SymbolInfo",
    "SymbolKind",
    "ValidationEngine",
    "dedupe",
    "fix_title",
    "is_baton_sql_file",
    "to_diagnostic",
]
