"""YAML parsing with line fidelity and SQL discovery."""

from batonsql.parser.discovery import find_sql_queries, is_sql_field, locate_query
from batonsql.parser.loader import LoadedDocument, SourceMap, TrackedLoader, YAMLSafetyError

__all__ = [
    "LoadedDocument",
    "SourceMap",
    "TrackedLoader",
    "YAMLSafetyError",
    "find_sql_queries",
    "is_sql_field",
    "locate_query",
]
