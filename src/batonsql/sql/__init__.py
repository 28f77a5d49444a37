"""Text-level SQL helpers: parameter normalization and lexical scans."""

from batonsql.sql.normalizer import ParameterToken, find_parameters, normalize_sql

__all__ = [
    "ParameterToken",
    "find_parameters",
    "normalize_sql",
]
