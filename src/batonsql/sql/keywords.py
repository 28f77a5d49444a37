"""Keyword vocabularies used by the spelling and parameter rules."""

from __future__ import annotations

SQL_KEYWORDS: tuple[str, ...] = (
    "SELECT", "FROM", "WHERE", "AND", "OR", "ORDER BY", "GROUP BY", "HAVING",
    "JOIN", "LEFT JOIN", "RIGHT JOIN", "INNER JOIN", "FULL JOIN", "OUTER JOIN",
    "CROSS JOIN", "ON", "AS", "IN", "EXISTS", "NOT", "BETWEEN", "LIKE",
    "IS NULL", "IS NOT NULL", "LIMIT", "OFFSET", "INSERT INTO", "VALUES",
    "UPDATE", "SET", "DELETE FROM", "CREATE TABLE", "ALTER TABLE", "DROP TABLE",
    "INDEX", "UNION", "ALL", "DISTINCT", "CASE", "WHEN", "THEN", "ELSE", "END",
    "WITH",
)

# First words of SQL_KEYWORDS ("ORDER BY" -> "ORDER").
KEYWORD_HEADS: frozenset[str] = frozenset(keyword.split()[0] for keyword in SQL_KEYWORDS)

# Clause keywords the fuzzy spelling pass compares against.
PRIMARY_KEYWORDS: tuple[str, ...] = (
    "SELECT", "FROM", "WHERE", "GROUP", "ORDER", "JOIN", "HAVING",
)

# Explicit misspelling -> correction table; checked before any fuzzy matching.
KEYWORD_TYPOS: dict[str, str] = {
    "SELCT": "SELECT",
    "SLECT": "SELECT",
    "SELET": "SELECT",
    "SELECTT": "SELECT",
    "SEKECT": "SELECT",
    "FORM": "FROM",
    "FOMR": "FROM",
    "FROMT": "FROM",
    "FRIM": "FROM",
    "WEHRE": "WHERE",
    "WHRE": "WHERE",
    "WHER": "WHERE",
    "WHEER": "WHERE",
    "WHEREE": "WHERE",
    "HWERE": "WHERE",
    "WKERE": "WHERE",
    "WHERRE": "WHERE",
    "GROOP": "GROUP",
    "GRUOP": "GROUP",
    "GORUP": "GROUP",
    "GROPU": "GROUP",
    "GROUPP": "GROUP",
    "ORDRE": "ORDER",
    "ORDR": "ORDER",
    "OREDR": "ORDER",
    "ORDERBY": "ORDER BY",
    "ODER": "ORDER",
    "OERDER": "ORDER",
    "JOIM": "JOIN",
    "JION": "JOIN",
    "JIOIN": "JOIN",
    "JOINN": "JOIN",
    "ONM": "ON",
    "ONN": "ON",
    "UPDTE": "UPDATE",
    "UPDAET": "UPDATE",
    "UPATE": "UPDATE",
    "UPDATTE": "UPDATE",
    "ISNER": "INSERT",
    "INSRET": "INSERT",
    "INSER": "INSERT",
    "INSETT": "INSERT",
    "INSETR": "INSERT",
    "DELTE": "DELETE",
    "DELETTE": "DELETE",
    "DEELETE": "DELETE",
    "DEKETE": "DELETE",
    "DELEET": "DELETE",
    "HAIVNG": "HAVING",
    "HAVNIG": "HAVING",
    "AHVING": "HAVING",
    "HABING": "HAVING",
    "GROUPBY": "GROUP BY",
    "INNERJOIN": "INNER JOIN",
    "LEFTJOIN": "LEFT JOIN",
    "RIGHTJOIN": "RIGHT JOIN",
    "FULLJOIN": "FULL JOIN",
    "OUTERJOIN": "OUTER JOIN",
}

JOIN_TYPOS: frozenset[str] = frozenset(
    typo.lower() for typo, correction in KEYWORD_TYPOS.items() if correction == "JOIN"
)

# Words that must not be used as ?<name> parameter names.
RESERVED_PARAMETER_WORDS: frozenset[str] = frozenset({
    "select", "from", "where", "and", "or", "order", "by", "group", "having",
    "join", "inner", "left", "right", "outer", "on", "as", "in", "exists",
    "not", "between", "like", "null", "is", "limit", "offset", "insert",
    "into", "values", "update", "set", "delete", "create", "table", "alter",
    "drop", "index", "union", "all", "distinct", "case", "when", "then",
    "else", "end", "with",
})

COMMON_PARAMETERS: tuple[str, ...] = (
    "user_id", "resource_id", "role_id", "permission_id", "group_id",
)
