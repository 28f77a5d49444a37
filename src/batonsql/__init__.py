"""batonsql: heuristic linter for SQL embedded in Baton SQL connector YAML."""

__version__ = "0.3.0"
