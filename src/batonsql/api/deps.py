"""Dependency injection for FastAPI: ValidationEngine singleton."""

from __future__ import annotations

from batonsql.service.engine import ValidationEngine

_engine: ValidationEngine | None = None


def init_engine(engine: ValidationEngine) -> None:
    """Set the global ValidationEngine (called at app startup)."""
    global _engine  # noqa: PLW0603
    _engine = engine


def get_engine() -> ValidationEngine:
    """FastAPI ``Depends`` provider for ValidationEngine."""
    if _engine is None:
        raise RuntimeError("ValidationEngine not initialised; call init_engine() first")
    return _engine


def reset_engine() -> None:
    """Clear the global ValidationEngine (for tests)."""
    global _engine  # noqa: PLW0603
    _engine = None
