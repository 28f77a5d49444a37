"""FastAPI REST surface for the linter."""
