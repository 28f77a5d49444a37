"""YAML loader with position tracking for SQL discovery and error reporting."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq

from batonsql.models.errors import SourceSpan

# ---------------------------------------------------------------------------
# Safety limits
# ---------------------------------------------------------------------------

_MAX_DOCUMENT_SIZE = 5_000_000  # 5M characters
_MAX_NODE_COUNT = 50_000
_MAX_DEPTH = 40


class YAMLSafetyError(Exception):
    """Raised when YAML input violates safety constraints.

    Distinct from parse errors: these indicate oversized or pathological
    input (alias bombs, excessive nesting).
    """


@dataclass
class SourceMap:
    """Maps YAML key paths to the source positions of keys and their values."""

    _positions: dict[str, SourceSpan] = field(default_factory=dict)
    _values: dict[str, SourceSpan] = field(default_factory=dict)

    def add(self, path: str, span: SourceSpan) -> None:
        self._positions[path] = span

    def add_value(self, path: str, span: SourceSpan) -> None:
        self._values[path] = span

    def get(self, path: str) -> SourceSpan | None:
        return self._positions.get(path)

    def get_value(self, path: str) -> SourceSpan | None:
        return self._values.get(path)

    @property
    def paths(self) -> list[str]:
        return list(self._positions.keys())


@dataclass
class LoadedDocument:
    """Parsed YAML tree (ruamel nodes) plus its source map."""

    data: Any
    source_map: SourceMap
    filename: str = "<string>"


def key_path(path: list[str]) -> str:
    """Dotted path used as SourceMap key (``queries.users.list[0]``)."""
    out = ""
    for part in path:
        if part.startswith("["):
            out += part
        else:
            out = f"{out}.{part}" if out else part
    return out


class TrackedLoader:
    """YAML loader that tracks source positions.

    Uses ruamel.yaml which preserves line/column info on every parsed node.
    """

    def __init__(self) -> None:
        self._yaml = YAML()
        self._yaml.preserve_quotes = True

    # -- safety checks -------------------------------------------------------

    @staticmethod
    def _check_yaml_safety(content: str) -> None:
        """Pre-parse safety checks on raw YAML text."""
        if len(content) > _MAX_DOCUMENT_SIZE:
            raise YAMLSafetyError(
                f"YAML document exceeds maximum size "
                f"({len(content):,} chars > {_MAX_DOCUMENT_SIZE:,} limit)"
            )

    @staticmethod
    def _check_node_count(
        data: Any, limit: int = _MAX_NODE_COUNT, max_depth: int = _MAX_DEPTH
    ) -> None:
        """Post-parse check: reject documents with too many nodes or too deep nesting."""
        count = 0
        stack: list[tuple[Any, int]] = [(data, 0)]
        while stack:
            node, depth = stack.pop()
            count += 1
            if count > limit:
                raise YAMLSafetyError(
                    f"YAML document exceeds maximum node count ({limit:,})"
                )
            if depth > max_depth:
                raise YAMLSafetyError(
                    f"YAML document exceeds maximum nesting depth ({max_depth})"
                )
            if isinstance(node, dict):
                stack.extend((child, depth + 1) for child in node.values())
            elif isinstance(node, list):
                stack.extend((child, depth + 1) for child in node)

    # -- public loading API --------------------------------------------------

    def load(self, path: Path) -> LoadedDocument:
        """Load a YAML file."""
        with path.open("r", encoding="utf-8") as handle:
            content = handle.read()
        return self.load_string(content, filename=str(path))

    def load_string(self, content: str, filename: str = "<string>") -> LoadedDocument:
        """Load YAML from a string.

        Raises ``YAMLSafetyError`` or ruamel's ``YAMLError`` subclasses.
        """
        self._check_yaml_safety(content)
        data = self._yaml.load(content)
        source_map = SourceMap()
        if data is None:
            return LoadedDocument(data={}, source_map=source_map, filename=filename)
        self._check_node_count(data)
        self._extract_positions(data, filename, [], source_map)
        return LoadedDocument(data=data, source_map=source_map, filename=filename)

    def _extract_positions(
        self,
        data: Any,
        filename: str,
        prefix: list[str],
        source_map: SourceMap,
    ) -> None:
        """Recursively extract source positions from ruamel.yaml nodes."""
        if isinstance(data, CommentedMap):
            for key in data:
                path = key_path([*prefix, str(key)])
                try:
                    key_positions = data.lc.key(key)
                    if key_positions:
                        line, col = key_positions
                        source_map.add(
                            path, SourceSpan(file=filename, line=line + 1, column=col + 1)
                        )
                    value_positions = data.lc.value(key)
                    if value_positions:
                        line, col = value_positions
                        source_map.add_value(
                            path, SourceSpan(file=filename, line=line + 1, column=col + 1)
                        )
                except (AttributeError, KeyError, TypeError):
                    # Fallback: use the map's own position
                    try:
                        source_map.add(
                            path,
                            SourceSpan(file=filename, line=data.lc.line + 1, column=data.lc.col + 1),
                        )
                    except (AttributeError, TypeError):
                        pass
                self._extract_positions(data[key], filename, [*prefix, str(key)], source_map)
        elif isinstance(data, CommentedSeq):
            for i, item in enumerate(data):
                path = key_path([*prefix, f"[{i}]"])
                try:
                    item_pos = data.lc.item(i)
                    if item_pos:
                        line, col = item_pos
                        span = SourceSpan(file=filename, line=line + 1, column=col + 1)
                        source_map.add(path, span)
                        source_map.add_value(path, span)
                except (AttributeError, KeyError, TypeError):
                    pass
                self._extract_positions(item, filename, [*prefix, f"[{i}]"], source_map)
