"""Record definition loading - YAML to location-tagged raw annotation data.

The loader works on the composed YAML node graph rather than on constructed
Python objects so that every key and value keeps its line and column, and so
that repeated keys in one mapping stay visible to the parser instead of being
silently collapsed.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

import yaml

from ormgen.core.errors import ErrorCode
from ormgen.model.diagnostics import Diagnostics, SourceLocation


@dataclass(frozen=True, slots=True)
class RawScalar:
    value: Any
    location: SourceLocation


@dataclass(frozen=True, slots=True)
class RawSequence:
    items: tuple[RawValue, ...]
    location: SourceLocation


@dataclass(frozen=True, slots=True)
class RawEntry:
    """One key/value pair of a mapping."""

    key: str
    value: RawValue
    location: SourceLocation  # of the key


@dataclass(frozen=True, slots=True)
class RawMapping:
    entries: tuple[RawEntry, ...]
    location: SourceLocation

    def keys(self) -> list[str]:
        return [e.key for e in self.entries]

    def get(self, key: str) -> RawEntry | None:
        """First entry for key; duplicates are reported by the parser."""
        for entry in self.entries:
            if entry.key == key:
                return entry
        return None

    def __iter__(self) -> Iterator[RawEntry]:
        return iter(self.entries)


RawValue = RawScalar | RawSequence | RawMapping


def _location(path: str, mark: yaml.Mark | None) -> SourceLocation:
    if mark is None:
        return SourceLocation(path, 1, 1)
    return SourceLocation(path, mark.line + 1, mark.column + 1)


class _NodeConverter:
    """Convert composed YAML nodes into raw values."""

    def __init__(self, path: str, diagnostics: Diagnostics) -> None:
        self._path = path
        self._diagnostics = diagnostics
        self._constructor = yaml.constructor.SafeConstructor()

    def convert(self, node: yaml.Node) -> RawValue:
        location = _location(self._path, node.start_mark)
        if isinstance(node, yaml.MappingNode):
            entries = []
            for key_node, value_node in node.value:
                key_location = _location(self._path, key_node.start_mark)
                if not isinstance(key_node, yaml.ScalarNode):
                    self._diagnostics.error(
                        ErrorCode.MALFORMED_VALUE, "mapping keys must be plain strings", key_location
                    )
                    continue
                entries.append(
                    RawEntry(key=str(key_node.value), value=self.convert(value_node), location=key_location)
                )
            return RawMapping(entries=tuple(entries), location=location)
        if isinstance(node, yaml.SequenceNode):
            return RawSequence(items=tuple(self.convert(n) for n in node.value), location=location)
        try:
            value = self._constructor.construct_object(node)
        except yaml.MarkedYAMLError as e:
            self._diagnostics.error(ErrorCode.SOURCE_SYNTAX_ERROR, str(e.problem or e), location)
            value = None
        return RawScalar(value=value, location=location)


def load_records(text: str, path: str, diagnostics: Diagnostics) -> list[RawMapping]:
    """Parse a record definition document into raw record mappings.

    Syntax errors and structural problems (missing ``records`` list, a record
    that is not a mapping) are reported to diagnostics; whatever could be
    read is still returned so later stages can report their own errors.
    """
    try:
        root = yaml.compose(text, Loader=yaml.SafeLoader)
    except yaml.MarkedYAMLError as e:
        mark = e.problem_mark or e.context_mark
        diagnostics.error(ErrorCode.SOURCE_SYNTAX_ERROR, str(e.problem or e), _location(path, mark))
        return []
    except yaml.YAMLError as e:
        diagnostics.error(ErrorCode.SOURCE_SYNTAX_ERROR, str(e), SourceLocation(path, 1, 1))
        return []

    if root is None:
        diagnostics.error(
            ErrorCode.MISSING_REQUIRED_KEY, "document is empty, expected a 'records' list", SourceLocation(path, 1, 1)
        )
        return []

    document = _NodeConverter(path, diagnostics).convert(root)
    if not isinstance(document, RawMapping):
        diagnostics.error(ErrorCode.MALFORMED_VALUE, "top level must be a mapping", document.location)
        return []

    records: list[RawMapping] = []
    for entry in document:
        if entry.key != "records":
            diagnostics.error(
                ErrorCode.UNKNOWN_ANNOTATION_KEY, f"unknown top-level key '{entry.key}'", entry.location
            )
            continue
        if not isinstance(entry.value, RawSequence):
            diagnostics.error(ErrorCode.MALFORMED_VALUE, "'records' must be a list", entry.value.location)
            continue
        for item in entry.value.items:
            if isinstance(item, RawMapping):
                records.append(item)
            else:
                diagnostics.error(ErrorCode.MALFORMED_VALUE, "each record must be a mapping", item.location)

    if document.get("records") is None:
        diagnostics.error(ErrorCode.MISSING_REQUIRED_KEY, "missing 'records' list", document.location)
    return records
