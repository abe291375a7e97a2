"""Test fixtures for the model package."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from ormgen.model.builder import build_table
from ormgen.model.descriptors import TableDescriptor
from ormgen.model.diagnostics import Diagnostics
from ormgen.model.parser import ParsedRecord, parse_record
from ormgen.model.source import load_records


@pytest.fixture
def parse() -> Callable[[str], tuple[ParsedRecord | None, Diagnostics]]:
    """Parse the first record of a YAML document."""

    def _parse(text: str) -> tuple[ParsedRecord | None, Diagnostics]:
        diagnostics = Diagnostics()
        raw = load_records(text, "test.yaml", diagnostics)
        assert raw, diagnostics.items
        return parse_record(raw[0], diagnostics), diagnostics

    return _parse


@pytest.fixture
def build(
    parse: Callable[[str], tuple[ParsedRecord | None, Diagnostics]],
) -> Callable[[str], tuple[TableDescriptor | None, Diagnostics]]:
    """Parse and resolve the first record of a YAML document."""

    def _build(text: str) -> tuple[TableDescriptor | None, Diagnostics]:
        record, diagnostics = parse(text)
        if record is None:
            return None, diagnostics
        return build_table(record, diagnostics), diagnostics

    return _build
