"""Tests for model/source.py - YAML loading with locations."""

from __future__ import annotations

from ormgen.core.errors import ErrorCode
from ormgen.model.diagnostics import Diagnostics
from ormgen.model.source import RawMapping, RawScalar, RawSequence, load_records


class TestLoadRecords:
    """Tests for load_records."""

    def test_reads_records_with_locations(self) -> None:
        """Each record becomes a mapping tagged with its 1-based position."""
        diagnostics = Diagnostics()
        text = "records:\n  - name: User\n    table_name: users\n"

        records = load_records(text, "users.yaml", diagnostics)

        assert not diagnostics.has_errors
        assert len(records) == 1
        record = records[0]
        assert record.keys() == ["name", "table_name"]
        name = record.get("name")
        assert name is not None
        assert name.location.line == 2
        assert name.location.column == 5
        assert isinstance(name.value, RawScalar)
        assert name.value.value == "User"
        assert name.value.location.path == "users.yaml"

    def test_scalars_are_typed(self) -> None:
        """Booleans and lists keep their YAML types."""
        diagnostics = Diagnostics()
        text = "records:\n  - deletable: true\n    imports: [a, b]\n"

        record = load_records(text, "x.yaml", diagnostics)[0]

        deletable = record.get("deletable")
        imports = record.get("imports")
        assert deletable is not None and imports is not None
        assert isinstance(deletable.value, RawScalar)
        assert deletable.value.value is True
        assert isinstance(imports.value, RawSequence)
        assert [item.value for item in imports.value.items] == ["a", "b"]  # type: ignore[union-attr]

    def test_duplicate_keys_are_kept(self) -> None:
        """Repeated keys survive loading so the parser can report them."""
        diagnostics = Diagnostics()
        text = "records:\n  - name: A\n    name: B\n"

        record = load_records(text, "x.yaml", diagnostics)[0]

        assert record.keys() == ["name", "name"]
        first = record.get("name")
        assert first is not None and isinstance(first.value, RawScalar)
        assert first.value.value == "A"

    def test_syntax_error_is_reported_with_location(self) -> None:
        """Malformed YAML yields a single syntax diagnostic."""
        diagnostics = Diagnostics()

        records = load_records("records: [unclosed\n", "bad.yaml", diagnostics)

        assert records == []
        assert diagnostics.codes() == [ErrorCode.SOURCE_SYNTAX_ERROR]
        assert diagnostics.items[0].location.path == "bad.yaml"

    def test_unknown_tag_is_reported_at_the_value(self) -> None:
        diagnostics = Diagnostics()
        text = "records:\n  - name: Item\n    table_name: items\n    fields:\n      - {name: id, type: !custom int}\n"

        records = load_records(text, "tagged.yaml", diagnostics)

        assert len(records) == 1
        assert diagnostics.codes() == [ErrorCode.SOURCE_SYNTAX_ERROR]
        assert diagnostics.items[0].location.line == 5
        assert "!custom" in diagnostics.items[0].message

    def test_empty_document(self) -> None:
        diagnostics = Diagnostics()

        assert load_records("", "empty.yaml", diagnostics) == []
        assert diagnostics.codes() == [ErrorCode.MISSING_REQUIRED_KEY]

    def test_missing_records_key_and_unknown_key(self) -> None:
        diagnostics = Diagnostics()

        load_records("tables: []\n", "x.yaml", diagnostics)

        assert diagnostics.codes() == [ErrorCode.UNKNOWN_ANNOTATION_KEY, ErrorCode.MISSING_REQUIRED_KEY]

    def test_non_mapping_record_is_rejected(self) -> None:
        diagnostics = Diagnostics()

        records = load_records("records:\n  - just a string\n  - name: Ok\n", "x.yaml", diagnostics)

        assert len(records) == 1
        assert isinstance(records[0], RawMapping)
        assert diagnostics.codes() == [ErrorCode.MALFORMED_VALUE]
        assert diagnostics.items[0].location.line == 2
