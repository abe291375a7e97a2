"""Descriptor parser - raw annotation data to parsed record drafts.

One pass over a record mapping: every key is checked against the fixed
vocabulary, every value against its expected shape, and defaults are filled in
(column name, accessor names, accessor argument types, insert type name).
Cross-field rules (the id field, accessor conflicts, patch references) are left
to the builder, which sees the whole record at once.
"""

from __future__ import annotations

import ast
import keyword
from dataclasses import dataclass, field

from ormgen.core.errors import ErrorCode
from ormgen.core.logging import get_logger
from ormgen.model.descriptors import AccessorKind, PatchDescriptor
from ormgen.model.diagnostics import Diagnostics, SourceLocation
from ormgen.model.source import RawEntry, RawMapping, RawScalar, RawSequence, RawValue

log = get_logger("parser")

RECORD_KEYS = frozenset(
    {
        "name",
        "table_name",
        "id_field",
        "insertable",
        "deletable",
        "imports",
        "fields",
        "patches",
        "accessors",
    }
)

FIELD_KEYS = frozenset(
    {
        "name",
        "type",
        "id",
        "column",
        "default",
        "custom_type",
        "get_one",
        "get_optional",
        "get_many",
        "set",
    }
)

ACCESSOR_KEYS: dict[str, AccessorKind] = {kind.value: kind for kind in AccessorKind}

PATCH_KEYS = frozenset({"name", "fields"})
TABLE_ACCESSOR_KEYS = frozenset({"field", "kind", "name", "type"})
GETTER_OPTION_KEYS = frozenset({"name", "type"})
SETTER_OPTION_KEYS = frozenset({"name"})
# Expressions Python rejects inside annotations.
_NON_ANNOTATION_NODES = (ast.Yield, ast.YieldFrom, ast.Await, ast.NamedExpr, ast.Starred)


@dataclass(frozen=True, slots=True)
class ParsedAccessor:
    """Accessor directive before resolution; argument_type None means the field's type."""

    kind: AccessorKind
    field_name: str
    generated_name: str
    argument_type: str | None
    location: SourceLocation


@dataclass(frozen=True, slots=True)
class ParsedField:
    name: str
    semantic_type: str
    column_name: str
    location: SourceLocation
    id_marker: bool = False
    default: bool = False
    custom_type: bool = False
    type_override: str | None = None
    accessors: tuple[ParsedAccessor, ...] = ()


@dataclass(frozen=True, slots=True)
class FieldReference:
    name: str
    location: SourceLocation


@dataclass(slots=True)
class ParsedRecord:
    """A record whose annotations are individually valid."""

    type_name: str
    location: SourceLocation
    table_name: str | None = None
    id_field: FieldReference | None = None
    insertable: str | None = None
    deletable: bool = False
    imports: list[str] = field(default_factory=list)
    fields: list[ParsedField] = field(default_factory=list)
    accessors: list[ParsedAccessor] = field(default_factory=list)
    patches: list[PatchDescriptor] = field(default_factory=list)
    patch_refs: list[tuple[FieldReference, ...]] = field(default_factory=list)


class _Parser:
    """Value readers sharing one diagnostics collector."""

    def __init__(self, diagnostics: Diagnostics) -> None:
        self.diagnostics = diagnostics

    def error(self, code: ErrorCode, message: str, location: SourceLocation) -> None:
        self.diagnostics.error(code, message, location)

    def entries(
        self,
        mapping: RawMapping,
        allowed: frozenset[str],
        where: str,
    ) -> dict[str, RawEntry]:
        """Known entries of a mapping, first occurrence wins.

        Unknown and repeated keys are reported and dropped.
        """
        seen: dict[str, RawEntry] = {}
        for entry in mapping:
            if entry.key not in allowed:
                self.error(
                    ErrorCode.UNKNOWN_ANNOTATION_KEY,
                    f"unknown key '{entry.key}' in {where}",
                    entry.location,
                )
                continue
            if entry.key in seen:
                code = (
                    ErrorCode.DUPLICATE_ACCESSOR_KIND
                    if entry.key in ACCESSOR_KEYS
                    else ErrorCode.MALFORMED_VALUE
                )
                self.error(code, f"key '{entry.key}' given more than once in {where}", entry.location)
                continue
            seen[entry.key] = entry
        return seen

    def require(
        self,
        entries: dict[str, RawEntry],
        key: str,
        where: str,
        location: SourceLocation,
    ) -> RawValue | None:
        entry = entries.get(key)
        if entry is None:
            self.error(ErrorCode.MISSING_REQUIRED_KEY, f"{where} is missing '{key}'", location)
            return None
        return entry.value

    def string(self, value: RawValue, what: str) -> str | None:
        if isinstance(value, RawScalar) and isinstance(value.value, str) and value.value.strip():
            return value.value.strip()
        self.error(ErrorCode.MALFORMED_VALUE, f"{what} must be a non-empty string", value.location)
        return None

    def identifier(self, value: RawValue, what: str) -> str | None:
        text = self.string(value, what)
        if text is None:
            return None
        if not text.isidentifier() or keyword.iskeyword(text):
            self.error(ErrorCode.MALFORMED_VALUE, f"{what} '{text}' is not a valid identifier", value.location)
            return None
        return text

    def type_expression(self, value: RawValue, what: str) -> str | None:
        text = self.string(value, what)
        if text is None:
            return None
        try:
            tree = ast.parse(text, mode="eval")
        except SyntaxError:
            tree = None
        # Emitted inline in annotations and signatures: one line, one expression.
        if (
            tree is None
            or "#" in text
            or "\n" in text
            or "\r" in text
            or isinstance(tree.body, ast.Tuple)
            or any(isinstance(node, _NON_ANNOTATION_NODES) for node in ast.walk(tree))
        ):
            self.error(ErrorCode.MALFORMED_VALUE, f"{what} '{text}' is not a valid type expression", value.location)
            return None
        return text

    def flag(self, value: RawValue, what: str) -> bool:
        if isinstance(value, RawScalar) and isinstance(value.value, bool):
            return value.value
        self.error(ErrorCode.MALFORMED_VALUE, f"{what} must be true or false", value.location)
        return False

    def sequence(self, value: RawValue, what: str) -> tuple[RawValue, ...]:
        if isinstance(value, RawSequence):
            return value.items
        self.error(ErrorCode.MALFORMED_VALUE, f"{what} must be a list", value.location)
        return ()

    def mapping(self, value: RawValue, what: str) -> RawMapping | None:
        if isinstance(value, RawMapping):
            return value
        self.error(ErrorCode.MALFORMED_VALUE, f"{what} must be a mapping", value.location)
        return None

    # -- accessors ---------------------------------------------------------------

    def accessor_options(
        self,
        kind: AccessorKind,
        value: RawValue,
        field_name: str,
    ) -> tuple[str, str | None] | None:
        """Read ``true`` / ``name`` / ``{name, type}``; None when disabled or malformed."""
        default_name = kind.default_name(field_name)
        if isinstance(value, RawScalar):
            if value.value is True:
                return default_name, None
            if value.value is False:
                return None
            name = self.identifier(value, f"{kind.value} name")
            return (name, None) if name else None

        options = self.mapping(value, f"{kind.value} options")
        if options is None:
            return None
        allowed = GETTER_OPTION_KEYS if kind.is_getter else SETTER_OPTION_KEYS
        entries = self.entries(options, allowed, f"{kind.value} options")
        name: str | None = default_name
        if "name" in entries:
            name = self.identifier(entries["name"].value, f"{kind.value} name")
        argument_type = None
        if "type" in entries:
            argument_type = self.type_expression(entries["type"].value, f"{kind.value} argument type")
            if argument_type is None:
                return None
        return (name, argument_type) if name else None

    def read_table_accessor(self, value: RawValue) -> ParsedAccessor | None:
        mapping = self.mapping(value, "accessor")
        if mapping is None:
            return None
        entries = self.entries(mapping, TABLE_ACCESSOR_KEYS, "accessor")
        field_value = self.require(entries, "field", "accessor", mapping.location)
        kind_value = self.require(entries, "kind", "accessor", mapping.location)
        if field_value is None or kind_value is None:
            return None
        field_name = self.identifier(field_value, "accessor field")
        kind_name = self.string(kind_value, "accessor kind")
        if field_name is None or kind_name is None:
            return None
        kind = ACCESSOR_KEYS.get(kind_name)
        if kind is None:
            self.error(
                ErrorCode.MALFORMED_VALUE,
                f"accessor kind must be one of {', '.join(ACCESSOR_KEYS)}, got '{kind_name}'",
                kind_value.location,
            )
            return None

        name: str | None = kind.default_name(field_name)
        if "name" in entries:
            name = self.identifier(entries["name"].value, "accessor name")
        argument_type = None
        if "type" in entries:
            if not kind.is_getter:
                self.error(
                    ErrorCode.UNKNOWN_ANNOTATION_KEY,
                    "set accessors take the field's own type, 'type' is not allowed",
                    entries["type"].location,
                )
                return None
            argument_type = self.type_expression(entries["type"].value, "accessor argument type")
        if name is None:
            return None
        return ParsedAccessor(
            kind=kind,
            field_name=field_name,
            generated_name=name,
            argument_type=argument_type,
            location=mapping.location,
        )

    # -- fields ------------------------------------------------------------------

    def read_field(self, value: RawValue) -> ParsedField | None:
        mapping = self.mapping(value, "field")
        if mapping is None:
            return None
        entries = self.entries(mapping, FIELD_KEYS, "field")
        name_value = self.require(entries, "name", "field", mapping.location)
        type_value = self.require(entries, "type", "field", mapping.location)
        name = self.identifier(name_value, "field name") if name_value is not None else None
        if name is None:
            return None
        semantic_type = self.type_expression(type_value, "field type") if type_value is not None else None

        column = name
        if "column" in entries:
            column = self.string(entries["column"].value, "column") or name

        custom_type = False
        type_override = None
        if "custom_type" in entries:
            raw = entries["custom_type"].value
            if isinstance(raw, RawScalar) and isinstance(raw.value, bool):
                custom_type = raw.value
            else:
                type_override = self.type_expression(raw, "custom_type override")
                custom_type = True

        accessors = []
        for key, kind in ACCESSOR_KEYS.items():
            if key not in entries:
                continue
            entry = entries[key]
            options = self.accessor_options(kind, entry.value, name)
            if options is None:
                continue
            generated_name, argument_type = options
            accessors.append(
                ParsedAccessor(
                    kind=kind,
                    field_name=name,
                    generated_name=generated_name,
                    argument_type=argument_type or semantic_type,
                    location=entry.location,
                )
            )
        # Keep directive order as written so generated members follow the source.
        accessors.sort(key=lambda a: (a.location.line, a.location.column))

        return ParsedField(
            name=name,
            semantic_type=semantic_type or "object",
            column_name=column,
            location=mapping.location,
            id_marker=self.flag(entries["id"].value, "id") if "id" in entries else False,
            default=self.flag(entries["default"].value, "default") if "default" in entries else False,
            custom_type=custom_type,
            type_override=type_override,
            accessors=tuple(accessors),
        )

    # -- patches -----------------------------------------------------------------

    def read_patch(self, value: RawValue) -> tuple[PatchDescriptor, tuple[FieldReference, ...]] | None:
        mapping = self.mapping(value, "patch")
        if mapping is None:
            return None
        entries = self.entries(mapping, PATCH_KEYS, "patch")
        name_value = self.require(entries, "name", "patch", mapping.location)
        fields_value = self.require(entries, "fields", "patch", mapping.location)
        if name_value is None or fields_value is None:
            return None
        type_name = self.identifier(name_value, "patch name")
        refs: list[FieldReference] = []
        for item in self.sequence(fields_value, "patch fields"):
            ref = self.identifier(item, "patch field")
            if ref is None:
                continue
            if any(r.name == ref for r in refs):
                self.error(ErrorCode.MALFORMED_VALUE, f"field '{ref}' listed twice in patch", item.location)
                continue
            refs.append(FieldReference(ref, item.location))
        if not refs:
            if isinstance(fields_value, RawSequence) and not fields_value.items:
                self.error(ErrorCode.MALFORMED_VALUE, "patch must list at least one field", fields_value.location)
            return None
        if type_name is None:
            return None
        patch = PatchDescriptor(
            type_name=type_name,
            field_names=tuple(r.name for r in refs),
            location=mapping.location,
        )
        return patch, tuple(refs)

    # -- records -----------------------------------------------------------------

    def read_record(self, mapping: RawMapping) -> ParsedRecord | None:
        entries = self.entries(mapping, RECORD_KEYS, "record")
        name_value = self.require(entries, "name", "record", mapping.location)
        fields_value = self.require(entries, "fields", "record", mapping.location)
        table_value = self.require(entries, "table_name", "record", mapping.location)

        type_name = self.identifier(name_value, "record name") if name_value is not None else None
        if type_name is None:
            return None

        record = ParsedRecord(type_name=type_name, location=mapping.location)
        if table_value is not None:
            record.table_name = self.string(table_value, "table_name")

        if "id_field" in entries:
            value = entries["id_field"].value
            ref = self.identifier(value, "id_field")
            if ref is not None:
                record.id_field = FieldReference(ref, value.location)

        if "insertable" in entries:
            value = entries["insertable"].value
            if isinstance(value, RawScalar) and isinstance(value.value, bool):
                record.insertable = f"Insert{type_name}" if value.value else None
            else:
                record.insertable = self.identifier(value, "insertable type name")

        if "deletable" in entries:
            record.deletable = self.flag(entries["deletable"].value, "deletable")

        if "imports" in entries:
            for item in self.sequence(entries["imports"].value, "imports"):
                line = self.string(item, "import")
                if line is None:
                    continue
                if not line.startswith(("import ", "from ")) or not _is_import(line):
                    self.error(ErrorCode.MALFORMED_VALUE, f"'{line}' is not an import statement", item.location)
                    continue
                record.imports.append(line)

        if fields_value is not None:
            items = self.sequence(fields_value, "fields")
            if isinstance(fields_value, RawSequence) and not items:
                self.error(ErrorCode.MALFORMED_VALUE, "record must declare at least one field", fields_value.location)
            for item in items:
                parsed = self.read_field(item)
                if parsed is not None:
                    record.fields.append(parsed)

        if "accessors" in entries:
            for item in self.sequence(entries["accessors"].value, "accessors"):
                accessor = self.read_table_accessor(item)
                if accessor is not None:
                    record.accessors.append(accessor)

        if "patches" in entries:
            for item in self.sequence(entries["patches"].value, "patches"):
                result = self.read_patch(item)
                if result is not None:
                    record.patches.append(result[0])
                    record.patch_refs.append(result[1])

        return record


def _is_import(line: str) -> bool:
    try:
        tree = ast.parse(line)
    except SyntaxError:
        return False
    return len(tree.body) == 1 and isinstance(tree.body[0], ast.Import | ast.ImportFrom)


def parse_record(mapping: RawMapping, diagnostics: Diagnostics) -> ParsedRecord | None:
    """Parse one record mapping, reporting every annotation error found.

    Returns None only when the record cannot be identified (no usable name);
    otherwise the draft is returned even if some annotations were rejected, so
    the builder can still check what remains.
    """
    before = len(diagnostics)
    record = _Parser(diagnostics).read_record(mapping)
    log.debug(
        "record_parsed",
        record=record.type_name if record else None,
        fields=len(record.fields) if record else 0,
        errors=len(diagnostics) - before,
    )
    return record
