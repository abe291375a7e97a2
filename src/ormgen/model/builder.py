"""Semantic model builder - cross-field validation and resolution.

Takes a parsed record draft and produces the immutable TableDescriptor the
emitters work from. Every rule is checked even after an earlier one fails, so a
single run reports the complete list of problems for the record.
"""

from __future__ import annotations

from ormgen.core.errors import ErrorCode
from ormgen.core.logging import get_logger
from ormgen.model.descriptors import (
    AccessorDirective,
    AccessorKind,
    FieldDescriptor,
    FieldRole,
    TableDescriptor,
)
from ormgen.model.diagnostics import Diagnostics, SourceLocation
from ormgen.model.parser import ParsedAccessor, ParsedField, ParsedRecord

log = get_logger("builder")

# Members every generated record class defines.
RECORD_MEMBERS = frozenset(
    {"table", "columns", "bind_arguments", "from_row", "get", "all", "all_paginated", "update"}
)
INSERT_MEMBERS = frozenset({"insert", "insert_id"})
PATCH_MEMBERS = frozenset({"apply"})
# Names bound as parameters or locals inside generated operations.
LOCAL_NAMES = frozenset({"self", "cls", "executor", "arguments", "rows", "row", "patch"})
# Names imported at module level of every generated unit.
MODULE_NAMES = frozenset(
    {"annotations", "dataclasses", "Arguments", "Executor", "Row", "at_most_one", "exactly_one"}
)


class _Builder:
    def __init__(self, record: ParsedRecord, diagnostics: Diagnostics) -> None:
        self.record = record
        self.diagnostics = diagnostics
        self.failed = False

    def error(self, code: ErrorCode, message: str, location: SourceLocation) -> None:
        self.failed = True
        self.diagnostics.error(code, message, location)

    def unique_fields(self) -> list[ParsedField]:
        fields: list[ParsedField] = []
        names: set[str] = set()
        columns: dict[str, str] = {}
        for f in self.record.fields:
            if f.name in names:
                self.error(ErrorCode.DUPLICATE_FIELD, f"field '{f.name}' is declared more than once", f.location)
                continue
            if f.column_name in columns:
                self.error(
                    ErrorCode.DUPLICATE_FIELD,
                    f"column '{f.column_name}' of field '{f.name}' is already used by "
                    f"field '{columns[f.column_name]}'",
                    f.location,
                )
                continue
            names.add(f.name)
            columns[f.column_name] = f.name
            fields.append(f)
        return fields

    def resolve_id(self, fields: list[ParsedField]) -> str | None:
        by_name = {f.name: f for f in fields}
        ids: list[str] = []
        ref = self.record.id_field
        if ref is not None:
            if ref.name in by_name:
                ids.append(ref.name)
            else:
                self.error(
                    ErrorCode.DANGLING_FIELD_REFERENCE,
                    f"id_field '{ref.name}' does not name a field of {self.record.type_name}",
                    ref.location,
                )
                return None
        for f in fields:
            if f.id_marker and f.name not in ids:
                ids.append(f.name)

        if not ids:
            self.error(
                ErrorCode.MISSING_ID,
                f"record {self.record.type_name} has no id field; set 'id_field' or mark a field with 'id: true'",
                self.record.location,
            )
            return None
        if len(ids) > 1:
            self.error(
                ErrorCode.DUPLICATE_ID,
                f"record {self.record.type_name} has more than one id field: {', '.join(ids)}",
                by_name[ids[1]].location,
            )
            return None
        return ids[0]

    def check_type_overrides(self, fields: list[ParsedField]) -> None:
        for f in fields:
            if f.custom_type and f.type_override is None:
                self.error(
                    ErrorCode.MISSING_TYPE_OVERRIDE,
                    f"field '{f.name}' is a custom type and needs an explicit override, "
                    f"e.g. custom_type: {f.semantic_type}",
                    f.location,
                )

    def resolve_accessors(self, fields: list[ParsedField]) -> dict[str, list[AccessorDirective]]:
        by_name = {f.name: f for f in fields}
        pending: dict[str, list[ParsedAccessor]] = {f.name: list(f.accessors) for f in fields}
        for accessor in self.record.accessors:
            if accessor.field_name not in by_name:
                self.error(
                    ErrorCode.DANGLING_ACCESSOR_REFERENCE,
                    f"{accessor.kind.value} accessor refers to unknown field '{accessor.field_name}'",
                    accessor.location,
                )
                continue
            pending[accessor.field_name].append(accessor)

        resolved: dict[str, list[AccessorDirective]] = {}
        for name, accessors in pending.items():
            getter: ParsedAccessor | None = None
            setter: ParsedAccessor | None = None
            directives = []
            for accessor in accessors:
                current = getter if accessor.kind.is_getter else setter
                if current is not None:
                    self.error(
                        ErrorCode.DUPLICATE_ACCESSOR_KIND,
                        f"field '{name}' already has a {current.kind.value} accessor, "
                        f"{accessor.kind.value} conflicts with it",
                        accessor.location,
                    )
                    continue
                if accessor.kind.is_getter:
                    getter = accessor
                else:
                    setter = accessor
                directives.append(
                    AccessorDirective(
                        kind=accessor.kind,
                        field_name=name,
                        generated_name=accessor.generated_name,
                        argument_type=(
                            by_name[name].semantic_type
                            if accessor.kind is AccessorKind.SET
                            else accessor.argument_type or by_name[name].semantic_type
                        ),
                        location=accessor.location,
                    )
                )
            resolved[name] = directives
        return resolved

    def check_patches(self, fields: list[ParsedField], id_name: str | None) -> None:
        names = {f.name for f in fields}
        for patch, refs in zip(self.record.patches, self.record.patch_refs, strict=True):
            for ref in refs:
                if ref.name not in names:
                    self.error(
                        ErrorCode.DANGLING_FIELD_REFERENCE,
                        f"patch {patch.type_name} refers to unknown field '{ref.name}'",
                        ref.location,
                    )
                elif ref.name == id_name:
                    self.error(
                        ErrorCode.MALFORMED_VALUE,
                        f"patch {patch.type_name} cannot update the id field '{ref.name}'",
                        ref.location,
                    )
                elif ref.name in PATCH_MEMBERS:
                    self.error(
                        ErrorCode.NAME_COLLISION,
                        f"field '{ref.name}' clashes with a generated member of patch {patch.type_name}",
                        ref.location,
                    )

    def check_names(self, fields: list[ParsedField], accessors: dict[str, list[AccessorDirective]]) -> None:
        record = self.record
        members: dict[str, str] = {name: "a generated operation" for name in RECORD_MEMBERS}
        if record.deletable:
            members.update({"delete": "a generated operation", "delete_by_id": "a generated operation"})
        if record.patches:
            members["patch"] = "a generated operation"

        for f in fields:
            if f.name in LOCAL_NAMES or f.name in MODULE_NAMES or f.name in members:
                self.error(
                    ErrorCode.NAME_COLLISION,
                    f"field name '{f.name}' is reserved in generated code",
                    f.location,
                )
                continue
            if record.insertable and f.name in INSERT_MEMBERS:
                self.error(
                    ErrorCode.NAME_COLLISION,
                    f"field name '{f.name}' clashes with a member of {record.insertable}",
                    f.location,
                )
                continue
            members[f.name] = f"field '{f.name}'"

        for f in fields:
            for directive in accessors.get(f.name, ()):
                taken = members.get(directive.generated_name)
                if taken is not None:
                    self.error(
                        ErrorCode.NAME_COLLISION,
                        f"accessor '{directive.generated_name}' clashes with {taken}",
                        directive.location,
                    )
                    continue
                members[directive.generated_name] = f"accessor on '{f.name}'"

        types: dict[str, SourceLocation] = {record.type_name: record.location}
        extra: list[tuple[str, SourceLocation]] = []
        if record.insertable:
            extra.append((record.insertable, record.location))
        extra.extend((p.type_name, p.location) for p in record.patches)
        for type_name, location in [(record.type_name, record.location), *extra]:
            if type_name in MODULE_NAMES:
                self.error(
                    ErrorCode.NAME_COLLISION,
                    f"type name '{type_name}' clashes with a name the generated module imports",
                    location,
                )
        for type_name, location in extra:
            if type_name in types:
                self.error(
                    ErrorCode.NAME_COLLISION,
                    f"type name '{type_name}' is generated more than once",
                    location,
                )
                continue
            types[type_name] = location

    def build(self) -> TableDescriptor | None:
        record = self.record
        fields = self.unique_fields()
        id_name = self.resolve_id(fields)
        self.check_type_overrides(fields)
        accessors = self.resolve_accessors(fields)
        self.check_patches(fields, id_name)
        self.check_names(fields, accessors)

        if self.failed or id_name is None or record.table_name is None or not fields:
            return None

        descriptors = tuple(_descriptor(f, id_name, accessors[f.name]) for f in fields)
        return TableDescriptor(
            type_name=record.type_name,
            table_name=record.table_name,
            id_field=next(d for d in descriptors if d.is_id),
            fields=descriptors,
            location=record.location,
            insertable=record.insertable,
            deletable=record.deletable,
            patches=tuple(record.patches),
            imports=tuple(record.imports),
        )


def _descriptor(f: ParsedField, id_name: str, accessors: list[AccessorDirective]) -> FieldDescriptor:
    if f.name == id_name:
        role = FieldRole.ID
    elif f.default:
        role = FieldRole.DEFAULT
    else:
        role = FieldRole.REGULAR
    return FieldDescriptor(
        name=f.name,
        semantic_type=f.semantic_type,
        column_name=f.column_name,
        role=role,
        location=f.location,
        custom_type=f.custom_type,
        type_override=f.type_override,
        accessors=tuple(accessors),
    )


def build_table(record: ParsedRecord, diagnostics: Diagnostics) -> TableDescriptor | None:
    """Resolve a parsed record, or return None after reporting every violation."""
    table = _Builder(record, diagnostics).build()
    if table is None:
        log.debug("model_rejected", record=record.type_name)
    else:
        log.debug(
            "model_resolved",
            record=table.type_name,
            table=table.table_name,
            columns=len(table.fields),
            accessors=len(table.accessors),
        )
    return table


def check_unit_names(tables: list[TableDescriptor], diagnostics: Diagnostics) -> None:
    """Report type names generated by more than one record of the same unit."""
    owners: dict[str, str] = {}
    for table in tables:
        names = [table.type_name]
        if table.insertable:
            names.append(table.insertable)
        names.extend(p.type_name for p in table.patches)
        for name in names:
            owner = owners.get(name)
            if owner is not None:
                diagnostics.error(
                    ErrorCode.NAME_COLLISION,
                    f"type name '{name}' is already generated for record {owner}",
                    table.location,
                )
                continue
            owners[name] = table.type_name

