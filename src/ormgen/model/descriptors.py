"""Resolved record model - the typed descriptors every emitter consumes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ormgen.model.diagnostics import SourceLocation


class FieldRole(Enum):
    """How a field participates in inserts."""

    ID = "id"
    DEFAULT = "default"
    REGULAR = "regular"


class AccessorKind(Enum):
    """Kind of generated query-by-field or update-one-field operation."""

    GET_ONE = "get_one"
    GET_OPTIONAL = "get_optional"
    GET_MANY = "get_many"
    SET = "set"

    @property
    def is_getter(self) -> bool:
        return self is not AccessorKind.SET

    def default_name(self, field_name: str) -> str:
        if self is AccessorKind.SET:
            return f"set_{field_name}"
        return f"get_by_{field_name}"


@dataclass(frozen=True, slots=True)
class AccessorDirective:
    """Request to generate one accessor for a field."""

    kind: AccessorKind
    field_name: str
    generated_name: str
    argument_type: str
    location: SourceLocation


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """A record field and its column mapping."""

    name: str
    semantic_type: str
    column_name: str
    role: FieldRole
    location: SourceLocation
    custom_type: bool = False
    type_override: str | None = None
    accessors: tuple[AccessorDirective, ...] = ()

    @property
    def is_id(self) -> bool:
        return self.role is FieldRole.ID

    @property
    def read_type(self) -> str | None:
        """Type passed to Row.try_get, None when the driver decodes natively."""
        return self.type_override if self.custom_type else None


@dataclass(frozen=True, slots=True)
class PatchDescriptor:
    """A partial-update type covering a subset of the record's columns."""

    type_name: str
    field_names: tuple[str, ...]
    location: SourceLocation


@dataclass(frozen=True, slots=True)
class TableDescriptor:
    """A fully resolved record definition."""

    type_name: str
    table_name: str
    id_field: FieldDescriptor
    fields: tuple[FieldDescriptor, ...]
    location: SourceLocation
    insertable: str | None = None
    deletable: bool = False
    patches: tuple[PatchDescriptor, ...] = ()
    imports: tuple[str, ...] = ()

    @property
    def columns(self) -> list[str]:
        return [f.column_name for f in self.fields]

    @property
    def non_id_fields(self) -> list[FieldDescriptor]:
        return [f for f in self.fields if not f.is_id]

    @property
    def insert_fields(self) -> list[FieldDescriptor]:
        """Fields the caller supplies on insert; ID and DEFAULT are database-generated."""
        return [f for f in self.fields if f.role is FieldRole.REGULAR]

    @property
    def accessors(self) -> list[AccessorDirective]:
        return [a for f in self.fields for a in f.accessors]

    def field(self, name: str) -> FieldDescriptor:
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(name)
