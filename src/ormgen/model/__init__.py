"""Record model: source loading, parsing, validation and the resolved descriptors."""

from ormgen.model.builder import build_table, check_unit_names
from ormgen.model.descriptors import (
    AccessorDirective,
    AccessorKind,
    FieldDescriptor,
    FieldRole,
    PatchDescriptor,
    TableDescriptor,
)
from ormgen.model.diagnostics import Diagnostic, Diagnostics, ModelValidationError, SourceLocation
from ormgen.model.parser import parse_record
from ormgen.model.source import load_records

__all__ = [
    "AccessorDirective",
    "AccessorKind",
    "Diagnostic",
    "Diagnostics",
    "FieldDescriptor",
    "FieldRole",
    "ModelValidationError",
    "PatchDescriptor",
    "SourceLocation",
    "TableDescriptor",
    "build_table",
    "check_unit_names",
    "load_records",
    "parse_record",
]
