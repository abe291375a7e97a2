"""Compilation unit - assembles emitted fragments into one Python module."""

from __future__ import annotations

from ormgen.codegen.accessors import emit_accessors
from ormgen.codegen.delete import emit_delete
from ormgen.codegen.dialects import Dialect
from ormgen.codegen.insert import emit_insert
from ormgen.codegen.patch import emit_patch_method, emit_patch_types
from ormgen.codegen.schema import emit_fields, emit_schema, emit_table_queries
from ormgen.codegen.writer import SourceWriter
from ormgen.model.descriptors import TableDescriptor

DEFAULT_RUNTIME_MODULE = "ormgen.runtime"


def render_table(table: TableDescriptor, dialect: Dialect) -> SourceWriter:
    """The record class followed by its insert and patch types."""
    writer = SourceWriter()
    writer.line("@dataclasses.dataclass")
    with writer.block(f"class {table.type_name}:"):
        writer.docstring(f"Row of table {table.table_name!r}.")
        writer.separate()
        writer.include(emit_fields(table))
        members = (
            emit_schema(table, dialect),
            emit_table_queries(table, dialect),
            emit_accessors(table, dialect),
            emit_patch_method(table),
            emit_delete(table, dialect),
        )
        for fragment in members:
            if fragment:
                writer.separate()
                writer.include(fragment)

    for fragment in (emit_insert(table, dialect), emit_patch_types(table, dialect)):
        if fragment:
            writer.lines(["", ""])
            writer.include(fragment)
    return writer


def render_unit(
    tables: list[TableDescriptor],
    dialect: Dialect,
    *,
    source_name: str,
    runtime_module: str = DEFAULT_RUNTIME_MODULE,
    header: bool = True,
) -> str:
    """Render every table of one record definition file into module source.

    Output depends only on the arguments: tables keep declaration order and
    imports are sorted, so compiling the same input twice is byte-identical.
    """
    body = SourceWriter()
    for table in tables:
        if body:
            body.lines(["", ""])
        body.include(render_table(table, dialect))

    extra_imports = sorted({line for table in tables for line in table.imports})

    out = SourceWriter()
    if header:
        out.line(f"# Generated by ormgen from {source_name} (dialect: {dialect.name}). Do not edit.")
        out.line()
    out.line("from __future__ import annotations")
    out.line()
    out.line("import dataclasses")
    out.line()
    out.line(f"from {runtime_module} import {', '.join(sorted(body.required))}")
    if extra_imports:
        out.line()
        out.lines(extra_imports)
    out.lines(["", ""])
    out.include(body)
    return out.getvalue()
