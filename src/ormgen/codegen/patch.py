"""Patch emitter - partial-update types and the record's patch operation."""

from __future__ import annotations

from ormgen.codegen import sql
from ormgen.codegen.dialects import Dialect
from ormgen.codegen.writer import SourceWriter
from ormgen.model.descriptors import PatchDescriptor, TableDescriptor


def emit_patch_method(table: TableDescriptor) -> SourceWriter:
    """Record-side ``patch``; accepts any patch type generated for the table."""
    writer = SourceWriter()
    if not table.patches:
        return writer
    writer.require("Executor")
    id_name = table.id_field.name
    accepted = " | ".join(p.type_name for p in table.patches)
    with writer.block(f"async def patch(self, executor: Executor, patch: {accepted}) -> {table.type_name}:"):
        writer.line(f"await patch.apply(executor, self.{id_name})")
        writer.line(f"return await self.get(executor, self.{id_name})")
    return writer


def emit_patch_types(table: TableDescriptor, dialect: Dialect) -> SourceWriter:
    writer = SourceWriter()
    for patch in table.patches:
        if writer:
            writer.lines(["", ""])
        _emit_patch_type(writer, table, dialect, patch)
    return writer


def _emit_patch_type(
    writer: SourceWriter,
    table: TableDescriptor,
    dialect: Dialect,
    patch: PatchDescriptor,
) -> None:
    fields = [table.field(name) for name in patch.field_names]
    id_field = table.id_field
    writer.require("Executor")
    writer.line("@dataclasses.dataclass")
    with writer.block(f"class {patch.type_name}:"):
        writer.docstring(f"Partial update of {table.type_name}: {', '.join(patch.field_names)}.")
        writer.separate()
        for f in fields:
            writer.line(f"{f.name}: {f.semantic_type}")
        writer.separate()
        signature = (
            f"async def apply(self, executor: Executor, {id_field.name}: {id_field.semantic_type}) -> None:"
        )
        with writer.block(signature):
            values = [f"self.{f.name}" for f in fields] + [id_field.name]
            sql.statement(writer, dialect, sql.update(table, dialect, fields), values, fetch=False)
