"""Delete emitter - row removal keyed by id."""

from __future__ import annotations

from ormgen.codegen import sql
from ormgen.codegen.dialects import Dialect
from ormgen.codegen.writer import SourceWriter
from ormgen.model.descriptors import TableDescriptor


def emit_delete(table: TableDescriptor, dialect: Dialect) -> SourceWriter:
    writer = SourceWriter()
    if not table.deletable:
        return writer
    writer.require("Executor")
    id_field = table.id_field

    writer.line("@classmethod")
    with writer.block(
        f"async def delete_by_id(cls, executor: Executor, {id_field.name}: {id_field.semantic_type}) -> None:"
    ):
        sql.statement(writer, dialect, sql.delete(table, dialect), [id_field.name], fetch=False)

    writer.separate()
    with writer.block("async def delete(self, executor: Executor) -> None:"):
        writer.line(f"await self.delete_by_id(executor, self.{id_field.name})")
    return writer
