"""Insert emitter - the companion insert type and its insert operations."""

from __future__ import annotations

from ormgen.codegen import sql
from ormgen.codegen.dialects import Dialect, FollowUpIdDialect
from ormgen.codegen.writer import SourceWriter, literal
from ormgen.model.descriptors import TableDescriptor


def emit_insert(table: TableDescriptor, dialect: Dialect) -> SourceWriter:
    """Dataclass holding every field but the id and database-defaulted ones.

    ``insert_id`` returns the id the database assigned, through RETURNING when
    the dialect has it and through the dialect's follow-up query otherwise.
    ``insert`` reads the new row back so defaulted columns are populated.
    """
    writer = SourceWriter()
    if table.insertable is None:
        return writer
    writer.require("Executor", "exactly_one")
    id_field = table.id_field
    name = literal(table.table_name)
    read_id = sql.read_column(id_field, row=f"exactly_one(rows, {name})")

    writer.line("@dataclasses.dataclass")
    with writer.block(f"class {table.insertable}:"):
        writer.docstring(f"New row for table {table.table_name!r}; database-generated columns omitted.")
        writer.separate()
        for f in table.insert_fields:
            writer.line(f"{f.name}: {f.semantic_type}")

        writer.separate()
        with writer.block(f"async def insert_id(self, executor: Executor) -> {id_field.semantic_type}:"):
            values = [f"self.{f.name}" for f in table.insert_fields]
            if isinstance(dialect, FollowUpIdDialect):
                sql.statement(writer, dialect, sql.insert(table, dialect), values, fetch=False)
                follow_up = dialect.last_insert_id_query(id_field.column_name)
                writer.line(f"rows = await executor.fetch_all({literal(follow_up)}, executor.arguments())")
            else:
                sql.statement(writer, dialect, sql.insert(table, dialect), values, fetch=True)
            writer.line(f"return {read_id}")

        writer.separate()
        with writer.block(f"async def insert(self, executor: Executor) -> {table.type_name}:"):
            writer.line(f"return await {table.type_name}.get(executor, await self.insert_id(executor))")
    return writer
