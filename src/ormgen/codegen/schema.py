"""Schema emitter - record fields, table metadata, row mapping and table-wide queries."""

from __future__ import annotations

from ormgen.codegen import sql
from ormgen.codegen.dialects import Dialect
from ormgen.codegen.writer import SourceWriter, literal
from ormgen.model.descriptors import TableDescriptor


def emit_fields(table: TableDescriptor) -> SourceWriter:
    writer = SourceWriter()
    for f in table.fields:
        writer.line(f"{f.name}: {f.semantic_type}")
    return writer


def emit_schema(table: TableDescriptor, dialect: Dialect) -> SourceWriter:
    """table(), columns(), bind_arguments() and from_row(), all in field order."""
    writer = SourceWriter()
    writer.require("Arguments", "Row")

    writer.separate()
    writer.line("@staticmethod")
    with writer.block("def table() -> str:"):
        writer.line(f"return {literal(table.table_name)}")

    writer.separate()
    writer.line("@staticmethod")
    with writer.block("def columns() -> list[str]:"):
        writer.line(f"return [{', '.join(literal(c) for c in table.columns)}]")

    writer.separate()
    with writer.block("def bind_arguments(self, arguments: Arguments) -> None:"):
        for f in table.fields:
            writer.line(dialect.bind("arguments", f"self.{f.name}"))

    writer.separate()
    writer.line("@classmethod")
    with writer.block(f"def from_row(cls, row: Row) -> {table.type_name}:"):
        with writer.block("return cls("):
            for f in table.fields:
                writer.line(f"{f.name}={sql.read_column(f)},")
        writer.line(")")
    return writer


def emit_table_queries(table: TableDescriptor, dialect: Dialect) -> SourceWriter:
    """get() by id, all(), all_paginated() and update() of every non-id column."""
    writer = SourceWriter()
    writer.require("Executor", "exactly_one")
    id_field = table.id_field
    order = sql.order_by_id(table, dialect)

    writer.separate()
    writer.line("@classmethod")
    with writer.block(
        f"async def get(cls, executor: Executor, {id_field.name}: {id_field.semantic_type}) -> {table.type_name}:"
    ):
        sql.statement(writer, dialect, sql.select(table, dialect, where=id_field), [id_field.name], fetch=True)
        writer.line(f"return cls.from_row(exactly_one(rows, {literal(table.table_name)}))")

    writer.separate()
    writer.line("@classmethod")
    with writer.block(f"async def all(cls, executor: Executor) -> list[{table.type_name}]:"):
        sql.statement(writer, dialect, sql.select(table, dialect) + order, [], fetch=True)
        writer.line("return [cls.from_row(row) for row in rows]")

    paginated = (
        sql.select(table, dialect)
        + order
        + f" LIMIT {dialect.placeholder(1)} OFFSET {dialect.placeholder(2)}"
    )
    writer.separate()
    writer.line("@classmethod")
    with writer.block(
        f"async def all_paginated(cls, executor: Executor, offset: int, limit: int) -> list[{table.type_name}]:"
    ):
        sql.statement(writer, dialect, paginated, ["limit", "offset"], fetch=True)
        writer.line("return [cls.from_row(row) for row in rows]")

    fields = table.non_id_fields
    if fields:
        writer.separate()
        with writer.block("async def update(self, executor: Executor) -> None:"):
            values = [f"self.{f.name}" for f in fields] + [f"self.{id_field.name}"]
            sql.statement(writer, dialect, sql.update(table, dialect, fields), values, fetch=False)
    return writer
