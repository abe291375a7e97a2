"""Accessor emitter - query-by-field and update-one-field operations."""

from __future__ import annotations

from ormgen.codegen import sql
from ormgen.codegen.dialects import Dialect
from ormgen.codegen.writer import SourceWriter, literal
from ormgen.model.descriptors import AccessorDirective, AccessorKind, TableDescriptor


def emit_accessors(table: TableDescriptor, dialect: Dialect) -> SourceWriter:
    writer = SourceWriter()
    for directive in table.accessors:
        writer.separate()
        if directive.kind is AccessorKind.SET:
            _emit_setter(writer, table, dialect, directive)
        else:
            _emit_getter(writer, table, dialect, directive)
    return writer


def _emit_getter(
    writer: SourceWriter,
    table: TableDescriptor,
    dialect: Dialect,
    directive: AccessorDirective,
) -> None:
    field = table.field(directive.field_name)
    name = literal(table.table_name)
    query = sql.select(table, dialect, where=field)
    if directive.kind is AccessorKind.GET_ONE:
        returns = table.type_name
    elif directive.kind is AccessorKind.GET_OPTIONAL:
        returns = f"{table.type_name} | None"
    else:
        returns = f"list[{table.type_name}]"
        query += sql.order_by_id(table, dialect)

    writer.require("Executor")
    writer.line("@classmethod")
    signature = (
        f"async def {directive.generated_name}(cls, executor: Executor, "
        f"{field.name}: {directive.argument_type}) -> {returns}:"
    )
    with writer.block(signature):
        sql.statement(writer, dialect, query, [field.name], fetch=True)
        if directive.kind is AccessorKind.GET_ONE:
            writer.require("exactly_one")
            writer.line(f"return cls.from_row(exactly_one(rows, {name}))")
        elif directive.kind is AccessorKind.GET_OPTIONAL:
            writer.require("at_most_one")
            writer.line(f"row = at_most_one(rows, {name})")
            writer.line("return None if row is None else cls.from_row(row)")
        else:
            writer.line("return [cls.from_row(row) for row in rows]")


def _emit_setter(
    writer: SourceWriter,
    table: TableDescriptor,
    dialect: Dialect,
    directive: AccessorDirective,
) -> None:
    """Update exactly one column keyed by id, then read the row back."""
    field = table.field(directive.field_name)
    id_name = table.id_field.name
    writer.require("Executor")
    signature = (
        f"async def {directive.generated_name}(self, executor: Executor, "
        f"{field.name}: {directive.argument_type}) -> {table.type_name}:"
    )
    with writer.block(signature):
        query = sql.update(table, dialect, [field])
        sql.statement(writer, dialect, query, [field.name, f"self.{id_name}"], fetch=False)
        # The id itself may have changed.
        key = field.name if field.is_id else f"self.{id_name}"
        writer.line(f"return await self.get(executor, {key})")
