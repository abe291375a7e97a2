"""SQL text and statement-call snippets shared by the emitters."""

from __future__ import annotations

from ormgen.codegen.dialects import Dialect
from ormgen.codegen.writer import SourceWriter, literal
from ormgen.model.descriptors import FieldDescriptor, TableDescriptor


def column_list(table: TableDescriptor, dialect: Dialect) -> str:
    return ", ".join(dialect.quote(c) for c in table.columns)


def select(table: TableDescriptor, dialect: Dialect, where: FieldDescriptor | None = None) -> str:
    sql = f"SELECT {column_list(table, dialect)} FROM {dialect.quote(table.table_name)}"
    if where is not None:
        sql += f" WHERE {dialect.quote(where.column_name)} = {dialect.placeholder(1)}"
    return sql


def order_by_id(table: TableDescriptor, dialect: Dialect) -> str:
    return f" ORDER BY {dialect.quote(table.id_field.column_name)}"


def update(table: TableDescriptor, dialect: Dialect, fields: list[FieldDescriptor]) -> str:
    """UPDATE of the given columns keyed by id; id is the last parameter."""
    assignments = ", ".join(
        f"{dialect.quote(f.column_name)} = {dialect.placeholder(i)}" for i, f in enumerate(fields, start=1)
    )
    return (
        f"UPDATE {dialect.quote(table.table_name)} SET {assignments} "
        f"WHERE {dialect.quote(table.id_field.column_name)} = {dialect.placeholder(len(fields) + 1)}"
    )


def insert(table: TableDescriptor, dialect: Dialect) -> str:
    fields = table.insert_fields
    if not fields:
        sql = dialect.empty_insert(table.table_name)
    else:
        columns = ", ".join(dialect.quote(f.column_name) for f in fields)
        values = ", ".join(dialect.placeholders(len(fields)))
        sql = f"INSERT INTO {dialect.quote(table.table_name)} ({columns}) VALUES ({values})"
    if dialect.supports_returning:
        sql += f" RETURNING {dialect.quote(table.id_field.column_name)}"
    return sql


def delete(table: TableDescriptor, dialect: Dialect) -> str:
    return (
        f"DELETE FROM {dialect.quote(table.table_name)} "
        f"WHERE {dialect.quote(table.id_field.column_name)} = {dialect.placeholder(1)}"
    )


def statement(
    writer: SourceWriter,
    dialect: Dialect,
    sql: str,
    values: list[str],
    *,
    fetch: bool,
) -> None:
    """Bind values in order and run sql, leaving fetched rows in ``rows``."""
    writer.line("arguments = executor.arguments()")
    for value in values:
        writer.line(dialect.bind("arguments", value))
    if fetch:
        writer.line(f"rows = await executor.fetch_all({literal(sql)}, arguments)")
    else:
        writer.line(f"await executor.execute({literal(sql)}, arguments)")


def read_column(field: FieldDescriptor, row: str = "row") -> str:
    """Expression reading one field's column out of a row."""
    if field.read_type is not None:
        return f"{row}.try_get({literal(field.column_name)}, {field.read_type})"
    return f"{row}.try_get({literal(field.column_name)})"
