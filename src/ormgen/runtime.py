"""Driver-facing interface imported by generated modules.

Generated code never talks to a database library directly. It asks an
``Executor`` for an argument collector, binds values into it in column order,
and hands SQL plus arguments back to the executor. Rows come back as objects
with ``try_get``. Exceptions raised by the driver propagate unchanged; the
only errors raised here are the row-count errors of single-row lookups.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Arguments(Protocol):
    """Positional argument collector."""

    def add(self, value: Any) -> None: ...


@runtime_checkable
class Row(Protocol):
    """One result row, read by column name."""

    def try_get(self, column: str, type_: Any = None) -> Any:
        """Decode a column, as type_ when given; raise the driver's error on failure."""
        ...


class Executor(Protocol):
    """Connection, pool or transaction able to run statements."""

    def arguments(self) -> Arguments: ...

    async def execute(self, sql: str, arguments: Arguments) -> int:
        """Run a statement, returning the number of affected rows."""
        ...

    async def fetch_all(self, sql: str, arguments: Arguments) -> Sequence[Row]: ...


class ArgumentList:
    """List-backed Arguments for drivers that take a plain parameter sequence."""

    def __init__(self) -> None:
        self._values: list[Any] = []

    def add(self, value: Any) -> None:
        self._values.append(value)

    @property
    def values(self) -> tuple[Any, ...]:
        return tuple(self._values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ArgumentList({self._values!r})"


class ResultError(Exception):
    """Base error for result-shape mismatches in generated lookups."""


class NotFound(ResultError):
    """A lookup that must return one row matched none."""

    def __init__(self, table: str) -> None:
        super().__init__(f"No row found in {table}")
        self.table = table


class AmbiguousResult(ResultError):
    """A single-row lookup matched more than one row."""

    def __init__(self, table: str, count: int) -> None:
        super().__init__(f"Expected at most one row in {table}, got {count}")
        self.table = table
        self.count = count


def exactly_one(rows: Sequence[Row], table: str) -> Row:
    if not rows:
        raise NotFound(table)
    if len(rows) > 1:
        raise AmbiguousResult(table, len(rows))
    return rows[0]


def at_most_one(rows: Sequence[Row], table: str) -> Row | None:
    if len(rows) > 1:
        raise AmbiguousResult(table, len(rows))
    return rows[0] if rows else None
