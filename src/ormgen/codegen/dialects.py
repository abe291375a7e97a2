"""SQL dialect strategies.

A dialect is selected once per compilation and consulted by every emitter for
the few things that differ between engines: how parameters are written, how
identifiers are quoted, whether INSERT ... RETURNING can hand back the new id,
and what to run afterwards when it cannot.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ormgen.core.errors import ConfigError


class Dialect:
    """Base strategy; subclasses override the class attributes and hooks."""

    name: str = ""
    supports_returning: bool = True
    quote_char: str = '"'
    bind_method: str = "add"

    def placeholder(self, position: int) -> str:
        """Parameter token for a 1-based position."""
        return "?"

    def placeholders(self, count: int, start: int = 1) -> list[str]:
        return [self.placeholder(position) for position in range(start, start + count)]

    def quote(self, identifier: str) -> str:
        q = self.quote_char
        return f"{q}{identifier.replace(q, q * 2)}{q}"

    def bind(self, collector: str, value: str) -> str:
        """Statement binding one value into an argument collector."""
        return f"{collector}.{self.bind_method}({value})"

    def empty_insert(self, table: str) -> str:
        return f"INSERT INTO {self.quote(table)} DEFAULT VALUES"

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class FollowUpIdDialect(Dialect, ABC):
    """Engine without INSERT ... RETURNING; the new id is read by a second query."""

    supports_returning = False

    @abstractmethod
    def last_insert_id_query(self, alias: str) -> str:
        """Query recovering the id of the row just inserted.

        It must run on the same connection as the insert.
        """


class PostgresDialect(Dialect):
    name = "postgres"

    def placeholder(self, position: int) -> str:
        return f"${position}"


class MySQLDialect(FollowUpIdDialect):
    name = "mysql"
    quote_char = "`"

    def empty_insert(self, table: str) -> str:
        return f"INSERT INTO {self.quote(table)} () VALUES ()"

    def last_insert_id_query(self, alias: str) -> str:
        return f"SELECT LAST_INSERT_ID() AS {self.quote(alias)}"


class SQLiteDialect(FollowUpIdDialect):
    name = "sqlite"

    def last_insert_id_query(self, alias: str) -> str:
        return f"SELECT last_insert_rowid() AS {self.quote(alias)}"


_DIALECTS: dict[str, Dialect] = {
    d.name: d for d in (PostgresDialect(), MySQLDialect(), SQLiteDialect())
}


def available_dialects() -> list[str]:
    return sorted(_DIALECTS)


def get_dialect(name: str) -> Dialect:
    """Look up a dialect by name (case-insensitive).

    Raises:
        ConfigError: If no dialect of that name is compiled in.
    """
    try:
        return _DIALECTS[name.lower()]
    except KeyError:
        raise ConfigError.unknown_dialect(name, available_dialects()) from None
