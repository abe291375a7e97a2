"""Behaviour of generated modules, run against a recording executor.

Each test compiles the users table, executes the module and drives the
generated operations the way application code would.
"""

from __future__ import annotations

import datetime
import types
from collections.abc import Callable
from decimal import Decimal

import pytest

from ormgen.compiler import compile_source
from ormgen.runtime import AmbiguousResult, NotFound
from tests.codegen.fakes import FakeExecutor, FakeRow, user_row

UsersModule = Callable[[str], types.ModuleType]

USER_COLUMNS = '"id", "first_name", "last_name", "email", "last_login"'


class TestRowMapping:
    def test_bind_then_from_row_round_trip(self, users_module: UsersModule) -> None:
        """Binding a record and reading it back from a row of the same columns is lossless."""
        module = users_module("postgres")
        user = module.User(
            user_id=4,
            first_name="Grace",
            last_name="Hopper",
            email="grace@example.com",
            last_login=datetime.datetime(2024, 1, 1),
        )
        executor = FakeExecutor()
        arguments = executor.arguments()

        user.bind_arguments(arguments)
        row = FakeRow(**dict(zip(module.User.columns(), arguments.values, strict=True)))

        assert module.User.from_row(row) == user

    def test_table_metadata(self, users_module: UsersModule) -> None:
        module = users_module("sqlite")

        assert module.User.table() == "users"
        assert module.User.columns() == ["id", "first_name", "last_name", "email", "last_login"]

    def test_custom_type_override_applied(self, load_module: Callable[[str], types.ModuleType]) -> None:
        code = compile_source(
            "records:\n  - name: Product\n    table_name: products\n"
            "    imports: ['from decimal import Decimal']\n    fields:\n"
            "      - {name: id, type: int, id: true}\n"
            "      - {name: price, type: Decimal, custom_type: Decimal}\n",
            "products.yaml",
        ).code
        module = load_module(code)

        product = module.Product.from_row(FakeRow(id=1, price="1.50"))

        assert product.price == Decimal("1.50")


class TestLookups:
    @pytest.mark.asyncio
    async def test_get_by_id(self, users_module: UsersModule) -> None:
        module = users_module("postgres")
        executor = FakeExecutor([user_row(user_id=3)])

        user = await module.User.get(executor, 3)

        assert user.user_id == 3
        assert executor.calls == [("fetch_all", f'SELECT {USER_COLUMNS} FROM "users" WHERE "id" = $1', (3,))]

    @pytest.mark.asyncio
    async def test_get_missing_row(self, users_module: UsersModule) -> None:
        module = users_module("postgres")

        with pytest.raises(NotFound, match="users"):
            await module.User.get(FakeExecutor([]), 99)

    @pytest.mark.asyncio
    async def test_get_optional_absent(self, users_module: UsersModule) -> None:
        module = users_module("postgres")

        assert await module.User.get_by_email(FakeExecutor([]), "nobody@example.com") is None

    @pytest.mark.asyncio
    async def test_get_optional_present(self, users_module: UsersModule) -> None:
        module = users_module("mysql")
        executor = FakeExecutor([user_row(email="ada@example.com")])

        user = await module.User.get_by_email(executor, "ada@example.com")

        assert user is not None
        assert user.email == "ada@example.com"
        assert executor.calls[0][1].endswith("WHERE `email` = ?")

    @pytest.mark.asyncio
    async def test_get_optional_ambiguous(self, users_module: UsersModule) -> None:
        """Two matching rows for a single-row lookup is an error, not the first row."""
        module = users_module("postgres")
        executor = FakeExecutor([user_row(user_id=1), user_row(user_id=2)])

        with pytest.raises(AmbiguousResult) as exc_info:
            await module.User.get_by_email(executor, "ada@example.com")

        assert exc_info.value.count == 2

    @pytest.mark.asyncio
    async def test_all_and_paginated(self, users_module: UsersModule) -> None:
        module = users_module("sqlite")
        executor = FakeExecutor([user_row(1), user_row(2)], [user_row(3)])

        everyone = await module.User.all(executor)
        page = await module.User.all_paginated(executor, offset=10, limit=5)

        assert [u.user_id for u in everyone] == [1, 2]
        assert [u.user_id for u in page] == [3]
        assert executor.calls[0][1].endswith('ORDER BY "id"')
        assert executor.calls[1][1].endswith('ORDER BY "id" LIMIT ? OFFSET ?')
        assert executor.calls[1][2] == (5, 10)


ITEMS_YAML = """\
records:
  - name: Item
    table_name: items
    fields:
      - {name: id, type: int, id: true}
      - {name: sku, type: str, get_one: true}
      - {name: owner, type: int, get_many: true}
"""


class TestFieldLookups:
    """Required and list lookups generated from field accessors."""

    @pytest.fixture
    def items(self, load_module: Callable[[str], types.ModuleType]) -> types.ModuleType:
        return load_module(compile_source(ITEMS_YAML, "items.yaml").code)

    @pytest.mark.asyncio
    async def test_required_lookup_finds_row(self, items: types.ModuleType) -> None:
        executor = FakeExecutor([FakeRow(id=5, sku="A-1", owner=2)])

        item = await items.Item.get_by_sku(executor, "A-1")

        assert item == items.Item(id=5, sku="A-1", owner=2)
        assert executor.calls == [("fetch_all", 'SELECT "id", "sku", "owner" FROM "items" WHERE "sku" = $1', ("A-1",))]

    @pytest.mark.asyncio
    async def test_required_lookup_without_rows(self, items: types.ModuleType) -> None:
        with pytest.raises(NotFound, match="items"):
            await items.Item.get_by_sku(FakeExecutor([]), "missing")

    @pytest.mark.asyncio
    async def test_required_lookup_with_two_rows(self, items: types.ModuleType) -> None:
        executor = FakeExecutor([FakeRow(id=1, sku="A", owner=1), FakeRow(id=2, sku="A", owner=1)])

        with pytest.raises(AmbiguousResult):
            await items.Item.get_by_sku(executor, "A")

    @pytest.mark.asyncio
    async def test_list_lookup_without_rows(self, items: types.ModuleType) -> None:
        assert await items.Item.get_by_owner(FakeExecutor([]), 9) == []

    @pytest.mark.asyncio
    async def test_list_lookup_is_ordered_by_id(self, items: types.ModuleType) -> None:
        """Rows come back in id order and keep that order."""
        executor = FakeExecutor([FakeRow(id=1, sku="A", owner=7), FakeRow(id=2, sku="B", owner=7)])

        found = await items.Item.get_by_owner(executor, 7)

        assert [item.id for item in found] == [1, 2]
        assert [item.sku for item in found] == ["A", "B"]
        assert executor.calls[0][1].endswith('WHERE "owner" = $1 ORDER BY "id"')
        assert executor.calls[0][2] == (7,)


class TestInsert:
    @pytest.mark.asyncio
    async def test_insert_with_returning(self, users_module: UsersModule) -> None:
        """Postgres reads the new id from RETURNING, then fetches the full row."""
        module = users_module("postgres")
        executor = FakeExecutor([FakeRow(id=7)], [user_row(user_id=7)])
        new_user = module.InsertUser(first_name="Ada", last_name="Lovelace", email="ada@example.com")

        user = await new_user.insert(executor)

        assert user.user_id == 7
        assert user.last_login is None
        assert executor.calls[0] == (
            "fetch_all",
            'INSERT INTO "users" ("first_name", "last_name", "email") VALUES ($1, $2, $3) RETURNING "id"',
            ("Ada", "Lovelace", "ada@example.com"),
        )
        assert executor.calls[1][2] == (7,)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("dialect", "follow_up"),
        [
            ("sqlite", 'SELECT last_insert_rowid() AS "id"'),
            ("mysql", "SELECT LAST_INSERT_ID() AS `id`"),
        ],
    )
    async def test_insert_with_follow_up_query(self, users_module: UsersModule, dialect: str, follow_up: str) -> None:
        module = users_module(dialect)
        executor = FakeExecutor([FakeRow(id=8)])
        new_user = module.InsertUser(first_name="Ada", last_name="Lovelace", email="ada@example.com")

        assert await new_user.insert_id(executor) == 8
        assert [call[0] for call in executor.calls] == ["execute", "fetch_all"]
        assert executor.calls[1] == ("fetch_all", follow_up, ())


class TestUpdates:
    @pytest.mark.asyncio
    async def test_update_writes_every_non_id_column(self, users_module: UsersModule) -> None:
        module = users_module("postgres")
        user = module.User.from_row(user_row(user_id=5))
        executor = FakeExecutor()

        await user.update(executor)

        kind, sql, values = executor.calls[0]
        assert kind == "execute"
        assert sql.endswith('WHERE "id" = $5')
        assert values == ("Ada", "Lovelace", "ada@example.com", None, 5)

    @pytest.mark.asyncio
    async def test_setter_updates_one_column(self, users_module: UsersModule) -> None:
        module = users_module("postgres")
        user = module.User.from_row(user_row(user_id=5))
        when = datetime.datetime(2024, 5, 1, 12, 0)
        executor = FakeExecutor([user_row(user_id=5, last_login=when)])

        updated = await user.set_last_login(executor, when)

        assert updated.last_login == when
        assert executor.calls[0] == ("execute", 'UPDATE "users" SET "last_login" = $1 WHERE "id" = $2', (when, 5))

    @pytest.mark.asyncio
    async def test_patch(self, users_module: UsersModule) -> None:
        module = users_module("sqlite")
        user = module.User.from_row(user_row(user_id=2))
        executor = FakeExecutor([FakeRow(id=2, first_name="A", last_name="B", email="ada@example.com", last_login=None)])

        patched = await user.patch(executor, module.UpdateUserName(first_name="A", last_name="B"))

        assert (patched.first_name, patched.last_name) == ("A", "B")
        assert executor.calls[0] == (
            "execute",
            'UPDATE "users" SET "first_name" = ?, "last_name" = ? WHERE "id" = ?',
            ("A", "B", 2),
        )

    @pytest.mark.asyncio
    async def test_delete(self, users_module: UsersModule) -> None:
        module = users_module("postgres")
        user = module.User.from_row(user_row(user_id=6))
        executor = FakeExecutor()

        await user.delete(executor)

        assert executor.calls == [("execute", 'DELETE FROM "users" WHERE "id" = $1', (6,))]
