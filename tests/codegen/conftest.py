"""Test fixtures for the codegen package."""

from __future__ import annotations

import itertools
import sys
import types
from collections.abc import Callable

import pytest

from ormgen.compiler import compile_source

_module_ids = itertools.count()


@pytest.fixture
def load_module(monkeypatch: pytest.MonkeyPatch) -> Callable[[str], types.ModuleType]:
    """Execute generated source as a registered module.

    dataclasses resolves string annotations through sys.modules, so the
    module must be importable by name while its body runs.
    """

    def _load(code: str) -> types.ModuleType:
        name = f"ormgen_generated_{next(_module_ids)}"
        module = types.ModuleType(name)
        monkeypatch.setitem(sys.modules, name, module)
        exec(compile(code, f"<{name}>", "exec"), module.__dict__)
        return module

    return _load


@pytest.fixture
def users_module(
    users_yaml: str,
    load_module: Callable[[str], types.ModuleType],
) -> Callable[[str], types.ModuleType]:
    """Compile and load the users table for a dialect."""

    def _users(dialect: str = "postgres") -> types.ModuleType:
        return load_module(compile_source(users_yaml, "users.yaml", dialect=dialect).code)

    return _users
