"""Code generation: dialect strategies, emitters and unit assembly."""

from ormgen.codegen.dialects import Dialect, available_dialects, get_dialect
from ormgen.codegen.unit import render_table, render_unit

__all__ = ["Dialect", "available_dialects", "get_dialect", "render_table", "render_unit"]
