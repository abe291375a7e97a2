"""Compiler pipeline: record definitions in, generated module source out."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ormgen.codegen.dialects import Dialect, get_dialect
from ormgen.codegen.unit import DEFAULT_RUNTIME_MODULE, render_unit
from ormgen.config.models import CodegenConfig
from ormgen.core.errors import SourceError
from ormgen.core.logging import clear_compilation_id, get_logger, set_compilation_id
from ormgen.model.builder import build_table, check_unit_names
from ormgen.model.descriptors import TableDescriptor
from ormgen.model.diagnostics import Diagnostics, ModelValidationError
from ormgen.model.parser import parse_record
from ormgen.model.source import load_records

log = get_logger("compiler")


@dataclass(frozen=True, slots=True)
class CompiledUnit:
    """Output of one record definition file."""

    source_name: str
    tables: tuple[TableDescriptor, ...]
    code: str


def resolve_tables(text: str, source_name: str, diagnostics: Diagnostics) -> list[TableDescriptor]:
    """Load, parse and validate every record in a definition document.

    Errors accumulate in diagnostics; tables are returned only for records
    that resolved cleanly.
    """
    tables: list[TableDescriptor] = []
    for raw in load_records(text, source_name, diagnostics):
        record = parse_record(raw, diagnostics)
        if record is None:
            continue
        table = build_table(record, diagnostics)
        if table is not None:
            tables.append(table)
    check_unit_names(tables, diagnostics)
    return tables


def compile_source(
    text: str,
    source_name: str,
    *,
    dialect: Dialect | str = "postgres",
    runtime_module: str = DEFAULT_RUNTIME_MODULE,
    header: bool = True,
) -> CompiledUnit:
    """Compile one record definition document.

    Raises:
        ModelValidationError: Carrying every diagnostic found in the document.
        ConfigError: If the dialect name is unknown.
    """
    if isinstance(dialect, str):
        dialect = get_dialect(dialect)

    set_compilation_id()
    try:
        diagnostics = Diagnostics()
        tables = resolve_tables(text, source_name, diagnostics)
        if diagnostics.has_errors:
            log.info("compile_failed", source=source_name, errors=len(diagnostics))
            diagnostics.raise_if_errors()

        code = render_unit(
            tables,
            dialect,
            source_name=Path(source_name).name,
            runtime_module=runtime_module,
            header=header,
        )
        log.info(
            "unit_emitted",
            source=source_name,
            dialect=dialect.name,
            records=[t.type_name for t in tables],
            lines=code.count("\n"),
        )
        return CompiledUnit(source_name=source_name, tables=tuple(tables), code=code)
    finally:
        clear_compilation_id()


def read_source(path: Path) -> str:
    """Read a record definition file as UTF-8.

    Raises:
        SourceError: If the file is missing or cannot be decoded.
    """
    if not path.is_file():
        raise SourceError.not_found(str(path))
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceError.unreadable(str(path), str(e)) from e


def compile_file(path: Path, config: CodegenConfig | None = None) -> CompiledUnit:
    """Compile a record definition file using codegen settings from config.

    Raises:
        SourceError: If the file is missing or cannot be decoded.
        ModelValidationError: If the definitions do not compile.
    """
    config = config or CodegenConfig()
    return compile_source(
        read_source(path),
        str(path),
        dialect=config.dialect,
        runtime_module=config.runtime_module,
        header=config.header,
    )


def check_source(text: str, source_name: str) -> Diagnostics:
    """Validate without emitting; the returned diagnostics may be empty."""
    diagnostics = Diagnostics()
    resolve_tables(text, source_name, diagnostics)
    return diagnostics


__all__ = [
    "CompiledUnit",
    "ModelValidationError",
    "check_source",
    "compile_file",
    "compile_source",
    "read_source",
    "resolve_tables",
]
