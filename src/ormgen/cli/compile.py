"""ormgen compile command - generate database access modules."""

from pathlib import Path

import click
from pydantic import ValidationError

from ormgen.cli.utils import get_console, output_path, print_diagnostics
from ormgen.codegen.dialects import available_dialects
from ormgen.compiler import compile_file
from ormgen.config.models import CodegenConfig, OrmgenConfig
from ormgen.core.errors import ConfigError, SourceError
from ormgen.core.logging import get_logger
from ormgen.model.diagnostics import ModelValidationError

log = get_logger("cli.compile")


@click.command()
@click.argument(
    "sources",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-d",
    "--dialect",
    type=click.Choice(available_dialects(), case_sensitive=False),
    default=None,
    help="Target SQL dialect (default from config: postgres)",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    default=None,
    help="Output .py file (single source) or directory. Default: stdout",
)
@click.option("--runtime-module", default=None, help="Module generated code imports the driver protocols from")
@click.option("--no-header", is_flag=True, help="Omit the generated-file banner")
@click.pass_context
def compile_command(
    ctx: click.Context,
    sources: tuple[Path, ...],
    dialect: str | None,
    output: Path | None,
    runtime_module: str | None,
    no_header: bool,
) -> None:
    """Compile record definition SOURCES into Python modules.

    Every source is compiled even if an earlier one fails; all model errors
    are reported and the exit status is 1 if any source failed.
    """
    config: OrmgenConfig = ctx.obj["config"]
    updates: dict[str, object] = {}
    if dialect is not None:
        updates["dialect"] = dialect.lower()
    if runtime_module is not None:
        updates["runtime_module"] = runtime_module
    if no_header:
        updates["header"] = False
    try:
        codegen = CodegenConfig.model_validate({**config.codegen.model_dump(), **updates})
    except ValidationError as e:
        raise click.BadParameter(e.errors()[0]["msg"]) from e

    console = get_console()
    failed = 0
    for source in sources:
        target = output_path(source, output, single=len(sources) == 1)
        try:
            unit = compile_file(source, codegen)
        except ModelValidationError as e:
            failed += 1
            print_diagnostics(console, e.diagnostics)
            continue
        except (ConfigError, SourceError) as e:
            raise click.ClickException(e.message) from e

        if target is None:
            click.echo(unit.code, nl=False)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(unit.code, encoding="utf-8")
        log.debug("unit_written", source=str(source), target=str(target))
        console.print(f"[green]✓[/green] {source} -> {target}", highlight=False)

    if failed:
        console.print(f"[red]✗[/red] {failed} of {len(sources)} sources failed", highlight=False)
        ctx.exit(1)
