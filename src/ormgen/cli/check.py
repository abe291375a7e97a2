"""ormgen check command - validate record definitions without generating code."""

import json
from pathlib import Path

import click

from ormgen.cli.utils import get_console, print_diagnostics
from ormgen.compiler import check_source, read_source
from ormgen.core.errors import SourceError


@click.command()
@click.argument(
    "sources",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--json", "as_json", is_flag=True, help="Output diagnostics as JSON")
@click.pass_context
def check_command(ctx: click.Context, sources: tuple[Path, ...], as_json: bool) -> None:
    """Validate record definition SOURCES and report every model error."""
    console = get_console()
    report: dict[str, list[dict[str, object]]] = {}
    failed = False
    for source in sources:
        try:
            text = read_source(source)
        except SourceError as e:
            raise click.ClickException(e.message) from e
        diagnostics = check_source(text, str(source))
        report[str(source)] = [d.to_dict() for d in diagnostics.sorted()]
        if diagnostics.has_errors:
            failed = True
            if not as_json:
                print_diagnostics(console, diagnostics.sorted())
        elif not as_json:
            console.print(f"[green]✓[/green] {source}", highlight=False)

    if as_json:
        click.echo(json.dumps(report, indent=2))
    if failed:
        ctx.exit(1)
