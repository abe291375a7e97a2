"""CLI utilities."""

from pathlib import Path

import click
from rich.console import Console

from ormgen.model.diagnostics import Diagnostic


def get_console() -> Console:
    """Rich console on stderr; generated code owns stdout."""
    return Console(stderr=True)


def print_diagnostics(console: Console, diagnostics: list[Diagnostic]) -> None:
    for diagnostic in diagnostics:
        console.print(diagnostic.format(), style="red", markup=False, highlight=False, soft_wrap=True)


def output_path(source: Path, output: Path | None, *, single: bool) -> Path | None:
    """Where the module generated from source goes; None means stdout.

    A ``.py`` output is a file and only valid for a single source. Anything
    else is a directory receiving ``<source stem>.py``.
    """
    if output is None:
        return None
    if output.suffix == ".py":
        if not single:
            raise click.UsageError("--output ending in .py needs exactly one source; pass a directory instead")
        return output
    return output / f"{source.stem}.py"
