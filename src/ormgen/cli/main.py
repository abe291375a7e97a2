"""ormgen CLI - ormgen command."""

from pathlib import Path

import click

from ormgen import __version__
from ormgen.cli.check import check_command
from ormgen.cli.compile import compile_command
from ormgen.config.loader import load_config
from ormgen.core.errors import ConfigError
from ormgen.core.logging import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="ormgen")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Directory holding ormgen.yaml (default: current directory)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_dir: Path | None) -> None:
    """ormgen - compile annotated record definitions into database access code."""
    try:
        config = load_config(config_dir)
    except ConfigError as e:
        raise click.ClickException(e.message) from e
    logging_config = config.logging
    if verbose:
        logging_config = logging_config.model_copy(update={"level": "DEBUG"})
    configure_logging(config=logging_config)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = config


cli.add_command(compile_command, name="compile")
cli.add_command(check_command, name="check")


if __name__ == "__main__":
    cli()
