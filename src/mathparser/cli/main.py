"""mathparser CLI entry point."""

import logging

import click

from mathparser.config import Settings


@click.group()
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (default: MATHPARSER_LOG_LEVEL or WARNING).",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None):
    """Evaluate arithmetic expressions."""
    settings = Settings.from_env()
    if log_level:
        settings.log_level = log_level.upper()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = settings


# Register subcommands
from mathparser.cli.eval_cmd import definitions, eval_cmd, repl  # noqa: E402

cli.add_command(eval_cmd)
cli.add_command(repl)
cli.add_command(definitions)
