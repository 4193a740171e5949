"""Evaluation CLI commands: eval, repl and definitions."""

import logging
from pathlib import Path

import click

from mathparser.config import Settings, load_definitions
from mathparser.errors import MathParserError
from mathparser.functions import parse_definition
from mathparser.numeric import format_number
from mathparser.registry import Registry

logger = logging.getLogger(__name__)


_REGISTRY_OPTIONS = [
    click.option(
        "--definitions",
        "definitions_path",
        default=None,
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="YAML definitions file (default: MATHPARSER_DEFINITIONS).",
    ),
    click.option(
        "--no-defaults",
        is_flag=True,
        default=False,
        help="Do not install the built-in pi, square and add.",
    ),
    click.option(
        "--const",
        "constants",
        multiple=True,
        metavar="NAME=VALUE",
        help="Define a constant; VALUE may be an expression.",
    ),
    click.option(
        "--func",
        "functions",
        multiple=True,
        metavar="DEF",
        help="Define a function, e.g. 'hypot(a, b) = (a^2 + b^2)^0.5'.",
    ),
]


def registry_options(command):
    """Options shared by every command that builds a registry."""
    for option in reversed(_REGISTRY_OPTIONS):
        command = option(command)
    return command


def _build_registry(
    settings: Settings,
    definitions_path: Path | None,
    no_defaults: bool,
    constants: tuple[str, ...],
    functions: tuple[str, ...],
) -> Registry:
    """Build the session registry, exiting with an error message on failure."""
    registry = Registry() if no_defaults else Registry.with_defaults()
    path = definitions_path or settings.definitions_path

    try:
        if path is not None:
            load_definitions(path, registry)
        for text in constants:
            registry.define(text)
        for text in functions:
            name, function = parse_definition(text)
            registry.add_function(name, function)
    except MathParserError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)

    return registry


@click.command("eval")
@click.argument("expression")
@registry_options
@click.pass_obj
def eval_cmd(
    settings: Settings,
    expression: str,
    definitions_path: Path | None,
    no_defaults: bool,
    constants: tuple[str, ...],
    functions: tuple[str, ...],
):
    """Evaluate a single EXPRESSION and print the result."""
    registry = _build_registry(settings, definitions_path, no_defaults, constants, functions)

    try:
        result = registry.evaluate(expression)
    except (MathParserError, RecursionError) as e:
        click.echo(click.style(f"Error: {_describe(e)}", fg="red"), err=True)
        raise SystemExit(1)

    click.echo(format_number(result))


@click.command()
@registry_options
@click.pass_obj
def repl(
    settings: Settings,
    definitions_path: Path | None,
    no_defaults: bool,
    constants: tuple[str, ...],
    functions: tuple[str, ...],
):
    """Read expressions line by line and print their values.

    Lines containing '=' are definitions: 'name = expression' defines a
    constant and 'name(params) = body' a function. End of input exits.
    """
    registry = _build_registry(settings, definitions_path, no_defaults, constants, functions)
    stdin = click.get_text_stream("stdin")

    while True:
        click.echo(settings.prompt, nl=False)
        line = stdin.readline()

        if not line:
            click.echo()
            click.echo("Nothing to parse :(")
            return

        expression = line.rstrip("\r\n")
        if not expression.strip():
            continue

        try:
            if "=" in expression:
                name = registry.define(expression)
                click.echo(f"Defined {name}")
            else:
                result = registry.evaluate(expression)
                click.echo(f"{expression} = {format_number(result)}")
        except (MathParserError, RecursionError) as e:
            logger.debug("Failed to evaluate %r", expression, exc_info=True)
            click.echo(click.style("An error occurred", fg="red"))
            click.echo(_describe(e))

        click.echo()


@click.command()
@registry_options
@click.pass_obj
def definitions(
    settings: Settings,
    definitions_path: Path | None,
    no_defaults: bool,
    constants: tuple[str, ...],
    functions: tuple[str, ...],
):
    """List the constants and functions available to expressions."""
    registry = _build_registry(settings, definitions_path, no_defaults, constants, functions)

    lines = registry.describe()
    if not lines:
        click.echo("No definitions.")
        return

    click.echo(f"{len(lines)} definition(s):\n")
    for line in lines:
        click.echo(f"  {line}")


def _describe(error: BaseException) -> str:
    if isinstance(error, RecursionError):
        return "Maximum nesting depth exceeded"
    return str(error)
