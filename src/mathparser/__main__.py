"""Run the mathparser CLI.

Usage:
    python -m mathparser repl
    python -m mathparser eval "2 * pi"
"""

from mathparser.cli.main import cli

if __name__ == "__main__":
    cli(prog_name="mathparser")
