"""Built-in definitions for mathparser.

Installed on every registry created with ``Registry.with_defaults()`` and by
the command line unless ``--no-defaults`` is given.
"""

import math

from mathparser.registry import Registry

DEFAULT_CONSTANTS = {
    "pi": math.pi,
}

DEFAULT_FUNCTIONS = {
    "square": (["x"], "x*x"),
    "add": (["x", "y"], "x + y"),
}


def register_defaults(registry: Registry) -> None:
    """Register the built-in constants and functions."""
    for name, value in DEFAULT_CONSTANTS.items():
        registry.define_constant(name, value)

    for name, (params, body) in DEFAULT_FUNCTIONS.items():
        registry.define_function(name, params, body)
