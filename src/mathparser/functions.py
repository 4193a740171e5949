"""User-defined functions for mathparser expressions.

A function is a list of parameter names plus an expression body, e.g.
``hypot(a, b) = (a^2 + b^2)^0.5``. Calling it evaluates the body in a fresh
evaluation whose only constants are the bound parameters.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Sequence

from mathparser.errors import FunctionDefinitionError
from mathparser.lexer import IDENTIFIER_PATTERN
from mathparser.parser import evaluate

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(IDENTIFIER_PATTERN)

# name(p1, p2, ...) = body
_DEFINITION = re.compile(
    rf"^\s*(?P<name>{IDENTIFIER_PATTERN})\s*\((?P<params>[^)]*)\)\s*=(?P<body>.*)$",
    re.DOTALL,
)


def validate_identifier(name: str) -> None:
    """Raise FunctionDefinitionError unless name is exactly one identifier."""
    match = _IDENTIFIER.match(name)
    matched = match.group() if match else ""

    if len(name) == 0:
        raise FunctionDefinitionError("Identifier is empty")
    if len(matched) != len(name):
        raise FunctionDefinitionError(
            f"Invalid identifier character {name[len(matched)]} encountered"
        )


@dataclass(frozen=True)
class UserFunction:
    """A named-parameter function with an expression body.

    Attributes:
        params: Parameter names, in call order
        body: Expression evaluated with the parameters bound as constants
    """

    params: tuple[str, ...]
    body: str

    def __init__(self, params: Iterable[str], body: str):
        params = tuple(params)

        if len(set(params)) != len(params):
            raise FunctionDefinitionError("Function arguments have repeating identifiers")

        for name in params:
            validate_identifier(name)

            # Substring check only; "x" counts as used in "max(1, 2)".
            if name not in body:
                raise FunctionDefinitionError(
                    f'Argument "{name}" never used in function body'
                )

        object.__setattr__(self, "params", params)
        object.__setattr__(self, "body", body)

    @property
    def arity(self) -> int:
        return len(self.params)

    def call(self, args: Sequence[float]) -> float:
        """Evaluate the body with args bound to the parameters.

        Raises:
            FunctionDefinitionError: If the number of args does not match
        """
        if len(args) != len(self.params):
            raise FunctionDefinitionError(
                f"Expected {len(self.params)} arguments for function but got {len(args)}"
            )

        constants = {name: float(value) for name, value in zip(self.params, args)}
        logger.debug("Evaluating %r with %s", self.body, constants)
        return evaluate(self.body, constants, {})

    def __str__(self) -> str:
        return f"({', '.join(self.params)}) = {self.body.strip()}"


def make_function(params: Iterable[str], body: str) -> UserFunction:
    """Build a UserFunction, validating its parameter list.

    Args:
        params: Distinct identifier names, each used in the body
        body: The expression evaluated when the function is called

    Raises:
        FunctionDefinitionError: On repeated, malformed or unused parameters
    """
    return UserFunction(params, body)


def is_function_definition(text: str) -> bool:
    """Return True if text has the shape ``name(params) = body``."""
    return _DEFINITION.match(text) is not None


def parse_definition(text: str) -> tuple[str, UserFunction]:
    """Parse ``name(p1, p2) = body`` into a name and a UserFunction.

    Example:
        name, func = parse_definition("add(x, y) = x + y")
        # name = "add", func.call([1, 2]) = 3.0
    """
    match = _DEFINITION.match(text)
    if match is None:
        raise FunctionDefinitionError(
            f'Invalid function definition "{text}", expected name(params) = body'
        )

    params_text = match.group("params").strip()
    params = [p.strip() for p in params_text.split(",")] if params_text else []
    body = match.group("body").strip()

    if not body:
        raise FunctionDefinitionError(f'Function "{match.group("name")}" has an empty body')

    return match.group("name"), UserFunction(params, body)
