"""Registry of constants and functions for mathparser expressions.

A Registry owns one long-lived constant table and one function table and
evaluates expressions against them. Each evaluation sees read-only views,
so nothing an expression does can change the tables.

Example:
    registry = Registry.with_defaults()
    registry.define("hypot(a, b) = (a^2 + b^2)^0.5")
    registry.define("g = 9.81")
    registry.evaluate("hypot(3, 4) * g")  # 49.05
"""

import logging
import re
from types import MappingProxyType
from typing import Iterable, Mapping

from mathparser.errors import FunctionDefinitionError
from mathparser.functions import (
    UserFunction,
    is_function_definition,
    parse_definition,
    validate_identifier,
)
from mathparser.lexer import IDENTIFIER_PATTERN
from mathparser.parser import evaluate

logger = logging.getLogger(__name__)

# name = expression
_CONSTANT_DEFINITION = re.compile(
    rf"^\s*(?P<name>{IDENTIFIER_PATTERN})\s*=(?P<expression>.*)$", re.DOTALL
)


class Registry:
    """Constant and function tables shared across evaluations."""

    def __init__(
        self,
        constants: Mapping[str, float] | None = None,
        functions: Mapping[str, UserFunction] | None = None,
    ):
        self._constants: dict[str, float] = {}
        self._functions: dict[str, UserFunction] = {}

        for name, value in (constants or {}).items():
            self.define_constant(name, value)
        for name, function in (functions or {}).items():
            self.add_function(name, function)

    @classmethod
    def with_defaults(cls) -> "Registry":
        """Create a registry holding the built-in definitions."""
        from mathparser.builtins import register_defaults

        registry = cls()
        register_defaults(registry)
        return registry

    @property
    def constants(self) -> Mapping[str, float]:
        return MappingProxyType(self._constants)

    @property
    def functions(self) -> Mapping[str, UserFunction]:
        return MappingProxyType(self._functions)

    # -------------------------------------------------------------------------
    # Definitions
    # -------------------------------------------------------------------------

    def define_constant(self, name: str, value: float) -> None:
        """Register a constant, replacing any existing one with that name."""
        validate_identifier(name)
        self._constants[name] = float(value)
        logger.debug("Defined constant %s = %r", name, self._constants[name])

    def define_function(self, name: str, params: Iterable[str], body: str) -> UserFunction:
        """Build and register a function from its parameters and body."""
        function = UserFunction(params, body)
        self.add_function(name, function)
        return function

    def add_function(self, name: str, function: UserFunction) -> None:
        """Register an already constructed function."""
        validate_identifier(name)
        self._functions[name] = function
        logger.debug("Defined function %s%s", name, function)

    def define(self, text: str) -> str:
        """Register a definition written as text.

        Accepts ``name(p1, p2) = body`` for functions and ``name = expression``
        for constants. The constant's expression is evaluated once, now.

        Returns:
            The defined name
        """
        if is_function_definition(text):
            name, function = parse_definition(text)
            self.add_function(name, function)
            return name

        match = _CONSTANT_DEFINITION.match(text)
        if match is None:
            raise FunctionDefinitionError(
                f'Invalid definition "{text}", expected name = expression '
                "or name(params) = body"
            )

        name = match.group("name")
        self.define_constant(name, self.evaluate(match.group("expression").strip()))
        return name

    def remove(self, name: str) -> None:
        """Remove a constant or function.

        Raises:
            KeyError: If nothing is registered under name
        """
        if name in self._constants:
            del self._constants[name]
        elif name in self._functions:
            del self._functions[name]
        else:
            raise KeyError(name)

    def __contains__(self, name: object) -> bool:
        return name in self._constants or name in self._functions

    def names(self) -> list[str]:
        """All registered names, sorted."""
        return sorted(set(self._constants) | set(self._functions))

    def describe(self) -> list[str]:
        """Printable lines for every definition, constants first."""
        lines = [f"{name} = {self._constants[name]!r}" for name in sorted(self._constants)]
        lines.extend(
            f"{name}{self._functions[name]}" for name in sorted(self._functions)
        )
        return lines

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def evaluate(self, expression: str) -> float:
        """Evaluate an expression against this registry's tables."""
        return evaluate(expression, self.constants, self.functions)
