"""Arithmetic expression evaluator.

This package provides:
- Lexer: Tokenizes expression strings
- Parser: Evaluates tokens with operator precedence (Pratt parsing)
- UserFunction: Functions defined as parameter names plus an expression body
- Registry: Long-lived constant and function tables
"""

from mathparser.builtins import register_defaults
from mathparser.config import Settings, load_definitions
from mathparser.errors import (
    ConfigError,
    EvaluationError,
    FunctionDefinitionError,
    MathParserError,
    TokenizerError,
)
from mathparser.functions import UserFunction, make_function, parse_definition
from mathparser.lexer import Lexer, Token, TokenType, tokenize
from mathparser.numeric import format_number
from mathparser.parser import BindingPower, Parser, evaluate
from mathparser.registry import Registry

__all__ = [
    # Errors
    "ConfigError",
    "EvaluationError",
    "FunctionDefinitionError",
    "MathParserError",
    "TokenizerError",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    "tokenize",
    # Parser
    "BindingPower",
    "Parser",
    "evaluate",
    "format_number",
    # Functions
    "UserFunction",
    "make_function",
    "parse_definition",
    # Definitions
    "Registry",
    "register_defaults",
    "Settings",
    "load_definitions",
]
