"""Parser/evaluator for mathparser expressions.

Consumes the token list produced by the lexer and computes the numeric
result directly, using top-down operator precedence (Pratt) parsing.

Binding powers (lowest to highest):
1. end of expression , )
2. identifier
3. number
4. + - (binary)
5. * / %
6. ^
7. + - (unary)
8. (

``+ - * / %`` are left associative. ``^`` is right associative, and a
prefix sign applies to a whole power: ``2^3^2 == 512``, ``-2^2 == -4``.
"""

import logging
from enum import IntEnum
from types import MappingProxyType
from typing import TYPE_CHECKING, Callable, Mapping

from mathparser import numeric
from mathparser.errors import EvaluationError
from mathparser.lexer import Token, TokenType, tokenize

if TYPE_CHECKING:
    from mathparser.functions import UserFunction

logger = logging.getLogger(__name__)


class BindingPower(IntEnum):
    """How tightly a token binds to the value on its left."""

    MINIMUM = 0
    IDENTIFIER = 1
    NUMBER = 2
    ADDITIVE = 3
    MULTIPLICATIVE = 4
    EXPONENTIAL = 5
    UNARY = 6
    PARENTHESIS = 7
    MAXIMUM = 8


BINDING_POWERS: Mapping[TokenType, BindingPower] = MappingProxyType({
    TokenType.END_OF_EXPRESSION: BindingPower.MINIMUM,
    TokenType.COMMA: BindingPower.MINIMUM,
    TokenType.IDENTIFIER: BindingPower.IDENTIFIER,
    TokenType.NUMBER: BindingPower.NUMBER,
    TokenType.PLUS: BindingPower.ADDITIVE,
    TokenType.MINUS: BindingPower.ADDITIVE,
    TokenType.MULTIPLY: BindingPower.MULTIPLICATIVE,
    TokenType.DIVIDE: BindingPower.MULTIPLICATIVE,
    TokenType.REMAINDER: BindingPower.MULTIPLICATIVE,
    TokenType.EXPONENT: BindingPower.EXPONENTIAL,
    TokenType.LPAREN: BindingPower.PARENTHESIS,
    TokenType.RPAREN: BindingPower.MINIMUM,
})

# Right-hand side of ^ and the operand of a prefix sign: anything that binds
# tighter than * / %, so a following ^ is absorbed.
POWER_OPERAND = BindingPower(BindingPower.EXPONENTIAL - 1)

_BINARY_OPERATORS: dict[TokenType, Callable[[float, float], float]] = {
    TokenType.PLUS: lambda left, right: left + right,
    TokenType.MINUS: lambda left, right: left - right,
    TokenType.MULTIPLY: lambda left, right: left * right,
    TokenType.DIVIDE: numeric.divide,
    TokenType.REMAINDER: numeric.remainder,
}


def binding_power(token: Token) -> BindingPower:
    """Return the binding power of a token.

    Raises:
        NotImplementedError: If the token type has no binding power
    """
    try:
        return BINDING_POWERS[token.type]
    except KeyError:
        raise NotImplementedError(
            f'Token binding power does not exist for token "{token}"'
        ) from None


class Parser:
    """Evaluates one expression against constant and function tables.

    Usage:
        parser = Parser("square(3) + pi", {"pi": 3.14159}, {"square": square})
        result = parser.parse()
    """

    def __init__(
        self,
        source: str,
        constants: Mapping[str, float] | None = None,
        functions: "Mapping[str, UserFunction] | None" = None,
    ):
        self.source = source
        self.constants = constants if constants is not None else {}
        self.functions = functions if functions is not None else {}
        self.tokens: list[Token] = []
        self.position = 0

        self._nud_handlers: dict[TokenType, Callable[[Token], float] | None] = {
            TokenType.END_OF_EXPRESSION: None,
            TokenType.COMMA: None,
            TokenType.NUMBER: self._parse_number,
            TokenType.IDENTIFIER: self._parse_identifier,
            TokenType.PLUS: self._parse_unary,
            TokenType.MINUS: self._parse_unary,
            TokenType.MULTIPLY: None,
            TokenType.DIVIDE: None,
            TokenType.REMAINDER: None,
            TokenType.EXPONENT: None,
            TokenType.LPAREN: self._parse_group,
            TokenType.RPAREN: None,
        }
        self._led_handlers: dict[TokenType, Callable[[float], float] | None] = {
            TokenType.END_OF_EXPRESSION: None,
            TokenType.COMMA: None,
            TokenType.NUMBER: None,
            TokenType.IDENTIFIER: None,
            TokenType.PLUS: self._parse_binary,
            TokenType.MINUS: self._parse_binary,
            TokenType.MULTIPLY: self._parse_binary,
            TokenType.DIVIDE: self._parse_binary,
            TokenType.REMAINDER: self._parse_binary,
            TokenType.EXPONENT: self._parse_exponent,
            TokenType.LPAREN: None,
            TokenType.RPAREN: None,
        }

    def parse(self) -> float:
        """Parse the expression and return its value."""
        if len(self.source) == 0:
            raise EvaluationError("Given expression is empty")

        self.tokens = tokenize(self.source)
        self.position = 0

        result = self._parse_expression()
        self._expect(TokenType.END_OF_EXPRESSION)

        logger.debug("Evaluated %r = %r", self.source, result)
        return result

    # -------------------------------------------------------------------------
    # Helper methods
    # -------------------------------------------------------------------------

    def _peek(self) -> Token:
        """Return the current token without consuming it."""
        if self.position >= len(self.tokens):
            raise EvaluationError(
                "Expected token to peek but all tokens have been used up"
            )
        return self.tokens[self.position]

    def _advance(self) -> Token:
        """Consume and return the current token."""
        if self.position >= len(self.tokens):
            raise EvaluationError(
                "Expected token to eat but all tokens have been used up"
            )
        token = self.tokens[self.position]
        self.position += 1
        return token

    def _expect(self, token_type: TokenType) -> Token:
        """Consume a token of the expected type, or raise error."""
        token = self._advance()
        if token.type != token_type:
            raise EvaluationError(
                f'Expected token type "{token_type.name}" but received '
                f'"{token.type.name}" at position {token.position}'
            )
        return token

    def _nud_handler(self, token: Token) -> Callable[[Token], float] | None:
        try:
            return self._nud_handlers[token.type]
        except KeyError:
            raise NotImplementedError(f'"{token}" does not have NUD handler') from None

    def _led_handler(self, token: Token) -> Callable[[float], float] | None:
        try:
            return self._led_handlers[token.type]
        except KeyError:
            raise NotImplementedError(f'"{token}" does not have LED handler') from None

    # -------------------------------------------------------------------------
    # Precedence climbing
    # -------------------------------------------------------------------------

    def _parse_expression(
        self, min_binding_power: BindingPower = BindingPower.MINIMUM
    ) -> float:
        """Parse a value, then fold in operators binding tighter than the minimum."""
        token = self._advance()
        nud = self._nud_handler(token)
        if nud is None:
            raise EvaluationError(
                f'Expected number or unary operator but received "{token}"'
            )

        left = nud(token)

        while binding_power(self._peek()) > min_binding_power:
            led = self._led_handler(self._peek())
            if led is None:
                raise EvaluationError(
                    f'"{self._peek().text}" is not a valid binary or exponent operator'
                )
            left = led(left)

        return left

    # -------------------------------------------------------------------------
    # Prefix (null denotation) handlers
    # -------------------------------------------------------------------------

    def _parse_number(self, token: Token) -> float:
        try:
            return float(token.text)
        except ValueError:
            raise EvaluationError(f'Invalid number "{token.text}"') from None

    def _parse_identifier(self, token: Token) -> float:
        """Parse an identifier as a function call or a constant."""
        if self._peek().type == TokenType.LPAREN:
            return self._parse_function_call(token)
        return self._parse_constant(token)

    def _parse_unary(self, token: Token) -> float:
        operand = self._parse_expression(POWER_OPERAND)
        if token.type == TokenType.MINUS:
            return -operand
        return operand

    def _parse_group(self, token: Token) -> float:
        value = self._parse_expression()
        self._expect(TokenType.RPAREN)
        return value

    def _parse_constant(self, token: Token) -> float:
        name = token.text
        if name not in self.constants:
            raise EvaluationError(f'Constant "{name}" does not exist')
        return float(self.constants[name])

    def _parse_function_call(self, token: Token) -> float:
        """Parse a function call (arguments in parentheses) and invoke it."""
        self._expect(TokenType.LPAREN)

        name = token.text
        if name not in self.functions:
            raise EvaluationError(f'Function "{name}" does not exist')

        arguments: list[float] = []

        if self._peek().type != TokenType.RPAREN:
            arguments.append(self._parse_expression())

            while self._peek().type == TokenType.COMMA:
                self._advance()
                arguments.append(self._parse_expression())

        self._expect(TokenType.RPAREN)

        logger.debug("Calling %s(%s)", name, ", ".join(map(repr, arguments)))
        return self.functions[name].call(arguments)

    # -------------------------------------------------------------------------
    # Infix (left denotation) handlers
    # -------------------------------------------------------------------------

    def _parse_binary(self, left: float) -> float:
        operator = self._advance()
        right = self._parse_expression(binding_power(operator))
        return _BINARY_OPERATORS[operator.type](left, right)

    def _parse_exponent(self, left: float) -> float:
        self._expect(TokenType.EXPONENT)
        return numeric.power(left, self._parse_expression(POWER_OPERAND))


def evaluate(
    expression: str,
    constants: Mapping[str, float] | None = None,
    functions: "Mapping[str, UserFunction] | None" = None,
) -> float:
    """Evaluate an expression string.

    This is the main entry point for expression evaluation.

    Args:
        expression: The expression string to evaluate
        constants: Constant names mapped to values
        functions: Function names mapped to UserFunction definitions

    Returns:
        The result as a float

    Raises:
        TokenizerError: If the expression contains unknown characters
        EvaluationError: If the expression is empty or malformed, or names
            an unknown constant or function

    Example:
        result = evaluate("2 * pi", {"pi": 3.14159})
        # result = 6.28318
    """
    return Parser(expression, constants, functions).parse()
