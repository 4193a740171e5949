"""Lexer/tokenizer for mathparser expressions.

Converts expression strings into a list of tokens for the parser.

Token types:
- Literals: NUMBER
- Identifiers: IDENTIFIER (constant and function names)
- Operators: PLUS, MINUS, MULTIPLY, DIVIDE, REMAINDER, EXPONENT
- Punctuation: LPAREN, RPAREN, COMMA
- END_OF_EXPRESSION sentinel, always last
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator

from mathparser.errors import TokenizerError

logger = logging.getLogger(__name__)


class TokenType(Enum):
    """Types of tokens in the expression language."""

    END_OF_EXPRESSION = auto()

    COMMA = auto()       # ,

    NUMBER = auto()
    IDENTIFIER = auto()

    PLUS = auto()        # +
    MINUS = auto()       # -

    MULTIPLY = auto()    # *
    DIVIDE = auto()      # /
    REMAINDER = auto()   # %

    EXPONENT = auto()    # ^

    LPAREN = auto()      # (
    RPAREN = auto()      # )


@dataclass(frozen=True)
class Token:
    """A single token from the lexer.

    Attributes:
        type: The token type
        text: The exact matched substring (empty for END_OF_EXPRESSION)
        position: Character position in the source string
    """

    type: TokenType
    text: str
    position: int = 0

    def __str__(self) -> str:
        return f"{self.type.name} Token -> {self.text}"


IDENTIFIER_PATTERN = r"[a-zA-Z_]\w*"

# Priority order; no two rules share a leading character.
TOKEN_PATTERNS = [
    (r",", TokenType.COMMA),
    (r"\d+(\.\d+)?", TokenType.NUMBER),
    (IDENTIFIER_PATTERN, TokenType.IDENTIFIER),
    (r"\+", TokenType.PLUS),
    (r"-", TokenType.MINUS),
    (r"\*", TokenType.MULTIPLY),
    (r"/", TokenType.DIVIDE),
    (r"%", TokenType.REMAINDER),
    (r"\^", TokenType.EXPONENT),
    (r"\(", TokenType.LPAREN),
    (r"\)", TokenType.RPAREN),
]

_WHITESPACE = re.compile(r"\s+")
_COMPILED_PATTERNS = [
    (re.compile(pattern), token_type) for pattern, token_type in TOKEN_PATTERNS
]


class Lexer:
    """Tokenizer for the expression language.

    Usage:
        lexer = Lexer("2 * (pi + 1)")
        for token in lexer:
            print(token)
    """

    def __init__(self, source: str):
        self.source = source
        self.position = 0

    def __iter__(self) -> Iterator[Token]:
        """Iterate over all tokens in the source, ending with the sentinel."""
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.END_OF_EXPRESSION:
                break

    def next_token(self) -> Token:
        """Get the next token from the source."""
        self._skip_whitespace()

        if self.position >= len(self.source):
            return Token(TokenType.END_OF_EXPRESSION, "", len(self.source))

        for pattern, token_type in _COMPILED_PATTERNS:
            match = pattern.match(self.source, self.position)
            if match:
                start = self.position
                self.position = match.end()
                return Token(token_type, match.group(), start)

        raise TokenizerError(
            f"Unknown pattern encountered -> {self.source[self.position:]}",
            self.position,
        )

    def _skip_whitespace(self) -> None:
        match = _WHITESPACE.match(self.source, self.position)
        if match:
            self.position = match.end()

    def tokenize(self) -> list[Token]:
        """Tokenize the entire source and return list of tokens."""
        tokens = list(self)
        logger.debug("Tokenized %r into %d tokens", self.source, len(tokens))
        return tokens


def tokenize(source: str) -> list[Token]:
    """Convenience function to tokenize an expression string.

    Args:
        source: The expression string

    Returns:
        The tokens, terminated by exactly one END_OF_EXPRESSION token

    Raises:
        TokenizerError: If a prefix of the input matches no lexical rule
    """
    return Lexer(source).tokenize()


def is_identifier(name: str) -> bool:
    """Return True if name lexes as exactly one identifier token."""
    return re.fullmatch(IDENTIFIER_PATTERN, name) is not None
