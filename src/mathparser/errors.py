"""Exception types raised by mathparser."""


class MathParserError(Exception):
    """Base class for every error raised by mathparser."""


class TokenizerError(MathParserError):
    """No lexical rule matches the remaining input."""

    def __init__(self, message: str, position: int):
        self.position = position
        super().__init__(f"{message} at position {position}")


class EvaluationError(MathParserError):
    """Error while parsing or evaluating an expression."""


class FunctionDefinitionError(MathParserError):
    """Invalid user function definition, or a call with the wrong arity."""


class ConfigError(MathParserError):
    """Invalid definitions file or settings."""
