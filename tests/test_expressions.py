"""Tests for the mathparser expression engine.

Tests cover:
- Lexer: Tokenization of expression strings
- Parser: Precedence, associativity and error reporting
- Numeric: IEEE results for division, remainder and power
- UserFunction: Definition validation and calls
"""

import math

import pytest
from dataclasses import FrozenInstanceError

from mathparser import (
    BindingPower,
    EvaluationError,
    FunctionDefinitionError,
    Lexer,
    Parser,
    Token,
    TokenizerError,
    TokenType,
    UserFunction,
    evaluate,
    make_function,
    parse_definition,
    tokenize,
)
from mathparser.numeric import divide, format_number, power, remainder
from mathparser.parser import BINDING_POWERS, binding_power


@pytest.fixture
def functions():
    return {
        "square": make_function(["x"], "x*x"),
        "add": make_function(["x", "y"], "x + y"),
        "answer": make_function([], "42"),
    }


# =============================================================================
# Lexer Tests
# =============================================================================


class TestLexer:
    """Tests for the expression lexer."""

    def test_tokenize_expression_with_positions(self):
        tokens = tokenize("2 * (pi + 1)")

        assert tokens == [
            Token(TokenType.NUMBER, "2", 0),
            Token(TokenType.MULTIPLY, "*", 2),
            Token(TokenType.LPAREN, "(", 4),
            Token(TokenType.IDENTIFIER, "pi", 5),
            Token(TokenType.PLUS, "+", 8),
            Token(TokenType.NUMBER, "1", 10),
            Token(TokenType.RPAREN, ")", 11),
            Token(TokenType.END_OF_EXPRESSION, "", 12),
        ]

    def test_tokenize_numbers(self):
        tokens = tokenize("42 3.14 007")

        assert [t.text for t in tokens[:-1]] == ["42", "3.14", "007"]
        assert all(t.type == TokenType.NUMBER for t in tokens[:-1])

    def test_tokenize_identifiers(self):
        tokens = tokenize("pi _private var_1 X")

        assert [t.text for t in tokens[:-1]] == ["pi", "_private", "var_1", "X"]
        assert all(t.type == TokenType.IDENTIFIER for t in tokens[:-1])

    def test_number_followed_by_identifier(self):
        tokens = tokenize("2pi")

        assert [t.type for t in tokens] == [
            TokenType.NUMBER,
            TokenType.IDENTIFIER,
            TokenType.END_OF_EXPRESSION,
        ]

    def test_tokenize_operators_and_punctuation(self):
        tokens = tokenize("+ - * / % ^ ( ) ,")

        types = [t.type for t in tokens[:-1]]
        assert types == [
            TokenType.PLUS,
            TokenType.MINUS,
            TokenType.MULTIPLY,
            TokenType.DIVIDE,
            TokenType.REMAINDER,
            TokenType.EXPONENT,
            TokenType.LPAREN,
            TokenType.RPAREN,
            TokenType.COMMA,
        ]

    def test_stream_ends_with_single_sentinel(self):
        tokens = tokenize("1 + 2   ")

        assert tokens[-1].type == TokenType.END_OF_EXPRESSION
        assert tokens[-1].text == ""
        assert [t.type for t in tokens].count(TokenType.END_OF_EXPRESSION) == 1

    def test_empty_and_blank_source_yield_only_sentinel(self):
        assert tokenize("") == [Token(TokenType.END_OF_EXPRESSION, "", 0)]
        assert tokenize(" \t\n") == [Token(TokenType.END_OF_EXPRESSION, "", 3)]

    def test_lexer_is_iterable(self):
        types = [t.type for t in Lexer("-1")]
        assert types == [TokenType.MINUS, TokenType.NUMBER, TokenType.END_OF_EXPRESSION]

    def test_lexer_error_on_invalid_character(self):
        with pytest.raises(TokenizerError) as exc_info:
            tokenize("2 @ 3")

        assert exc_info.value.position == 2
        assert "@ 3" in str(exc_info.value)

    def test_trailing_dot_is_not_a_number(self):
        with pytest.raises(TokenizerError) as exc_info:
            tokenize("3.")
        assert exc_info.value.position == 1

    def test_token_str(self):
        assert str(Token(TokenType.NUMBER, "5")) == "NUMBER Token -> 5"


# =============================================================================
# Parser Tests
# =============================================================================


class TestBindingPowers:
    """Tests for the binding power table."""

    def test_every_token_type_has_a_binding_power(self):
        assert set(BINDING_POWERS) == set(TokenType)

    def test_binding_power_order(self):
        assert (
            BindingPower.MINIMUM
            < BindingPower.IDENTIFIER
            < BindingPower.NUMBER
            < BindingPower.ADDITIVE
            < BindingPower.MULTIPLICATIVE
            < BindingPower.EXPONENTIAL
            < BindingPower.UNARY
            < BindingPower.PARENTHESIS
            < BindingPower.MAXIMUM
        )

    def test_terminators_sit_at_minimum(self):
        for token_type in (
            TokenType.END_OF_EXPRESSION,
            TokenType.COMMA,
            TokenType.RPAREN,
        ):
            assert binding_power(Token(token_type, "")) == BindingPower.MINIMUM


class TestEvaluator:
    """Tests for expression evaluation."""

    @pytest.mark.parametrize("numeral", ["0", "42", "3.14", "007", "1.50", "123456789.5"])
    def test_numeral_matches_float(self, numeral):
        assert evaluate(numeral) == float(numeral)

    def test_result_is_float(self):
        assert isinstance(evaluate("1 + 1"), float)

    def test_arithmetic(self):
        assert evaluate("10 + 4") == 14
        assert evaluate("10 - 4") == 6
        assert evaluate("10 * 4") == 40
        assert evaluate("10 / 4") == 2.5
        assert evaluate("10 % 4") == 2
        assert evaluate("2 ^ 10") == 1024

    def test_precedence(self):
        assert evaluate("2+3*4") == 14
        assert evaluate("(2+3)*4") == 20
        assert evaluate("2*3^2") == 18
        assert evaluate("2^3*2") == 16
        assert evaluate("1 + 7 % 4 * 2") == 7

    def test_subtraction_is_left_associative(self):
        assert evaluate("2-3-4") == -5
        assert evaluate("100/10/5") == 2

    def test_exponent_is_right_associative(self):
        assert evaluate("2^3^2") == 512

    def test_unary_sign(self):
        assert evaluate("-2") == -2
        assert evaluate("+3") == 3
        assert evaluate("--2") == 2
        assert evaluate("-(2+3)") == -5
        assert evaluate("-2+3") == 1
        assert evaluate("-2*3") == -6
        assert evaluate("2*-3") == -6

    def test_unary_sign_applies_to_whole_power(self):
        assert evaluate("-2^2") == -4
        assert evaluate("(-2)^2") == 4
        assert evaluate("2^-1") == 0.5
        assert evaluate("2^-2^2") == 0.0625

    def test_remainder_follows_dividend_sign(self):
        assert evaluate("7 % 3") == 1
        assert evaluate("-7 % 3") == -1
        assert evaluate("7 % -3") == 1
        assert evaluate("7.5 % 2") == 1.5

    def test_whitespace_is_ignored(self):
        assert evaluate("\t2 +\n 3 ") == 5

    def test_constants(self):
        assert evaluate("pi*2", {"pi": math.pi}) == 2 * math.pi
        assert evaluate("r^2", {"r": 3}) == 9

    def test_constants_are_case_sensitive(self):
        with pytest.raises(EvaluationError):
            evaluate("PI", {"pi": math.pi})

    def test_function_calls(self, functions):
        assert evaluate("square(3)", {}, functions) == 9
        assert evaluate("add(1, 2)", {}, functions) == 3
        assert evaluate("answer()", {}, functions) == 42

    def test_function_arguments_are_full_expressions(self, functions):
        assert evaluate("add(square(2), 1 + 2 * 3)", {}, functions) == 11
        assert evaluate("square(-(1 + 2))", {}, functions) == 9
        assert evaluate("add(k, k^2)", {"k": 3}, functions) == 12

    def test_function_result_in_expression(self, functions):
        assert evaluate("2 * square(3) + 1", {}, functions) == 19
        assert evaluate("-square(3)", {}, functions) == -9

    def test_identical_calls_give_identical_results(self, functions):
        constants = {"k": 2.5}
        first = evaluate("add(k, square(k)) / 3", constants, functions)
        second = evaluate("add(k, square(k)) / 3", constants, functions)

        assert first == second
        assert constants == {"k": 2.5}

    def test_parser_class(self):
        parser = Parser("a + b", {"a": 1, "b": 2})
        assert parser.parse() == 3
        assert parser.parse() == 3


class TestEvaluatorErrors:
    """Tests for evaluation failures."""

    def test_empty_expression(self):
        with pytest.raises(EvaluationError, match="empty"):
            evaluate("")

    def test_blank_expression(self):
        with pytest.raises(EvaluationError, match="Expected number or unary operator"):
            evaluate("   ")

    def test_missing_right_operand(self):
        with pytest.raises(EvaluationError):
            evaluate("2+")

    def test_trailing_token(self):
        with pytest.raises(EvaluationError, match="not a valid binary or exponent operator"):
            evaluate("2 3")

    def test_trailing_group(self):
        with pytest.raises(EvaluationError):
            evaluate("2 (3)")

    def test_unmatched_parentheses(self):
        with pytest.raises(EvaluationError, match="RPAREN"):
            evaluate("(2 + 3")
        with pytest.raises(EvaluationError, match="END_OF_EXPRESSION"):
            evaluate("2 + 3)")

    def test_operator_without_left_operand(self):
        with pytest.raises(EvaluationError, match="Expected number or unary operator"):
            evaluate("* 2")
        with pytest.raises(EvaluationError):
            evaluate(")")

    def test_unknown_constant(self):
        with pytest.raises(EvaluationError, match='Constant "foo" does not exist'):
            evaluate("foo")

    def test_unknown_function(self):
        with pytest.raises(EvaluationError, match='Function "foo" does not exist'):
            evaluate("foo(1)")

    def test_function_name_without_call_is_a_constant_lookup(self, functions):
        with pytest.raises(EvaluationError, match='Constant "square" does not exist'):
            evaluate("square", {}, functions)

    def test_malformed_argument_list(self, functions):
        with pytest.raises(EvaluationError):
            evaluate("add(1,)", {}, functions)
        with pytest.raises(EvaluationError):
            evaluate("add(1 2)", {}, functions)
        with pytest.raises(EvaluationError):
            evaluate("add(1, 2", {}, functions)

    def test_wrong_argument_count(self, functions):
        with pytest.raises(FunctionDefinitionError, match="Expected 2 arguments"):
            evaluate("add(1)", {}, functions)

    def test_tokenizer_error_propagates(self):
        with pytest.raises(TokenizerError):
            evaluate("2 $ 3")


# =============================================================================
# Numeric Tests
# =============================================================================


class TestNumeric:
    """Tests for IEEE-754 results."""

    def test_division_by_zero(self):
        assert evaluate("2/0") == math.inf
        assert evaluate("-2/0") == -math.inf
        assert math.isnan(evaluate("0/0"))

    def test_division_by_negative_zero(self):
        assert divide(1.0, -0.0) == -math.inf

    def test_remainder_by_zero(self):
        assert math.isnan(evaluate("5 % 0"))
        assert math.isnan(remainder(math.inf, 2.0))
        assert remainder(5.0, math.inf) == 5.0

    def test_power_edge_cases(self):
        assert math.isnan(evaluate("(-8)^(1/3)"))
        assert evaluate("0^-1") == math.inf
        assert evaluate("10^400") == math.inf
        assert power(-10.0, 401.0) == -math.inf
        assert power(-0.0, -1.0) == -math.inf
        assert evaluate("2^0.5") == pytest.approx(math.sqrt(2))

    def test_overflow_is_infinite(self):
        assert evaluate("10^300 * 10^300") == math.inf

    def test_format_number(self):
        assert format_number(7.0) == "7"
        assert format_number(0.5) == "0.5"
        assert format_number(-3.0) == "-3"
        assert format_number(math.inf) == "inf"
        assert format_number(math.nan) == "nan"
        assert format_number(1e16) == "1e+16"


# =============================================================================
# UserFunction Tests
# =============================================================================


class TestUserFunction:
    """Tests for user-defined functions."""

    def test_call(self):
        assert make_function(["x", "y"], "x+y").call([3, 4]) == 7

    def test_call_binds_in_order(self):
        assert make_function(["a", "b"], "a - b").call([10, 4]) == 6

    def test_zero_parameters(self):
        func = make_function([], "6 * 7")
        assert func.arity == 0
        assert func.call([]) == 42

    def test_repeated_parameter(self):
        with pytest.raises(FunctionDefinitionError, match="repeating"):
            make_function(["x", "x"], "x+x")

    def test_unused_parameter(self):
        with pytest.raises(FunctionDefinitionError, match='Argument "x" never used'):
            make_function(["x"], "1+1")

    def test_usage_check_is_textual(self):
        # "x" is found inside "max", so construction succeeds.
        func = make_function(["x"], "max(1, 2)")

        with pytest.raises(EvaluationError, match='Function "max" does not exist'):
            func.call([1])

    @pytest.mark.parametrize(
        "name, bad_char",
        [("x-y", "-"), ("1x", "1"), ("a b", " "), ("x!", "!")],
    )
    def test_invalid_parameter_name(self, name, bad_char):
        with pytest.raises(FunctionDefinitionError) as exc_info:
            make_function([name], f"{name} + 1")
        assert f"Invalid identifier character {bad_char}" in str(exc_info.value)

    def test_empty_parameter_name(self):
        with pytest.raises(FunctionDefinitionError, match="empty"):
            make_function([""], "1")

    def test_wrong_argument_count(self):
        func = make_function(["x", "y"], "x*y")

        with pytest.raises(FunctionDefinitionError, match="Expected 2 arguments for function but got 3"):
            func.call([1, 2, 3])

    def test_body_sees_only_its_parameters(self):
        func = make_function(["x"], "x * pi")

        with pytest.raises(EvaluationError, match='Constant "pi" does not exist'):
            evaluate("f(2)", {"pi": math.pi}, {"f": func})

    def test_body_errors_propagate(self):
        func = make_function(["x"], "x +")

        with pytest.raises(EvaluationError):
            func.call([1])

    def test_body_cannot_call_functions(self):
        func = make_function(["x"], "f(x)")

        with pytest.raises(EvaluationError, match='Function "f" does not exist'):
            evaluate("f(1)", {}, {"f": func})

    def test_is_immutable(self):
        func = make_function(["x"], "x")

        with pytest.raises(FrozenInstanceError):
            func.body = "x + 1"

    def test_equality_and_str(self):
        func = UserFunction(("x", "y"), "x + y")

        assert func == make_function(["x", "y"], "x + y")
        assert func.params == ("x", "y")
        assert str(func) == "(x, y) = x + y"


class TestParseDefinition:
    """Tests for the name(params) = body syntax."""

    def test_parse_definition(self):
        name, func = parse_definition("hypot(a, b) = (a^2 + b^2)^0.5")

        assert name == "hypot"
        assert func.params == ("a", "b")
        assert func.call([3, 4]) == 5

    def test_parse_definition_without_parameters(self):
        name, func = parse_definition("answer() = 42")

        assert name == "answer"
        assert func.params == ()

    def test_empty_body(self):
        with pytest.raises(FunctionDefinitionError, match="empty body"):
            parse_definition("f(x) =")

    def test_not_a_definition(self):
        with pytest.raises(FunctionDefinitionError, match="expected name"):
            parse_definition("f x = x")

    def test_definition_validates_parameters(self):
        with pytest.raises(FunctionDefinitionError, match="repeating"):
            parse_definition("f(x, x) = x")
