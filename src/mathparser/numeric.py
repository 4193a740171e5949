"""IEEE-754 double arithmetic for the evaluator.

Python's float operators raise on division by zero and ``math.pow`` raises
on domain errors and overflow. Expressions instead follow plain
double-precision semantics: infinities and NaN are results, not errors.
"""

import math

INF = math.inf
NAN = math.nan


def divide(left: float, right: float) -> float:
    """Divide with IEEE semantics (``1/0 == inf``, ``0/0`` is NaN)."""
    if right == 0:
        if left == 0 or math.isnan(left):
            return NAN
        # Sign of zero matters: 1/-0.0 is -inf.
        return math.copysign(INF, left) * math.copysign(1.0, right)
    return left / right


def remainder(left: float, right: float) -> float:
    """Truncated remainder, sign follows the dividend (C ``fmod``)."""
    if right == 0 or math.isinf(left) or math.isnan(left) or math.isnan(right):
        return NAN
    return math.fmod(left, right)


def _is_odd_integer(value: float) -> bool:
    return math.isfinite(value) and value == math.floor(value) and value % 2 == 1


def power(base: float, exponent: float) -> float:
    """``base ** exponent`` with IEEE results in place of exceptions.

    A negative base with a fractional exponent gives NaN rather than a
    complex number.
    """
    try:
        return math.pow(base, exponent)
    except ValueError:
        # Zero to a negative power, or negative base to a fractional power.
        if base == 0:
            if _is_odd_integer(exponent):
                return math.copysign(INF, base)
            return INF
        return NAN
    except OverflowError:
        if base < 0 and _is_odd_integer(exponent):
            return -INF
        return INF


def format_number(value: float) -> str:
    """Render a result in shortest round-trip form, dropping a trailing ``.0``."""
    text = repr(float(value))
    if text.endswith(".0"):
        text = text[:-2]
    return text
