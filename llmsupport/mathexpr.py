"""Safe evaluation of arithmetic expressions."""

from __future__ import annotations

import ast
import math
import operator
from collections.abc import Callable

Number = int | float


class ExpressionError(ValueError):
    """Raised when an expression cannot be compiled or evaluated."""


def _invalid(message: str) -> ExpressionError:
    return ExpressionError(f"invalid expression: {message}")


def _runtime(message: str) -> ExpressionError:
    return ExpressionError(f"evaluation error: {message}")


def _round(x: float) -> float:
    if not math.isfinite(x):
        return x
    return math.copysign(math.floor(abs(x) + 0.5), x)


def _floor(x: float) -> float:
    return float(math.floor(x)) if math.isfinite(x) else x


def _ceil(x: float) -> float:
    return float(math.ceil(x)) if math.isfinite(x) else x


def _sqrt(x: float) -> float:
    if math.isnan(x) or x < 0:
        return math.nan
    return math.sqrt(x)


def _pow(base: float, exponent: float) -> float:
    try:
        return math.pow(base, exponent)
    except ValueError:
        return math.nan
    except OverflowError:
        if base < 0 and exponent.is_integer() and int(exponent) % 2:
            return -math.inf
        return math.inf


def _min(*args: float) -> float:
    return min(args) if args else 0.0


def _max(*args: float) -> float:
    return max(args) if args else 0.0


# name -> (arity or None for variadic, implementation)
_FUNCTIONS: dict[str, tuple[int | None, Callable[..., float]]] = {
    "abs": (1, abs),
    "round": (1, _round),
    "floor": (1, _floor),
    "ceil": (1, _ceil),
    "sqrt": (1, _sqrt),
    "pow": (2, _pow),
    "min": (None, _min),
    "max": (None, _max),
}

_COMPARISONS: dict[type, Callable[[object, object], bool]] = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
}


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_float(value: object) -> float:
    if not _is_number(value):
        raise _invalid(f"cannot use {value!r} as a number")
    return float(value)


def _divide(a: Number, b: Number) -> float:
    x, y = float(a), float(b)
    if y == 0:
        if x == 0 or math.isnan(x):
            return math.nan
        return math.inf if x > 0 else -math.inf
    return x / y


def _modulo(a: Number, b: Number) -> int:
    if not (isinstance(a, int) and isinstance(b, int)):
        raise _invalid("operator % requires integer operands")
    if b == 0:
        raise _runtime("integer divide by zero")
    remainder = abs(a) % abs(b)
    return -remainder if a < 0 else remainder


def _arith(op: ast.operator, a: object, b: object) -> Number:
    if not (_is_number(a) and _is_number(b)):
        raise _invalid("arithmetic requires numeric operands")
    both_int = isinstance(a, int) and isinstance(b, int)
    match op:
        case ast.Add():
            return a + b if both_int else float(a) + float(b)
        case ast.Sub():
            return a - b if both_int else float(a) - float(b)
        case ast.Mult():
            return a * b if both_int else float(a) * float(b)
        case ast.Div():
            return _divide(a, b)
        case ast.Mod():
            return _modulo(a, b)
        case ast.Pow():
            return _pow(float(a), float(b))
    raise _invalid(f"unsupported operator {type(op).__name__}")


def _eval(node: ast.expr) -> Number | bool:
    match node:
        case ast.Constant(value=value) if _is_number(value):
            return value
        case ast.Name(id="true"):
            return True
        case ast.Name(id="false"):
            return False
        case ast.UnaryOp(op=ast.USub(), operand=operand):
            value = _eval(operand)
            if not _is_number(value):
                raise _invalid("unary minus requires a number")
            return -value
        case ast.UnaryOp(op=ast.UAdd(), operand=operand):
            value = _eval(operand)
            if not _is_number(value):
                raise _invalid("unary plus requires a number")
            return value
        case ast.UnaryOp(op=ast.Not(), operand=operand):
            value = _eval(operand)
            if not isinstance(value, bool):
                raise _invalid("not requires a boolean")
            return not value
        case ast.BinOp(left=left, op=op, right=right):
            return _arith(op, _eval(left), _eval(right))
        case ast.BoolOp(op=op, values=values):
            results = [_eval(value) for value in values]
            if not all(isinstance(result, bool) for result in results):
                raise _invalid("logical operators require booleans")
            return all(results) if isinstance(op, ast.And) else any(results)
        case ast.Compare(left=left, ops=[op], comparators=[right]):
            compare = _COMPARISONS.get(type(op))
            if compare is None:
                raise _invalid(f"unsupported comparison {type(op).__name__}")
            a, b = _eval(left), _eval(right)
            if type(op) not in (ast.Eq, ast.NotEq) and not (_is_number(a) and _is_number(b)):
                raise _invalid("ordering requires numeric operands")
            return compare(a, b)
        case ast.Call(func=ast.Name(id=name), args=args, keywords=[]):
            if name not in _FUNCTIONS:
                raise _invalid(f"unknown function {name}")
            arity, function = _FUNCTIONS[name]
            if arity is not None and len(args) != arity:
                raise _invalid(f"{name} expects {arity} argument(s), got {len(args)}")
            return float(function(*(_as_float(_eval(arg)) for arg in args)))
        case ast.Name(id=name):
            raise _invalid(f"unknown name {name}")
    raise _invalid(f"unsupported syntax {type(node).__name__}")


def evaluate(expression: str) -> Number | bool:
    """Evaluate an arithmetic expression; ``**`` and ``^`` both mean power."""
    source = expression.replace("**", "^").replace("^", "**").strip()
    try:
        tree = ast.parse(source, mode="eval")
    except SyntaxError as exc:
        raise _invalid(exc.msg) from exc
    return _eval(tree.body)


def format_result(value: Number | bool) -> str:
    """Format a result as the value printed after ``RESULT:``."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "+Inf" if value > 0 else "-Inf"
        if abs(value) < 2**63 and value == int(value):
            return str(int(value))
        return f"{value:.6g}"
    return str(value)