import pytest

from llmsupport.mathexpr import ExpressionError, evaluate, format_result


@pytest.mark.parametrize(
    "expression,expected",
    [
        ("2 + 3", "5"),
        ("10 - 4", "6"),
        ("6 * 7", "42"),
        ("20 / 4", "5"),
        ("(2 + 3) * 4", "20"),
        ("2 ** 8", "256"),
        ("17 % 5", "2"),
        ("-5 + 10", "5"),
        ("abs(-42)", "42"),
        ("max(1, 5, 3)", "5"),
        ("min(1, 5, 3)", "1"),
    ],
)
def test_source_cases(expression, expected):
    assert format_result(evaluate(expression)) == expected


def test_floating_point_division():
    result = format_result(evaluate("10 / 3"))
    assert result.startswith("3.333")
    assert result == "3.33333"


def test_caret_is_power():
    assert format_result(evaluate("2 ^ 10")) == "1024"


def test_round_half_away_from_zero():
    assert format_result(evaluate("round(2.5)")) == "3"
    assert format_result(evaluate("round(-2.5)")) == "-3"


def test_modulo_sign_follows_dividend():
    assert evaluate("-7 % 3") == -1


def test_integer_arithmetic_stays_integer():
    assert evaluate("2 + 3") == 5
    assert isinstance(evaluate("2 + 3"), int)


def test_special_float_results():
    assert format_result(evaluate("1 / 0")) == "+Inf"
    assert format_result(evaluate("sqrt(-1)")) == "NaN"


def test_comparison_result():
    assert format_result(evaluate("3 > 2")) == "true"


def test_empty_variadic_is_zero():
    assert format_result(evaluate("max()")) == "0"


@pytest.mark.parametrize("expression", ["1 +", "foo(1)", "x + 1", "sqrt(1, 2)", "2.5 % 2"])
def test_invalid_expressions(expression):
    with pytest.raises(ExpressionError, match="invalid expression"):
        evaluate(expression)


def test_modulo_by_zero():
    with pytest.raises(ExpressionError, match="evaluation error"):
        evaluate("5 % 0")