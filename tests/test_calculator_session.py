import math

import pytest

import statistics_engine
from arbitrary_precision_engine import ArbitraryPrecisionCalculatorEngine
from calculator_errors import (
    EmptyDatasetError,
    InvalidExpressionError,
    NumericRangeError,
    SingularMatrixError,
    UnsupportedMatrixOrderError,
)
from calculator_session import CalculatorSession
from formula_evaluator import AngleMode
from number_formatter import format_number


@pytest.fixture
def session():
    return CalculatorSession()


class _RecordingEngine:
    def __init__(self):
        self.calls = []

    def evaluate(self, expression, angle_mode):
        self.calls.append((expression, angle_mode))
        return "42"


def test_defaults(session):
    assert session.angle_mode is AngleMode.DEGREES
    assert session.result == "0"
    assert session.expression == ""
    assert session.history == []


def test_submit_formats_result(session):
    assert session.submit("2+3*4") == "14"
    assert session.submit("sqrt(16)+cbrt(27)") == "7"
    assert session.submit("1/3") == "0.3333333333"
    assert session.result == "0.3333333333"


def test_toggle_angle_mode(session):
    assert session.submit("sin(90)") == "1"
    assert session.toggle_angle_mode() == "RAD"
    assert session.angle_mode is AngleMode.RADIANS
    assert session.submit("sin(90)") == format_number(math.sin(90))
    assert session.toggle_angle_mode() == "DEG"


def test_angle_mode_is_passed_to_engine():
    engine = _RecordingEngine()
    session = CalculatorSession(engine=engine, angle_mode="rad")
    session.submit("x")
    session.toggle_angle_mode()
    session.submit("y")
    assert engine.calls == [("x", AngleMode.RADIANS), ("y", AngleMode.DEGREES)]


def test_submit_without_text_uses_current_expression(session):
    session.expression = "6*7"
    assert session.submit() == "42"


def test_failed_submit_leaves_state_untouched(session):
    session.submit("1+1")
    with pytest.raises(InvalidExpressionError):
        session.submit("(1+2")
    assert session.result == "2"
    assert session.expression == "1+1"
    assert session.history == [("1+1", "2")]


def test_history_is_newest_first_and_bounded(session):
    for n in range(CalculatorSession.HISTORY_LIMIT + 10):
        session.submit(f"{n}+0")
    history = session.history
    assert len(history) == CalculatorSession.HISTORY_LIMIT
    assert history[0] == ("59+0", "59")
    assert history[-1] == ("10+0", "10")


def test_recall_and_clear_history(session):
    session.submit("2^10")
    session.submit("1+1")
    assert session.recall_history(1) == "1024"
    assert session.expression == "1024"
    session.clear_history()
    assert session.history == []


def test_factorial_overflow_is_reported_as_infinity(session):
    assert session.submit("factorial(171)") == "∞"


def test_memory_register(session):
    session.submit("5")
    assert session.memory_store() == 5
    session.submit("3")
    assert session.memory_add() == 8
    assert session.memory_subtract() == 5
    assert session.memory_recall() == "5"
    assert session.expression == "5"
    session.memory_clear()
    assert session.memory == 0


def test_memory_ignores_non_numeric_result(session):
    session.submit("factorial(200)")
    assert session.memory_store() == 0


def test_clear(session):
    session.submit("1+1")
    session.clear()
    assert session.result == "0"
    assert session.expression == ""


def test_matrix_operations(session):
    assert session.matrix_operation("determinant", [[1, 2], [3, 4]]) == "-2"
    assert session.matrix_operation("transpose", [[1, 2], [3, 4]]) == (
        "[       1        3]\n[       2        4]"
    )
    assert session.matrix_operation("inverse", [[2, 0], [0, 4]]) == (
        "[     0.5        0]\n[       0     0.25]"
    )


def test_matrix_errors(session):
    with pytest.raises(SingularMatrixError):
        session.matrix_operation("inverse", [[1, 2], [2, 4]])
    with pytest.raises(UnsupportedMatrixOrderError):
        session.matrix_operation("determinant", [[1.0] * 4 for _ in range(4)])
    with pytest.raises(NumericRangeError):
        session.matrix_operation("determinant", [[1e200, 0], [0, 1e200]])


def test_inverse_of_large_matrix(session):
    assert session.matrix_operation("inverse", [[1e200, 0], [0, 1e200]]) == (
        "[1.000000e-200        0]\n[       0 1.000000e-200]"
    )


def test_statistics(session):
    summary = session.statistics("1, 2, 2, 3, 4")
    assert summary["Media"] == "2.4"
    assert summary["Moda"] == "2"
    assert session.statistics("1,2,3")["Moda"] == statistics_engine.NO_MODE


def test_statistics_out_of_float_range(session):
    with pytest.raises(NumericRangeError):
        session.statistics("1e308, 1e308")
    with pytest.raises(NumericRangeError):
        session.statistics("1e200, -1e200")


def test_statistics_without_numbers_skips_engine(session, monkeypatch):
    def _fail(_data):
        raise AssertionError("compute no debería llamarse")

    monkeypatch.setattr(statistics_engine, "compute", _fail)
    with pytest.raises(EmptyDatasetError):
        session.statistics("a, b, ")


def test_convert(session):
    assert session.convert(100, "temperature", "celsius", "fahrenheit") == "212"


def test_session_with_arbitrary_precision_engine():
    session = CalculatorSession(engine=ArbitraryPrecisionCalculatorEngine())
    assert session.submit("2+3*4") == "14"
    assert session.history == [("2+3*4", "14")]
