"""Sesión de la calculadora: estado y orquestación de los motores.

La sesión es lo único que conserva estado (modo angular, expresión actual,
último resultado, historial y memoria). Los motores son funciones puras o
reciben el modo angular como parámetro en cada llamada.
"""

from __future__ import annotations

import logging

import matrix_engine
import statistics_engine
import unit_converter
from calculator_engine import CalculatorEngine
from calculator_errors import EmptyDatasetError, SingularMatrixError
from formula_evaluator import AngleMode
from matrix_engine import MatrixOperation
from number_formatter import format_matrix, format_number

logger = logging.getLogger(__name__)


class CalculatorSession:
    """Orquesta evaluación, matrices, estadística y conversiones."""

    HISTORY_LIMIT = 50

    def __init__(self, engine=None, angle_mode=AngleMode.DEGREES):
        self._engine = engine if engine is not None else CalculatorEngine()
        self._angle_mode = AngleMode.coerce(angle_mode)
        self.expression = ""
        self.result = "0"
        self.memory = 0.0
        self._history: list[tuple[str, str]] = []

    @property
    def engine(self):
        return self._engine

    # ── Modo angular ─────────────────────────────────────────────

    @property
    def angle_mode(self) -> AngleMode:
        return self._angle_mode

    @angle_mode.setter
    def angle_mode(self, mode):
        self._angle_mode = AngleMode.coerce(mode)

    def toggle_angle_mode(self) -> str:
        self._angle_mode = self._angle_mode.toggled()
        logger.debug("Modo angular: %s", self._angle_mode.value)
        return self._angle_mode.label

    # ── Expresiones ──────────────────────────────────────────────

    def submit(self, text: str | None = None) -> str:
        """Evalúa ``text`` (o la expresión actual) y guarda el resultado.

        Si la evaluación falla no se modifica ningún estado.

        Raises:
            InvalidExpressionError: la expresión no es válida.
        """
        expression = self.expression if text is None else text
        result = self._engine.evaluate(expression, self._angle_mode)

        self.expression = expression
        self.result = result
        self._history.insert(0, (expression, result))
        del self._history[self.HISTORY_LIMIT :]
        return result

    @property
    def history(self) -> list[tuple[str, str]]:
        return list(self._history)

    def recall_history(self, index: int) -> str:
        """Pone el resultado de una entrada del historial como expresión."""
        _, result = self._history[index]
        self.expression = result
        return result

    def clear_history(self):
        self._history.clear()

    def clear(self):
        self.expression = ""
        self.result = "0"

    # ── Memoria ──────────────────────────────────────────────────

    def _result_value(self) -> float:
        try:
            return float(self.result)
        except ValueError:
            return 0.0

    def memory_store(self) -> float:
        self.memory = self._result_value()
        return self.memory

    def memory_add(self) -> float:
        self.memory += self._result_value()
        return self.memory

    def memory_subtract(self) -> float:
        self.memory -= self._result_value()
        return self.memory

    def memory_recall(self) -> str:
        self.expression = format_number(self.memory)
        return self.expression

    def memory_clear(self):
        self.memory = 0.0

    # ── Matrices, estadística y conversiones ─────────────────────

    def matrix_operation(self, kind, matrix) -> str:
        """Aplica la operación y devuelve el resultado formateado.

        Raises:
            UnsupportedMatrixOrderError: la matriz no es de orden 2 o 3.
            SingularMatrixError: se pidió la inversa de una matriz singular.
            NumericRangeError: el resultado no cabe en un float.
        """
        kind = MatrixOperation(kind)
        logger.debug("Operación de matriz: %s", kind.value)
        result = matrix_engine.apply_operation(kind, matrix)

        if kind is MatrixOperation.DETERMINANT:
            return format_number(result)
        if result is None:
            raise SingularMatrixError("La matriz no es invertible")
        return format_matrix(result)

    def statistics(self, raw_text: str) -> dict[str, str]:
        """Estadísticas del texto separado por comas.

        Raises:
            EmptyDatasetError: ninguna entrada es un número válido.
            NumericRangeError: algún resultado excede el rango de los float.
        """
        data = statistics_engine.parse_dataset(raw_text)
        if not data:
            raise EmptyDatasetError("Introduce números válidos")
        return statistics_engine.summarize(statistics_engine.compute(data))

    def convert(self, value: float, category: str, from_unit: str, to_unit: str) -> str:
        converted = unit_converter.convert(value, category, from_unit, to_unit)
        return format_number(converted)
