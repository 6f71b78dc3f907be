"""
Motor de cálculo para la calculadora científica.

Este módulo provee la clase CalculatorEngine que evalúa expresiones con
aritmética float y devuelve el resultado ya formateado. Está diseñado como
módulo independiente que puede ser reemplazado por implementaciones
alternativas (e.g., ArbitraryPrecisionCalculatorEngine con mpmath).

Contrato de interfaz:
    - evaluate(expression: str, angle_mode: AngleMode) -> str
"""

import math

from formula_evaluator import AngleMode, FormulaEvaluator, PythonMathProvider
from number_formatter import format_number


class CalculatorEngine:
    """Evalúa expresiones matemáticas con funciones científicas."""

    def __init__(self):
        self._provider = PythonMathProvider()
        self._evaluator = FormulaEvaluator(self._provider)

    # ── Evaluación principal ─────────────────────────────────────

    def evaluate(self, expression: str, angle_mode=AngleMode.DEGREES) -> str:
        """Evalúa la expresión y devuelve el resultado como cadena.

        Raises:
            InvalidExpressionError: expresión inválida, función desconocida,
                división por cero o error de dominio.
        """
        result = self._evaluator.evaluate(expression, angle_mode)
        return self._format_result(result)

    # ── Formato del resultado ────────────────────────────────────

    @staticmethod
    def _format_result(value) -> str:
        if value == math.inf:
            return "∞"
        if value == -math.inf:
            return "-∞"
        return format_number(value)
