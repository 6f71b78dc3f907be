"""Errores del núcleo de cálculo.

Todas las condiciones son locales y recuperables: la capa que llama muestra
el mensaje al usuario. Heredan de ValueError para conservar el contrato de
los motores (``evaluate`` lanza ValueError ante entradas inválidas).
"""


class CalculatorError(ValueError):
    """Base de los errores de la calculadora."""


class InvalidExpressionError(CalculatorError):
    """Expresión con error de sintaxis, identificador o dominio."""


class UnsupportedMatrixOrderError(CalculatorError):
    """Operación pedida sobre una matriz que no es de orden 2 o 3."""


class SingularMatrixError(CalculatorError):
    """La matriz no es invertible (determinante casi nulo)."""


class EmptyDatasetError(CalculatorError):
    """No hay números válidos para calcular estadísticas."""


class UnknownUnitError(CalculatorError):
    """Categoría o unidad de conversión desconocida."""


class NumericRangeError(CalculatorError):
    """Un resultado intermedio o final excede el rango de los float."""
