"""Álgebra de matrices cuadradas de orden 2 y 3.

Operaciones puras: ninguna modifica la matriz recibida. Las matrices son
listas de filas con números float.
"""

from __future__ import annotations

import logging
import math
from enum import Enum

from calculator_errors import NumericRangeError, UnsupportedMatrixOrderError

logger = logging.getLogger(__name__)

SUPPORTED_ORDERS = (2, 3)
SINGULAR_THRESHOLD = 1e-10


class MatrixOperation(Enum):
    DETERMINANT = "determinant"
    TRANSPOSE = "transpose"
    INVERSE = "inverse"


def _order(matrix) -> int:
    size = len(matrix)
    if size not in SUPPORTED_ORDERS or any(len(row) != size for row in matrix):
        raise UnsupportedMatrixOrderError(
            "Solo se admiten matrices cuadradas de 2x2 y 3x3"
        )
    return size


def determinant(matrix) -> float:
    """Determinante por fórmula cerrada (2x2) o cofactores (3x3).

    Raises:
        UnsupportedMatrixOrderError: la matriz no es de orden 2 o 3.
        NumericRangeError: el determinante no cabe en un float.
    """
    det = _raw_determinant(matrix)
    if not math.isfinite(det):
        raise NumericRangeError("El determinante excede el rango numérico")
    return det


def _raw_determinant(matrix) -> float:
    size = _order(matrix)
    m = matrix

    if size == 2:
        return m[0][0] * m[1][1] - m[0][1] * m[1][0]

    return (
        m[0][0] * (m[1][1] * m[2][2] - m[1][2] * m[2][1])
        - m[0][1] * (m[1][0] * m[2][2] - m[1][2] * m[2][0])
        + m[0][2] * (m[1][0] * m[2][1] - m[1][1] * m[2][0])
    )


def transpose(matrix) -> list[list[float]]:
    return [list(column) for column in zip(*matrix)]


def minor(matrix, row: int, col: int) -> list[list[float]]:
    """Submatriz que resulta de eliminar la fila ``row`` y la columna ``col``."""
    return [
        [value for j, value in enumerate(cells) if j != col]
        for i, cells in enumerate(matrix)
        if i != row
    ]


def adjugate(matrix) -> list[list[float]]:
    """Traspuesta de la matriz de cofactores."""
    size = len(matrix)
    cofactors = [
        [(-1) ** (i + j) * _minor_determinant(matrix, i, j) for j in range(size)]
        for i in range(size)
    ]
    return transpose(cofactors)


def _minor_determinant(matrix, row: int, col: int) -> float:
    sub = minor(matrix, row, col)
    if len(sub) == 1:
        return sub[0][0]
    return _raw_determinant(sub)


def inverse(matrix) -> list[list[float]] | None:
    """Inversa de la matriz, o None si no es invertible.

    Se considera singular cuando |det| < 1e-10. Si el determinante desborda,
    se calcula sobre la matriz escalada por su mayor elemento y se deshace la
    escala al final.

    Raises:
        NumericRangeError: algún elemento de la inversa no cabe en un float.
    """
    det = _raw_determinant(matrix)
    if math.isfinite(det):
        if abs(det) < SINGULAR_THRESHOLD:
            logger.debug("Matriz singular (det=%r)", det)
            return None
        result = _divided_adjugate(matrix, det)
    else:
        result = _scaled_inverse(matrix)
        if result is None:
            return None

    if not all(math.isfinite(value) for row in result for value in row):
        raise NumericRangeError("La inversa excede el rango numérico")
    return result


def _divided_adjugate(m, det: float) -> list[list[float]]:
    if len(m) == 2:
        return [
            [m[1][1] / det, -m[0][1] / det],
            [-m[1][0] / det, m[0][0] / det],
        ]

    return [[value / det for value in row] for row in adjugate(m)]


def _scaled_inverse(matrix) -> list[list[float]] | None:
    # inv(M) = inv(M / s) / s, con det(M) = det(M / s) * s^n
    scale = max(abs(value) for row in matrix for value in row)
    scaled = [[value / scale for value in row] for row in matrix]
    det = _raw_determinant(scaled)

    limit = SINGULAR_THRESHOLD
    for _ in matrix:
        limit /= scale
    if det == 0 or abs(det) < limit:
        logger.debug("Matriz singular tras escalar (det=%r)", det)
        return None

    return [[value / scale for value in row] for row in _divided_adjugate(scaled, det)]


def apply_operation(kind, matrix):
    """Aplica la operación indicada (nombre o MatrixOperation)."""
    kind = MatrixOperation(kind)
    if kind is MatrixOperation.DETERMINANT:
        return determinant(matrix)
    if kind is MatrixOperation.TRANSPOSE:
        return transpose(matrix)
    return inverse(matrix)


def matrix_from_entries(entries, order: int) -> list[list[float]]:
    """Construye la matriz a partir de celdas en orden de filas.

    Las celdas vacías, no numéricas o no finitas valen 0.
    """
    if order not in SUPPORTED_ORDERS:
        raise UnsupportedMatrixOrderError(f"Orden no admitido: {order}")

    cells = list(entries)
    if len(cells) != order * order:
        raise ValueError(f"Se esperaban {order * order} celdas, hay {len(cells)}")

    values = [_coerce_cell(cell) for cell in cells]
    return [values[i * order : (i + 1) * order] for i in range(order)]


def _coerce_cell(cell) -> float:
    try:
        value = float(str(cell).strip())
    except ValueError:
        return 0.0
    return value if math.isfinite(value) else 0.0
