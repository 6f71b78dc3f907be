"""Formato de números para mostrar en pantalla."""

import math

SCIENTIFIC_UPPER = 1e10
SCIENTIFIC_LOWER = 1e-6
FIXED_DECIMALS = 10
SCIENTIFIC_DIGITS = 6
MATRIX_CELL_WIDTH = 8


def format_number(value: float) -> str:
    """Convierte un número finito en su representación canónica.

    Magnitudes mayores que 1e10 o menores que 1e-6 (distintas de cero) se
    muestran en notación científica con 6 decimales; el resto se redondea a
    10 decimales sin ceros sobrantes.

    Raises:
        ValueError: el valor es infinito o NaN.
    """
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"No se puede formatear un valor no finito: {value}")

    magnitude = abs(value)
    if magnitude > SCIENTIFIC_UPPER or (0 < magnitude < SCIENTIFIC_LOWER):
        return _scientific(value)

    text = f"{value:.{FIXED_DECIMALS}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        return "0"
    return text


def _scientific(value: float) -> str:
    mantissa, exponent = f"{value:.{SCIENTIFIC_DIGITS}e}".split("e")
    sign = exponent[0]
    digits = exponent[1:].lstrip("0") or "0"
    return f"{mantissa}e{sign}{digits}"


def format_matrix(matrix) -> str:
    """Una fila por línea, celdas alineadas a la derecha entre corchetes."""
    rows = []
    for row in matrix:
        cells = " ".join(format_number(v).rjust(MATRIX_CELL_WIDTH) for v in row)
        rows.append(f"[{cells}]")
    return "\n".join(rows)
