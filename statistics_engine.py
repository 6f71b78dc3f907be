"""Estadística descriptiva sobre una lista de números."""

from __future__ import annotations

import math
from dataclasses import dataclass

from calculator_errors import EmptyDatasetError, NumericRangeError
from number_formatter import format_number

NO_MODE = "Sin moda"

_CHECKED_FIELDS = (
    ("total", "Suma"),
    ("mean", "Media"),
    ("median", "Mediana"),
    ("range", "Rango"),
    ("variance", "Varianza"),
    ("std_deviation", "Desviación estándar"),
)


@dataclass(frozen=True)
class Stats:
    count: int
    total: float
    mean: float
    median: float
    modes: tuple | None
    range: float
    minimum: float
    maximum: float
    variance: float
    std_deviation: float


def parse_dataset(raw_text: str) -> list[float]:
    """Separa por comas y descarta las entradas que no son números finitos."""
    data = []
    for entry in raw_text.split(","):
        try:
            value = float(entry.strip())
        except ValueError:
            continue
        if math.isfinite(value):
            data.append(value)
    return data


def median(data) -> float:
    ordered = sorted(data)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return ordered[mid - 1] / 2 + ordered[mid] / 2
    return ordered[mid]


def modes(data) -> tuple | None:
    """Valores de frecuencia máxima en orden de aparición.

    Devuelve None cuando todos los valores empatan (ninguno se repite).
    """
    frequency = {}
    for value in data:
        frequency[value] = frequency.get(value, 0) + 1

    top = max(frequency.values())
    modal = tuple(value for value, count in frequency.items() if count == top)
    if len(modal) == len(data):
        return None
    return modal


def mean(data) -> float:
    n = len(data)
    return math.fsum(x / n for x in data)


def variance(data) -> float:
    """Varianza poblacional (divide entre N)."""
    avg = mean(data)
    n = len(data)
    return math.fsum((x - avg) * (x - avg) / n for x in data)


def compute(data) -> Stats:
    """Calcula todas las estadísticas del conjunto.

    Raises:
        EmptyDatasetError: el conjunto está vacío.
        NumericRangeError: algún resultado excede el rango de los float.
    """
    data = list(data)
    if not data:
        raise EmptyDatasetError("Introduce números válidos")

    try:
        total = math.fsum(data)
    except OverflowError as exc:
        raise NumericRangeError("La suma excede el rango numérico") from exc
    smallest = min(data)
    largest = max(data)
    var = variance(data)
    stats = Stats(
        count=len(data),
        total=total,
        mean=mean(data),
        median=median(data),
        modes=modes(data),
        range=largest - smallest,
        minimum=smallest,
        maximum=largest,
        variance=var,
        std_deviation=math.sqrt(var),
    )

    for name, label in _CHECKED_FIELDS:
        if not math.isfinite(getattr(stats, name)):
            raise NumericRangeError(f"{label} fuera del rango numérico")
    return stats


def summarize(stats: Stats) -> dict[str, str]:
    """Etiquetas y valores listos para mostrar."""
    if stats.modes is None:
        mode_text = NO_MODE
    else:
        mode_text = ", ".join(format_number(v) for v in stats.modes)

    return {
        "Cantidad": format_number(stats.count),
        "Suma": format_number(stats.total),
        "Media": format_number(stats.mean),
        "Mediana": format_number(stats.median),
        "Moda": mode_text,
        "Rango": format_number(stats.range),
        "Mínimo": format_number(stats.minimum),
        "Máximo": format_number(stats.maximum),
        "Varianza": format_number(stats.variance),
        "Desviación estándar": format_number(stats.std_deviation),
    }
