"""Conversión de unidades de longitud, masa y temperatura."""

from calculator_errors import UnknownUnitError

# Factores respecto de la unidad base de cada categoría (metro, kilogramo).
FACTORS = {
    "length": {
        "meters": 1,
        "feet": 3.28084,
        "inches": 39.3701,
        "centimeters": 100,
        "kilometers": 0.001,
        "miles": 0.000621371,
    },
    "mass": {
        "kilograms": 1,
        "pounds": 2.20462,
        "grams": 1000,
        "ounces": 35.274,
    },
}

TEMPERATURE_UNITS = ("celsius", "fahrenheit", "kelvin")


def categories() -> list[str]:
    return [*FACTORS, "temperature"]


def units(category: str) -> list[str]:
    if category == "temperature":
        return list(TEMPERATURE_UNITS)
    if category not in FACTORS:
        raise UnknownUnitError(f"Categoría desconocida: {category}")
    return list(FACTORS[category])


def convert(value: float, category: str, from_unit: str, to_unit: str) -> float:
    """Convierte ``value`` de ``from_unit`` a ``to_unit``.

    Raises:
        UnknownUnitError: categoría o unidad desconocida.
    """
    known = units(category)
    for unit in (from_unit, to_unit):
        if unit not in known:
            raise UnknownUnitError(f"Unidad desconocida para {category}: {unit}")

    if category == "temperature":
        return _from_celsius(_to_celsius(value, from_unit), to_unit)

    factors = FACTORS[category]
    return value / factors[from_unit] * factors[to_unit]


def _to_celsius(value: float, unit: str) -> float:
    if unit == "fahrenheit":
        return (value - 32) * 5 / 9
    if unit == "kelvin":
        return value - 273.15
    return value


def _from_celsius(celsius: float, unit: str) -> float:
    if unit == "fahrenheit":
        return celsius * 9 / 5 + 32
    if unit == "kelvin":
        return celsius + 273.15
    return celsius
