"""Punto de entrada de la calculadora científica.

Uso:
    python main.py eval "2+3*4"
    python main.py eval "sin(pi/2)" --rad
    python main.py eval "pi" --precise --more 1
    python main.py matrix inverse "2 0 0; 0 2 0; 0 0 2"
    python main.py stats "1, 2, 2, 3, 4"
    python main.py convert 100 temperature celsius fahrenheit
"""

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from calculator_engine import CalculatorEngine
from calculator_session import CalculatorSession
from formula_evaluator import AngleMode
from matrix_engine import MatrixOperation, matrix_from_entries


USE_ARBITRARY_PRECISION = False
AP_INITIAL_DIGITS = 120
AP_PRECISION_STEP = 120

app = typer.Typer(
    name="calculadora",
    help="Calculadora científica: expresiones, matrices, estadística y unidades",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def build_session(precise: bool = False, rad: bool = False) -> CalculatorSession:
    if precise or USE_ARBITRARY_PRECISION:
        from arbitrary_precision_engine import ArbitraryPrecisionCalculatorEngine

        engine = ArbitraryPrecisionCalculatorEngine(
            initial_digits=AP_INITIAL_DIGITS,
            precision_step=AP_PRECISION_STEP,
        )
    else:
        engine = CalculatorEngine()
    mode = AngleMode.RADIANS if rad else AngleMode.DEGREES
    return CalculatorSession(engine=engine, angle_mode=mode)


def _fail(exc: Exception) -> None:
    err_console.print(f"[red]Error:[/red] {exc}")
    raise typer.Exit(1)


def parse_matrix(text: str) -> list[list[float]]:
    """Filas separadas por ';' y celdas por espacios o comas."""
    rows = [row for row in text.split(";") if row.strip()]
    cells = [cell for row in rows for cell in row.replace(",", " ").split()]
    return matrix_from_entries(cells, len(rows))


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Muestra trazas de depuración"),
) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(name)s: %(message)s",
            handlers=[RichHandler(console=err_console, show_time=False)],
        )


@app.command("eval")
def cmd_eval(
    expression: str = typer.Argument(help="Expresión, e.g. 'sqrt(16)+cbrt(27)'"),
    rad: bool = typer.Option(False, "--rad", help="Ángulos en radianes (por defecto grados)"),
    precise: bool = typer.Option(False, "--precise", "-p", help="Precisión arbitraria (mpmath)"),
    more: int = typer.Option(0, "--more", help="Pasos extra de precisión (con --precise)"),
) -> None:
    """Evalúa una expresión."""
    session = build_session(precise=precise, rad=rad)
    try:
        result = session.submit(expression)
        if more and not hasattr(session.engine, "request_more_precision"):
            raise ValueError("--more requiere --precise")
        for _ in range(more):
            result = session.engine.request_more_precision()
    except ValueError as exc:
        _fail(exc)
    console.print(result, soft_wrap=True)


@app.command("matrix")
def cmd_matrix(
    operation: MatrixOperation = typer.Argument(help="determinant, transpose o inverse"),
    values: str = typer.Argument(help="Filas separadas por ';', e.g. '1 2; 3 4'"),
) -> None:
    """Determinante, traspuesta o inversa de una matriz 2x2 o 3x3."""
    session = build_session()
    try:
        result = session.matrix_operation(operation, parse_matrix(values))
    except ValueError as exc:
        _fail(exc)
    console.print(result, highlight=False)


@app.command("stats")
def cmd_stats(
    data: str = typer.Argument(help="Números separados por comas"),
) -> None:
    """Estadística descriptiva de una lista de números."""
    session = build_session()
    try:
        summary = session.statistics(data)
    except ValueError as exc:
        _fail(exc)

    table = Table(title="Estadísticas", show_header=False)
    table.add_column("Medida", style="green")
    table.add_column("Valor", justify="right")
    for label, value in summary.items():
        table.add_row(label, value)
    console.print(table)


@app.command("convert")
def cmd_convert(
    value: float = typer.Argument(help="Valor a convertir"),
    category: str = typer.Argument(help="length, mass o temperature"),
    from_unit: str = typer.Argument(help="Unidad de origen"),
    to_unit: str = typer.Argument(help="Unidad de destino"),
) -> None:
    """Convierte unidades de longitud, masa o temperatura."""
    session = build_session()
    try:
        result = session.convert(value, category, from_unit, to_unit)
    except ValueError as exc:
        _fail(exc)
    console.print(f"{result} {to_unit}")


if __name__ == "__main__":
    app()
