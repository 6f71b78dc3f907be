"""Motor de cálculo con precisión arbitraria y expansión progresiva."""

from __future__ import annotations

import logging

from formula_evaluator import AngleMode, FormulaEvaluator

try:
    from mpmath import mp
except ImportError as exc:  # pragma: no cover
    raise ImportError(
        "mpmath no está instalado. Instala con: pip install mpmath"
    ) from exc

logger = logging.getLogger(__name__)


class MPMathProvider:
    """Proveedor matemático basado en mpmath."""

    def number(self, text: str):
        return mp.mpf(text)

    @staticmethod
    def power(base, exponent):
        return mp.power(base, exponent)

    @staticmethod
    def is_real(value) -> bool:
        return isinstance(value, mp.mpf) and not mp.isnan(value)

    @staticmethod
    def is_finite(value) -> bool:
        return bool(mp.isfinite(value))

    @staticmethod
    def _trig(fn, degrees: bool):
        def wrapped(x):
            value = mp.radians(x) if degrees else x
            return fn(value)

        return wrapped

    @staticmethod
    def _inv_trig(fn, degrees: bool):
        def wrapped(x):
            result = fn(x)
            return mp.degrees(result) if degrees else result

        return wrapped

    @staticmethod
    def _reciprocal(fn, exact_zero=False):
        def wrapped(x):
            value = fn(x)
            # cos(90°) no da cero exacto: se toma como cero lo que cae
            # por debajo de la precisión de trabajo
            tolerance = 0 if exact_zero else mp.ldexp(1, 10 - mp.prec)
            if abs(value) <= tolerance:
                raise ValueError("función no definida en este punto")
            return 1 / value

        return wrapped

    @staticmethod
    def _round(x):
        rounded = mp.floor(abs(x) + mp.mpf("0.5"))
        return -rounded if x < 0 else rounded

    @staticmethod
    def _factorial(x):
        if not mp.isfinite(x):
            raise ValueError("factorial no admite infinito o NaN")

        n = int(mp.floor(x))
        if n < 0:
            raise ValueError("factorial requiere un entero no negativo")
        if n <= 5000:
            return mp.factorial(n)

        return mp.exp(mp.loggamma(n + 1))

    @staticmethod
    def _cbrt(x):
        # mp.cbrt devuelve la raíz principal compleja para negativos
        if x < 0:
            return -mp.cbrt(-x)
        return mp.cbrt(x)

    def build_namespace(self, angle_mode: AngleMode) -> dict:
        degrees = angle_mode is AngleMode.DEGREES
        return {
            "sin": self._trig(mp.sin, degrees),
            "cos": self._trig(mp.cos, degrees),
            "tan": self._trig(mp.tan, degrees),
            "sec": self._reciprocal(self._trig(mp.cos, degrees)),
            "csc": self._reciprocal(self._trig(mp.sin, degrees)),
            "cot": self._reciprocal(self._trig(mp.tan, degrees)),
            "asin": self._inv_trig(mp.asin, degrees),
            "acos": self._inv_trig(mp.acos, degrees),
            "atan": self._inv_trig(mp.atan, degrees),
            "sinh": mp.sinh,
            "cosh": mp.cosh,
            "tanh": mp.tanh,
            "sech": mp.sech,
            "csch": self._reciprocal(mp.sinh, exact_zero=True),
            "coth": self._reciprocal(mp.tanh, exact_zero=True),
            "ln": mp.log,
            "log": mp.log10,
            "log2": lambda x: mp.log(x, 2),
            "exp": mp.exp,
            "exp2": lambda x: mp.power(2, x),
            "exp10": lambda x: mp.power(10, x),
            "sqrt": mp.sqrt,
            "cbrt": self._cbrt,
            "factorial": self._factorial,
            "gamma": mp.gamma,
            "abs": abs,
            "floor": mp.floor,
            "ceil": mp.ceil,
            "round": self._round,
            "π": mp.mpf(mp.pi),
            "pi": mp.mpf(mp.pi),
            "e": mp.mpf(mp.e),
            "φ": mp.mpf(mp.phi),
            "phi": mp.mpf(mp.phi),
        }


class ArbitraryPrecisionCalculatorEngine:
    """Evalúa expresiones con precisión arbitraria y dígitos progresivos."""

    SCI_NOTATION_EXP_LIMIT = 12

    def __init__(self, initial_digits: int = 18, precision_step: int = 24):
        self._provider = MPMathProvider()
        self._evaluator = FormulaEvaluator(self._provider)

        self._initial_digits = max(8, initial_digits)
        self._precision_step = max(8, precision_step)

        self._working_digits = self._initial_digits
        self._last_expression: str | None = None
        self._last_mode = AngleMode.DEGREES
        self._last_value = None

    @property
    def working_digits(self) -> int:
        return self._working_digits

    def evaluate(self, expression: str, angle_mode=AngleMode.DEGREES) -> str:
        mode = AngleMode.coerce(angle_mode)
        value = self._evaluate_with_digits(expression, mode, self._initial_digits)

        self._last_expression = expression
        self._last_mode = mode
        self._working_digits = self._initial_digits
        self._last_value = value
        return self._format_result(value, self._working_digits)

    def can_expand_precision(self) -> bool:
        return self._last_expression is not None

    def request_more_precision(self) -> str:
        if not self._last_expression:
            raise ValueError("No hay cálculo previo")

        self._working_digits += self._precision_step
        logger.debug("Ampliando precisión a %d dígitos", self._working_digits)
        self._last_value = self._evaluate_with_digits(
            self._last_expression,
            self._last_mode,
            self._working_digits,
        )
        return self._format_result(self._last_value, self._working_digits)

    def _evaluate_with_digits(self, expression: str, mode: AngleMode, digits: int):
        internal_dps = max(40, digits * 2 + 10)
        with mp.workdps(internal_dps):
            return self._evaluator.evaluate(expression, mode)

    @staticmethod
    def _format_result(value, digits: int) -> str:
        if not mp.isfinite(value):
            return "∞" if value > 0 else "-∞"

        if value == 0:
            return "0"

        if mp.floor(value) == value and abs(value) < mp.mpf("1e18"):
            return str(int(value))

        exponent = int(mp.floor(mp.log10(abs(value))))
        if abs(exponent) >= ArbitraryPrecisionCalculatorEngine.SCI_NOTATION_EXP_LIMIT:
            return mp.nstr(value, n=digits, min_fixed=0, max_fixed=0)

        return mp.nstr(value, n=digits)
