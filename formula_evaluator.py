"""Parseo y evaluación de expresiones para la calculadora científica.

La expresión se normaliza, se divide en tokens y se analiza por descenso
recursivo hasta obtener un árbol que luego se recorre para calcular el
valor. Las funciones y constantes las aporta un *proveedor* (float con
``math`` o precisión arbitraria con ``mpmath``); el evaluador solo conoce
la gramática.

Precedencia, de menor a mayor::

    expression := term (("+" | "-") term)*
    term       := unary (("*" | "/") unary | unary)*
    unary      := ("-" | "+") unary | power
    power      := postfix ("^" unary)?
    postfix    := primary ("!" | "%")*
    primary    := número | nombre "(" expression ")" | nombre | "(" expression ")"
"""

from __future__ import annotations

import logging
import math
import re
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple

from calculator_errors import InvalidExpressionError

logger = logging.getLogger(__name__)

GOLDEN_RATIO = (1 + math.sqrt(5)) / 2
RECIPROCAL_EPSILON = 1e-15


class AngleMode(Enum):
    """Unidad con la que se interpretan los ángulos trigonométricos."""

    DEGREES = "deg"
    RADIANS = "rad"

    @property
    def label(self) -> str:
        return self.value.upper()

    def toggled(self) -> AngleMode:
        if self is AngleMode.DEGREES:
            return AngleMode.RADIANS
        return AngleMode.DEGREES

    @classmethod
    def coerce(cls, mode) -> AngleMode:
        try:
            return cls(mode)
        except ValueError as exc:
            raise ValueError("El modo debe ser 'rad' o 'deg'") from exc


# ── Tokens ───────────────────────────────────────────────────────

NUMBER = "number"
IDENTIFIER = "identifier"
OPERATOR = "operator"
LPAREN = "lparen"
RPAREN = "rparen"


class Token(NamedTuple):
    kind: str
    text: str
    position: int


# ── Árbol de la expresión ────────────────────────────────────────


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class Constant:
    name: str


@dataclass(frozen=True)
class UnaryMinus:
    operand: object


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: object
    right: object


@dataclass(frozen=True)
class FunctionCall:
    name: str
    argument: object


# ── Proveedor float ──────────────────────────────────────────────


class PythonMathProvider:
    """Provee funciones y constantes matemáticas con aritmética float."""

    FACTORIAL_LIMIT = 170

    def number(self, text: str) -> float:
        return float(text)

    @staticmethod
    def power(base, exponent):
        return math.pow(base, exponent)

    @staticmethod
    def is_real(value) -> bool:
        return isinstance(value, (int, float)) and not math.isnan(value)

    @staticmethod
    def is_finite(value) -> bool:
        return math.isfinite(value)

    @staticmethod
    def _reciprocal(fn, tolerance=RECIPROCAL_EPSILON):
        def w(x):
            value = fn(x)
            if abs(value) <= tolerance:
                raise ValueError("función no definida en este punto")
            return 1 / value

        return w

    @staticmethod
    def _round(x):
        # medio alejándose de cero: round(2.5) = 3, round(-2.5) = -3
        return math.copysign(math.floor(abs(x) + 0.5), x)

    @classmethod
    def _factorial(cls, x):
        n = math.floor(x)
        if n < 0:
            raise ValueError("factorial requiere un entero no negativo")
        if n > cls.FACTORIAL_LIMIT:
            return math.inf
        return float(math.factorial(n))

    def build_namespace(self, angle_mode: AngleMode) -> dict:
        degrees = angle_mode is AngleMode.DEGREES

        def _trig(fn):
            def w(x):
                return fn(math.radians(x) if degrees else x)

            return w

        def _inv_trig(fn):
            def w(x):
                r = fn(x)
                return math.degrees(r) if degrees else r

            return w

        return {
            "sin": _trig(math.sin),
            "cos": _trig(math.cos),
            "tan": _trig(math.tan),
            "sec": self._reciprocal(_trig(math.cos)),
            "csc": self._reciprocal(_trig(math.sin)),
            "cot": self._reciprocal(_trig(math.tan)),
            "asin": _inv_trig(math.asin),
            "acos": _inv_trig(math.acos),
            "atan": _inv_trig(math.atan),
            "sinh": math.sinh,
            "cosh": math.cosh,
            "tanh": math.tanh,
            "sech": self._reciprocal(math.cosh),
            "csch": self._reciprocal(math.sinh, 0),
            "coth": self._reciprocal(math.tanh, 0),
            "ln": math.log,
            "log": math.log10,
            "log2": math.log2,
            "exp": math.exp,
            "exp2": lambda x: math.pow(2, x),
            "exp10": lambda x: math.pow(10, x),
            "sqrt": math.sqrt,
            "cbrt": math.cbrt,
            "factorial": self._factorial,
            "gamma": math.gamma,
            "abs": abs,
            "floor": lambda x: float(math.floor(x)),
            "ceil": lambda x: float(math.ceil(x)),
            "round": self._round,
            "π": math.pi,
            "pi": math.pi,
            "e": math.e,
            "φ": GOLDEN_RATIO,
            "phi": GOLDEN_RATIO,
        }


# ── Analizador ───────────────────────────────────────────────────


class _Parser:
    """Descenso recursivo sobre la lista de tokens."""

    def __init__(self, tokens: list[Token], max_depth: int):
        self._tokens = tokens
        self._index = 0
        self._depth = 0
        self._max_depth = max_depth

    def parse(self):
        if not self._tokens:
            raise InvalidExpressionError("Expresión vacía")

        node = self._expression()
        token = self._peek()
        if token is not None:
            if token.kind == RPAREN:
                raise InvalidExpressionError("Paréntesis de cierre sin abrir")
            raise InvalidExpressionError(f"Símbolo inesperado: {token.text}")
        return node

    # -- utilidades --

    def _peek(self) -> Token | None:
        if self._index < len(self._tokens):
            return self._tokens[self._index]
        return None

    def _match(self, kind: str, *texts: str) -> Token | None:
        token = self._peek()
        if token is None or token.kind != kind:
            return None
        if texts and token.text not in texts:
            return None
        self._index += 1
        return token

    @contextmanager
    def _nested(self, levels: int = 1):
        self._depth += levels
        if self._depth > self._max_depth:
            raise InvalidExpressionError("Expresión demasiado anidada")
        try:
            yield
        finally:
            self._depth -= levels

    def _expect_closing(self):
        if self._match(RPAREN) is None:
            raise InvalidExpressionError("Falta ')'")

    # -- reglas --

    def _expression(self):
        node = self._term()
        while True:
            token = self._match(OPERATOR, "+", "-")
            if token is None:
                return node
            node = BinaryOp(token.text, node, self._term())

    def _term(self):
        node = self._unary()
        while True:
            token = self._match(OPERATOR, "*", "/")
            if token is not None:
                node = BinaryOp(token.text, node, self._unary())
            elif self._starts_implicit_factor():
                node = BinaryOp("*", node, self._unary())
            else:
                return node

    def _starts_implicit_factor(self) -> bool:
        # 2π, 2(3), (1+1)(2), 3sin(30), (2)3, π2
        token = self._peek()
        if token is None:
            return False
        if token.kind in (LPAREN, IDENTIFIER):
            return True
        previous = self._tokens[self._index - 1]
        return token.kind == NUMBER and previous.kind in (RPAREN, IDENTIFIER)

    def _unary(self):
        token = self._match(OPERATOR, "-", "+")
        if token is None:
            return self._power()
        with self._nested():
            operand = self._unary()
        if token.text == "-":
            return UnaryMinus(operand)
        return operand

    def _power(self):
        base = self._postfix()
        if self._match(OPERATOR, "^") is None:
            return base
        with self._nested():
            exponent = self._unary()
        return BinaryOp("^", base, exponent)

    def _postfix(self):
        node = self._primary()
        applied = 0
        while True:
            token = self._match(OPERATOR, "!", "%")
            if token is None:
                return node
            applied += 1
            if self._depth + applied > self._max_depth:
                raise InvalidExpressionError("Expresión demasiado anidada")
            if token.text == "!":
                node = FunctionCall("factorial", node)
            else:
                node = BinaryOp("/", node, Literal("100"))

    def _primary(self):
        token = self._peek()
        if token is None:
            raise InvalidExpressionError("Expresión incompleta")
        self._index += 1

        if token.kind == NUMBER:
            return Literal(token.text)

        if token.kind == LPAREN:
            with self._nested():
                node = self._expression()
            self._expect_closing()
            return node

        if token.kind == IDENTIFIER:
            return self._identifier(token.text)

        raise InvalidExpressionError(f"Símbolo inesperado: {token.text}")

    def _identifier(self, name: str):
        if name in FormulaEvaluator.FUNCTION_IDENTIFIERS:
            if self._match(LPAREN) is None:
                raise InvalidExpressionError(f"Falta '(' después de {name}")
            with self._nested():
                argument = self._expression()
            self._expect_closing()
            return FunctionCall(name, argument)

        if name in FormulaEvaluator.CONSTANT_IDENTIFIERS:
            following = self._peek()
            if following is not None and following.kind == LPAREN:
                raise InvalidExpressionError(f"{name} no es una función")
            return Constant(name)

        raise InvalidExpressionError(f"Identificador no permitido: {name}")


# ── Evaluador ────────────────────────────────────────────────────


class FormulaEvaluator:
    """Transforma expresiones de UI y evalúa su valor numérico."""

    MAX_NESTING_DEPTH = 64

    FUNCTION_IDENTIFIERS = frozenset(
        {
            "sin",
            "cos",
            "tan",
            "sec",
            "csc",
            "cot",
            "asin",
            "acos",
            "atan",
            "sinh",
            "cosh",
            "tanh",
            "sech",
            "csch",
            "coth",
            "ln",
            "log",
            "log2",
            "exp",
            "exp2",
            "exp10",
            "sqrt",
            "cbrt",
            "factorial",
            "gamma",
            "abs",
            "floor",
            "ceil",
            "round",
        }
    )
    CONSTANT_IDENTIFIERS = frozenset({"pi", "π", "e", "phi", "φ"})

    _REPLACEMENTS = (
        ("×", "*"),
        ("·", "*"),
        ("÷", "/"),
        ("−", "-"),
        ("–", "-"),
        ("—", "-"),
        ("**", "^"),
        ("²", "^2"),
        ("³", "^3"),
    )
    _NUMBER = re.compile(r"(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+\-]?[0-9]+)?")
    _NAME = re.compile(r"[A-Za-z]+")
    _NAME_WITH_DIGITS = re.compile(r"[A-Za-z]+[0-9]+")
    _SYMBOLS = {
        "+": OPERATOR,
        "-": OPERATOR,
        "*": OPERATOR,
        "/": OPERATOR,
        "^": OPERATOR,
        "!": OPERATOR,
        "%": OPERATOR,
        "(": LPAREN,
        ")": RPAREN,
    }

    def __init__(self, provider: PythonMathProvider):
        self._provider = provider

    def evaluate(self, expression: str, angle_mode):
        """Evalúa la expresión con el modo angular indicado.

        El modo se toma una sola vez al inicio: todas las llamadas anidadas
        usan la misma tabla de funciones.

        Raises:
            InvalidExpressionError: sintaxis, identificador o dominio inválido.
        """
        mode = AngleMode.coerce(angle_mode)
        tree = self.parse(expression)
        namespace = self._provider.build_namespace(mode)

        try:
            value = self._evaluate_node(tree, namespace)
        except InvalidExpressionError:
            raise
        except (ArithmeticError, ValueError) as exc:
            raise InvalidExpressionError(f"Error de cálculo: {exc}") from exc

        logger.debug("%r (%s) = %r", expression, mode.value, value)
        return value

    def parse(self, expression: str):
        """Devuelve el árbol de la expresión sin evaluarla."""
        if not expression or not expression.strip():
            raise InvalidExpressionError("Expresión vacía")

        tokens = self.tokenize(self._preprocess(expression))
        return _Parser(tokens, self.MAX_NESTING_DEPTH).parse()

    def _preprocess(self, expr: str) -> str:
        expr = expr.strip()
        for glyph, replacement in self._REPLACEMENTS:
            expr = expr.replace(glyph, replacement)
        return expr

    def tokenize(self, expr: str) -> list[Token]:
        tokens = []
        position = 0

        while position < len(expr):
            char = expr[position]
            if char.isspace():
                position += 1
                continue

            match = self._NUMBER.match(expr, position) or self._name_match(expr, position)
            if match:
                kind = NUMBER if match.re is self._NUMBER else IDENTIFIER
                tokens.append(Token(kind, match.group(), position))
                position = match.end()
                continue

            if char in ("π", "φ"):
                tokens.append(Token(IDENTIFIER, char, position))
            elif char == "√":
                tokens.append(Token(IDENTIFIER, "sqrt", position))
            elif char in self._SYMBOLS:
                tokens.append(Token(self._SYMBOLS[char], char, position))
            else:
                raise InvalidExpressionError(f"Carácter no permitido: {char}")
            position += 1

        return tokens

    def _name_match(self, expr: str, position: int):
        # log2, exp10: los dígitos solo forman parte de nombres de función
        match = self._NAME_WITH_DIGITS.match(expr, position)
        if match and match.group() in self.FUNCTION_IDENTIFIERS:
            return match
        return self._NAME.match(expr, position)

    # ── Recorrido del árbol ──────────────────────────────────────

    def _evaluate_node(self, node, namespace: dict):
        if isinstance(node, Literal):
            return self._checked(self._provider.number(node.text))

        if isinstance(node, Constant):
            return namespace[node.name]

        if isinstance(node, UnaryMinus):
            return -self._evaluate_node(node.operand, namespace)

        if isinstance(node, FunctionCall):
            argument = self._evaluate_node(node.argument, namespace)
            result = namespace[node.name](argument)
            if node.name == "factorial":
                # el desbordamiento del factorial se informa como infinito
                return self._checked(result, math.inf)
            return self._checked(result, argument)

        return self._evaluate_chain(node, namespace)

    def _evaluate_chain(self, node: BinaryOp, namespace: dict):
        # Las cadenas a izquierda (1+1+1+...) pueden ser muy largas: se
        # recorren iterativamente para no depender de la pila.
        spine = []
        while isinstance(node, BinaryOp) and node.op != "^":
            spine.append(node)
            node = node.left

        if isinstance(node, BinaryOp):
            base = self._evaluate_node(node.left, namespace)
            exponent = self._evaluate_node(node.right, namespace)
            value = self._checked(self._provider.power(base, exponent), base, exponent)
        else:
            value = self._evaluate_node(node, namespace)

        for op_node in reversed(spine):
            right = self._evaluate_node(op_node.right, namespace)
            value = self._checked(self._apply(op_node.op, value, right), value, right)
        return value

    @staticmethod
    def _apply(op: str, left, right):
        if op == "+":
            return left + right
        if op == "-":
            return left - right
        if op == "*":
            return left * right
        if right == 0:
            raise InvalidExpressionError("División por cero")
        return left / right

    def _checked(self, value, *operands):
        """Rechaza NaN, complejos y desbordamientos nuevos.

        Un infinito que ya venía en algún operando (factorial grande) se
        propaga; uno que aparece a partir de operandos finitos es un error.
        """
        if not self._provider.is_real(value):
            raise InvalidExpressionError("Resultado no definido")
        if not self._provider.is_finite(value) and all(
            self._provider.is_finite(operand) for operand in operands
        ):
            raise InvalidExpressionError("Resultado fuera de rango")
        return value
