"""
Calculator Tool
Safe numeric evaluation of board expressions using SymPy, with domain pre-checks
"""

import logging
import math
import re
from typing import Callable, Dict, List, NamedTuple, Optional

import sympy as sp
from sympy.parsing.sympy_parser import (
    parse_expr,
    standard_transformations,
    implicit_multiplication_application,
    convert_xor
)

from boardcheck.config import DOMAIN_EPS
from boardcheck.utils.text_normalizer import TextNormalizer

logger = logging.getLogger(__name__)


# Enable safe math parsing
TRANSFORMATIONS = standard_transformations + (
    implicit_multiplication_application,
    convert_xor
)

FUNCTIONS: Dict[str, object] = {
    "sqrt": sp.sqrt,
    "log": sp.log,
    "ln": sp.log,
    "exp": sp.exp,
    "sin": sp.sin,
    "cos": sp.cos,
    "tan": sp.tan,
    "asin": sp.asin,
    "acos": sp.acos,
    "atan": sp.atan,
    "sinh": sp.sinh,
    "cosh": sp.cosh,
    "tanh": sp.tanh,
    "abs": sp.Abs,
}
CONSTANTS: Dict[str, object] = {"pi": sp.pi, "e": sp.E}

DIVISION_BY_ZERO = "division by zero"
SQRT_OF_NEGATIVE = "sqrt of negative"
LOG_OF_NON_POSITIVE = "log of non-positive"

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z_0-9]*")


class Evaluation(NamedTuple):
    """Numeric value of an expression, or the domain problem that prevents one."""
    value: Optional[float]
    issue: Optional[str] = None


class Calculator:
    """
    Numeric expression evaluator using SymPy.

    Expressions are validated (characters, parentheses, identifiers), parsed
    without evaluation, walked for domain violations at the given variable
    values and only then reduced to a float. Nothing here raises to callers:
    malformed input yields None.
    """

    # -------------------------
    # Internal Safe Parser
    # -------------------------
    @staticmethod
    def _safe_parse(expr: str, variables=()):
        """
        Parse a math expression into an unevaluated SymPy tree.
        """
        text = TextNormalizer.normalize(expr)
        if not text:
            raise ValueError("Empty expression")

        ok, error = TextNormalizer.validate_characters(text)
        if not ok:
            raise ValueError(error)
        ok, error = TextNormalizer.validate_parentheses(text)
        if not ok:
            raise ValueError(error)

        local_dict = dict(FUNCTIONS)
        local_dict.update(CONSTANTS)
        for name in variables:
            local_dict[name] = sp.Symbol(name)

        for name in _IDENTIFIER.findall(text):
            if name not in local_dict and len(name) > 1:
                raise ValueError(f"Unknown identifier '{name}'")

        try:
            tree = parse_expr(text, local_dict=local_dict,
                              transformations=TRANSFORMATIONS, evaluate=False)
        except Exception as e:
            raise ValueError(f"Invalid mathematical expression: '{expr}' → {str(e)}")

        # "2, 3" parses to a tuple, "x = 1" to a relation
        if not isinstance(tree, sp.Expr):
            raise ValueError(f"Not a single expression: '{expr}'")
        return tree

    @staticmethod
    def _number(node, subs) -> Optional[complex]:
        try:
            value = complex(sp.N(node.subs(subs)))
        except (TypeError, ValueError, ZeroDivisionError):
            return None
        return value

    @staticmethod
    def _even_root(exponent) -> bool:
        # unevaluated x^(1/2) carries Mul(1, Pow(2, -1)) as its exponent
        exact = exponent.doit()
        if isinstance(exact, sp.Float):
            exact = sp.nsimplify(exact)
        return isinstance(exact, sp.Rational) and exact.q % 2 == 0

    @staticmethod
    def _domain_issue(tree, subs) -> Optional[str]:
        """
        Walk the tree and report the first division by (near) zero, even root
        of a negative number or logarithm of a non-positive number.
        """
        for node in sp.preorder_traversal(tree):
            if isinstance(node, sp.Pow):
                base, exponent = node.args
                if not exponent.is_number:
                    continue
                exp_value = Calculator._number(exponent, subs)
                base_value = Calculator._number(base, subs)
                if exp_value is None or base_value is None:
                    continue
                if exp_value.real < 0 and abs(base_value) <= DOMAIN_EPS:
                    return DIVISION_BY_ZERO
                if (Calculator._even_root(exponent)
                        and abs(base_value.imag) <= DOMAIN_EPS and base_value.real < 0):
                    return SQRT_OF_NEGATIVE
            elif isinstance(node, sp.log):
                arg_value = Calculator._number(node.args[0], subs)
                if arg_value is None:
                    continue
                if abs(arg_value.imag) <= DOMAIN_EPS and arg_value.real <= 0:
                    return LOG_OF_NON_POSITIVE
        return None

    @staticmethod
    def _real(tree, subs) -> Optional[float]:
        value = Calculator._number(tree, subs)
        if value is None:
            return None
        if abs(value.imag) > 1e-9 * max(1.0, abs(value.real)):
            return None
        real = value.real
        if not math.isfinite(real):
            return None
        return real

    # -------------------------
    # Expression Evaluation
    # -------------------------
    @staticmethod
    def inspect(expression: str, variables: Optional[Dict[str, float]] = None) -> Evaluation:
        """
        Evaluate with the domain pre-check.

        Returns Evaluation(None, tag) on a domain violation and
        Evaluation(None, None) when the expression does not parse or does not
        reduce to a finite real number.
        """
        variables = variables or {}
        try:
            tree = Calculator._safe_parse(expression, variables)
        except ValueError as e:
            logger.debug("parse failed: %s", e)
            return Evaluation(None)

        subs = {sp.Symbol(k): v for k, v in variables.items()}
        if tree.free_symbols - set(subs):
            return Evaluation(None)

        try:
            issue = Calculator._domain_issue(tree, subs)
            if issue:
                return Evaluation(None, issue)
            return Evaluation(Calculator._real(tree, subs))
        except (TypeError, ValueError, ZeroDivisionError, OverflowError) as e:
            logger.debug("evaluation failed for %r: %s", expression, e)
            return Evaluation(None)

    @staticmethod
    def evaluate(expression: str, variables: Optional[Dict[str, float]] = None) -> Optional[float]:
        """
        Evaluate a mathematical expression numerically; None on any problem.
        """
        return Calculator.inspect(expression, variables).value

    # -------------------------
    # Functions of one variable
    # -------------------------
    @staticmethod
    def compile_function(expression: str, variable: str = "x") -> Optional[Callable[[float], Optional[float]]]:
        """
        Turn `expression` into f(x) -> Optional[float] for sampling.
        Points where f is undefined or complex map to None.
        """
        try:
            tree = Calculator._safe_parse(expression, [variable])
        except ValueError as e:
            logger.debug("parse failed: %s", e)
            return None

        symbol = sp.Symbol(variable)
        if tree.free_symbols - {symbol}:
            return None

        tree = tree.doit()
        try:
            fast = sp.lambdify(symbol, tree, modules="math")
        except Exception as e:  # lambdify can fail on odd trees
            logger.debug("lambdify failed for %r: %s", expression, e)
            fast = None

        def f(x: float) -> Optional[float]:
            if fast is not None:
                try:
                    value = float(fast(x))
                except (ValueError, ZeroDivisionError, OverflowError, TypeError):
                    return None
                return value if math.isfinite(value) else None
            return Calculator._real(tree, {symbol: x})

        return f

    @staticmethod
    def expression_variables(expression: str) -> List[str]:
        """Free symbols of an expression, sorted by name."""
        names = [n for n in _IDENTIFIER.findall(TextNormalizer.normalize(expression))
                 if n not in FUNCTIONS and n not in CONSTANTS]
        try:
            tree = Calculator._safe_parse(expression, names)
        except ValueError:
            return []
        return sorted(str(s) for s in tree.free_symbols)


evaluate = Calculator.evaluate
compile_function = Calculator.compile_function
expression_variables = Calculator.expression_variables
