"""
Formula simplification.

Every simplifier satisfies the ``Simplifier`` contract: it takes a formula and
returns an equivalent one. :func:`default_simplify` only folds constants,
:func:`simplify` performs a full logic minimization with pyeda.
"""

import threading
import typing as tp

from pyeda.boolalg.expr import Complement  # type: ignore
from pyeda.boolalg.expr import Variable as PyedaVariable
from pyeda.inter import (  # type: ignore
    Expression,
    espresso_exprs,
    expr,
    exprvar,
)

from fe_analysis.logic.formula import (
    FALSE,
    TRUE,
    Conjunction,
    Constant,
    Disjunction,
    Formula,
    Negation,
    Variable,
    conjunction_of,
    is_false,
    is_true,
)

Simplifier = tp.Callable[[Formula], Formula]


def default_simplify(formula: Formula) -> Formula:
    """
    Remove constants from a formula, bottom-up.

    Only the rules ``!1 = 0``, ``!0 = 1``, ``x && 0 = 0``, ``x && 1 = x``,
    ``x || 1 = 1`` and ``x || 0 = x`` are applied, everything else is kept as
    is.
    """
    if isinstance(formula, (Constant, Variable)):
        return formula
    if isinstance(formula, Negation):
        inner = default_simplify(formula.formula)
        if isinstance(inner, Constant):
            return FALSE if inner.value else TRUE
        return formula if inner is formula.formula else Negation(inner)
    if isinstance(formula, Conjunction):
        left = default_simplify(formula.left)
        right = default_simplify(formula.right)
        if is_false(left) or is_false(right):
            return FALSE
        if is_true(left):
            return right
        if is_true(right):
            return left
        if left is formula.left and right is formula.right:
            return formula
        return Conjunction(left, right)
    if isinstance(formula, Disjunction):
        left = default_simplify(formula.left)
        right = default_simplify(formula.right)
        if is_true(left) or is_true(right):
            return TRUE
        if is_false(left):
            return right
        if is_false(right):
            return left
        if left is formula.left and right is formula.right:
            return formula
        return Disjunction(left, right)
    raise NotImplementedError()


class PyedaSimplifier():
    """
    Full logic simplifier backed by pyeda.

    Variable names are hex encoded for pyeda, as it does not accept the
    operator characters used by non-boolean variables.
    """

    __LOCK = threading.Lock()

    def __call__(self, formula: Formula) -> Formula:
        return self.simplify(formula)

    def simplify(self, formula: Formula) -> Formula:
        """
        Minimize a formula.

        Args:
            formula: the formula to simplify

        Returns: an equivalent formula in minimal disjunctive normal form or
                 one of the constants
        """
        if isinstance(formula, (Constant, Variable)):
            return formula

        # pyeda keeps global expression caches
        with self.__LOCK:
            expression = self.__to_expression(formula)
            if expression.equivalent(expr(True)):
                return TRUE
            if expression.equivalent(expr(False)):
                return FALSE

            minimized = espresso_exprs(expression.to_dnf())[0]
            return self.__from_expression(minimized)

    @staticmethod
    def __pyeda_name(name: str) -> str:
        return f"v{name.encode('utf-8').hex()}"

    @staticmethod
    def __original_name(pyeda_name: str) -> str:
        return bytes.fromhex(pyeda_name[1:]).decode('utf-8')

    def __to_expression(self, formula: Formula) -> Expression:
        if isinstance(formula, Constant):
            return expr(formula.value)
        if isinstance(formula, Variable):
            return exprvar(self.__pyeda_name(formula.name))
        if isinstance(formula, Negation):
            return ~self.__to_expression(formula.formula)
        if isinstance(formula, Conjunction):
            return self.__to_expression(formula.left
                                       ) & self.__to_expression(formula.right)
        if isinstance(formula, Disjunction):
            return self.__to_expression(formula.left
                                       ) | self.__to_expression(formula.right)
        raise NotImplementedError()

    def __from_literal(self, expression: Expression) -> Formula:
        if isinstance(expression, Complement):
            return Negation(self.__from_literal(~expression))
        if isinstance(expression, PyedaVariable):
            return Variable(self.__original_name(str(expression)))
        raise NotImplementedError()

    def __from_expression(self, expression: Expression) -> Formula:
        if expression.is_zero() or expression.is_one():
            return TRUE if expression.is_one() else FALSE
        if expression.ASTOP == "lit":
            return self.__from_literal(expression)
        if expression.ASTOP == "and":
            return conjunction_of(
                self.__sorted(map(self.__from_expression, expression.xs))
            )
        if expression.ASTOP == "or":
            clauses = self.__sorted(map(self.__from_expression, expression.xs))
            result = clauses[0]
            for clause in clauses[1:]:
                result = Disjunction(result, clause)
            return result
        raise NotImplementedError()

    @staticmethod
    def __sorted(formulas: tp.Iterable[Formula]) -> tp.List[Formula]:
        return sorted(formulas, key=str)


_DEFAULT_SIMPLIFIER = PyedaSimplifier()


def simplify(formula: Formula) -> Formula:
    """Simplify a formula with a shared :class:`PyedaSimplifier`."""
    return _DEFAULT_SIMPLIFIER.simplify(formula)
