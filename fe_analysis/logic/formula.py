"""
Boolean formula model used for presence conditions and feature effects.

A formula is an immutable tree built from six node kinds: the two constants
:data:`TRUE` and :data:`FALSE`, :class:`Variable`, :class:`Negation`,
:class:`Conjunction` and :class:`Disjunction`. Equality is structural, no
canonicalization is performed.
"""

from __future__ import annotations

import typing as tp
from dataclasses import dataclass


class Formula:
    """Base class of all formula nodes."""

    __slots__ = ()

    def __and__(self, other: Formula) -> Conjunction:
        return Conjunction(self, other)

    def __or__(self, other: Formula) -> Disjunction:
        return Disjunction(self, other)

    def __invert__(self) -> Negation:
        return Negation(self)

    def __str__(self) -> str:
        return to_c_style(self)


@dataclass(frozen=True, eq=True, repr=False)
class Constant(Formula):
    """The constants ``true`` and ``false``."""
    value: bool

    def __repr__(self) -> str:
        return "TRUE" if self.value else "FALSE"


TRUE = Constant(True)
FALSE = Constant(False)


@dataclass(frozen=True, eq=True)
class Variable(Formula):
    """A configuration variable."""
    name: str


@dataclass(frozen=True, eq=True)
class Negation(Formula):
    """Logical not."""
    formula: Formula


@dataclass(frozen=True, eq=True)
class Conjunction(Formula):
    """Logical and of two formulas."""
    left: Formula
    right: Formula


@dataclass(frozen=True, eq=True)
class Disjunction(Formula):
    """Logical or of two formulas."""
    left: Formula
    right: Formula


def is_true(formula: Formula) -> bool:
    return isinstance(formula, Constant) and formula.value


def is_false(formula: Formula) -> bool:
    return isinstance(formula, Constant) and not formula.value


def find_vars(formula: Formula) -> tp.Set[str]:
    """
    Collect the names of all free variables of a formula.

    Args:
        formula: the formula to walk through

    Returns: the set of variable names
    """
    result: tp.Set[str] = set()
    _find_vars_rec(formula, result)
    return result


def _find_vars_rec(formula: Formula, result: tp.Set[str]) -> None:
    if isinstance(formula, Constant):
        return
    if isinstance(formula, Variable):
        result.add(formula.name)
    elif isinstance(formula, Negation):
        _find_vars_rec(formula.formula, result)
    elif isinstance(formula, (Conjunction, Disjunction)):
        _find_vars_rec(formula.left, result)
        _find_vars_rec(formula.right, result)
    else:
        raise NotImplementedError()


def substitute(
    formula: Formula,
    variable: str,
    value: bool,
    exact: bool = True
) -> Formula:
    """
    Replace a variable with a constant.

    Args:
        formula: the formula to substitute in
        variable: name of the variable to replace
        value: the constant the variable is replaced with
        exact: if ``False``, every variable whose name starts with
               ``variable`` is replaced

    Returns: a new formula, parts that do not contain the variable are shared
             with the input
    """
    if isinstance(formula, Constant):
        return formula
    if isinstance(formula, Variable):
        if exact:
            matches = formula.name == variable
        else:
            matches = formula.name.startswith(variable)
        if matches:
            return TRUE if value else FALSE
        return formula
    if isinstance(formula, Negation):
        inner = substitute(formula.formula, variable, value, exact)
        return formula if inner is formula.formula else Negation(inner)
    if isinstance(formula, (Conjunction, Disjunction)):
        left = substitute(formula.left, variable, value, exact)
        right = substitute(formula.right, variable, value, exact)
        if left is formula.left and right is formula.right:
            return formula
        return type(formula)(left, right)
    raise NotImplementedError()


def rename_variables(
    formula: Formula, rename: tp.Callable[[str], str]
) -> Formula:
    """Rebuild ``formula`` with every variable name passed through
    ``rename``."""
    if isinstance(formula, Constant):
        return formula
    if isinstance(formula, Variable):
        return Variable(rename(formula.name))
    if isinstance(formula, Negation):
        return Negation(rename_variables(formula.formula, rename))
    if isinstance(formula, (Conjunction, Disjunction)):
        return type(formula)(
            rename_variables(formula.left, rename),
            rename_variables(formula.right, rename)
        )
    raise NotImplementedError()


def split_at_or(formula: Formula) -> tp.List[Formula]:
    """
    Split a formula at its top-level disjunctions.

    ``A || (B && C)`` results in ``[A, B && C]``. A formula without a
    disjunction at the top results in a list with just that formula.
    """
    if isinstance(formula, Disjunction):
        return split_at_or(formula.left) + split_at_or(formula.right)
    return [formula]


def literal_size(formula: Formula) -> int:
    """Number of leaves (variables and constants) in the formula tree."""
    if isinstance(formula, (Constant, Variable)):
        return 1
    if isinstance(formula, Negation):
        return literal_size(formula.formula)
    if isinstance(formula, (Conjunction, Disjunction)):
        return literal_size(formula.left) + literal_size(formula.right)
    raise NotImplementedError()


def conjunction_of(formulas: tp.Iterable[Formula]) -> Formula:
    """Left-associated conjunction of all formulas, ``TRUE`` if empty."""
    result: tp.Optional[Formula] = None
    for formula in formulas:
        result = formula if result is None else Conjunction(result, formula)
    return TRUE if result is None else result


def to_c_style(formula: Formula) -> str:
    """
    Render a formula as C-style boolean expression.

    Sub-terms are parenthesized whenever reparsing with left-associative
    operators (``&&`` binding tighter than ``||``) would not yield the same
    tree.
    """
    if isinstance(formula, Constant):
        return "1" if formula.value else "0"
    if isinstance(formula, Variable):
        return formula.name
    if isinstance(formula, Negation):
        inner = to_c_style(formula.formula)
        if isinstance(formula.formula, (Conjunction, Disjunction)):
            return f"!({inner})"
        return f"!{inner}"
    if isinstance(formula, Conjunction):
        left = _operand(formula.left, wrap=(Disjunction,))
        right = _operand(formula.right, wrap=(Disjunction, Conjunction))
        return f"{left} && {right}"
    if isinstance(formula, Disjunction):
        left = _operand(formula.left, wrap=())
        right = _operand(formula.right, wrap=(Disjunction,))
        return f"{left} || {right}"
    raise NotImplementedError()


def _operand(
    formula: Formula, wrap: tp.Tuple[tp.Type[Formula], ...]
) -> str:
    if wrap and isinstance(formula, wrap):
        return f"({to_c_style(formula)})"
    return to_c_style(formula)
