"""Incremental construction of disjunctions without duplicated operands."""

import logging
import typing as tp
from collections import deque

from fe_analysis.logic.formula import (
    FALSE,
    TRUE,
    Disjunction,
    Formula,
    is_false,
    is_true,
)
from fe_analysis.logic.simplifier import Simplifier

LOG = logging.getLogger(__name__)


class DisjunctionQueue():
    """
    Collects formulas and combines them into one disjunction.

    Duplicated formulas and ``FALSE`` are dropped while adding. Adding
    ``TRUE`` makes the whole disjunction ``TRUE``.

    Args:
        simplify: whether each added formula is passed through ``simplifier``
                  first
        simplifier: simplifier used when ``simplify`` is set
    """

    def __init__(
        self,
        simplify: bool = False,
        simplifier: tp.Optional[Simplifier] = None
    ) -> None:
        self._simplifier = simplifier if simplify else None
        self.__operands: tp.List[Formula] = []
        self.__known: tp.Set[Formula] = set()
        self.__is_true = False

    def add(self, formula: Formula) -> None:
        """Add a formula to the disjunction."""
        if self.__is_true:
            return

        if self._simplifier is not None:
            formula = self._simplifier(formula)

        if is_true(formula):
            self.__is_true = True
        elif not is_false(formula) and formula not in self.__known:
            self.__known.add(formula)
            self.__operands.append(formula)

    def is_empty(self) -> bool:
        return not self.__is_true and not self.__operands

    def __len__(self) -> int:
        return len(self.__operands)

    def get_disjunction(self, name: tp.Optional[str] = None) -> Formula:
        """
        Combine all added formulas.

        Operands are paired in the order they were added, e.g., ``[a, b, c]``
        becomes ``c || (a || b)``. The queue stays unchanged, so this can be
        called again after more formulas were added.

        Args:
            name: name of the variable the disjunction belongs to, only used
                  for logging

        Returns: the disjunction of all added formulas, ``FALSE`` if nothing
                 was added
        """
        if self.__is_true:
            return TRUE
        if not self.__operands:
            return FALSE

        if name is not None and len(self.__operands) > 1:
            LOG.debug(
                "Combining %d formulas for %s", len(self.__operands), name
            )

        pending: tp.Deque[Formula] = deque(self.__operands)
        while len(pending) > 1:
            left = pending.popleft()
            right = pending.popleft()
            pending.append(Disjunction(left, right))
        return pending[0]


class SimplifyingDisjunctionQueue(DisjunctionQueue):
    """:class:`DisjunctionQueue` that simplifies each added formula and the
    combined disjunction."""

    def __init__(self, simplifier: Simplifier) -> None:
        super().__init__(True, simplifier)
        self.__simplifier = simplifier

    def get_disjunction(self, name: tp.Optional[str] = None) -> Formula:
        return self.__simplifier(super().get_disjunction(name))
