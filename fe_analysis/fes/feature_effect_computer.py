"""Computation of a single feature effect from the presence conditions of a
variable."""

import typing as tp

from fe_analysis.logic.disjunction_queue import (
    DisjunctionQueue,
    SimplifyingDisjunctionQueue,
)
from fe_analysis.logic.formula import (
    FALSE,
    Conjunction,
    Formula,
    Negation,
    is_false,
    is_true,
    substitute,
)
from fe_analysis.logic.simplifier import Simplifier, default_simplify
from fe_analysis.utils.exceptions import SetUpError


class FeatureEffectComputer():
    """
    Computes feature effects.

    The feature effect of a variable ``v`` with presence conditions ``pcs``
    is the disjunction over all ``pc[v := 1] XOR pc[v := 0]``, i.e., it
    describes when changing ``v`` changes at least one presence condition.

    Args:
        simplify: whether the feature effect is simplified with
                  ``simplifier``, otherwise only constants are removed
        non_boolean: whether variables may carry an encoded value assignment,
                     e.g., ``VAR_eq_1``
        simplifier: simplifier used if ``simplify`` is set
    """

    def __init__(
        self,
        simplify: bool = False,
        non_boolean: bool = False,
        simplifier: tp.Optional[Simplifier] = None
    ) -> None:
        if simplify and simplifier is None:
            raise SetUpError(
                "Feature effects should be simplified, "
                "but no simplifier was passed."
            )
        self.__simplify = simplify
        self.__non_boolean = non_boolean
        self.__simplifier = simplifier

    def build_feature_effect(
        self, variable: str, pcs: tp.Iterable[Formula]
    ) -> Formula:
        """
        Compute the feature effect of a variable.

        Args:
            variable: the variable to compute the feature effect for
            pcs: all presence conditions the variable occurs in

        Returns: the feature effect, ``FALSE`` if there are no presence
                 conditions
        """
        result = self.__create_xor_tree(variable, pcs)

        if self.__non_boolean:
            index = variable.find("_eq_")
            if index != -1:
                # other value assignments of the same variable are exclusive
                result = substitute(
                    result, variable[:index] + "_eq_", False, exact=False
                )

        if self.__simplify and self.__simplifier is not None:
            return self.__simplifier(result)

        return default_simplify(result)

    def __new_inner_queue(self) -> DisjunctionQueue:
        return DisjunctionQueue(self.__simplify, self.__simplifier)

    def __create_xor_tree(
        self, variable: str, pcs: tp.Iterable[Formula]
    ) -> Formula:
        xor_trees: DisjunctionQueue
        if self.__simplify and self.__simplifier is not None:
            xor_trees = SimplifyingDisjunctionQueue(self.__simplifier)
        else:
            xor_trees = DisjunctionQueue()

        # sorted for a deterministic operand order
        for presence_condition in sorted(pcs, key=str):
            # A xor B <==> (A || B) && (!A || !B)
            true_formula = substitute(presence_condition, variable, True)
            false_formula = substitute(presence_condition, variable, False)

            positive = self.__new_inner_queue()
            positive.add(true_formula)
            positive.add(false_formula)
            at_least_one_positive = positive.get_disjunction(variable)

            negative = self.__new_inner_queue()
            negative.add(Negation(true_formula))
            negative.add(Negation(false_formula))
            at_least_one_negative = negative.get_disjunction(variable)

            xor: Formula
            if is_true(at_least_one_positive):
                xor = at_least_one_negative
            elif is_true(at_least_one_negative):
                xor = at_least_one_positive
            elif is_false(at_least_one_positive
                         ) or is_false(at_least_one_negative):
                xor = FALSE
            else:
                xor = Conjunction(at_least_one_positive, at_least_one_negative)
            xor_trees.add(xor)

        return xor_trees.get_disjunction(variable)
