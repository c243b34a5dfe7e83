"""Splits feature effects by the architecture components of their
variables."""

import re
import typing as tp
from dataclasses import dataclass

from fe_analysis.arch_components.arch_component_storage import (
    ArchComponentStorage,
)
from fe_analysis.fes.feature_effect_finder import VariableWithFeatureEffect
from fe_analysis.logic.disjunction_queue import DisjunctionQueue
from fe_analysis.logic.formula import Formula, find_vars, is_false, split_at_or
from fe_analysis.utils.exceptions import SetUpError

OPERATOR_REGEX = re.compile(r"=|<|>|>=|<=|!=|\+|\*|-|/|%|\||&")


@dataclass(frozen=True)
class FeatureEffectWithArchComponent:
    """
    Feature effect of a variable, split into the parts that depend on
    variables of the same, of mixed and of other architecture components.

    Parts that are ``FALSE`` are dropped, but ``same_component`` is always
    kept if the other two parts are missing.
    """
    variable: str
    same_component: tp.Optional[Formula]
    mixed_component: tp.Optional[Formula]
    other_component: tp.Optional[Formula]

    @staticmethod
    def create(
        variable: str, same_component: tp.Optional[Formula],
        mixed_component: tp.Optional[Formula],
        other_component: tp.Optional[Formula]
    ) -> 'FeatureEffectWithArchComponent':
        """Create the split feature effect, dropping ``FALSE`` parts."""
        if mixed_component is not None and is_false(mixed_component):
            mixed_component = None
        if other_component is not None and is_false(other_component):
            other_component = None
        if same_component is not None and is_false(same_component) and (
            mixed_component is not None or other_component is not None
        ):
            same_component = None

        return FeatureEffectWithArchComponent(
            variable, same_component, mixed_component, other_component
        )


def _base_name(variable: str) -> str:
    match = OPERATOR_REGEX.search(variable)
    if match is None:
        return variable
    return variable[:match.start()]


class ArchComponentResolver():
    """
    Splits feature effects at their top-level disjunctions and sorts the
    clauses by the components of their variables.

    Args:
        storage: the architecture components of the variables

    Raises:
        SetUpError: if no storage was passed
    """

    def __init__(self, storage: tp.Optional[ArchComponentStorage]) -> None:
        if storage is None:
            raise SetUpError("No architecture component storage was passed.")
        self.__storage = storage

    def __classify(self, variable: str,
                   clause: Formula) -> tp.Tuple[bool, bool]:
        found_same = False
        found_other = False
        for clause_var in find_vars(clause):
            if self.__storage.is_same_component(
                variable, _base_name(clause_var)
            ):
                found_same = True
            else:
                found_other = True
        return found_same, found_other

    def resolve(
        self, effect: VariableWithFeatureEffect
    ) -> FeatureEffectWithArchComponent:
        """
        Split a single feature effect.

        Clauses without any variable count as same component.
        """
        variable = effect.variable
        same_component = DisjunctionQueue()
        mixed_component = DisjunctionQueue()
        other_component = DisjunctionQueue()

        for clause in split_at_or(effect.feature_effect):
            found_same, found_other = self.__classify(variable, clause)
            if found_same and found_other:
                mixed_component.add(clause)
            elif found_other:
                other_component.add(clause)
            else:
                same_component.add(clause)

        return FeatureEffectWithArchComponent.create(
            variable, same_component.get_disjunction(variable),
            mixed_component.get_disjunction(variable),
            other_component.get_disjunction(variable)
        )

    def run(
        self, effects: tp.Iterable[VariableWithFeatureEffect]
    ) -> tp.Iterator[FeatureEffectWithArchComponent]:
        for effect in effects:
            yield self.resolve(effect)
