"""Extends the feature effects of value assignments by the feature effect of
their base variable."""

import logging
import typing as tp

from fe_analysis.fes.feature_effect_finder import VariableWithFeatureEffect
from fe_analysis.logic.formula import Disjunction
from fe_analysis.logic.simplifier import Simplifier

LOG = logging.getLogger(__name__)


class FeatureEffectStorage():
    """
    Keeps the feature effects of the current group of similarly named
    variables.

    Input is expected to be sorted by name, so a base variable ``VAR`` is
    stored before its value assignments ``VAR=k``. The storage is cleared as
    soon as a variable is added that does not start with any stored name.
    """

    def __init__(self) -> None:
        self.__effects: tp.Dict[str, VariableWithFeatureEffect] = {}

    def add(self, effect: VariableWithFeatureEffect) -> None:
        if not any(
            effect.variable.startswith(other) for other in self.__effects
        ):
            self.clear()
        self.__effects[effect.variable] = effect

    def get_feature_effect(
        self, variable: str
    ) -> tp.Optional[VariableWithFeatureEffect]:
        return self.__effects.get(variable, None)

    def get_base_variable(
        self, variable: str
    ) -> tp.Optional[VariableWithFeatureEffect]:
        """
        Look up the base variable of a value assignment.

        Args:
            variable: a variable name, possibly with a value assignment like
                      ``VAR=1``

        Returns: the stored feature effect of ``VAR``, or ``None``
        """
        index = variable.rfind("=")
        if index != -1:
            variable = variable[:index]
        return self.get_feature_effect(variable)

    def clear(self) -> None:
        self.__effects.clear()

    def __len__(self) -> int:
        return len(self.__effects)


class NonBooleanFeExpander():
    """
    For each ``VAR=k`` whose base variable ``VAR`` has a feature effect, emits
    the simplified disjunction of both feature effects.

    Outside of non-boolean mode, feature effects are passed on unchanged.

    Args:
        non_boolean_mode: whether variables carry value assignments
        simplifier: simplifies the combined feature effects
    """

    def __init__(self, non_boolean_mode: bool, simplifier: Simplifier) -> None:
        self.__storage = FeatureEffectStorage() if non_boolean_mode else None
        self.__simplifier = simplifier

    def expand(
        self, effects: tp.Iterable[VariableWithFeatureEffect]
    ) -> tp.Iterator[VariableWithFeatureEffect]:
        """
        Expand the feature effects of value assignments.

        Args:
            effects: feature effects sorted by variable name
        """
        for effect in effects:
            if self.__storage is None:
                yield effect
                continue

            base = self.__storage.get_base_variable(effect.variable)
            if base is not None:
                LOG.debug(
                    "Expanding %s with feature effect of %s", effect.variable,
                    base.variable
                )
                yield VariableWithFeatureEffect(
                    effect.variable,
                    self.__simplifier(
                        Disjunction(base.feature_effect, effect.feature_effect)
                    )
                )
            else:
                self.__storage.add(effect)
                yield effect
