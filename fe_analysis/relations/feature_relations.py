"""
Depends-on relations between features, derived from feature effects.

Every variable that occurs in the feature effect of a feature ``F`` is a
feature ``F`` depends on. Value comparisons like ``VAR=1`` or ``VAR>0`` are
reduced to the compared feature ``VAR``.
"""

import logging
import re
import typing as tp
from dataclasses import dataclass

from fe_analysis.fes.feature_effect_finder import VariableWithFeatureEffect
from fe_analysis.logic.formula import Formula, find_vars, substitute
from fe_analysis.logic.simplifier import default_simplify

LOG = logging.getLogger(__name__)

OPERATOR_REGEX = re.compile(r"(=|<|>|>=|<=|!=|\+|\*|-|/|%|\||&)")

NO_DEPENDENCY = "TRUE"


def normalize_variable(variable: str) -> str:
    """
    Cut off everything from the first comparison or arithmetic operator.

    >>> normalize_variable("VAR=1")
    'VAR'
    """
    match = OPERATOR_REGEX.search(variable)
    if match is None:
        return variable
    return variable[:match.start()].strip()


def compute_context(depends_on: str, feature_effect: Formula) -> Formula:
    """The part of ``feature_effect`` that is left if ``depends_on`` is
    selected."""
    return default_simplify(substitute(feature_effect, depends_on, True))


@dataclass(frozen=True)
class FeatureDependencyRelation:
    """``feature`` depends on ``depends_on`` in the given context."""
    feature: str
    depends_on: str
    context: Formula

    def __str__(self) -> str:
        return f"{self.feature} -> {self.depends_on} [{self.context}]"


class FeatureRelationStorage():
    """
    Remembers which relations were already emitted for the current group of
    similarly named features.

    Input is expected to be sorted by name, so the storage is cleared as soon
    as a feature is seen that does not start with any stored feature.
    """

    def __init__(self) -> None:
        self.__relations: tp.Dict[str, tp.Set[str]] = {}

    def mark_processed(self, feature: str, depends_on: str) -> bool:
        """
        Record a relation.

        Returns: ``True`` if the relation was not recorded before
        """
        if feature not in self.__relations:
            if not any(
                feature.startswith(other) for other in self.__relations
            ):
                self.__relations.clear()
            self.__relations[feature] = set()

        relations = self.__relations[feature]
        if depends_on in relations:
            return False
        relations.add(depends_on)
        return True

    def __len__(self) -> int:
        return len(self.__relations)


class FeatureRelations():
    """Computes the distinct depends-on relations of feature effects."""

    def __init__(self) -> None:
        self.__storage = FeatureRelationStorage()

    def find(
        self, effect: VariableWithFeatureEffect
    ) -> tp.List[FeatureDependencyRelation]:
        """
        Compute the relations of a single feature effect that were not
        reported before.

        A constant feature effect results in a single relation to
        ``TRUE``, with the feature effect as context.

        Args:
            effect: the feature and its feature effect

        Returns: the new relations, sorted by the feature depended on
        """
        feature = normalize_variable(effect.variable)
        variables = find_vars(effect.feature_effect)

        if not variables:
            if self.__storage.mark_processed(feature, NO_DEPENDENCY):
                return [
                    FeatureDependencyRelation(
                        feature, NO_DEPENDENCY, effect.feature_effect
                    )
                ]
            return []

        depends_on_vars = {
            normalize_variable(variable) for variable in variables
        }
        depends_on_vars.discard("")
        depends_on_vars.discard(feature)

        return [
            FeatureDependencyRelation(
                feature, depends_on,
                compute_context(depends_on, effect.feature_effect)
            )
            for depends_on in sorted(depends_on_vars)
            if self.__storage.mark_processed(feature, depends_on)
        ]

    def run(
        self, effects: tp.Iterable[VariableWithFeatureEffect]
    ) -> tp.Iterator[FeatureDependencyRelation]:
        count = 0
        for effect in effects:
            yield from self.find(effect)
            count += 1
        LOG.debug("Computed feature relations of %d feature effects", count)
