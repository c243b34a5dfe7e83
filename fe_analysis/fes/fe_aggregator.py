"""Aggregation of the feature effects of non-boolean variables."""

import logging
import re
import typing as tp

from fe_analysis.fes.feature_effect_finder import VariableWithFeatureEffect
from fe_analysis.logic.disjunction_queue import (
    DisjunctionQueue,
    SimplifyingDisjunctionQueue,
)
from fe_analysis.logic.simplifier import Simplifier
from fe_analysis.utils.exceptions import SetUpError

LOG = logging.getLogger(__name__)

OPERATOR_REGEX = re.compile(r"!=|<=|>=|=|<|>")

ContinuationCheck = tp.Callable[[str, str], bool]


def get_base_name(variable: str) -> str:
    """
    Cut a variable name at its first comparison operator.

    ``VAR=1`` and ``VAR<=1`` both result in ``VAR``, names without an
    operator are returned unchanged.
    """
    match = OPERATOR_REGEX.search(variable)
    if match is None:
        return variable
    return variable[:match.start()]


def starts_with_group_name(base_name: str, group_name: str) -> bool:
    """Default continuation check: a variable belongs to an open group if its
    name starts with the group name."""
    return base_name.startswith(group_name)


def same_group_name(base_name: str, group_name: str) -> bool:
    """Strict continuation check, only identical base names continue a
    group."""
    return base_name == group_name


class FeAggregator():
    """
    Merges the feature effects of all value assignments of a variable.

    Input has to be sorted by variable name. ``VAR``, ``VAR=0`` and
    ``VAR=1`` result in one feature effect for ``VAR`` that is the
    disjunction of the three. Groups are emitted as soon as a variable shows
    up that does not continue any of the open groups.

    Args:
        simplify: whether aggregated feature effects are simplified
        simplifier: simplifier used if ``simplify`` is set
        is_continuation: decides whether a base name continues an open group,
                         defaults to :func:`starts_with_group_name`
    """

    def __init__(
        self,
        simplify: bool = False,
        simplifier: tp.Optional[Simplifier] = None,
        is_continuation: tp.Optional[ContinuationCheck] = None
    ) -> None:
        if simplify and simplifier is None:
            raise SetUpError(
                "Aggregated feature effects should be simplified, "
                "but no simplifier was passed."
            )
        self.__simplify = simplify
        self.__simplifier = simplifier
        self.__is_continuation = is_continuation or starts_with_group_name

    def __new_queue(self) -> DisjunctionQueue:
        if self.__simplify and self.__simplifier is not None:
            return SimplifyingDisjunctionQueue(self.__simplifier)
        return DisjunctionQueue()

    def aggregate(
        self, effects: tp.Iterable[VariableWithFeatureEffect]
    ) -> tp.Iterator[VariableWithFeatureEffect]:
        """
        Merge the feature effects of each base variable.

        Args:
            effects: feature effects sorted by variable name

        Returns: one feature effect per base variable
        """
        grouped_queues: tp.Dict[str, DisjunctionQueue] = {}

        for effect in effects:
            base_name = get_base_name(effect.variable)

            conditions = grouped_queues.get(base_name, None)
            if conditions is None:
                if grouped_queues and not any(
                    self.__is_continuation(base_name, group_name)
                    for group_name in grouped_queues
                ):
                    yield from self.__aggregate_groups(grouped_queues)

                conditions = self.__new_queue()
                grouped_queues[base_name] = conditions

            conditions.add(effect.feature_effect)

        yield from self.__aggregate_groups(grouped_queues)

    @staticmethod
    def __aggregate_groups(
        grouped_queues: tp.Dict[str, DisjunctionQueue]
    ) -> tp.List[VariableWithFeatureEffect]:
        results = [
            VariableWithFeatureEffect(name, queue.get_disjunction(name))
            for name, queue in sorted(grouped_queues.items())
        ]
        LOG.debug("Aggregated %d variables", len(results))
        grouped_queues.clear()
        return results
