"""Computes the feature effects of all relevant variables."""

import logging
import typing as tp
from dataclasses import dataclass

from fe_analysis.fes.feature_effect_computer import FeatureEffectComputer
from fe_analysis.helper import PresenceConditionAnalysisHelper
from fe_analysis.logic.formula import Formula
from fe_analysis.logic.simplifier import Simplifier
from fe_analysis.pcs.pc_finder import VariableWithPcs
from fe_analysis.settings import AnalysisSettings

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class VariableWithFeatureEffect:
    """A variable and its feature effect."""
    variable: str
    feature_effect: Formula

    def __str__(self) -> str:
        return f"FeatureEffect[{self.variable}] = {self.feature_effect}"


class FeatureEffectFinder():
    """
    Computes feature effects one variable after another.

    Args:
        settings: analysis settings
        helper: decides which variables are relevant
        simplifier: used if results should be simplified
    """

    def __init__(
        self,
        settings: AnalysisSettings,
        helper: PresenceConditionAnalysisHelper,
        simplifier: tp.Optional[Simplifier] = None
    ) -> None:
        self._helper = helper
        self._computer = FeatureEffectComputer(
            settings.simplify_results, settings.non_boolean_replacements,
            simplifier
        )

    def process_single(
        self, var_with_pcs: VariableWithPcs
    ) -> tp.Optional[VariableWithFeatureEffect]:
        """
        Compute the feature effect of one variable.

        Args:
            var_with_pcs: the variable and its presence conditions

        Returns: the feature effect with human-readable names in non-boolean
                 mode, ``None`` if the variable is not relevant
        """
        variable = var_with_pcs.variable
        if not self._helper.is_relevant(variable):
            return None

        feature_effect = self._computer.build_feature_effect(
            variable, var_with_pcs.pcs
        )
        return VariableWithFeatureEffect(
            self._helper.do_replacements(variable),
            self._helper.do_formula_replacements(feature_effect)
        )

    def run(
        self, variables: tp.Iterable[VariableWithPcs]
    ) -> tp.Iterator[VariableWithFeatureEffect]:
        """Compute the feature effects of all relevant variables, in input
        order."""
        processed = 0
        for var_with_pcs in variables:
            result = self.process_single(var_with_pcs)
            processed += 1
            if result is not None:
                yield result
        LOG.info("Processed %d variables", processed)
