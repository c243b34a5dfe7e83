"""Helper functionality shared by the presence-condition based analyses."""

import re
import typing as tp

from fe_analysis.code_model import VariabilityModel
from fe_analysis.logic.formula import Formula, find_vars, rename_variables
from fe_analysis.settings import AnalysisSettings, SimplificationType
from fe_analysis.utils.exceptions import SetUpError

# Encoding of non-boolean value assignments inside variable names
NON_BOOLEAN_REPLACEMENTS = (
    ("_eq_", "="),
    ("_ne_", "!="),
    ("_gt_", ">"),
    ("_ge_", ">="),
    ("_lt_", "<"),
    ("_le_", "<="),
)


class PresenceConditionAnalysisHelper():
    """
    Decides which variables are relevant for an analysis and translates
    non-boolean variable names.

    Args:
        settings: analysis settings
        variability_model: model with the known variables, required if only
                           variability model variables are relevant

    Raises:
        SetUpError: if only variability model variables should be considered,
                    but no variability model was passed
    """

    def __init__(
        self,
        settings: AnalysisSettings,
        variability_model: tp.Optional[VariabilityModel] = None
    ) -> None:
        self.__settings = settings
        self.__relevant_vars_pattern = re.compile(settings.relevant_variables)

        if settings.use_varmodel_variables_only and variability_model is None:
            raise SetUpError(
                "use_varmodel_variables_only was specified, but no "
                "variability model was passed."
            )
        self.__variability_model = (
            variability_model
            if settings.use_varmodel_variables_only else None
        )

    @property
    def settings(self) -> AnalysisSettings:
        return self.__settings

    @property
    def simplification_mode(self) -> SimplificationType:
        return self.__settings.simplification

    def is_non_boolean_mode(self) -> bool:
        return self.__settings.non_boolean_mode

    def is_relevant(self, variable: str) -> bool:
        """
        Check whether a variable should be part of the results.

        Args:
            variable: name of the variable

        Returns: ``True`` if the variable is in the variability model, or
                 matches the relevant variables pattern if no variability
                 model is used
        """
        if self.__variability_model is not None:
            if variable in self.__variability_model:
                return True
            if self.__settings.non_boolean_replacements:
                index = variable.find("_eq_")
                if index > -1:
                    return variable[:index] in self.__variability_model
            return False

        return self.__relevant_vars_pattern.fullmatch(variable) is not None

    def is_relevant_formula(self, formula: Formula) -> bool:
        """Check whether at least one variable of a formula is relevant."""
        return any(
            self.is_relevant(variable) for variable in find_vars(formula)
        )

    def do_replacements(self, name: str) -> str:
        """
        Translate the encoded operators of a non-boolean variable name.

        ``VAR_eq_1`` becomes ``VAR=1``. Names are only translated in
        non-boolean mode.
        """
        if self.__settings.non_boolean_mode:
            for encoded, operator in NON_BOOLEAN_REPLACEMENTS:
                name = name.replace(encoded, operator)
        return name

    def do_formula_replacements(self, formula: Formula) -> Formula:
        """Translate the names of all variables of a formula, see
        :meth:`do_replacements`."""
        if not self.__settings.non_boolean_mode:
            return formula
        return rename_variables(formula, self.do_replacements)

    @staticmethod
    def remove_replacements(name: str) -> str:
        """Cut a non-boolean variable name at its value assignment, e.g.,
        ``VAR_eq_1`` becomes ``VAR``."""
        for encoded, _ in NON_BOOLEAN_REPLACEMENTS:
            index = name.find(encoded)
            if index != -1:
                return name[:index]
        return name

    def remove_formula_replacements(self, formula: Formula) -> Formula:
        return rename_variables(formula, self.remove_replacements)
