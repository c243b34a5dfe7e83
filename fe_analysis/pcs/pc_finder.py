"""Collects the presence conditions of every variable from the code model."""

import logging
import typing as tp
from dataclasses import dataclass

from fe_analysis.code_model import BuildModel, CodeBlock, SourceFile
from fe_analysis.helper import PresenceConditionAnalysisHelper
from fe_analysis.logic.formula import Conjunction, Formula, find_vars, is_true
from fe_analysis.logic.simplifier import Simplifier
from fe_analysis.settings import AnalysisSettings
from fe_analysis.utils.exceptions import SetUpError

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class VariableWithPcs:
    """A variable and all presence conditions it occurs in."""
    variable: str
    pcs: tp.FrozenSet[Formula]

    def __str__(self) -> str:
        return f"PCs[{self.variable}] = {sorted(map(str, self.pcs))}"


class PcFinder():
    """
    Finds all presence conditions for each variable.

    Args:
        settings: analysis settings
        helper: decides which presence conditions are relevant
        simplifier: used to simplify the found presence conditions if
                    presence conditions should be simplified
    """

    def __init__(
        self,
        settings: AnalysisSettings,
        helper: PresenceConditionAnalysisHelper,
        simplifier: tp.Optional[Simplifier] = None
    ) -> None:
        self.__helper = helper
        self.__add_all_bm_pcs = settings.add_all_bm_pcs
        self.__combine_non_boolean = settings.combine_non_boolean
        self.__simplify = settings.simplify_pcs
        if self.__simplify and simplifier is None:
            raise SetUpError(
                "Presence conditions should be simplified, "
                "but no simplifier was passed."
            )
        self.__simplifier = simplifier

    def find(
        self,
        source_files: tp.Iterable[SourceFile],
        build_model: tp.Optional[BuildModel] = None,
        build_model_expected: bool = False
    ) -> tp.List[VariableWithPcs]:
        """
        Collect the presence conditions of all source files.

        Args:
            source_files: the source files of the code model
            build_model: build model with the file presence conditions
            build_model_expected: whether a missing build model should be
                                  reported

        Returns: the variables and their presence conditions, sorted by
                 variable name
        """
        if build_model is not None:
            LOG.debug(
                "Calculating presence conditions including information from "
                "build model"
            )
        elif build_model_expected:
            LOG.warning(
                "Should use build information for calculation of presence "
                "conditions, but no build model was passed. "
                "Ignoring build model."
            )
        else:
            LOG.debug(
                "Calculating presence conditions without considering build "
                "model"
            )

        result: tp.Dict[str, tp.Set[Formula]] = {}
        for source_file in source_files:
            file_pc: tp.Optional[Formula] = None
            if build_model is not None:
                file_pc = build_model.get_pc(source_file.path)
                if file_pc is not None:
                    LOG.debug("File PC for %s: %s", source_file.path, file_pc)
                    self.__add_pc_to_result(result, file_pc)
                else:
                    LOG.warning(
                        "No file PC for %s in build model", source_file.path
                    )

            for block in source_file:
                self.__find_pcs_in_block(block, result, file_pc, False)

        if build_model is not None and self.__add_all_bm_pcs:
            for file_path in build_model:
                file_pc = build_model.get_pc(file_path)
                if file_pc is not None:
                    self.__add_pc_to_result(result, file_pc)

        return self.__sort_results(result)

    def __find_pcs_in_block(
        self, block: CodeBlock, result: tp.Dict[str, tp.Set[Formula]],
        file_pc: tp.Optional[Formula], parent_is_relevant: bool
    ) -> None:
        presence_condition = block.presence_condition

        # nested PCs contain the accepted PC of the parent
        if parent_is_relevant or self.__helper.is_relevant_formula(
            presence_condition
        ):
            parent_is_relevant = True
            if file_pc is not None:
                if is_true(presence_condition):
                    presence_condition = file_pc
                else:
                    presence_condition = Conjunction(
                        file_pc, presence_condition
                    )
            self.__add_pc_to_result(result, presence_condition)

        for child in block:
            self.__find_pcs_in_block(child, result, file_pc, parent_is_relevant)

    def __add_pc_to_result(
        self, result: tp.Dict[str, tp.Set[Formula]], presence_condition: Formula
    ) -> None:
        if self.__combine_non_boolean:
            presence_condition = self.__helper.remove_formula_replacements(
                presence_condition
            )

        for variable in find_vars(presence_condition):
            result.setdefault(variable, set()).add(presence_condition)

    def __sort_results(
        self, pc_map: tp.Dict[str, tp.Set[Formula]]
    ) -> tp.List[VariableWithPcs]:
        LOG.info(
            "Sorting %sPCs of %d variables",
            "and simplifying " if self.__simplify else "", len(pc_map)
        )

        results = []
        for variable in sorted(pc_map):
            pcs: tp.Iterable[Formula] = pc_map[variable]
            if self.__simplify and self.__simplifier is not None:
                pcs = map(self.__simplifier, pcs)
            results.append(VariableWithPcs(variable, frozenset(pcs)))

        return results
