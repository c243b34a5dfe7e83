"""
CSV tables for analysis inputs and results.

Formulas are stored in their C-style string representation. Readers skip rows
that cannot be parsed and log them with their line number.
"""
import logging
import typing as tp
from pathlib import Path

import pandas as pd

from fe_analysis.arch_components.arch_component_resolver import (
    FeatureEffectWithArchComponent,
)
from fe_analysis.arch_components.arch_component_storage import (
    ArchComponentStorage,
)
from fe_analysis.fes.feature_effect_finder import VariableWithFeatureEffect
from fe_analysis.logic.formula import Formula
from fe_analysis.logic.parser import parse_formula
from fe_analysis.logic.simplifier import Simplifier
from fe_analysis.pcs.pc_finder import VariableWithPcs
from fe_analysis.relations.feature_relations import FeatureDependencyRelation
from fe_analysis.relations.potential_parent_finder import (
    VariableWithPotentialParents,
)
from fe_analysis.utils.exceptions import FormulaParseError, TableFormatError

LOG = logging.getLogger(__name__)

VARIABLE_COL = "Variable"
PCS_COL = "Presence Conditions"
FE_COL = "Feature Effect"
ARCH_COMPONENT_COL = "Architecture Component"
SAME_COMPONENT_COL = "Same Component"
MIXED_COMPONENT_COL = "Mixed Component"
OTHER_COMPONENT_COL = "Other Component"
FEATURE_COL = "Feature"
PARENT_COL = "Parent"
PROBABILITY_COL = "Probability"
DEPENDS_ON_COL = "Depends On"
CONTEXT_COL = "Context"

TablePath = tp.Union[str, Path, tp.TextIO]


def _read_table(path: TablePath, min_columns: int) -> pd.DataFrame:
    table = pd.read_csv(path, dtype=str, keep_default_na=False)
    if len(table.columns) < min_columns:
        raise TableFormatError(
            f"Expected at least {min_columns} columns, "
            f"got {len(table.columns)}"
        )
    return table


def _line_number(row_index: int) -> int:
    # first line holds the header
    return row_index + 2


def _format_pcs(pcs: tp.Iterable[Formula]) -> str:
    return f"[{', '.join(sorted(map(str, pcs)))}]"


def _parse_pcs(pc_list: str) -> tp.List[Formula]:
    pc_list = pc_list.strip()
    if not pc_list.startswith("[") or not pc_list.endswith("]"):
        raise FormulaParseError(
            "List does not start with '[' or does not end with ']'"
        )
    content = pc_list[1:-1].strip()
    if not content:
        return []
    return [parse_formula(pc_str) for pc_str in content.split(",")]


def read_pcs(
    path: TablePath,
    simplifier: tp.Optional[Simplifier] = None
) -> tp.List[VariableWithPcs]:
    """
    Read a presence condition table.

    The first column holds the variable, the second a list of presence
    conditions like ``[A && B, !C]``.

    Args:
        path: file to read
        simplifier: if given, every presence condition is simplified

    Returns: the variables with their presence conditions, in file order
    """
    table = _read_table(path, 2)
    results = []
    for row_index, row in enumerate(table.itertuples(index=False)):
        variable, pc_list = row[0], row[1]
        try:
            pcs = _parse_pcs(pc_list)
        except FormulaParseError as err:
            LOG.error(
                "Line %d can not be read: %s", _line_number(row_index), err
            )
            continue

        if simplifier is not None:
            pcs = [simplifier(pc) for pc in pcs]
        results.append(VariableWithPcs(variable, frozenset(pcs)))
    return results


def read_feature_effects(
    path: TablePath
) -> tp.List[VariableWithFeatureEffect]:
    """
    Read a feature effect table with the variable in the first and the
    feature effect in the second column.

    Args:
        path: file to read

    Returns: the feature effects, in file order
    """
    table = _read_table(path, 2)
    results = []
    for row_index, row in enumerate(table.itertuples(index=False)):
        try:
            feature_effect = parse_formula(row[1])
        except FormulaParseError as err:
            LOG.error(
                "Can't parse formula in line %d: \"%s\" (%s)",
                _line_number(row_index), row[1], err
            )
            continue
        results.append(VariableWithFeatureEffect(row[0], feature_effect))
    return results


def read_arch_components(path: TablePath) -> ArchComponentStorage:
    """
    Read the architecture components of variables.

    Variables are read from the first column, components from the column
    with the header ``Architecture Component`` (case insensitive).

    Args:
        path: file to read

    Returns: storage with all variables that have a component
    """
    table = _read_table(path, 2)
    component_cols = [
        col for col in table.columns[1:]
        if str(col).lower() == ARCH_COMPONENT_COL.lower()
    ]
    if not component_cols:
        raise TableFormatError(
            f"Couldn't find column with header \"{ARCH_COMPONENT_COL}\""
        )

    storage = ArchComponentStorage()
    for variable, component in zip(
        table.iloc[:, 0], table[component_cols[0]]
    ):
        storage.set_component(variable, component.strip())
    return storage


def pcs_to_dataframe(variables: tp.Iterable[VariableWithPcs]) -> pd.DataFrame:
    return pd.DataFrame([{
        VARIABLE_COL: var.variable,
        PCS_COL: _format_pcs(var.pcs)
    } for var in variables],
                        columns=[VARIABLE_COL, PCS_COL])


def feature_effects_to_dataframe(
    effects: tp.Iterable[VariableWithFeatureEffect]
) -> pd.DataFrame:
    return pd.DataFrame([{
        VARIABLE_COL: effect.variable,
        FE_COL: str(effect.feature_effect)
    } for effect in effects],
                        columns=[VARIABLE_COL, FE_COL])


def arch_split_to_dataframe(
    effects: tp.Iterable[FeatureEffectWithArchComponent]
) -> pd.DataFrame:
    """Missing parts of a split feature effect are written as empty
    cells."""

    def to_str(formula: tp.Optional[Formula]) -> str:
        return "" if formula is None else str(formula)

    return pd.DataFrame([{
        VARIABLE_COL: effect.variable,
        SAME_COMPONENT_COL: to_str(effect.same_component),
        MIXED_COMPONENT_COL: to_str(effect.mixed_component),
        OTHER_COMPONENT_COL: to_str(effect.other_component),
    } for effect in effects],
                        columns=[
                            VARIABLE_COL, SAME_COMPONENT_COL,
                            MIXED_COMPONENT_COL, OTHER_COMPONENT_COL
                        ])


def potential_parents_to_dataframe(
    variables: tp.Iterable[VariableWithPotentialParents]
) -> pd.DataFrame:
    """One row per variable and potential parent."""
    return pd.DataFrame([{
        FEATURE_COL: relation.feature,
        PARENT_COL: relation.parent,
        PROBABILITY_COL: relation.probability
    } for var in variables for relation in var.to_relations()],
                        columns=[FEATURE_COL, PARENT_COL, PROBABILITY_COL])


def feature_relations_to_dataframe(
    relations: tp.Iterable[FeatureDependencyRelation]
) -> pd.DataFrame:
    return pd.DataFrame([{
        FEATURE_COL: relation.feature,
        DEPENDS_ON_COL: relation.depends_on,
        CONTEXT_COL: str(relation.context)
    } for relation in relations],
                        columns=[FEATURE_COL, DEPENDS_ON_COL, CONTEXT_COL])


def write_pcs(
    variables: tp.Iterable[VariableWithPcs], path: TablePath
) -> None:
    pcs_to_dataframe(variables).to_csv(path, index=False)


def write_feature_effects(
    effects: tp.Iterable[VariableWithFeatureEffect], path: TablePath
) -> None:
    feature_effects_to_dataframe(effects).to_csv(path, index=False)


def write_arch_split(
    effects: tp.Iterable[FeatureEffectWithArchComponent], path: TablePath
) -> None:
    arch_split_to_dataframe(effects).to_csv(path, index=False)


def write_potential_parents(
    variables: tp.Iterable[VariableWithPotentialParents], path: TablePath
) -> None:
    potential_parents_to_dataframe(variables).to_csv(path, index=False)


def write_feature_relations(
    relations: tp.Iterable[FeatureDependencyRelation], path: TablePath
) -> None:
    feature_relations_to_dataframe(relations).to_csv(path, index=False)
